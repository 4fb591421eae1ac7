from abc import ABC, abstractmethod
from typing import List, Optional

from ..core.models import GalleryRecord, NewGalleryItem, NewUser, User


class GalleryStore(ABC):
    """Persistence boundary for users and gallery records.

    Implementations own id assignment (monotonic, never reused) and
    ``created_at``. Records are immutable once created.
    """

    @abstractmethod
    def create_user(self, new_user: NewUser) -> User: ...

    @abstractmethod
    def get_user(self, user_id: int) -> Optional[User]: ...

    @abstractmethod
    def get_user_by_username(self, username: str) -> Optional[User]: ...

    @abstractmethod
    def create_gallery_item(self, item: NewGalleryItem) -> GalleryRecord: ...

    @abstractmethod
    def get_gallery_items(self, user_id: Optional[int] = None) -> List[GalleryRecord]:
        """All records, or only those owned by ``user_id``, newest first."""

    @abstractmethod
    def get_gallery_item(self, item_id: int) -> Optional[GalleryRecord]: ...


def newest_first(items: List[GalleryRecord]) -> List[GalleryRecord]:
    # id breaks ties between records created within the same clock tick
    return sorted(items, key=lambda i: (i.created_at, i.id), reverse=True)
