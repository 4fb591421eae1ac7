import threading
from datetime import datetime, timezone
from typing import Dict, List, Optional

from ..core.models import GalleryRecord, NewGalleryItem, NewUser, User
from .base import GalleryStore, newest_first


class MemoryStore(GalleryStore):
    """Process-local store backed by dicts.

    A single lock serializes writes so ids follow the order in which the
    persistence step completes.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._users: Dict[int, User] = {}
        self._gallery: Dict[int, GalleryRecord] = {}
        self._next_user_id = 1
        self._next_gallery_id = 1

    def create_user(self, new_user: NewUser) -> User:
        with self._lock:
            user = User(id=self._next_user_id, **new_user.model_dump())
            self._next_user_id += 1
            self._users[user.id] = user
        return user

    def get_user(self, user_id: int) -> Optional[User]:
        return self._users.get(user_id)

    def get_user_by_username(self, username: str) -> Optional[User]:
        for user in list(self._users.values()):
            if user.username == username:
                return user
        return None

    def create_gallery_item(self, item: NewGalleryItem) -> GalleryRecord:
        with self._lock:
            record = GalleryRecord(
                id=self._next_gallery_id,
                created_at=datetime.now(timezone.utc),
                **item.model_dump(),
            )
            self._next_gallery_id += 1
            self._gallery[record.id] = record
        return record

    def get_gallery_items(self, user_id: Optional[int] = None) -> List[GalleryRecord]:
        items = list(self._gallery.values())
        if user_id is not None:
            items = [i for i in items if i.user_id == user_id]
        return newest_first(items)

    def get_gallery_item(self, item_id: int) -> Optional[GalleryRecord]:
        return self._gallery.get(item_id)
