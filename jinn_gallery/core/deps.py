from functools import lru_cache
from typing import Optional

from fastapi import Depends, Request

from .config import settings
from .errors import Unauthenticated
from .models import User
from ..store.base import GalleryStore
from ..store.memory import MemoryStore
from ..services.analysis import AnalysisClient
from ..services.uploader import GalleryUploader

SESSION_USER_KEY = "user_id"


@lru_cache()
def get_store() -> GalleryStore:
    """The process-wide store selected by STORAGE_BACKEND."""
    if settings.storage_backend.lower() == "dynamodb":
        from ..aws.storage import DynamoStore
        return DynamoStore()
    return MemoryStore()


@lru_cache()
def get_analysis_client() -> AnalysisClient:
    return AnalysisClient()


def get_uploader(
    store: GalleryStore = Depends(get_store),
    analysis: AnalysisClient = Depends(get_analysis_client),
) -> GalleryUploader:
    return GalleryUploader(store, analysis)


def optional_user(request: Request, store: GalleryStore = Depends(get_store)) -> Optional[User]:
    user_id = request.session.get(SESSION_USER_KEY)
    if user_id is None:
        return None
    return store.get_user(int(user_id))


def current_user(user: Optional[User] = Depends(optional_user)) -> User:
    if user is None:
        raise Unauthenticated()
    return user
