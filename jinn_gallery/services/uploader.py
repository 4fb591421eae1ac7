"""Upload pipeline: validate, normalize, compose, analyze, persist.

Each step either returns its result or raises a ``GalleryError``. Nothing
is persisted unless every step succeeds, and files written on the way are
removed when a later step fails.
"""
import logging
import os
import random
import time
from typing import Optional, Tuple

from ..core.config import settings
from ..core.errors import (
    InvalidParameter,
    InvalidUpload,
    IOFailure,
    Unauthenticated,
)
from ..core.models import GalleryRecord, NewGalleryItem, UploadRequest
from ..store.base import GalleryStore
from . import image as image_service
from . import prompts
from .analysis import AnalysisClient

logger = logging.getLogger(__name__)

ALLOWED_IMAGE_CONTENT_TYPES = {"image/jpeg", "image/png", "image/gif"}
ALLOWED_IMAGE_EXTS = {".jpg", ".jpeg", ".png", ".gif"}
CTYPE_TO_EXTS = {
    "image/jpeg": {".jpg", ".jpeg"},
    "image/png": {".png"},
    "image/gif": {".gif"},
}
PARAMETER_LABELS = {
    "creativity_value": "Creativity value",
    "excitement_value": "Excitement value",
}


def parse_level(raw, field: str) -> int:
    """Parse a 0-100 slider value, raising InvalidParameter otherwise."""
    label = PARAMETER_LABELS.get(field, field)
    if isinstance(raw, bool):
        raise InvalidParameter(f"{label} must be between 0 and 100")
    try:
        value = int(str(raw).strip())
    except (TypeError, ValueError):
        raise InvalidParameter(f"{label} must be between 0 and 100")
    if value < 0 or value > 100:
        raise InvalidParameter(f"{label} must be between 0 and 100")
    return value


def parse_flag(raw) -> bool:
    """Parse the required "true"/"false" jinnification field."""
    if isinstance(raw, bool):
        return raw
    value = str(raw).strip().lower() if raw is not None else ""
    if value not in ("true", "false"):
        raise InvalidParameter("Jinnification must be true or false")
    return value == "true"


def check_file(filename: Optional[str], content_type: Optional[str], data: Optional[bytes],
               max_bytes: Optional[int] = None) -> str:
    """Type/size filter applied before the image is touched.

    Returns the lower-cased extension to keep for stored files.
    """
    if not data:
        raise InvalidUpload("No file was uploaded")
    max_bytes = max_bytes or settings.max_upload_bytes
    if len(data) > max_bytes:
        raise InvalidUpload(f"File is too large (max {max_bytes // (1024 * 1024)} MB)")

    ext = os.path.splitext(filename or "")[1].lower()
    ctype = (content_type or "").lower()
    # Require both: supported content-type and extension, and they must match
    if ctype not in ALLOWED_IMAGE_CONTENT_TYPES or ext not in ALLOWED_IMAGE_EXTS:
        raise InvalidUpload()
    if ext not in CTYPE_TO_EXTS[ctype]:
        raise InvalidUpload()
    return ext


def stored_names(user_id: int, ext: str) -> Tuple[str, str, str]:
    """(original, working, thumbnail) file names for one upload."""
    stem = f"{user_id}-{int(time.time() * 1000)}-{random.randint(0, 10**9)}"
    return f"{stem}{ext}", f"{stem}-resized{ext}", f"{stem}-thumb{ext}"


class GalleryUploader:
    def __init__(self, store: GalleryStore, analysis: AnalysisClient) -> None:
        self.store = store
        self.analysis = analysis

    def handle_upload(self, req: UploadRequest) -> GalleryRecord:
        # Validated
        if req.requester_id is None:
            raise Unauthenticated()
        creativity = parse_level(req.creativity_value, "creativity_value")
        excitement = parse_level(req.excitement_value, "excitement_value")
        jinnification = parse_flag(req.jinnification)
        ext = check_file(req.filename, req.content_type, req.image_bytes)

        image_service.ensure_directory(settings.gallery_dir)
        image_service.ensure_directory(settings.thumbnails_dir)
        original_name, working_name, thumb_name = stored_names(req.requester_id, ext)
        original_path = os.path.join(settings.gallery_dir, original_name)
        working_path = os.path.join(settings.gallery_dir, working_name)
        thumb_path = os.path.join(settings.thumbnails_dir, thumb_name)

        try:
            with open(original_path, "wb") as fh:
                fh.write(req.image_bytes)
        except OSError as e:
            image_service.remove_files(original_path)
            raise IOFailure() from e

        # Normalized; normalize_file cleans up after itself on failure
        normalized = image_service.normalize_file(original_path, working_path, thumb_path)
        logger.info(
            "Normalized upload from user %s to %sx%s", req.requester_id, *normalized.working_size
        )

        try:
            pair = prompts.compose(creativity, excitement, jinnification)
            description = self.analysis.analyze(
                normalized.working_bytes, pair.system, pair.user, media_type=normalized.media_type
            )
            item = NewGalleryItem(
                user_id=req.requester_id,
                image=f"/uploads/gallery/{working_name}",
                thumbnail=f"/uploads/thumbnails/{thumb_name}",
                creativity_value=creativity,
                excitement_value=excitement,
                jinnification=jinnification,
                description=description,
            )
            record = self.store.create_gallery_item(item)
        except Exception as e:
            logger.warning("Upload from user %s failed: %s", req.requester_id, e)
            image_service.remove_files(working_path, thumb_path)
            raise

        logger.info("Stored gallery item %s for user %s", record.id, record.user_id)
        return record
