from fastapi import APIRouter, Depends, File, Form, Query, UploadFile
from starlette.concurrency import run_in_threadpool
from typing import Optional, List
from ..core.config import settings
from ..core.deps import get_store, get_uploader, optional_user
from ..core.errors import NotFound
from ..core.models import GalleryRecord, MessageResponse, UploadRequest, User
from ..services.uploader import GalleryUploader
from ..store.base import GalleryStore

router = APIRouter(prefix="/api/gallery", tags=["gallery"])

ERROR_RESPONSES = {
    400: {"model": MessageResponse},
    401: {"model": MessageResponse},
    502: {"model": MessageResponse},
}


@router.get(
    "",
    response_model=List[GalleryRecord],
    summary="List gallery items",
    description=(
        "Returns gallery items, newest first.\n\n"
        "Query params:\n"
        "- `userId`: return only items owned by this user."
    ),
)
def list_gallery(
    user_id: Optional[int] = Query(None, alias="userId", description="Filter by owner user id"),
    store: GalleryStore = Depends(get_store),
):
    return store.get_gallery_items(user_id)


@router.get(
    "/{item_id}",
    response_model=GalleryRecord,
    summary="Get one gallery item",
    responses={404: {"model": MessageResponse}},
)
def get_gallery_item(item_id: int, store: GalleryStore = Depends(get_store)):
    item = store.get_gallery_item(item_id)
    if item is None:
        raise NotFound("Gallery image not found")
    return item


# Multipart upload; every field is validated by the uploader so that
# missing or malformed values come back as 400 with a readable message.
@router.post(
    "/upload",
    response_model=GalleryRecord,
    status_code=201,
    summary="Upload and analyze an image (JPEG/PNG/GIF)",
    description=(
        "Fields:\n"
        "- `image` (required): the image file, max 10 MB.\n"
        "- `creativityValue`, `excitementValue` (required): integers 0-100.\n"
        "- `jinnification` (required): `true` or `false`.\n\n"
        "Requires a logged-in session. The image is resized to fit 2000x2000, "
        "a 200x200 thumbnail is generated and Claude writes the description."
    ),
    responses=ERROR_RESPONSES,
)
async def upload_image(
    image: Optional[UploadFile] = File(None),
    creativityValue: Optional[str] = Form(None),
    excitementValue: Optional[str] = Form(None),
    jinnification: Optional[str] = Form(None),
    user: Optional[User] = Depends(optional_user),
    uploader: GalleryUploader = Depends(get_uploader),
):
    # One byte past the limit is enough to reject oversize files
    data = await image.read(settings.max_upload_bytes + 1) if image is not None else None
    req = UploadRequest(
        requester_id=user.id if user else None,
        filename=image.filename if image is not None else None,
        content_type=image.content_type if image is not None else None,
        image_bytes=data,
        creativity_value=creativityValue,
        excitement_value=excitementValue,
        jinnification=jinnification,
    )
    # Pillow and the model call block; keep them off the event loop
    return await run_in_threadpool(uploader.handle_upload, req)
