"""Image normalization: bounded working copy plus a square thumbnail.

The working copy keeps the source bytes untouched when the image already
fits the bounding box, so re-encoding never degrades small uploads.
"""
import logging
import os
from dataclasses import dataclass
from io import BytesIO
from typing import Optional, Tuple

from PIL import Image, ImageOps

from ..core.config import settings
from ..core.errors import InvalidUpload, IOFailure, UnreadableImage

logger = logging.getLogger(__name__)

MEDIA_TYPES = {
    "JPEG": "image/jpeg",
    "PNG": "image/png",
    "GIF": "image/gif",
}


@dataclass(frozen=True)
class NormalizedImage:
    working_bytes: bytes
    working_size: Tuple[int, int]
    thumbnail_bytes: bytes
    format: str

    @property
    def media_type(self) -> str:
        return MEDIA_TYPES[self.format]


def _round_half_up(x: float) -> int:
    return int(x + 0.5)


def fit_within(width: int, height: int, max_width: int, max_height: int) -> Tuple[int, int]:
    """Scale (width, height) down into the box, keeping the aspect ratio.

    Never enlarges. The constrained side lands exactly on the limit and the
    other side is rounded half up.
    """
    new_w, new_h = width, height
    if new_w > max_width:
        new_h = _round_half_up(new_h * max_width / new_w)
        new_w = max_width
    if new_h > max_height:
        new_w = _round_half_up(new_w * max_height / new_h)
        new_h = max_height
    return max(new_w, 1), max(new_h, 1)


def _open(source_bytes: bytes) -> Image.Image:
    try:
        img = Image.open(BytesIO(source_bytes))
        img.load()
    except Exception as e:
        raise UnreadableImage() from e
    if not img.width or not img.height:
        raise UnreadableImage()
    return img


def _encode(img: Image.Image, fmt: str) -> bytes:
    buf = BytesIO()
    if fmt == "JPEG" and img.mode not in ("RGB", "L", "CMYK"):
        img = img.convert("RGB")
    img.save(buf, format=fmt)
    return buf.getvalue()


def _resizable(img: Image.Image, fmt: str) -> Image.Image:
    # Palette images resample badly; GIF output is re-quantized on save
    if img.mode in ("P", "1"):
        return img.convert("RGBA" if fmt == "PNG" else "RGB")
    return img


def make_thumbnail(img: Image.Image, fmt: str, size: Optional[int] = None) -> bytes:
    """Cover-crop to an exact square, centered."""
    size = size or settings.thumbnail_size
    thumb = ImageOps.fit(_resizable(img, fmt), (size, size), method=Image.Resampling.LANCZOS, centering=(0.5, 0.5))
    return _encode(thumb, fmt)


def normalize(source_bytes: bytes) -> NormalizedImage:
    """Produce the working copy and thumbnail in memory.

    Raises UnreadableImage when Pillow cannot determine the dimensions and
    InvalidUpload when the content is not JPEG, PNG or GIF, whatever the
    file name or declared type say.
    """
    with _open(source_bytes) as img:
        fmt = img.format
        if fmt not in MEDIA_TYPES:
            raise InvalidUpload()
        width, height = img.size
        max_w, max_h = settings.max_image_width, settings.max_image_height

        if width <= max_w and height <= max_h:
            working_bytes = source_bytes
            working_size = (width, height)
        else:
            working_size = fit_within(width, height, max_w, max_h)
            working_bytes = _encode(_resizable(img, fmt).resize(working_size, Image.Resampling.LANCZOS), fmt)
            logger.debug("Resized %sx%s -> %sx%s", width, height, *working_size)

        thumbnail_bytes = make_thumbnail(img, fmt)

    return NormalizedImage(
        working_bytes=working_bytes,
        working_size=working_size,
        thumbnail_bytes=thumbnail_bytes,
        format=fmt,
    )


def _remove_quietly(path: str) -> None:
    try:
        os.remove(path)
    except FileNotFoundError:
        pass
    except OSError as e:
        logger.warning("Could not remove %s: %s", path, e)


def remove_files(*paths: str) -> None:
    for path in paths:
        _remove_quietly(path)


def _write(path: str, data: bytes) -> None:
    try:
        with open(path, "wb") as fh:
            fh.write(data)
    except OSError as e:
        raise IOFailure() from e


def normalize_file(source_path: str, working_path: str, thumbnail_path: str) -> NormalizedImage:
    """Normalize the image at ``source_path`` onto disk.

    Writes the working image and thumbnail, then removes the source when it
    is a different file from the working image. On failure the source and
    any partial outputs are removed.
    """
    try:
        try:
            with open(source_path, "rb") as fh:
                source_bytes = fh.read()
        except OSError as e:
            raise IOFailure() from e

        result = normalize(source_bytes)
        _write(working_path, result.working_bytes)
        _write(thumbnail_path, result.thumbnail_bytes)
    except Exception:
        remove_files(working_path, thumbnail_path)
        if os.path.abspath(source_path) != os.path.abspath(working_path):
            _remove_quietly(source_path)
        raise

    if os.path.abspath(source_path) != os.path.abspath(working_path):
        _remove_quietly(source_path)
    return result


def ensure_directory(path: str) -> None:
    os.makedirs(path, exist_ok=True)
