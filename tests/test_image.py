import os
from io import BytesIO

import pytest
from PIL import Image

from jinn_gallery.core.errors import InvalidUpload, UnreadableImage
from jinn_gallery.services import image as image_service
from conftest import image_bytes


def _size(data: bytes):
    with Image.open(BytesIO(data)) as img:
        return img.size


def test_fit_within_keeps_aspect_ratio():
    assert image_service.fit_within(3000, 1500, 2000, 2000) == (2000, 1000)
    assert image_service.fit_within(1000, 4000, 2000, 2000) == (500, 2000)
    assert image_service.fit_within(2001, 2001, 2000, 2000) == (2000, 2000)
    # rounds half up on the secondary side
    assert image_service.fit_within(4000, 1001, 2000, 2000) == (2000, 501)


def test_fit_within_never_enlarges():
    assert image_service.fit_within(300, 200, 2000, 2000) == (300, 200)


def test_small_image_passes_through_byte_identical():
    src = image_bytes((640, 480), "JPEG")
    result = image_service.normalize(src)
    assert result.working_bytes == src
    assert result.working_size == (640, 480)
    assert result.format == "JPEG"
    assert result.media_type == "image/jpeg"


def test_large_image_is_downscaled():
    result = image_service.normalize(image_bytes((3000, 1500), "JPEG"))
    assert result.working_size == (2000, 1000)
    assert _size(result.working_bytes) == (2000, 1000)


def test_normalize_is_deterministic():
    src = image_bytes((2500, 1700), "PNG")
    assert image_service.normalize(src).working_size == image_service.normalize(src).working_size


@pytest.mark.parametrize("size", [(4000, 1000), (1000, 4000), (50, 30)])
def test_thumbnail_is_always_square(size):
    result = image_service.normalize(image_bytes(size, "PNG"))
    assert _size(result.thumbnail_bytes) == (200, 200)


def test_gif_is_supported():
    result = image_service.normalize(image_bytes((2400, 600), "GIF"))
    assert result.format == "GIF"
    assert result.working_size == (2000, 500)
    assert _size(result.thumbnail_bytes) == (200, 200)


def test_unreadable_bytes_raise():
    with pytest.raises(UnreadableImage):
        image_service.normalize(b"not_an_image")


@pytest.mark.parametrize("fmt", ["BMP", "TIFF"])
def test_formats_outside_jpeg_png_gif_rejected(fmt):
    with pytest.raises(InvalidUpload):
        image_service.normalize(image_bytes((64, 48), fmt))


def test_normalize_file_cleans_up_on_unsupported_format(tmp_path):
    src = tmp_path / "d.png"
    src.write_bytes(image_bytes((64, 48), "BMP"))
    with pytest.raises(InvalidUpload):
        image_service.normalize_file(str(src), str(tmp_path / "d-resized.png"), str(tmp_path / "d-thumb.png"))
    assert os.listdir(tmp_path) == []


def test_normalize_file_removes_original_after_resize(tmp_path):
    src = tmp_path / "a.jpg"
    src.write_bytes(image_bytes((3000, 1500), "JPEG"))
    working, thumb = tmp_path / "a-resized.jpg", tmp_path / "a-thumb.jpg"

    image_service.normalize_file(str(src), str(working), str(thumb))

    assert sorted(os.listdir(tmp_path)) == ["a-resized.jpg", "a-thumb.jpg"]
    assert _size(working.read_bytes()) == (2000, 1000)


def test_normalize_file_removes_original_without_resize(tmp_path):
    data = image_bytes((100, 80), "PNG")
    src = tmp_path / "b.png"
    src.write_bytes(data)
    working, thumb = tmp_path / "b-resized.png", tmp_path / "b-thumb.png"

    image_service.normalize_file(str(src), str(working), str(thumb))

    assert sorted(os.listdir(tmp_path)) == ["b-resized.png", "b-thumb.png"]
    assert working.read_bytes() == data


def test_normalize_file_cleans_up_on_failure(tmp_path):
    src = tmp_path / "c.png"
    src.write_bytes(b"garbage")
    with pytest.raises(UnreadableImage):
        image_service.normalize_file(str(src), str(tmp_path / "c-resized.png"), str(tmp_path / "c-thumb.png"))
    assert os.listdir(tmp_path) == []
