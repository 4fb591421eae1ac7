import os, sys, shutil, tempfile
from io import BytesIO

import pytest
from PIL import Image

# Ensure project root on sys.path so `import jinn_gallery...` works
ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

# Static files are mounted at import time, so the upload root must be set first
os.environ.setdefault("UPLOADS_DIR", tempfile.mkdtemp(prefix="jinn-uploads-"))

from jinn_gallery.core.config import settings
from jinn_gallery.core.errors import ServiceUnavailable


def image_bytes(size=(3, 2), fmt="PNG", color=(0, 128, 255)) -> bytes:
    img = Image.new("RGB", size, color=color)
    if fmt == "GIF":
        img = img.convert("P")
    buf = BytesIO()
    img.save(buf, format=fmt)
    return buf.getvalue()


class FakeAnalysis:
    """Stands in for the Claude client; records every call."""

    def __init__(self, text="En reise inn i bildet.", error=None):
        self.text = text
        self.error = error
        self.calls = []

    def analyze(self, image_bytes, system_prompt, user_prompt, media_type="image/jpeg"):
        self.calls.append(
            {"image_bytes": image_bytes, "system": system_prompt, "user": user_prompt, "media_type": media_type}
        )
        if self.error is not None:
            raise self.error
        return self.text


def stored_files():
    found = []
    for d in (settings.gallery_dir, settings.thumbnails_dir):
        if os.path.isdir(d):
            found.extend(os.path.join(d, name) for name in os.listdir(d))
    return sorted(found)


@pytest.fixture(autouse=True)
def clean_uploads():
    for d in (settings.gallery_dir, settings.thumbnails_dir):
        shutil.rmtree(d, ignore_errors=True)
        os.makedirs(d, exist_ok=True)
    yield


@pytest.fixture
def fake_analysis():
    return FakeAnalysis()


@pytest.fixture
def unavailable_analysis():
    return FakeAnalysis(error=ServiceUnavailable("connection refused"))
