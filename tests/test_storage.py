import asyncio
import os

import pytest

from app.core.enum import FileType
from app.core.settings import settings
from app.services.shares.storage import CHUNK_SIZE, StorageService


class BrokenUpload:
    """Upload whose stream dies after the first chunk."""

    filename = "avatar.png"
    content_type = "image/png"

    def __init__(self):
        self.reads = 0
        self.closed = False

    async def read(self, size=-1):
        self.reads += 1
        if self.reads > 1:
            raise OSError("connection reset")
        return b"x" * CHUNK_SIZE

    async def close(self):
        self.closed = True


@pytest.fixture
def storage(tmp_path, monkeypatch):
    monkeypatch.setattr(settings, "UPLOAD_DIR", str(tmp_path))
    return StorageService()


def stored_files(root):
    return [name for _, _, names in os.walk(root) for name in names]


def test_failed_write_leaves_no_partial_file(storage, tmp_path):
    upload = BrokenUpload()
    with pytest.raises(OSError):
        asyncio.run(storage.save_image_async(upload, FileType.AVATAR))
    assert upload.closed is True
    assert stored_files(tmp_path) == []


def test_discard_removes_stored_upload(storage, tmp_path):
    folder = tmp_path / FileType.AVATAR.value
    folder.mkdir()
    (folder / "1-avatar.png").write_bytes(b"png")

    storage.discard(f"/uploads/{FileType.AVATAR.value}/1-avatar.png")
    assert stored_files(tmp_path) == []

    # already gone or never stored
    storage.discard(f"/uploads/{FileType.AVATAR.value}/1-avatar.png")
    storage.discard(None)
