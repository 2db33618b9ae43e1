import os
import time

import aiofiles
from fastapi import UploadFile
from loguru import logger

from app.core.enum import FileType
from app.core.exceptions import BadRequestError
from app.core.settings import settings
from app.libs.formats.text import safe_filename

CHUNK_SIZE = 1024 * 1024
MAX_UPLOAD_BYTES = 5 * 1024 * 1024
ALLOWED_IMAGE_TYPES = {"image/jpeg", "image/png", "image/gif", "image/webp"}


class StorageService:
    """Local-disk storage for avatars and course images, served under /uploads."""

    def __init__(self):
        self.root = settings.UPLOAD_DIR

    async def save_image_async(self, file: UploadFile, file_type: FileType) -> str:
        if file.content_type not in ALLOWED_IMAGE_TYPES:
            raise BadRequestError("Only image uploads are allowed (jpeg, png, gif, webp)")

        folder = os.path.join(self.root, file_type.value)
        os.makedirs(folder, exist_ok=True)

        filename = f"{int(time.time() * 1000)}-{safe_filename(file.filename)}"
        path = os.path.join(folder, filename)

        written = 0
        try:
            async with aiofiles.open(path, "wb") as out:
                while chunk := await file.read(CHUNK_SIZE):
                    written += len(chunk)
                    if written > MAX_UPLOAD_BYTES:
                        raise BadRequestError("File is too large (max 5 MB)")
                    await out.write(chunk)
        except BaseException:
            # never leave a partial file behind
            if os.path.exists(path):
                os.remove(path)
            raise
        finally:
            await file.close()

        logger.info(f"📁 Stored upload {path} ({written} bytes)")
        return f"/uploads/{file_type.value}/{filename}"

    def discard(self, url: str | None) -> None:
        """Remove a stored upload whose database write did not commit."""
        if not url or not url.startswith("/uploads/"):
            return
        path = os.path.join(self.root, *url[len("/uploads/"):].split("/"))
        try:
            os.remove(path)
        except FileNotFoundError:
            return
        logger.info(f"🧹 Discarded upload {path}")
