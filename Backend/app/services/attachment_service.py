# app/services/attachment_service.py
import io
import logging
import time
import uuid
from typing import Tuple

from PIL import Image, UnidentifiedImageError

from app.config import MAX_UPLOAD_SIZE
from app.errors import InvalidUpload
from app.schemas.job import ChecklistItemImage
from app.services.binary_store import BinaryStore

logger = logging.getLogger(__name__)

# Pillow format name -> file extension
IMAGE_EXTENSIONS = {
    "JPEG": "jpg",
    "PNG": "png",
    "GIF": "gif",
    "WEBP": "webp",
    "BMP": "bmp",
    "TIFF": "tiff",
}


def inspect_image(data: bytes, max_size: int = MAX_UPLOAD_SIZE) -> Tuple[str, str]:
    """Return (extension, content_type) for image bytes, or raise InvalidUpload."""
    if not data:
        raise InvalidUpload("Uploaded file is empty")
    if len(data) > max_size:
        raise InvalidUpload(f"File too large. Limit is {max_size} bytes")
    try:
        with Image.open(io.BytesIO(data)) as img:
            fmt = img.format
            img.verify()
    except (UnidentifiedImageError, OSError, SyntaxError) as exc:
        raise InvalidUpload("Uploaded file must be an image") from exc

    ext = IMAGE_EXTENSIONS.get(fmt)
    if ext is None:
        raise InvalidUpload(f"Unsupported image format: {fmt}")
    return ext, Image.MIME.get(fmt, "application/octet-stream")


def build_image_path(job_id: str, item_id: str, ext: str) -> str:
    """{job_id}/{item_id}/{timestamp_ms}-{uid}.{ext}"""
    ts = int(time.time() * 1000)
    uid = uuid.uuid4().hex[:8]
    return f"{job_id}/{item_id}/{ts}-{uid}.{ext}"


def new_image_id() -> str:
    return f"img-{uuid.uuid4().hex[:12]}"


class AttachmentManager:
    """Moves image bytes in and out of the binary store; never touches job records."""

    def __init__(self, store: BinaryStore, max_size: int = MAX_UPLOAD_SIZE):
        self.store = store
        self.max_size = max_size

    def add_image(self, job_id: str, item_id: str, data: bytes) -> ChecklistItemImage:
        ext, content_type = inspect_image(data, self.max_size)
        path = build_image_path(job_id, item_id, ext)
        self.store.upload(path, data, content_type)
        url = self.store.public_url(path)
        logger.info("Uploaded %s (%d bytes) to %s", path, len(data), self.store.bucket)
        return ChecklistItemImage(id=new_image_id(), url=url)

    def remove_image(self, image_id: str, url: str) -> None:
        # raises before any delete when the URL has an unexpected shape
        path = self.store.path_from_url(url)
        self.store.delete(path)
        logger.info("Deleted image %s at %s from %s", image_id, path, self.store.bucket)

    def read_image(self, url: str) -> Tuple[bytes, str]:
        data = self.store.download(self.store.path_from_url(url))
        _, content_type = inspect_image(data, max_size=len(data) or 1)
        return data, content_type
