# app/services/binary_store.py
"""Binary (image) storage addressed by (bucket, path)."""
import logging
import os
import urllib.parse
from abc import ABC, abstractmethod

from supabase import create_client

from app.config import (
    IMAGE_BUCKET,
    PUBLIC_BASE_URL,
    STORAGE_BACKEND,
    SUPABASE_SERVICE_KEY,
    SUPABASE_URL,
    UPLOAD_DIR,
)
from app.errors import AttachmentStoreFailure

logger = logging.getLogger(__name__)


class BinaryStore(ABC):
    bucket: str

    @property
    @abstractmethod
    def url_marker(self) -> str:
        """Part of every public URL that directly precedes the object path."""

    @abstractmethod
    def upload(self, path: str, data: bytes, content_type: str) -> None:
        ...

    @abstractmethod
    def delete(self, path: str) -> None:
        ...

    @abstractmethod
    def download(self, path: str) -> bytes:
        ...

    @abstractmethod
    def public_url(self, path: str) -> str:
        ...

    def path_from_url(self, url: str) -> str:
        """
        Recover the storage path from a public URL.
        URL format: <base><url_marker><job_id>/<item_id>/<filename>
        """
        url_path = urllib.parse.urlparse(url or "").path
        if self.url_marker not in url_path:
            raise AttachmentStoreFailure("Could not determine file path from URL.")
        path = urllib.parse.unquote(url_path.split(self.url_marker, 1)[1])
        if not path:
            raise AttachmentStoreFailure("Could not determine file path from URL.")
        return path


# ------------------------------------------------------------------
# Local filesystem store, served by the /uploads static mount
# ------------------------------------------------------------------
class LocalBinaryStore(BinaryStore):
    def __init__(self, root_dir: str, bucket: str, public_base_url: str):
        self.root_dir = root_dir
        self.bucket = bucket
        self.public_base_url = public_base_url.rstrip("/")
        os.makedirs(os.path.join(self.root_dir, self.bucket), exist_ok=True)

    @property
    def url_marker(self) -> str:
        return f"/uploads/{self.bucket}/"

    def _full_path(self, path: str) -> str:
        parts = [p for p in path.split("/") if p]
        if not parts or any(p in (".", "..") for p in parts):
            raise AttachmentStoreFailure(f"Invalid storage path: {path}")
        return os.path.join(self.root_dir, self.bucket, *parts)

    def upload(self, path: str, data: bytes, content_type: str) -> None:
        full_path = self._full_path(path)
        try:
            os.makedirs(os.path.dirname(full_path), exist_ok=True)
            with open(full_path, "wb") as buffer:
                buffer.write(data)
        except OSError as exc:
            raise AttachmentStoreFailure(f"Failed to upload image: {exc}") from exc

    def delete(self, path: str) -> None:
        full_path = self._full_path(path)
        try:
            os.remove(full_path)
        except FileNotFoundError:
            logger.warning("Blob %s/%s was already gone", self.bucket, path)
        except OSError as exc:
            raise AttachmentStoreFailure(f"Failed to delete image: {exc}") from exc

    def download(self, path: str) -> bytes:
        full_path = self._full_path(path)
        try:
            with open(full_path, "rb") as f:
                return f.read()
        except OSError as exc:
            raise AttachmentStoreFailure(f"Failed to read image: {exc}") from exc

    def public_url(self, path: str) -> str:
        return f"{self.public_base_url}/uploads/{self.bucket}/{urllib.parse.quote(path)}"


# ------------------------------------------------------------------
# Supabase Storage bucket
# ------------------------------------------------------------------
class SupabaseBinaryStore(BinaryStore):
    def __init__(self, url: str, key: str, bucket: str, client=None):
        if client is None:
            if not url or not key:
                raise ValueError(
                    "Supabase credentials not configured. "
                    "Set SUPABASE_URL and SUPABASE_SERVICE_KEY environment variables."
                )
            client = create_client(url, key)
        self.client = client
        self.bucket = bucket

    @property
    def url_marker(self) -> str:
        return f"/storage/v1/object/public/{self.bucket}/"

    def _bucket(self):
        return self.client.storage.from_(self.bucket)

    def upload(self, path: str, data: bytes, content_type: str) -> None:
        try:
            self._bucket().upload(path=path, file=data, file_options={"content-type": content_type})
        except Exception as exc:
            raise AttachmentStoreFailure(f"Failed to upload image: {exc}") from exc

    def delete(self, path: str) -> None:
        try:
            self._bucket().remove([path])
        except Exception as exc:
            raise AttachmentStoreFailure(f"Failed to delete image: {exc}") from exc

    def download(self, path: str) -> bytes:
        try:
            return self._bucket().download(path)
        except Exception as exc:
            raise AttachmentStoreFailure(f"Failed to read image: {exc}") from exc

    def public_url(self, path: str) -> str:
        try:
            url = self._bucket().get_public_url(path)
        except Exception as exc:
            raise AttachmentStoreFailure(f"Could not get public URL for uploaded file: {exc}") from exc
        if not url:
            raise AttachmentStoreFailure("Could not get public URL for uploaded file.")
        return url


def get_binary_store() -> BinaryStore:
    if STORAGE_BACKEND == "supabase":
        return SupabaseBinaryStore(SUPABASE_URL, SUPABASE_SERVICE_KEY, IMAGE_BUCKET)
    return LocalBinaryStore(UPLOAD_DIR, IMAGE_BUCKET, PUBLIC_BASE_URL)
