"""File storage collaborator (Cloudinary).

Accepts a file body and a folder, returns a stable URL. The workflow treats the
URL as an opaque string. Uploads use Cloudinary's signed upload API over httpx.
"""
import hashlib
import logging
import time
from typing import Optional, Protocol

import httpx

from config import settings

logger = logging.getLogger(__name__)

THUMBNAIL_FOLDER = "kurasi/thumbnails"
CONTENT_FOLDER = "kurasi/content"


class StorageError(Exception):
    """Upload rejected or storage not configured."""


class FileStorage(Protocol):
    def upload(self, data: bytes, filename: str, folder: str, resource_type: str = "auto") -> str: ...


class CloudinaryStorage:
    """Signed uploads to Cloudinary."""

    API_BASE = "https://api.cloudinary.com/v1_1"

    def __init__(self, cloud_name: Optional[str], api_key: Optional[str], api_secret: Optional[str], timeout: float = 30.0):
        self.cloud_name = cloud_name
        self.api_key = api_key
        self.api_secret = api_secret
        self.timeout = timeout

    @property
    def configured(self) -> bool:
        return bool(self.cloud_name and self.api_key and self.api_secret)

    def _signature(self, params: dict) -> str:
        # Cloudinary signs the alphabetically sorted params with the API secret appended
        to_sign = "&".join(f"{k}={params[k]}" for k in sorted(params))
        return hashlib.sha1(f"{to_sign}{self.api_secret}".encode()).hexdigest()

    def upload(self, data: bytes, filename: str, folder: str, resource_type: str = "auto") -> str:
        if not self.configured:
            raise StorageError("File storage is not configured")

        params = {"folder": folder, "timestamp": str(int(time.time()))}
        form = {**params, "api_key": self.api_key, "signature": self._signature(params)}
        url = f"{self.API_BASE}/{self.cloud_name}/{resource_type}/upload"

        try:
            response = httpx.post(url, data=form, files={"file": (filename, data)}, timeout=self.timeout)
            response.raise_for_status()
        except httpx.HTTPError as e:
            logger.error(f"Cloudinary upload of {filename} failed: {e}")
            raise StorageError("File upload failed") from e

        secure_url = response.json().get("secure_url")
        if not secure_url:
            raise StorageError("File upload returned no URL")
        return secure_url


_storage = CloudinaryStorage(
    settings.CLOUDINARY_CLOUD_NAME,
    settings.CLOUDINARY_API_KEY,
    settings.CLOUDINARY_API_SECRET,
)


def get_file_storage() -> FileStorage:
    """FastAPI dependency; tests override it with an in-memory fake."""
    return _storage
