"""Blob storage for uploaded element screenshots.

Writes to a local directory (served under ``/storage``) by default and
switches to the remote blob API when ``STORAGE_BACKEND=blob`` and a
read-write token is configured.
"""

from __future__ import annotations

import os
import re
import time
from pathlib import Path
from typing import Any

import httpx
from pydantic import BaseModel

from statebook.common.exceptions import UploadError
from statebook.config import settings
from statebook.integrations.base import BaseIntegration

ALLOWED_TYPES = {
    "image/png",
    "image/jpeg",
    "image/jpg",
    "image/webp",
    "image/gif",
    "image/svg+xml",
}

_EXTENSIONS = {
    "image/svg+xml": ".svg",
    "image/png": ".png",
    "image/jpeg": ".jpg",
    "image/jpg": ".jpg",
    "image/webp": ".webp",
    "image/gif": ".gif",
}

LOCAL_URL_PREFIX = "/storage"


def _use_remote() -> bool:
    return settings.STORAGE_BACKEND == "blob" and settings.BLOB_READ_WRITE_TOKEN.strip() != ""


def safe_extension(name: str, content_type: str) -> str:
    ext = os.path.splitext(name)[1]
    if ext:
        return ext
    return _EXTENSIONS.get(content_type, "")


def sanitize_file_name(name: str) -> str:
    return re.sub(r"-+", "-", re.sub(r"[^a-zA-Z0-9\-_]+", "-", name)).lower()


class StoredUpload(BaseModel):
    path: str
    name: str
    type: str
    size: int


class BlobClient(BaseIntegration):
    """Puts bytes into the configured backend and returns a public URL."""

    def __init__(self) -> None:
        super().__init__("storage")

    @property
    def local_path(self) -> Path:
        return Path(settings.STORAGE_LOCAL_PATH)

    @property
    def backend(self) -> str:
        return "blob" if _use_remote() else "local"

    async def health_check(self) -> bool:
        if _use_remote():
            # endpoint is not probed; a configured one counts as healthy
            return bool(settings.BLOB_API_URL)
        try:
            self.local_path.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            self.logger.error("Local storage %s is not writable: %s", self.local_path, e)
            return False
        return os.access(self.local_path, os.W_OK)

    async def put(self, filename: str, content: bytes, content_type: str) -> dict[str, Any]:
        if _use_remote():
            return await self._put_remote(filename, content, content_type)
        return self._put_local(filename, content, content_type)

    def _put_local(self, filename: str, content: bytes, content_type: str) -> dict[str, Any]:
        self.local_path.mkdir(parents=True, exist_ok=True)
        target = self.local_path / filename
        target.write_bytes(content)
        self.logger.info("Local upload: %s (%d bytes)", filename, len(content))
        return {
            "url": f"{LOCAL_URL_PREFIX}/{filename}",
            "pathname": filename,
            "content_type": content_type,
            "storage_backend": "local",
        }

    async def _put_remote(self, filename: str, content: bytes, content_type: str) -> dict[str, Any]:
        async with httpx.AsyncClient(timeout=30) as client:
            resp = await client.put(
                f"{settings.BLOB_API_URL.rstrip('/')}/{filename}",
                content=content,
                headers={
                    "Authorization": f"Bearer {settings.BLOB_READ_WRITE_TOKEN}",
                    "x-content-type": content_type,
                    "x-add-random-suffix": "0",
                    "x-api-version": "7",
                },
            )
            resp.raise_for_status()
            data = resp.json()
        self.logger.info("Remote upload: %s (%d bytes)", filename, len(content))
        return {
            "url": data["url"],
            "pathname": data.get("pathname", filename),
            "content_type": content_type,
            "storage_backend": "blob",
        }


class UploadStore:
    """Validates an uploaded image and persists it through ``BlobClient``.

    The size limit and allowed types are read on every call so configuration
    changes apply from the next upload on.
    """

    def __init__(self, blob: BlobClient | None = None) -> None:
        self.blob = blob or BlobClient()

    @property
    def max_bytes(self) -> int:
        return self.max_mb * 1024 * 1024

    @property
    def max_mb(self) -> int:
        return settings.UPLOAD_MAX_SIZE_MB if settings.UPLOAD_MAX_SIZE_MB > 0 else 4

    def validate(self, name: str, content_type: str, size: int) -> None:
        if content_type not in ALLOWED_TYPES:
            self.blob.logger.warning("Upload rejected: type=%s name=%s", content_type, name)
            raise UploadError("Unsupported file type.")
        if size > self.max_bytes:
            self.blob.logger.warning("Upload rejected: size=%d limit=%dMB name=%s", size, self.max_mb, name)
            raise UploadError(f"File exceeds {self.max_mb}MB limit.", status_code=413)

    async def store(self, content: bytes, name: str, content_type: str, size: int | None = None) -> StoredUpload:
        size = len(content) if size is None else size
        self.validate(name, content_type, size)

        ext = safe_extension(name, content_type)
        base = os.path.basename(name)
        if ext and base.endswith(ext):
            base = base[: -len(ext)]
        safe_name = sanitize_file_name(base)
        filename = f"{safe_name or 'element'}-{int(time.time() * 1000)}{ext}"

        try:
            record = await self.blob.put(filename, content, content_type)
        except (httpx.HTTPError, OSError) as e:
            self.blob.logger.error("Blob put failed for %s: %s", filename, e)
            raise UploadError("Upload failed.", status_code=502) from e

        return StoredUpload(path=record["url"], name=name, type=content_type, size=size)
