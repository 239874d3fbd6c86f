from __future__ import annotations

import logging
import secrets
import time
from dataclasses import dataclass
from functools import lru_cache
from urllib.parse import quote

import httpx

from career_pages.core.config import get_settings

logger = logging.getLogger(__name__)

ASSET_KINDS = {"logo", "banner", "video"}
IMAGE_MAX_BYTES = 25 * 1024 * 1024
VIDEO_MAX_BYTES = 100 * 1024 * 1024
VIDEO_CONTENT_TYPES = {"video/mp4", "video/webm", "video/ogg"}


class StorageError(Exception):
    """Raised when the blob store rejects or cannot take an upload."""


class StorageValidationError(StorageError):
    """Raised when an upload is refused before reaching the blob store."""


@dataclass(slots=True)
class StoredObject:
    path: str
    public_url: str


def validate_asset(kind: str, *, content_type: str | None, size: int) -> None:
    if kind not in ASSET_KINDS:
        raise StorageValidationError(f"asset kind must be one of: {', '.join(sorted(ASSET_KINDS))}")
    if size <= 0:
        raise StorageValidationError("uploaded file is empty")

    content_type = (content_type or "").lower()
    if kind == "video":
        if content_type not in VIDEO_CONTENT_TYPES:
            raise StorageValidationError("video must be mp4, webm or ogg")
        if size > VIDEO_MAX_BYTES:
            raise StorageValidationError("video must be smaller than 100MB")
        return

    if not content_type.startswith("image/"):
        raise StorageValidationError("file must be an image")
    if size > IMAGE_MAX_BYTES:
        raise StorageValidationError("image must be smaller than 25MB")


def asset_path(kind: str, company_id: str, filename: str | None) -> str:
    extension = ""
    if filename and "." in filename:
        extension = "." + filename.rsplit(".", maxsplit=1)[1].lower()
    return f"{kind}s/{company_id}/{secrets.token_hex(6)}_{int(time.time() * 1000)}{extension}"


class SupabaseStorage:
    def __init__(
        self,
        supabase_url: str | None,
        service_key: str | None,
        timeout_seconds: float,
    ) -> None:
        self.supabase_url = supabase_url.rstrip("/") if supabase_url else None
        self.service_key = service_key
        self.timeout_seconds = timeout_seconds

    def get_public_url(self, bucket: str, path: str) -> str:
        if not self.supabase_url:
            raise StorageError("CP_SUPABASE_URL is required")
        return f"{self.supabase_url}/storage/v1/object/public/{bucket}/{quote(path)}"

    async def upload(self, bucket: str, path: str, content: bytes, content_type: str) -> StoredObject:
        if not self.supabase_url or not self.service_key:
            raise StorageError("Supabase storage is not configured")

        url = f"{self.supabase_url}/storage/v1/object/{bucket}/{quote(path)}"
        headers = {
            "Authorization": f"Bearer {self.service_key}",
            "apikey": self.service_key,
            "Content-Type": content_type,
            "x-upsert": "false",
        }
        try:
            async with httpx.AsyncClient(timeout=self.timeout_seconds) as client:
                response = await client.post(url, headers=headers, content=content)
        except httpx.HTTPError as exc:  # pragma: no cover - network dependent
            raise StorageError("storage upload unavailable") from exc

        if response.status_code >= 400:
            logger.warning(
                "storage upload rejected bucket=%s path=%s status=%s",
                bucket,
                path,
                response.status_code,
            )
            raise StorageError(f"storage upload failed with status {response.status_code}")

        logger.info("storage upload ok bucket=%s path=%s bytes=%s", bucket, path, len(content))
        return StoredObject(path=path, public_url=self.get_public_url(bucket, path))


@lru_cache
def get_storage() -> SupabaseStorage:
    settings = get_settings()
    return SupabaseStorage(
        supabase_url=settings.supabase_url,
        service_key=settings.supabase_service_key,
        timeout_seconds=settings.storage_timeout_seconds,
    )
