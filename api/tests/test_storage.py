from __future__ import annotations

import asyncio
from typing import Any

import httpx
import pytest

from career_pages.services.storage import (
    IMAGE_MAX_BYTES,
    StorageError,
    StorageValidationError,
    SupabaseStorage,
    asset_path,
    validate_asset,
)


def test_validate_asset_accepts_images_and_videos() -> None:
    validate_asset("logo", content_type="image/png", size=1024)
    validate_asset("banner", content_type="IMAGE/JPEG", size=IMAGE_MAX_BYTES)
    validate_asset("video", content_type="video/mp4", size=50 * 1024 * 1024)


@pytest.mark.parametrize(
    ("kind", "content_type", "size", "message"),
    [
        ("avatar", "image/png", 10, "asset kind"),
        ("logo", "image/png", 0, "empty"),
        ("logo", "application/pdf", 10, "must be an image"),
        ("banner", "image/png", IMAGE_MAX_BYTES + 1, "25MB"),
        ("video", "video/quicktime", 10, "mp4, webm or ogg"),
        ("video", "video/mp4", 100 * 1024 * 1024 + 1, "100MB"),
    ],
)
def test_validate_asset_rejects(kind: str, content_type: str, size: int, message: str) -> None:
    with pytest.raises(StorageValidationError, match=message):
        validate_asset(kind, content_type=content_type, size=size)


def test_asset_path_groups_by_kind_and_company() -> None:
    path = asset_path("banner", "company-1", "Summer.PNG")

    assert path.startswith("banners/company-1/")
    assert path.endswith(".png")
    assert asset_path("logo", "company-1", "logo").startswith("logos/company-1/")
    assert asset_path("logo", "company-1", "a.png") != asset_path("logo", "company-1", "a.png")


def test_public_url_points_at_public_object() -> None:
    storage = SupabaseStorage("http://supabase.local/", "service-key", 5.0)

    assert (
        storage.get_public_url("career-assets", "logos/c1/a b.png")
        == "http://supabase.local/storage/v1/object/public/career-assets/logos/c1/a%20b.png"
    )


def test_upload_requires_configuration() -> None:
    storage = SupabaseStorage(None, None, 5.0)

    with pytest.raises(StorageError):
        asyncio.run(storage.upload("career-assets", "logos/c1/a.png", b"png", "image/png"))


def test_upload_posts_bytes_with_service_key(monkeypatch) -> None:
    captured: dict[str, Any] = {}

    class FakeAsyncClient:
        async def __aenter__(self) -> "FakeAsyncClient":
            return self

        async def __aexit__(self, exc_type, exc, tb) -> None:
            return None

        async def post(self, url: str, headers: dict[str, str], content: bytes) -> httpx.Response:
            captured.update(url=url, headers=headers, content=content)
            return httpx.Response(status_code=200, request=httpx.Request("POST", url))

    monkeypatch.setattr(httpx, "AsyncClient", lambda *args, **kwargs: FakeAsyncClient())
    storage = SupabaseStorage("http://supabase.local", "service-key", 5.0)

    stored = asyncio.run(storage.upload("career-assets", "logos/c1/a.png", b"png-bytes", "image/png"))

    assert captured["url"] == "http://supabase.local/storage/v1/object/career-assets/logos/c1/a.png"
    assert captured["headers"]["Authorization"] == "Bearer service-key"
    assert captured["headers"]["Content-Type"] == "image/png"
    assert captured["content"] == b"png-bytes"
    assert stored.public_url == "http://supabase.local/storage/v1/object/public/career-assets/logos/c1/a.png"


def test_upload_rejection_raises(monkeypatch) -> None:
    class RejectingAsyncClient:
        async def __aenter__(self) -> "RejectingAsyncClient":
            return self

        async def __aexit__(self, exc_type, exc, tb) -> None:
            return None

        async def post(self, url: str, headers: dict[str, str], content: bytes) -> httpx.Response:
            return httpx.Response(status_code=409, request=httpx.Request("POST", url))

    monkeypatch.setattr(httpx, "AsyncClient", lambda *args, **kwargs: RejectingAsyncClient())
    storage = SupabaseStorage("http://supabase.local", "service-key", 5.0)

    with pytest.raises(StorageError, match="409"):
        asyncio.run(storage.upload("career-assets", "logos/c1/a.png", b"png", "image/png"))
