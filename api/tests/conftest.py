from __future__ import annotations

import copy
from datetime import datetime, timezone
from typing import Any

import pytest
from fastapi.testclient import TestClient

import career_pages.core.security as security
from career_pages.core.config import get_settings
from career_pages.main import app
from career_pages.services.editor import get_session_manager
from career_pages.services.repository import (
    CAREER_PAGE_UPDATE_FIELDS,
    DEFAULT_THEME,
    RepositoryNotFoundError,
    RepositoryValidationError,
    get_repository,
)
from career_pages.services.revalidation import RevalidationHub, ViewCache, get_revalidation_hub
from career_pages.services.storage import StoredObject, get_storage

OWNER_ID = "00000000-0000-0000-0000-0000000000aa"
INTRUDER_ID = "00000000-0000-0000-0000-0000000000bb"
COMPANY_ID = "11111111-1111-1111-1111-111111111111"
PAGE_ID = "22222222-2222-2222-2222-222222222222"
TOKENS = {"owner-token": OWNER_ID, "intruder-token": INTRUDER_ID}

OWNER_HEADERS = {"Authorization": "Bearer owner-token"}
INTRUDER_HEADERS = {"Authorization": "Bearer intruder-token"}


class FakePagesRepository:
    def __init__(self) -> None:
        now = datetime.now(timezone.utc)
        self.companies: dict[str, dict[str, Any]] = {
            "acme": {
                "id": COMPANY_ID,
                "name": "Acme",
                "slug": "acme",
                "owner_id": OWNER_ID,
                "logo_url": None,
                "created_at": now,
            }
        }
        self.pages: dict[str, dict[str, Any]] = {}
        self.jobs: list[dict[str, Any]] = []
        self.updates: list[tuple[str, dict[str, Any]]] = []

    def seed_page(self, **fields: Any) -> dict[str, Any]:
        now = datetime.now(timezone.utc)
        record = {
            "id": PAGE_ID,
            "company_id": COMPANY_ID,
            "theme": dict(DEFAULT_THEME),
            "draft_puck_data": None,
            "puck_data": None,
            "published": False,
            "logo_url": None,
            "banner_url": None,
            "video_url": None,
            "created_at": now,
            "updated_at": now,
        }
        record.update(fields)
        self.pages[record["id"]] = record
        return record

    def seed_job(self, job_id: str, title: str, **fields: Any) -> dict[str, Any]:
        job = {
            "id": job_id,
            "company_id": COMPANY_ID,
            "title": title,
            "description": f"{title} description",
            "published": True,
            "created_at": datetime(2026, 1, 1, tzinfo=timezone.utc),
        }
        job.update(fields)
        self.jobs.append(job)
        return job

    async def get_company_by_slug(self, slug: str) -> dict[str, Any]:
        company = self.companies.get(slug)
        if company is None:
            raise RepositoryNotFoundError("company not found")
        return dict(company)

    async def get_career_page(self, company_id: str) -> dict[str, Any] | None:
        for record in self.pages.values():
            if record["company_id"] == company_id:
                return copy.deepcopy(record)
        return None

    async def get_career_page_by_id(self, career_page_id: str) -> dict[str, Any]:
        record = self.pages.get(career_page_id)
        if record is None:
            raise RepositoryNotFoundError("career page not found")
        company = next(item for item in self.companies.values() if item["id"] == record["company_id"])
        return {
            **copy.deepcopy(record),
            "owner_id": company["owner_id"],
            "company_slug": company["slug"],
            "company_name": company["name"],
        }

    async def create_career_page(self, company_id: str) -> dict[str, Any]:
        record = self.seed_page(company_id=company_id)
        return copy.deepcopy(record)

    async def update_career_page(self, career_page_id: str, fields: dict[str, Any]) -> dict[str, Any]:
        unknown = set(fields) - CAREER_PAGE_UPDATE_FIELDS
        if unknown:
            raise RepositoryValidationError(f"unsupported career page fields: {sorted(unknown)}")
        record = self.pages.get(career_page_id)
        if record is None:
            raise RepositoryNotFoundError("career page not found")
        record.update(copy.deepcopy(fields))
        record["updated_at"] = datetime.now(timezone.utc)
        self.updates.append((career_page_id, copy.deepcopy(fields)))
        return copy.deepcopy(record)

    async def list_published_jobs(self, company_id: str, *, limit: int | None = None, offset: int = 0):
        rows = [job for job in self.jobs if job["company_id"] == company_id and job["published"]]
        return rows[offset : None if limit is None else offset + limit]

    async def list_all_jobs(self, company_id: str, *, limit: int | None = None, offset: int = 0):
        rows = [job for job in self.jobs if job["company_id"] == company_id]
        return rows[offset : None if limit is None else offset + limit]

    async def close(self) -> None:
        return None


class FakeStorage:
    def __init__(self) -> None:
        self.uploads: list[dict[str, Any]] = []

    async def upload(self, bucket: str, path: str, content: bytes, content_type: str) -> StoredObject:
        self.uploads.append({"bucket": bucket, "path": path, "size": len(content), "content_type": content_type})
        return StoredObject(path=path, public_url=f"https://cdn.example.test/{bucket}/{path}")


@pytest.fixture
def repository() -> FakePagesRepository:
    return FakePagesRepository()


@pytest.fixture
def storage() -> FakeStorage:
    return FakeStorage()


@pytest.fixture
def revalidation() -> RevalidationHub:
    return RevalidationHub(cache=ViewCache(ttl_seconds=300))


@pytest.fixture
def client(
    monkeypatch: pytest.MonkeyPatch,
    repository: FakePagesRepository,
    storage: FakeStorage,
    revalidation: RevalidationHub,
):
    monkeypatch.setenv("CP_SUPABASE_URL", "http://supabase.local")
    monkeypatch.setenv("CP_SUPABASE_ANON_KEY", "anon-key")
    monkeypatch.setenv("CP_SITE_URL", "https://jobs.example.test")
    get_settings.cache_clear()

    async def fake_fetch_supabase_user(**kwargs: Any) -> dict[str, Any]:
        user_id = TOKENS.get(kwargs["token"])
        return {"id": user_id, "email": "owner@example.test"} if user_id else {}

    monkeypatch.setattr(security, "_fetch_supabase_user", fake_fetch_supabase_user)
    app.dependency_overrides[get_repository] = lambda: repository
    app.dependency_overrides[get_storage] = lambda: storage
    app.dependency_overrides[get_revalidation_hub] = lambda: revalidation
    get_session_manager().clear()

    yield TestClient(app)

    app.dependency_overrides.clear()
    get_session_manager().clear()
    get_settings.cache_clear()
