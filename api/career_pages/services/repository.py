from __future__ import annotations

import json
from datetime import datetime
from functools import lru_cache
from typing import Any

import asyncpg  # type: ignore[import-untyped]
from asyncpg import exceptions as pg_exc

from career_pages.core.config import get_settings


class RepositoryError(Exception):
    """Base repository error."""


class RepositoryUnavailableError(RepositoryError):
    """Raised when the database is unavailable or not configured."""


class RepositoryNotFoundError(RepositoryError):
    """Raised when the requested entity does not exist."""


class RepositoryConflictError(RepositoryError):
    """Raised when an operation violates state transition rules."""


class RepositoryForbiddenError(RepositoryError):
    """Raised when an operation is not permitted for the actor."""


class RepositoryValidationError(RepositoryError):
    """Raised when payload validation fails before persistence."""


CAREER_PAGE_UPDATE_FIELDS = {
    "theme",
    "draft_puck_data",
    "puck_data",
    "published",
    "logo_url",
    "banner_url",
    "video_url",
}
JSON_FIELDS = {"theme", "draft_puck_data", "puck_data"}
DEFAULT_THEME = {"primaryColor": "#000000"}

_CAREER_PAGE_COLUMNS = """
  id::text as id,
  company_id::text as company_id,
  theme,
  draft_puck_data,
  puck_data,
  published,
  logo_url,
  banner_url,
  video_url,
  created_at,
  updated_at
"""

_JOB_COLUMNS = """
  id::text as id,
  company_id::text as company_id,
  title,
  description,
  location,
  job_type,
  published,
  team,
  work_policy,
  employment_type,
  experience_level,
  salary_range,
  job_slug,
  currency,
  expires_at,
  created_at
"""


class PostgresRepository:
    def __init__(
        self,
        database_url: str | None,
        min_pool_size: int,
        max_pool_size: int,
    ) -> None:
        self.database_url = database_url
        self.min_pool_size = min_pool_size
        self.max_pool_size = max_pool_size
        self._pool: asyncpg.Pool | None = None

    async def close(self) -> None:
        if self._pool is not None:
            await self._pool.close()
            self._pool = None

    async def get_company_by_slug(self, slug: str) -> dict[str, Any]:
        normalized_slug = self._coerce_text(slug)
        if not normalized_slug:
            raise RepositoryNotFoundError("company not found")

        pool = await self._get_pool()
        row = await pool.fetchrow(
            """
            select
              id::text as id,
              name,
              slug,
              owner_id::text as owner_id,
              logo_url,
              created_at
            from companies
            where slug = $1
            """,
            normalized_slug,
        )
        if not row:
            raise RepositoryNotFoundError("company not found")
        return {
            "id": row["id"],
            "name": row["name"],
            "slug": row["slug"],
            "owner_id": row["owner_id"],
            "logo_url": row["logo_url"],
            "created_at": row["created_at"],
        }

    async def get_career_page(self, company_id: str) -> dict[str, Any] | None:
        pool = await self._get_pool()
        try:
            row = await pool.fetchrow(
                f"""
                select {_CAREER_PAGE_COLUMNS}
                from career_pages
                where company_id = $1::uuid
                """,
                company_id,
            )
        except (pg_exc.InvalidTextRepresentationError, asyncpg.DataError) as exc:
            raise RepositoryNotFoundError("company not found") from exc
        return self._career_page_row_to_dict(row) if row else None

    async def get_career_page_by_id(self, career_page_id: str) -> dict[str, Any]:
        pool = await self._get_pool()
        try:
            row = await pool.fetchrow(
                f"""
                select
                  page.*,
                  c.owner_id::text as owner_id,
                  c.slug as company_slug,
                  c.name as company_name
                from (
                  select {_CAREER_PAGE_COLUMNS}
                  from career_pages
                  where id = $1::uuid
                ) page
                join companies c on c.id::text = page.company_id
                """,
                career_page_id,
            )
        except (pg_exc.InvalidTextRepresentationError, asyncpg.DataError) as exc:
            raise RepositoryNotFoundError("career page not found") from exc
        if not row:
            raise RepositoryNotFoundError("career page not found")
        record = self._career_page_row_to_dict(row)
        record["owner_id"] = row["owner_id"]
        record["company_slug"] = row["company_slug"]
        record["company_name"] = row["company_name"]
        return record

    async def create_career_page(self, company_id: str) -> dict[str, Any]:
        pool = await self._get_pool()
        try:
            row = await pool.fetchrow(
                f"""
                insert into career_pages (company_id, theme, published)
                values ($1::uuid, $2::jsonb, false)
                returning {_CAREER_PAGE_COLUMNS}
                """,
                company_id,
                json.dumps(DEFAULT_THEME),
            )
        except pg_exc.UniqueViolationError as exc:
            raise RepositoryConflictError("career page already exists for company") from exc
        except pg_exc.ForeignKeyViolationError as exc:
            raise RepositoryNotFoundError("company not found") from exc
        return self._career_page_row_to_dict(row)

    async def update_career_page(self, career_page_id: str, fields: dict[str, Any]) -> dict[str, Any]:
        unknown = set(fields) - CAREER_PAGE_UPDATE_FIELDS
        if unknown:
            raise RepositoryValidationError(f"unsupported career page fields: {', '.join(sorted(unknown))}")
        if not fields:
            raise RepositoryValidationError("no career page fields to update")

        assignments: list[str] = []
        values: list[Any] = [career_page_id]
        for name in sorted(fields):
            value = fields[name]
            values.append(json.dumps(value) if name in JSON_FIELDS and value is not None else value)
            cast = "::jsonb" if name in JSON_FIELDS else ""
            assignments.append(f"{name} = ${len(values)}{cast}")

        pool = await self._get_pool()
        try:
            row = await pool.fetchrow(
                f"""
                update career_pages
                set {", ".join(assignments)}, updated_at = now()
                where id = $1::uuid
                returning {_CAREER_PAGE_COLUMNS}
                """,
                *values,
            )
        except (pg_exc.InvalidTextRepresentationError, asyncpg.DataError) as exc:
            raise RepositoryNotFoundError("career page not found") from exc
        if not row:
            raise RepositoryNotFoundError("career page not found")
        return self._career_page_row_to_dict(row)

    async def list_published_jobs(
        self,
        company_id: str,
        *,
        limit: int | None = None,
        offset: int = 0,
    ) -> list[dict[str, Any]]:
        return await self._list_jobs(company_id, published_only=True, limit=limit, offset=offset)

    async def list_all_jobs(
        self,
        company_id: str,
        *,
        limit: int | None = None,
        offset: int = 0,
    ) -> list[dict[str, Any]]:
        return await self._list_jobs(company_id, published_only=False, limit=limit, offset=offset)

    async def _list_jobs(
        self,
        company_id: str,
        *,
        published_only: bool,
        limit: int | None,
        offset: int,
    ) -> list[dict[str, Any]]:
        pool = await self._get_pool()
        rows = await pool.fetch(
            f"""
            select {_JOB_COLUMNS}
            from jobs
            where company_id = $1::uuid
              and ($2::boolean = false or published = true)
            order by created_at desc
            limit $3
            offset $4
            """,
            company_id,
            published_only,
            limit,
            max(0, offset),
        )
        return [self._job_row_to_dict(row) for row in rows]

    async def _get_pool(self) -> asyncpg.Pool:
        if not self.database_url:
            raise RepositoryUnavailableError("CP_DATABASE_URL is required")

        if self._pool is not None:
            return self._pool

        try:
            self._pool = await asyncpg.create_pool(
                dsn=self.database_url,
                min_size=self.min_pool_size,
                max_size=self.max_pool_size,
                command_timeout=15,
            )
            return self._pool
        except Exception as exc:  # pragma: no cover - depends on environment
            raise RepositoryUnavailableError("database unavailable") from exc

    def _career_page_row_to_dict(self, row: asyncpg.Record) -> dict[str, Any]:
        theme = self._coerce_json_dict(row["theme"])
        return {
            "id": row["id"],
            "company_id": row["company_id"],
            "theme": theme or dict(DEFAULT_THEME),
            "draft_puck_data": self._coerce_json_value(row["draft_puck_data"]),
            "puck_data": self._coerce_json_value(row["puck_data"]),
            "published": self._coerce_bool(row["published"]),
            "logo_url": self._coerce_text(row["logo_url"]),
            "banner_url": self._coerce_text(row["banner_url"]),
            "video_url": self._coerce_text(row["video_url"]),
            "created_at": self._coerce_datetime(row["created_at"]),
            "updated_at": self._coerce_datetime(row["updated_at"]),
        }

    def _job_row_to_dict(self, row: asyncpg.Record) -> dict[str, Any]:
        return {
            "id": row["id"],
            "company_id": row["company_id"],
            "title": row["title"] or "",
            "description": row["description"],
            "location": self._coerce_text(row["location"]),
            "job_type": self._coerce_text(row["job_type"]),
            "published": self._coerce_bool(row["published"]),
            "team": self._coerce_text(row["team"]),
            "work_policy": self._coerce_text(row["work_policy"]),
            "employment_type": self._coerce_text(row["employment_type"]),
            "experience_level": self._coerce_text(row["experience_level"]),
            "salary_range": self._coerce_text(row["salary_range"]),
            "job_slug": self._coerce_text(row["job_slug"]),
            "currency": self._coerce_text(row["currency"]),
            "expires_at": self._coerce_datetime(row["expires_at"]),
            "created_at": self._coerce_datetime(row["created_at"]),
        }

    @staticmethod
    def _coerce_text(value: Any) -> str | None:
        if value is None:
            return None
        if isinstance(value, str):
            stripped = value.strip()
            return stripped or None
        return str(value)

    @staticmethod
    def _coerce_bool(value: Any) -> bool:
        if isinstance(value, bool):
            return value
        if isinstance(value, (int, float)):
            return value != 0
        if isinstance(value, str):
            normalized = value.strip().lower()
            if normalized in {"1", "true", "yes", "on"}:
                return True
            if normalized in {"0", "false", "no", "off"}:
                return False
        return False

    @staticmethod
    def _coerce_datetime(value: Any) -> datetime | None:
        if value is None:
            return None
        if isinstance(value, datetime):
            return value
        if isinstance(value, str):
            candidate = value.strip()
            if not candidate:
                return None
            try:
                return datetime.fromisoformat(candidate.replace("Z", "+00:00"))
            except ValueError:
                return None
        return None

    @staticmethod
    def _coerce_json_value(value: Any) -> Any:
        # jsonb arrives as text unless a codec is registered on the pool.
        if isinstance(value, str):
            try:
                return json.loads(value)
            except json.JSONDecodeError:
                return None
        return value

    @classmethod
    def _coerce_json_dict(cls, value: Any) -> dict[str, Any]:
        value = cls._coerce_json_value(value)
        if isinstance(value, dict):
            return value
        return {}


@lru_cache
def get_repository() -> PostgresRepository:
    settings = get_settings()
    return PostgresRepository(
        database_url=settings.database_url,
        min_pool_size=settings.database_pool_min_size,
        max_pool_size=settings.database_pool_max_size,
    )
