from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from fastapi import Depends, HTTPException, status

from career_pages.core.auth import Principal
from career_pages.schemas.jobs import Job
from career_pages.schemas.pages import CareerPageOut, ThemeOut
from career_pages.services.document import PageAssets
from career_pages.services.page_store import PageStore
from career_pages.services.palette import Theme, generate_palette
from career_pages.services.repository import (
    RepositoryConflictError,
    RepositoryError,
    RepositoryForbiddenError,
    RepositoryNotFoundError,
    RepositoryUnavailableError,
    RepositoryValidationError,
    get_repository,
)
from career_pages.services.revalidation import RevalidationHub, get_revalidation_hub


@dataclass(slots=True)
class OwnedPage:
    company: dict[str, Any]
    page: dict[str, Any]

    @property
    def career_page_id(self) -> str:
        return self.page["id"]


def get_page_store(
    repository=Depends(get_repository),
    revalidation: RevalidationHub = Depends(get_revalidation_hub),
) -> PageStore:
    return PageStore(repository, revalidation)


def repository_http_error(exc: RepositoryError) -> HTTPException:
    if isinstance(exc, RepositoryUnavailableError):
        return HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(exc))
    if isinstance(exc, RepositoryNotFoundError):
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc))
    if isinstance(exc, RepositoryForbiddenError):
        return HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(exc))
    if isinstance(exc, RepositoryConflictError):
        return HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc))
    if isinstance(exc, RepositoryValidationError):
        return HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_CONTENT, detail=str(exc))
    return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="repository error")


async def load_owned_page(slug: str, principal: Principal, repository: Any, store: PageStore) -> OwnedPage:
    try:
        company = await repository.get_company_by_slug(slug)
    except RepositoryError as exc:
        raise repository_http_error(exc) from exc

    try:
        principal.require_owner(company.get("owner_id"))
    except PermissionError as exc:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(exc)) from exc

    try:
        page = await store.open_page(company)
    except RepositoryError as exc:
        raise repository_http_error(exc) from exc
    return OwnedPage(company=company, page=page)


def page_theme(page: dict[str, Any]) -> Theme:
    return Theme.from_record(page.get("theme"))


def page_assets(page: dict[str, Any]) -> PageAssets:
    return PageAssets.from_record(page)


def page_out(company: dict[str, Any], page: dict[str, Any]) -> CareerPageOut:
    theme = page_theme(page)
    return CareerPageOut(
        id=page["id"],
        company_id=page["company_id"],
        company_slug=company["slug"],
        published=bool(page.get("published")),
        theme=ThemeOut(primaryColor=theme.primary_color, secondaryColor=theme.secondary_color),
        palette=generate_palette(theme).css_variables(),
        logo_url=page.get("logo_url"),
        banner_url=page.get("banner_url"),
        video_url=page.get("video_url"),
        updated_at=page.get("updated_at"),
    )


def jobs_from_rows(rows: list[dict[str, Any]]) -> list[Job]:
    return [Job.model_validate(row) for row in rows]
