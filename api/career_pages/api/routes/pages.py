import logging

from fastapi import APIRouter, Depends, File, HTTPException, Query, UploadFile, status

from career_pages.api.deps import (
    get_page_store,
    jobs_from_rows,
    load_owned_page,
    page_assets,
    page_out,
    page_theme,
    repository_http_error,
)
from career_pages.core.config import Settings, get_settings
from career_pages.core.security import get_owner_principal
from career_pages.schemas.jobs import JobFilters, Pagination, RuntimeData
from career_pages.schemas.pages import (
    AssetKind,
    AssetOut,
    CareerPageOut,
    DraftPutRequest,
    PageDocumentOut,
    ThemePatchRequest,
)
from career_pages.schemas.render import RenderOut
from career_pages.services.document import inject_assets
from career_pages.services.editor import get_session_manager
from career_pages.services.renderer import render, render_legacy_jobs
from career_pages.services.repository import RepositoryError, get_repository
from career_pages.services.storage import StorageError, StorageValidationError, asset_path, get_storage, validate_asset

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("/{slug}/draft", response_model=PageDocumentOut)
async def get_draft(
    slug: str,
    principal=Depends(get_owner_principal),
    repository=Depends(get_repository),
    store=Depends(get_page_store),
) -> PageDocumentOut:
    owned = await load_owned_page(slug, principal, repository, store)
    try:
        document = await store.load_draft(owned.career_page_id)
    except RepositoryError as exc:
        raise repository_http_error(exc) from exc
    return PageDocumentOut(career_page_id=owned.career_page_id, **document.to_page_data())


@router.put("/{slug}/draft", response_model=PageDocumentOut)
async def put_draft(
    slug: str,
    payload: DraftPutRequest,
    principal=Depends(get_owner_principal),
    repository=Depends(get_repository),
    store=Depends(get_page_store),
) -> PageDocumentOut:
    owned = await load_owned_page(slug, principal, repository, store)
    try:
        document = await store.save_draft(
            owned.career_page_id,
            payload.model_dump(),
            actor_id=principal.subject,
        )
    except RepositoryError as exc:
        raise repository_http_error(exc) from exc

    # A live editor session would now hold a stale copy of the draft.
    get_session_manager().discard(principal.subject, owned.career_page_id)
    return PageDocumentOut(career_page_id=owned.career_page_id, **document.to_page_data())


@router.post("/{slug}/publish", response_model=CareerPageOut)
async def publish_page(
    slug: str,
    principal=Depends(get_owner_principal),
    repository=Depends(get_repository),
    store=Depends(get_page_store),
) -> CareerPageOut:
    owned = await load_owned_page(slug, principal, repository, store)
    try:
        await store.publish(owned.career_page_id, actor_id=principal.subject)
        page = await repository.get_career_page(owned.company["id"])
    except RepositoryError as exc:
        raise repository_http_error(exc) from exc
    return page_out(owned.company, page or owned.page)


@router.get("/{slug}/published", response_model=PageDocumentOut)
async def get_published(
    slug: str,
    principal=Depends(get_owner_principal),
    repository=Depends(get_repository),
    store=Depends(get_page_store),
) -> PageDocumentOut:
    owned = await load_owned_page(slug, principal, repository, store)
    try:
        document = await store.load_published(owned.career_page_id)
    except RepositoryError as exc:
        raise repository_http_error(exc) from exc
    if document is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="page has no published content")
    return PageDocumentOut(career_page_id=owned.career_page_id, **document.to_page_data())


@router.get("/{slug}", response_model=CareerPageOut)
async def get_page(
    slug: str,
    principal=Depends(get_owner_principal),
    repository=Depends(get_repository),
    store=Depends(get_page_store),
) -> CareerPageOut:
    owned = await load_owned_page(slug, principal, repository, store)
    return page_out(owned.company, owned.page)


@router.patch("/{slug}/theme", response_model=CareerPageOut)
async def patch_theme(
    slug: str,
    payload: ThemePatchRequest,
    principal=Depends(get_owner_principal),
    repository=Depends(get_repository),
    store=Depends(get_page_store),
) -> CareerPageOut:
    owned = await load_owned_page(slug, principal, repository, store)
    theme = {**page_theme(owned.page).to_record(), **payload.model_dump(exclude_none=True)}
    try:
        page = await store.update_settings(owned.career_page_id, {"theme": theme}, actor_id=principal.subject)
    except RepositoryError as exc:
        raise repository_http_error(exc) from exc
    return page_out(owned.company, page)


@router.post("/{slug}/assets/{kind}", response_model=AssetOut, status_code=status.HTTP_201_CREATED)
async def upload_asset(
    slug: str,
    kind: AssetKind,
    file: UploadFile = File(...),
    principal=Depends(get_owner_principal),
    repository=Depends(get_repository),
    store=Depends(get_page_store),
    storage=Depends(get_storage),
    settings: Settings = Depends(get_settings),
) -> AssetOut:
    owned = await load_owned_page(slug, principal, repository, store)
    content = await file.read()
    try:
        validate_asset(kind, content_type=file.content_type, size=len(content))
    except StorageValidationError as exc:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_CONTENT, detail=str(exc)) from exc

    path = asset_path(kind, owned.company["id"], file.filename)
    try:
        stored = await storage.upload(settings.storage_bucket, path, content, file.content_type or "")
    except StorageError as exc:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(exc)) from exc

    try:
        page = await store.update_settings(
            owned.career_page_id,
            {f"{kind}_url": stored.public_url},
            actor_id=principal.subject,
        )
    except RepositoryError as exc:
        raise repository_http_error(exc) from exc

    _sync_live_session(principal.subject, page)
    logger.info("asset uploaded career_page_id=%s kind=%s path=%s", owned.career_page_id, kind, stored.path)
    return AssetOut(kind=kind, path=stored.path, public_url=stored.public_url, page=page_out(owned.company, page))


@router.delete("/{slug}/assets/{kind}", response_model=CareerPageOut)
async def remove_asset(
    slug: str,
    kind: AssetKind,
    principal=Depends(get_owner_principal),
    repository=Depends(get_repository),
    store=Depends(get_page_store),
) -> CareerPageOut:
    owned = await load_owned_page(slug, principal, repository, store)
    try:
        page = await store.update_settings(owned.career_page_id, {f"{kind}_url": None}, actor_id=principal.subject)
    except RepositoryError as exc:
        raise repository_http_error(exc) from exc
    _sync_live_session(principal.subject, page)
    return page_out(owned.company, page)


@router.get("/{slug}/preview", response_model=RenderOut)
async def preview_page(
    slug: str,
    page: int = Query(default=1, ge=1),
    search: str | None = Query(default=None),
    location: str | None = Query(default=None),
    job_type: str | None = Query(default=None, alias="type"),
    team: str | None = Query(default=None),
    principal=Depends(get_owner_principal),
    repository=Depends(get_repository),
    store=Depends(get_page_store),
    settings: Settings = Depends(get_settings),
) -> RenderOut:
    owned = await load_owned_page(slug, principal, repository, store)
    try:
        document = await store.load_draft(owned.career_page_id)
        jobs = jobs_from_rows(await repository.list_all_jobs(owned.company["id"]))
    except RepositoryError as exc:
        raise repository_http_error(exc) from exc

    theme = page_theme(owned.page)
    pagination = Pagination(page=page, per_page=settings.jobs_per_page)
    document = inject_assets(document, page_assets(owned.page), company_name=owned.company.get("name"))
    runtime = RuntimeData(
        jobs=jobs,
        pagination=pagination,
        filters=JobFilters(search=search, location=location, job_type=job_type, team=team),
        mode="preview",
    )
    tree = render(document, theme, runtime)
    if tree is None:
        return RenderOut(legacy=render_legacy_jobs(jobs, theme, pagination, mode="preview"))
    return RenderOut(tree=tree)


def _sync_live_session(actor_id: str, page: dict) -> None:
    session = get_session_manager().get(actor_id, page["id"])
    if session is not None:
        session.sync_assets(page_assets(page))
