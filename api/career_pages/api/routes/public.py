import logging
from urllib.parse import urlencode

from fastapi import APIRouter, Depends, HTTPException, Query, status
from fastapi.responses import HTMLResponse

from career_pages.api.deps import get_page_store, jobs_from_rows, page_assets, page_theme, repository_http_error
from career_pages.core.config import Settings, get_settings
from career_pages.schemas.jobs import JobFilters, Pagination, RuntimeData
from career_pages.schemas.render import RenderOut
from career_pages.services.document import inject_assets
from career_pages.services.html import render_legacy_html, render_page_html
from career_pages.services.renderer import render, render_legacy_jobs
from career_pages.services.repository import RepositoryError, get_repository
from career_pages.services.revalidation import RevalidationHub, get_revalidation_hub

router = APIRouter()
logger = logging.getLogger(__name__)


async def _published_view(
    slug: str,
    *,
    page: int,
    filters: JobFilters,
    repository,
    store,
    settings: Settings,
) -> tuple[dict, list, RenderOut]:
    try:
        company = await repository.get_company_by_slug(slug)
        record = await repository.get_career_page(company["id"])
    except RepositoryError as exc:
        raise repository_http_error(exc) from exc
    if record is None or not record.get("published"):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="career page is not published")

    try:
        document = await store.load_published(record["id"])
        jobs = jobs_from_rows(await repository.list_published_jobs(company["id"]))
    except RepositoryError as exc:
        raise repository_http_error(exc) from exc

    theme = page_theme(record)
    pagination = Pagination(page=page, per_page=settings.jobs_per_page)
    brand = {**company, "logo_url": record.get("logo_url") or company.get("logo_url")}

    if document is None:
        return brand, jobs, RenderOut(legacy=render_legacy_jobs(jobs, theme, pagination))

    document = inject_assets(document, page_assets(record), company_name=company.get("name"))
    runtime = RuntimeData(jobs=jobs, pagination=pagination, filters=filters, mode="public")
    tree = render(document, theme, runtime)
    if tree is None:
        return brand, jobs, RenderOut(legacy=render_legacy_jobs(jobs, theme, pagination))
    return brand, jobs, RenderOut(tree=tree)


@router.get("/pages/{slug}/render", response_model=RenderOut)
async def render_published(
    slug: str,
    page: int = Query(default=1, ge=1),
    search: str | None = Query(default=None),
    location: str | None = Query(default=None),
    job_type: str | None = Query(default=None, alias="type"),
    team: str | None = Query(default=None),
    repository=Depends(get_repository),
    store=Depends(get_page_store),
    settings: Settings = Depends(get_settings),
) -> RenderOut:
    filters = JobFilters(search=search, location=location, job_type=job_type, team=team)
    _, _, view = await _published_view(
        slug,
        page=page,
        filters=filters,
        repository=repository,
        store=store,
        settings=settings,
    )
    return view


@router.get("/{slug}/careers", response_class=HTMLResponse)
async def careers_page(
    slug: str,
    page: int = Query(default=1, ge=1),
    search: str | None = Query(default=None),
    location: str | None = Query(default=None),
    job_type: str | None = Query(default=None, alias="type"),
    team: str | None = Query(default=None),
    repository=Depends(get_repository),
    store=Depends(get_page_store),
    settings: Settings = Depends(get_settings),
    revalidation: RevalidationHub = Depends(get_revalidation_hub),
) -> HTMLResponse:
    path = f"/{slug}/careers"
    query = {"page": page, "search": search, "location": location, "type": job_type, "team": team}
    variant = urlencode(sorted((key, value) for key, value in query.items() if value is not None))

    cached = revalidation.cache.get(path, variant)
    if cached is not None:
        return HTMLResponse(cached)

    filters = JobFilters(search=search, location=location, job_type=job_type, team=team)
    company, jobs, view = await _published_view(
        slug,
        page=page,
        filters=filters,
        repository=repository,
        store=store,
        settings=settings,
    )
    careers_url = f"{settings.site_url.rstrip('/')}{path}"
    if view.tree is not None:
        html = render_page_html(view.tree, company=company, jobs=jobs, careers_url=careers_url)
    else:
        html = render_legacy_html(view.legacy, company=company, jobs=jobs, careers_url=careers_url)

    revalidation.cache.set(path, html, variant)
    logger.info("rendered careers page slug=%s page=%s legacy=%s", slug, page, view.tree is None)
    return HTMLResponse(html)
