from typing import Any

from fastapi import APIRouter, Body, Depends, HTTPException, Response, status

from career_pages.api.deps import (
    OwnedPage,
    get_page_store,
    load_owned_page,
    page_assets,
    page_theme,
    repository_http_error,
)
from career_pages.blocks.registry import BlockPropsError, UnknownBlockTypeError
from career_pages.core.security import get_owner_principal
from career_pages.schemas.jobs import RuntimeData
from career_pages.schemas.pages import (
    ActionOut,
    BlockCatalogEntry,
    BlockCreateRequest,
    BlockDuplicateRequest,
    BlockMoveRequest,
    BlockPatchRequest,
    EditorStateOut,
    TemplateApplyRequest,
    TemplateSummary,
)
from career_pages.schemas.render import RenderOut
from career_pages.services.editor import (
    BlockNotFoundError,
    BlockPermissionError,
    EditingSession,
    get_session_manager,
)
from career_pages.services.page_store import PageStore
from career_pages.services.page_templates import UnknownTemplateError, list_templates
from career_pages.services.renderer import render, render_legacy_jobs
from career_pages.services.repository import RepositoryError, get_repository

router = APIRouter()


async def _session(owned: OwnedPage, actor_id: str, store: PageStore) -> EditingSession:
    manager = get_session_manager()
    session = manager.get(actor_id, owned.career_page_id)
    assets = page_assets(owned.page)
    if session is None:
        try:
            document = await store.load_draft(owned.career_page_id)
        except RepositoryError as exc:
            raise repository_http_error(exc) from exc
        session = EditingSession(
            owned.career_page_id,
            actor_id,
            document=document,
            company_name=owned.company.get("name"),
            assets=assets,
        )
        return manager.put(session)
    if session.assets != assets:
        session.sync_assets(assets)
    return session


async def _owned_session(slug: str, principal: Any, repository: Any, store: PageStore) -> EditingSession:
    owned = await load_owned_page(slug, principal, repository, store)
    return await _session(owned, principal.subject, store)


def _state(session: EditingSession, *, include_catalog: bool = False) -> EditorStateOut:
    state = EditorStateOut(
        career_page_id=session.career_page_id,
        error=session.error,
        **session.document.to_page_data(),
    )
    if include_catalog:
        registry = session.registry
        state.blocks = [
            BlockCatalogEntry(
                type=block_type.value,
                label=registry.definition(block_type).label,
                can_delete=registry.get_permissions(block_type).can_delete,
                can_duplicate=registry.get_permissions(block_type).can_duplicate,
                fields=registry.describe(block_type),
                default_props=registry.get_default_props(block_type),
            )
            for block_type in registry.types
        ]
        state.templates = [
            TemplateSummary(
                id=template.id,
                name=template.name,
                description=template.description,
                suggested_primary_color=template.suggested_primary_color,
            )
            for template in list_templates()
        ]
    return state


def _edit_error(exc: Exception) -> HTTPException:
    if isinstance(exc, (BlockNotFoundError, UnknownTemplateError)):
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc))
    if isinstance(exc, BlockPermissionError):
        return HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc))
    return HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_CONTENT, detail=str(exc))


EDIT_ERRORS = (
    BlockNotFoundError,
    BlockPermissionError,
    BlockPropsError,
    UnknownBlockTypeError,
    UnknownTemplateError,
)


@router.get("/{slug}/editor", response_model=EditorStateOut)
async def open_editor(
    slug: str,
    principal=Depends(get_owner_principal),
    repository=Depends(get_repository),
    store=Depends(get_page_store),
) -> EditorStateOut:
    session = await _owned_session(slug, principal, repository, store)
    return _state(session, include_catalog=True)


@router.get("/{slug}/editor/render", response_model=RenderOut)
async def render_canvas(
    slug: str,
    principal=Depends(get_owner_principal),
    repository=Depends(get_repository),
    store=Depends(get_page_store),
) -> RenderOut:
    owned = await load_owned_page(slug, principal, repository, store)
    session = await _session(owned, principal.subject, store)
    theme = page_theme(owned.page)
    tree = render(session.document, theme, RuntimeData(mode="editor"), session.registry)
    if tree is None:
        return RenderOut(legacy=render_legacy_jobs([], theme, mode="editor"))
    return RenderOut(tree=tree)


@router.put("/{slug}/editor/document", response_model=EditorStateOut)
async def replace_document(
    slug: str,
    payload: Any = Body(...),
    principal=Depends(get_owner_principal),
    repository=Depends(get_repository),
    store=Depends(get_page_store),
) -> EditorStateOut:
    session = await _owned_session(slug, principal, repository, store)
    session.replace(payload)
    return _state(session)


@router.post("/{slug}/editor/blocks", response_model=EditorStateOut, status_code=status.HTTP_201_CREATED)
async def add_block(
    slug: str,
    payload: BlockCreateRequest,
    principal=Depends(get_owner_principal),
    repository=Depends(get_repository),
    store=Depends(get_page_store),
) -> EditorStateOut:
    session = await _owned_session(slug, principal, repository, store)
    try:
        session.add_block(payload.type, index=payload.index, props=payload.props)
    except EDIT_ERRORS as exc:
        raise _edit_error(exc) from exc
    return _state(session)


@router.patch("/{slug}/editor/blocks/{block_id}", response_model=EditorStateOut)
async def update_block(
    slug: str,
    block_id: str,
    payload: BlockPatchRequest,
    principal=Depends(get_owner_principal),
    repository=Depends(get_repository),
    store=Depends(get_page_store),
) -> EditorStateOut:
    session = await _owned_session(slug, principal, repository, store)
    try:
        session.update_props(block_id, payload.props)
    except EDIT_ERRORS as exc:
        raise _edit_error(exc) from exc
    return _state(session)


@router.delete("/{slug}/editor/blocks/{block_id}", response_model=EditorStateOut)
async def delete_block(
    slug: str,
    block_id: str,
    principal=Depends(get_owner_principal),
    repository=Depends(get_repository),
    store=Depends(get_page_store),
) -> EditorStateOut:
    session = await _owned_session(slug, principal, repository, store)
    try:
        session.delete_block(block_id)
    except EDIT_ERRORS as exc:
        raise _edit_error(exc) from exc
    return _state(session)


@router.post("/{slug}/editor/blocks/{block_id}/duplicate", response_model=EditorStateOut)
async def duplicate_block(
    slug: str,
    block_id: str,
    payload: BlockDuplicateRequest | None = None,
    principal=Depends(get_owner_principal),
    repository=Depends(get_repository),
    store=Depends(get_page_store),
) -> EditorStateOut:
    session = await _owned_session(slug, principal, repository, store)
    try:
        session.duplicate_block(block_id, overrides=payload.overrides if payload else None)
    except EDIT_ERRORS as exc:
        raise _edit_error(exc) from exc
    return _state(session)


@router.post("/{slug}/editor/blocks/{block_id}/move", response_model=EditorStateOut)
async def move_block(
    slug: str,
    block_id: str,
    payload: BlockMoveRequest,
    principal=Depends(get_owner_principal),
    repository=Depends(get_repository),
    store=Depends(get_page_store),
) -> EditorStateOut:
    session = await _owned_session(slug, principal, repository, store)
    try:
        session.move_block(block_id, payload.to_index)
    except EDIT_ERRORS as exc:
        raise _edit_error(exc) from exc
    return _state(session)


@router.post("/{slug}/editor/template", response_model=EditorStateOut)
async def apply_template(
    slug: str,
    payload: TemplateApplyRequest,
    principal=Depends(get_owner_principal),
    repository=Depends(get_repository),
    store=Depends(get_page_store),
) -> EditorStateOut:
    session = await _owned_session(slug, principal, repository, store)
    try:
        session.apply_template(payload.template_id)
    except EDIT_ERRORS as exc:
        raise _edit_error(exc) from exc
    return _state(session)


@router.post("/{slug}/editor/reset", response_model=EditorStateOut)
async def reset_editor(
    slug: str,
    principal=Depends(get_owner_principal),
    repository=Depends(get_repository),
    store=Depends(get_page_store),
) -> EditorStateOut:
    session = await _owned_session(slug, principal, repository, store)
    session.reset()
    return _state(session)


@router.post("/{slug}/editor/save", response_model=ActionOut)
async def save_editor(
    slug: str,
    response: Response,
    principal=Depends(get_owner_principal),
    repository=Depends(get_repository),
    store=Depends(get_page_store),
) -> ActionOut:
    session = await _owned_session(slug, principal, repository, store)
    outcome = await session.save(store)
    response.status_code = outcome.status
    return ActionOut(ok=outcome.ok, error=outcome.error)


@router.post("/{slug}/editor/publish", response_model=ActionOut)
async def publish_editor(
    slug: str,
    response: Response,
    principal=Depends(get_owner_principal),
    repository=Depends(get_repository),
    store=Depends(get_page_store),
) -> ActionOut:
    session = await _owned_session(slug, principal, repository, store)
    outcome = await session.publish(store)
    response.status_code = outcome.status
    return ActionOut(ok=outcome.ok, error=outcome.error)
