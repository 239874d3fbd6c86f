"""Live editing sessions.

An ``EditingSession`` owns the in-memory document an owner is editing. Every
mutation is routed through ``normalize`` so the live document always
satisfies the structural invariants. Persistence happens only on explicit
``save``/``publish``.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from dataclasses import dataclass
from functools import lru_cache
from typing import Any
from uuid import uuid4

from career_pages.blocks.registry import BlockRegistry, UnknownBlockTypeError, build_default_registry
from career_pages.core.config import get_settings
from career_pages.schemas.document import Block, BlockType, Document
from career_pages.services.document import (
    PageAssets,
    empty_document,
    inject_assets,
    is_document_like,
    normalize,
)
from career_pages.services.page_store import PageStore
from career_pages.services.page_templates import apply_template as build_template
from career_pages.services.repository import (
    RepositoryConflictError,
    RepositoryError,
    RepositoryForbiddenError,
    RepositoryNotFoundError,
    RepositoryUnavailableError,
    RepositoryValidationError,
)

logger = logging.getLogger(__name__)

EDITOR_ERROR_MESSAGE = "The editor hit an unexpected error. Reset the page to continue."
PINNED_TYPES = (BlockType.HERO, BlockType.FOOTER)


class BlockPermissionError(PermissionError):
    """Raised when a block's placement rules forbid the requested edit."""


class BlockNotFoundError(LookupError):
    """Raised when a block id is not part of the live document."""


@dataclass(slots=True)
class ActionOutcome:
    ok: bool
    error: str | None = None
    status: int = 200


def _outcome_from_error(exc: RepositoryError) -> ActionOutcome:
    if isinstance(exc, RepositoryForbiddenError):
        status = 403
    elif isinstance(exc, RepositoryNotFoundError):
        status = 404
    elif isinstance(exc, RepositoryConflictError):
        status = 409
    elif isinstance(exc, RepositoryValidationError):
        status = 422
    elif isinstance(exc, RepositoryUnavailableError):
        status = 503
    else:
        status = 500
    return ActionOutcome(ok=False, error=str(exc) or exc.__class__.__name__, status=status)


class EditingSession:
    def __init__(
        self,
        career_page_id: str,
        actor_id: str,
        *,
        document: Any = None,
        company_name: str | None = None,
        assets: PageAssets | None = None,
        registry: BlockRegistry | None = None,
    ) -> None:
        self.career_page_id = career_page_id
        self.actor_id = actor_id
        self.company_name = company_name
        self.registry = registry or build_default_registry()
        self.assets = PageAssets()
        self.error: str | None = None
        self._document = self._normalize(document)
        if assets is not None:
            self.sync_assets(assets)

    @property
    def document(self) -> Document:
        return self._document

    def replace(self, raw: Any) -> Document:
        """Swap in a whole document coming from the canvas.

        Input that is not even an object leaves the live document alone and
        puts the session in the editor error state until ``reset``.
        """
        if not is_document_like(raw):
            logger.warning(
                "editor received non-object document career_page_id=%s kind=%s",
                self.career_page_id,
                type(raw).__name__,
            )
            self.error = EDITOR_ERROR_MESSAGE
            return self._document
        self._document = self._normalize(raw)
        return self._document

    def add_block(self, block_type: Any, index: int | None = None, props: dict[str, Any] | None = None) -> Block:
        resolved = self.registry.resolve_type(block_type)
        if resolved is None:
            raise UnknownBlockTypeError(f"unknown block type: {block_type!r}")
        if resolved in PINNED_TYPES and self._first_of(resolved) is not None:
            raise BlockPermissionError(f"a page can only have one {resolved.value}")

        merged = {**self.registry.get_default_props(resolved), **(props or {})}
        block = Block(
            id=f"{resolved.value}-{uuid4()}",
            type=resolved,
            props=self.registry.validate_props(resolved, merged),
        )

        blocks = list(self._document.blocks)
        blocks.insert(self._insert_position(index, len(blocks)), block)
        self._apply(blocks)
        return self._find(block.id) or block

    def delete_block(self, block_id: str) -> Document:
        block = self._require(block_id)
        if not self.registry.get_permissions(block.type).can_delete:
            raise BlockPermissionError(f"{block.type.value} cannot be deleted")
        self._apply([item for item in self._document.blocks if item.id != block_id])
        return self._document

    def duplicate_block(self, block_id: str, overrides: dict[str, Any] | None = None) -> Block | None:
        """Insert a copy right after ``block_id``.

        Without ``overrides`` the copy is an exact duplicate and normalization
        folds it back into the original, in which case ``None`` is returned.
        """
        block = self._require(block_id)
        if not self.registry.get_permissions(block.type).can_duplicate:
            raise BlockPermissionError(f"{block.type.value} cannot be duplicated")

        props = {**block.props, **(overrides or {})}
        copy = Block(
            id=f"{block.type.value}-{uuid4()}",
            type=block.type,
            props=self.registry.validate_props(block.type, props),
        )
        blocks = list(self._document.blocks)
        blocks.insert(blocks.index(block) + 1, copy)
        self._apply(blocks)
        return self._find(copy.id)

    def move_block(self, block_id: str, to_index: int) -> Document:
        block = self._require(block_id)
        if block.type in PINNED_TYPES:
            raise BlockPermissionError(f"{block.type.value} has a fixed position")
        blocks = [item for item in self._document.blocks if item.id != block_id]
        blocks.insert(self._insert_position(to_index, len(blocks)), block)
        self._apply(blocks)
        return self._document

    def update_props(self, block_id: str, props: dict[str, Any]) -> Block | None:
        block = self._require(block_id)
        validated = self.registry.validate_props(block.type, {**block.props, **props})
        blocks = [
            item.model_copy(update={"props": validated}) if item.id == block_id else item
            for item in self._document.blocks
        ]
        self._apply(blocks)
        return self._find(block_id)

    def apply_template(self, template_id: str) -> Document:
        page_data = build_template(template_id, self.company_name)
        self._document = inject_assets(
            self._normalize(page_data),
            self.assets,
            company_name=self.company_name,
        )
        return self._document

    def sync_assets(self, assets: PageAssets) -> Document:
        """Re-apply theme assets after they changed outside the session."""
        previous = self.assets
        self._document = inject_assets(
            self._document,
            assets,
            company_name=self.company_name,
            previous=previous,
        )
        self.assets = assets
        return self._document

    def reset(self) -> Document:
        self._document = empty_document()
        self.error = None
        return self._document

    async def save(self, store: PageStore) -> ActionOutcome:
        try:
            saved = await store.save_draft(self.career_page_id, self._document, actor_id=self.actor_id)
        except RepositoryError as exc:
            logger.warning(
                "editor save failed career_page_id=%s actor_id=%s error=%s",
                self.career_page_id,
                self.actor_id,
                exc,
            )
            return _outcome_from_error(exc)
        self._document = saved
        return ActionOutcome(ok=True)

    async def publish(self, store: PageStore) -> ActionOutcome:
        outcome = await self.save(store)
        if not outcome.ok:
            return outcome
        try:
            await store.publish(self.career_page_id, actor_id=self.actor_id)
        except RepositoryError as exc:
            logger.warning(
                "editor publish failed career_page_id=%s actor_id=%s error=%s",
                self.career_page_id,
                self.actor_id,
                exc,
            )
            return _outcome_from_error(exc)
        return ActionOutcome(ok=True)

    def _normalize(self, raw: Any) -> Document:
        return normalize(raw, owner_id=self.career_page_id, registry=self.registry)

    def _apply(self, blocks: list[Block]) -> None:
        candidate = self._document.model_copy(update={"blocks": blocks})
        self._document = self._normalize(candidate)

    def _find(self, block_id: str) -> Block | None:
        return next((block for block in self._document.blocks if block.id == block_id), None)

    def _first_of(self, block_type: BlockType) -> Block | None:
        return next((block for block in self._document.blocks if block.type == block_type), None)

    def _require(self, block_id: str) -> Block:
        block = self._find(block_id)
        if block is None:
            raise BlockNotFoundError(f"block not found: {block_id}")
        return block

    def _insert_position(self, index: int | None, size: int) -> int:
        # New and moved blocks stay between the pinned Hero and Footer.
        low = 1 if self._first_of(BlockType.HERO) is not None else 0
        high = size - 1 if self._first_of(BlockType.FOOTER) is not None else size
        high = max(low, high)
        if index is None:
            return high
        return min(max(index, low), high)


class EditorSessionManager:
    """Keeps one live session per (actor, career page) in process memory.

    Sessions untouched for ``idle_seconds`` are dropped; unsaved edits in them
    are lost, the persisted draft is not.
    """

    def __init__(self, idle_seconds: float = 3600.0, clock: Callable[[], float] = time.monotonic) -> None:
        self.idle_seconds = idle_seconds
        self._clock = clock
        self._sessions: dict[tuple[str, str], EditingSession] = {}
        self._touched: dict[tuple[str, str], float] = {}

    def __len__(self) -> int:
        return len(self._sessions)

    def get(self, actor_id: str, career_page_id: str) -> EditingSession | None:
        self.evict_idle()
        key = (actor_id, career_page_id)
        session = self._sessions.get(key)
        if session is not None:
            self._touched[key] = self._clock()
        return session

    def put(self, session: EditingSession) -> EditingSession:
        self.evict_idle()
        key = (session.actor_id, session.career_page_id)
        self._sessions[key] = session
        self._touched[key] = self._clock()
        return session

    def discard(self, actor_id: str, career_page_id: str) -> None:
        self._sessions.pop((actor_id, career_page_id), None)
        self._touched.pop((actor_id, career_page_id), None)

    def evict_idle(self) -> int:
        cutoff = self._clock() - self.idle_seconds
        idle = [key for key, touched in self._touched.items() if touched <= cutoff]
        for key in idle:
            self.discard(*key)
        if idle:
            logger.info("evicted idle editing sessions count=%s", len(idle))
        return len(idle)

    def clear(self) -> int:
        count = len(self._sessions)
        self._sessions.clear()
        self._touched.clear()
        return count


@lru_cache
def get_session_manager() -> EditorSessionManager:
    return EditorSessionManager(idle_seconds=get_settings().editor_session_idle_seconds)
