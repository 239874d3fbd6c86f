from __future__ import annotations

import logging
from typing import Any

from opentelemetry import trace

from career_pages.blocks.registry import BlockRegistry, build_default_registry
from career_pages.schemas.document import Document
from career_pages.services.document import normalize
from career_pages.services.repository import (
    RepositoryForbiddenError,
    RepositoryNotFoundError,
    RepositoryValidationError,
)
from career_pages.services.revalidation import RevalidationHub

logger = logging.getLogger(__name__)
tracer = trace.get_tracer(__name__)


class PageStore:
    """Draft and published slots of a career page, over the repository.

    The draft is written by ``save_draft``. ``publish`` copies whatever draft
    is persisted at that moment into the published slot; it never takes an
    in-memory document.
    """

    def __init__(
        self,
        repository: Any,
        revalidation: RevalidationHub | None = None,
        registry: BlockRegistry | None = None,
    ) -> None:
        self.repository = repository
        self.revalidation = revalidation
        self.registry = registry or build_default_registry()

    async def open_page(self, company: dict[str, Any]) -> dict[str, Any]:
        """Return the company's career page record, creating an empty one on first access."""
        record = await self.repository.get_career_page(company["id"])
        if record is None:
            record = await self.repository.create_career_page(company["id"])
            logger.info("created career page company_id=%s career_page_id=%s", company["id"], record["id"])
        return record

    async def load_draft(self, career_page_id: str) -> Document:
        record = await self.repository.get_career_page_by_id(career_page_id)
        return normalize(record.get("draft_puck_data"), owner_id=career_page_id, registry=self.registry)

    async def load_published(self, career_page_id: str) -> Document | None:
        record = await self.repository.get_career_page_by_id(career_page_id)
        published = record.get("puck_data")
        if not record.get("published") or not isinstance(published, dict) or not published.get("content"):
            return None
        document = normalize(published, owner_id=career_page_id, registry=self.registry)
        return None if document.is_empty else document

    async def save_draft(self, career_page_id: str, document: Any, *, actor_id: str) -> Document:
        with tracer.start_as_current_span("page_store.save_draft") as span:
            span.set_attribute("career_page.id", career_page_id)
            record = await self._owned_record(career_page_id, actor_id)
            normalized = normalize(document, owner_id=career_page_id, registry=self.registry)
            await self.repository.update_career_page(
                career_page_id,
                {"draft_puck_data": normalized.to_page_data()},
            )
            span.set_attribute("career_page.blocks", len(normalized.blocks))
            logger.info(
                "saved draft career_page_id=%s actor_id=%s blocks=%s",
                career_page_id,
                actor_id,
                len(normalized.blocks),
            )
        await self._revalidate(record)
        return normalized

    async def publish(self, career_page_id: str, *, actor_id: str) -> None:
        with tracer.start_as_current_span("page_store.publish") as span:
            span.set_attribute("career_page.id", career_page_id)
            record = await self._owned_record(career_page_id, actor_id)
            draft = record.get("draft_puck_data")
            if draft is None:
                raise RepositoryNotFoundError("career page has no draft to publish")
            await self.repository.update_career_page(
                career_page_id,
                {"puck_data": draft, "published": True},
            )
            logger.info("published career page career_page_id=%s actor_id=%s", career_page_id, actor_id)
        await self._revalidate(record)

    async def update_settings(self, career_page_id: str, fields: dict[str, Any], *, actor_id: str) -> dict[str, Any]:
        """Theme and asset updates; the draft and published slots are left untouched."""
        if {"draft_puck_data", "puck_data", "published"} & set(fields):
            raise RepositoryValidationError("page content changes go through save_draft and publish")
        record = await self._owned_record(career_page_id, actor_id)
        updated = await self.repository.update_career_page(career_page_id, fields)
        await self._revalidate(record)
        return updated

    async def _owned_record(self, career_page_id: str, actor_id: str) -> dict[str, Any]:
        record = await self.repository.get_career_page_by_id(career_page_id)
        if record.get("owner_id") != actor_id:
            raise RepositoryForbiddenError("Unauthorized")
        return record

    async def _revalidate(self, record: dict[str, Any]) -> None:
        slug = record.get("company_slug")
        if self.revalidation is not None and slug:
            await self.revalidation.revalidate_company(slug)
