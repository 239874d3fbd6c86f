from __future__ import annotations

import logging
from typing import Any

from career_pages.blocks.registry import BlockRegistry, build_default_registry
from career_pages.blocks.views import job_card, page_slice, paginate, pagination_view
from career_pages.schemas.document import Block, BlockType, Document
from career_pages.schemas.jobs import Job, Pagination, RenderMode, RuntimeData
from career_pages.schemas.render import LegacyJobsView, RenderTree, SectionView
from career_pages.services.palette import Theme, generate_palette

logger = logging.getLogger(__name__)

PREVIEW_BANNER = "Preview Mode - Unpublished Changes"
FALLBACK_TEMPLATE = "blocks/fallback.html"
FALLBACK_MESSAGE = "This section could not be displayed."


def render(
    document: Document,
    theme: Theme,
    runtime: RuntimeData,
    registry: BlockRegistry | None = None,
) -> RenderTree | None:
    """Build the render tree for a document, or ``None`` when it has no blocks.

    Job listings always come from ``runtime``; whatever a Jobs block carries
    in its props is ignored. A block that fails to render is replaced by a
    fallback section and the rest of the page still renders.
    """
    if document.is_empty:
        return None

    registry = registry or build_default_registry()
    palette = generate_palette(theme)
    sections = [_render_block(block, runtime, registry) for block in document.blocks]

    return RenderTree(
        mode=runtime.mode,
        style=palette.css_variables(),
        sections=sections,
        preview_banner=PREVIEW_BANNER if runtime.mode == "preview" else None,
    )


def _render_block(block: Block, runtime: RuntimeData, registry: BlockRegistry) -> SectionView:
    props = dict(block.props)
    if block.type == BlockType.JOBS:
        props.pop("jobs", None)

    try:
        return registry.render(block.type, block.id, props, runtime)
    except Exception:
        logger.exception("block render failed block_id=%s type=%s", block.id, block.type.value)
        return fallback_section(block, registry)


def fallback_section(block: Block, registry: BlockRegistry) -> SectionView:
    heading = block.props.get("heading") or block.props.get("title")
    if not isinstance(heading, str) or not heading:
        heading = registry.definition(block.type).label if registry.is_known_type(block.type) else "Section"
    return SectionView(
        block_id=block.id,
        block_type=block.type.value,
        template=FALLBACK_TEMPLATE,
        data={"heading": heading, "message": FALLBACK_MESSAGE},
        failed=True,
    )


def render_legacy_jobs(
    jobs: list[Job],
    theme: Theme,
    pagination: Pagination | None = None,
    mode: RenderMode = "public",
) -> LegacyJobsView:
    """Plain two-column job list used when a page has no block content."""
    palette = generate_palette(theme)
    cards: list[dict[str, Any]] = []
    pages = paginate(len(jobs), pagination)
    for job in page_slice(jobs, pages):
        card = job_card(job)
        card["description"] = job.description
        cards.append(card)

    return LegacyJobsView(
        mode=mode,
        style=palette.css_variables(),
        jobs=cards,
        pagination=pagination_view(pages),
        preview_banner=PREVIEW_BANNER if mode == "preview" else None,
    )
