"""Page document normalization.

``normalize`` is the single repair/validation entry point: loading drafts,
saving drafts, editor mutations and template application all route through
it. It never raises on bad input; invalid blocks are dropped and logged.
"""

from __future__ import annotations

import json
import logging
import time
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from career_pages.blocks.registry import BlockPropsError, BlockRegistry, build_default_registry
from career_pages.schemas.document import Block, BlockType, Document

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class PageAssets:
    logo_url: str | None = None
    banner_url: str | None = None
    video_url: str | None = None

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> PageAssets:
        return cls(
            logo_url=record.get("logo_url") or None,
            banner_url=record.get("banner_url") or None,
            video_url=record.get("video_url") or None,
        )


def empty_document() -> Document:
    return Document(blocks=[], root_props={})


def hero_id(owner_id: str | None) -> str:
    return f"hero-section-{owner_id or 'default'}"


def footer_id(owner_id: str | None) -> str:
    return f"footer-section-{owner_id or 'default'}"


def is_document_like(raw: Any) -> bool:
    return raw is None or isinstance(raw, (Document, Mapping))


def normalize(raw: Any, owner_id: str | None = None, registry: BlockRegistry | None = None) -> Document:
    """Repair ``raw`` into a document satisfying every structural invariant.

    ``raw`` may be the persisted wire shape (``content``/``root``), the model
    shape (``blocks``/``root_props``), a ``Document`` or ``None``. Anything
    else degrades to an empty document. An empty ``Document`` instance is the
    reset/degraded sentinel and is returned unchanged, which keeps the
    function idempotent over its own degraded output.
    """
    registry = registry or build_default_registry()

    if isinstance(raw, Document):
        if raw.is_empty:
            return empty_document()
        raw = raw.to_page_data()
    elif raw is None:
        raw = {}
    elif not isinstance(raw, Mapping):
        logger.warning("page document is not an object; degrading to empty type=%s", type(raw).__name__)
        return empty_document()

    entries, root_props = _split_raw(raw)

    blocks = _validated_blocks(entries, registry)
    blocks = _dedupe(blocks)
    blocks = _assign_ids(blocks)
    blocks = _pin_hero(blocks, owner_id, registry)
    blocks = _pin_footer(blocks, owner_id, registry)
    blocks = _assign_ids(blocks)
    blocks = [block for block in blocks if registry.has_renderer(block.type)]

    return Document(blocks=blocks, root_props=root_props)


def _split_raw(raw: Mapping[str, Any]) -> tuple[list[Any], dict[str, Any]]:
    content = raw.get("content")
    if content is None:
        content = raw.get("blocks")
    if not isinstance(content, list):
        if content is not None:
            logger.warning("page document content is not a list; ignoring type=%s", type(content).__name__)
        content = []

    root_props: Any = None
    root = raw.get("root")
    if isinstance(root, Mapping):
        root_props = root.get("props")
    elif "root_props" in raw:
        root_props = raw.get("root_props")
    if not isinstance(root_props, Mapping):
        root_props = {}
    return content, dict(root_props)


def _validated_blocks(entries: list[Any], registry: BlockRegistry) -> list[Block]:
    blocks: list[Block] = []
    for index, entry in enumerate(entries):
        if not isinstance(entry, Mapping):
            logger.warning("dropping non-object block index=%s", index)
            continue
        type_name = entry.get("type")
        raw_props = entry.get("props")
        if not isinstance(type_name, str) or not isinstance(raw_props, Mapping):
            logger.warning("dropping malformed block index=%s type=%r", index, type_name)
            continue

        block_type = registry.resolve_type(type_name)
        if block_type is None or not registry.has_renderer(block_type):
            logger.warning("dropping unknown block type index=%s type=%s", index, type_name)
            continue

        try:
            props = registry.validate_props(block_type, raw_props)
        except BlockPropsError:
            logger.warning("dropping block with invalid props index=%s type=%s", index, block_type.value)
            continue

        raw_id = entry.get("id")
        blocks.append(
            Block(
                id=raw_id.strip() if isinstance(raw_id, str) else "",
                type=block_type,
                props=props,
            )
        )
    return blocks


def _props_key(block: Block) -> tuple[str, str]:
    return block.type.value, json.dumps(block.props, sort_keys=True, separators=(",", ":"))


def _dedupe(blocks: list[Block]) -> list[Block]:
    seen: set[tuple[str, str]] = set()
    unique: list[Block] = []
    for block in blocks:
        key = _props_key(block)
        if key in seen:
            logger.info("removed duplicate block type=%s id=%s", block.type.value, block.id)
            continue
        seen.add(key)
        unique.append(block)
    return unique


def _assign_ids(blocks: list[Block]) -> list[Block]:
    timestamp = int(time.time() * 1000)
    seen: set[str] = set()
    counters: dict[str, int] = {}
    repaired: list[Block] = []
    for index, block in enumerate(blocks):
        block_id = block.id or f"{block.type.value}-{index}-{timestamp}"
        if block_id in seen:
            count = counters.get(block_id, 0)
            candidate = block_id
            while candidate in seen:
                count += 1
                candidate = f"{block_id}-{count}"
            counters[block_id] = count
            block_id = candidate
        seen.add(block_id)
        repaired.append(block if block_id == block.id else block.model_copy(update={"id": block_id}))
    return repaired


def _extract(blocks: list[Block], block_type: BlockType) -> tuple[list[Block], list[Block]]:
    matching = [block for block in blocks if block.type == block_type]
    rest = [block for block in blocks if block.type != block_type]
    return matching, rest


def _synthesize(block_type: BlockType, block_id: str, registry: BlockRegistry) -> Block | None:
    if not registry.is_known_type(block_type):
        return None
    return Block(id=block_id, type=block_type, props=registry.get_default_props(block_type))


def _pin_hero(blocks: list[Block], owner_id: str | None, registry: BlockRegistry) -> list[Block]:
    heroes, rest = _extract(blocks, BlockType.HERO)
    if len(heroes) > 1:
        logger.warning("removed duplicate hero blocks count=%s owner_id=%s", len(heroes) - 1, owner_id)
    hero = heroes[0] if heroes else _synthesize(BlockType.HERO, hero_id(owner_id), registry)
    return [hero, *rest] if hero is not None else rest


def _pin_footer(blocks: list[Block], owner_id: str | None, registry: BlockRegistry) -> list[Block]:
    head, body = blocks[:1], blocks[1:]
    if head and head[0].type != BlockType.HERO:
        head, body = [], blocks
    footers, rest = _extract(body, BlockType.FOOTER)
    if len(footers) > 1:
        logger.warning("removed duplicate footer blocks count=%s owner_id=%s", len(footers) - 1, owner_id)
    footer = footers[0] if footers else _synthesize(BlockType.FOOTER, footer_id(owner_id), registry)
    return [*head, *rest, footer] if footer is not None else [*head, *rest]


def find_hero(document: Document) -> Block | None:
    if document.blocks and document.blocks[0].type == BlockType.HERO:
        return document.blocks[0]
    return None


def inject_assets(
    document: Document,
    assets: PageAssets,
    *,
    company_name: str | None = None,
    previous: PageAssets | None = None,
) -> Document:
    """Copy theme-level assets into the Hero without overriding manual edits.

    A Hero field is filled only while it is falsy. When ``previous`` is given
    and an asset present there has since been removed, the matching Hero
    field is cleared.
    """
    hero = find_hero(document)
    if hero is None:
        return document

    props = dict(hero.props)
    removed = _removed_assets(previous, assets)

    if assets.banner_url:
        if not props.get("backgroundImageUrl"):
            props["backgroundImageUrl"] = assets.banner_url
            props["backgroundStyle"] = "image"
    elif "banner_url" in removed and props.get("backgroundImageUrl"):
        props.pop("backgroundImageUrl", None)
        if props.get("backgroundStyle") == "image":
            props["backgroundStyle"] = "solid"

    if assets.logo_url:
        if not props.get("logoUrl"):
            props["logoUrl"] = assets.logo_url
            props["logoAlt"] = f"{company_name or 'Company'} Logo"
    elif "logo_url" in removed and props.get("logoUrl"):
        props.pop("logoUrl", None)
        props.pop("logoAlt", None)

    if assets.video_url:
        if not props.get("cultureVideoUrl"):
            props["cultureVideoUrl"] = assets.video_url
    elif "video_url" in removed and props.get("cultureVideoUrl"):
        props.pop("cultureVideoUrl", None)

    if props == hero.props:
        return document
    blocks = [hero.model_copy(update={"props": props}), *document.blocks[1:]]
    return document.model_copy(update={"blocks": blocks})


def _removed_assets(previous: PageAssets | None, current: PageAssets) -> set[str]:
    if previous is None:
        return set()
    return {
        name
        for name in ("logo_url", "banner_url", "video_url")
        if getattr(previous, name) and not getattr(current, name)
    }
