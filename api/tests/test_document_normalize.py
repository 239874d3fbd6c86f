from __future__ import annotations

import pytest

from career_pages.schemas.document import Block, BlockType, Document
from career_pages.services.document import PageAssets, empty_document, inject_assets, normalize

OWNER = "page-1"


def _types(document: Document) -> list[str]:
    return [block.type.value for block in document.blocks]


def _ids(document: Document) -> list[str]:
    return [block.id for block in document.blocks]


def test_empty_content_gets_pinned_hero_and_footer() -> None:
    document = normalize({"content": [], "root": {"props": {}}}, owner_id="X")

    assert _types(document) == ["HeroSection", "FooterSection"]
    assert _ids(document) == ["hero-section-X", "footer-section-X"]
    assert document.blocks[0].props["title"] == "Join our team"
    assert document.blocks[1].props == {"text": "Built with Lisco", "showPoweredBy": True}


def test_none_is_treated_as_no_blocks() -> None:
    document = normalize(None, owner_id=OWNER)

    assert _types(document) == ["HeroSection", "FooterSection"]


def test_hero_is_moved_first_and_footer_last() -> None:
    raw = {
        "content": [
            {"type": "Footer", "id": "f", "props": {}},
            {"type": "Benefits", "id": "b", "props": {"heading": "Perks"}},
            {"type": "Hero", "id": "h", "props": {"title": "Hi"}},
        ]
    }

    document = normalize(raw, owner_id=OWNER)

    assert _ids(document) == ["h", "b", "f"]
    assert _types(document) == ["HeroSection", "BenefitsSection", "FooterSection"]


def test_unknown_types_are_dropped() -> None:
    raw = {
        "content": [
            {"type": "Hero", "id": "a", "props": {}},
            {"type": "Unknown", "id": "b", "props": {}},
            {"type": "Footer", "id": "c", "props": {}},
        ]
    }

    document = normalize(raw, owner_id=OWNER)

    assert _ids(document) == ["a", "c"]
    assert _types(document) == ["HeroSection", "FooterSection"]


def test_duplicate_ids_get_suffixes() -> None:
    raw = {
        "content": [
            {"type": "Hero", "id": "x", "props": {"title": "1"}},
            {"type": "Jobs", "id": "x", "props": {}},
            {"type": "Footer", "id": "x", "props": {"text": "z"}},
        ]
    }

    document = normalize(raw, owner_id=OWNER)

    assert _ids(document) == ["x", "x-1", "x-2"]


def test_suffixes_skip_ids_already_in_use() -> None:
    raw = {
        "content": [
            {"type": "Benefits", "id": "b", "props": {"heading": "1"}},
            {"type": "Benefits", "id": "b-1", "props": {"heading": "2"}},
            {"type": "Benefits", "id": "b", "props": {"heading": "3"}},
        ]
    }

    document = normalize(raw, owner_id=OWNER)

    ids = _ids(document)
    assert ids[1:4] == ["b", "b-1", "b-2"]
    assert len(set(ids)) == len(ids)


def test_missing_ids_are_generated() -> None:
    raw = {"content": [{"type": "Jobs", "props": {}}, {"type": "Video", "id": "", "props": {}}]}

    document = normalize(raw, owner_id=OWNER)

    generated = _ids(document)[1:3]
    assert generated[0].startswith("JobsSection-0-")
    assert generated[1].startswith("VideoSection-1-")


def test_exact_duplicates_collapse_to_first() -> None:
    raw = {
        "content": [
            {"type": "Hero", "id": "h", "props": {"title": "A"}},
            {"type": "Benefits", "id": "b1", "props": {"heading": "Perks"}},
            {"type": "Benefits", "id": "b2", "props": {"heading": "Perks"}},
            {"type": "Benefits", "id": "b3", "props": {"heading": "Other perks"}},
        ]
    }

    document = normalize(raw, owner_id=OWNER)

    assert _ids(document) == ["h", "b1", "b3", f"footer-section-{OWNER}"]


def test_key_order_does_not_defeat_duplicate_detection() -> None:
    raw = {
        "content": [
            {"type": "Video", "id": "v1", "props": {"title": "T", "align": "left"}},
            {"type": "Video", "id": "v2", "props": {"align": "left", "title": "T"}},
        ]
    }

    document = normalize(raw, owner_id=OWNER)

    assert "v2" not in _ids(document)


def test_multiple_heroes_keep_only_the_first() -> None:
    raw = {
        "content": [
            {"type": "Jobs", "id": "j", "props": {}},
            {"type": "Hero", "id": "h1", "props": {"title": "First"}},
            {"type": "Hero", "id": "h2", "props": {"title": "Second"}},
        ]
    }

    document = normalize(raw, owner_id=OWNER)

    assert _ids(document) == ["h1", "j", f"footer-section-{OWNER}"]


def test_malformed_entries_and_invalid_props_are_dropped() -> None:
    raw = {
        "content": [
            "not-a-block",
            {"type": "Benefits", "id": "missing-props"},
            {"type": "Benefits", "id": "bad-props", "props": ["x"]},
            {"type": 7, "id": "bad-type", "props": {}},
            {"type": "Hero", "id": "bad-enum", "props": {"alignment": "diagonal"}},
            {"type": "Team", "id": "ok", "props": {"heading": "Crew", "extra": True}},
        ]
    }

    document = normalize(raw, owner_id=OWNER)

    assert _ids(document) == [f"hero-section-{OWNER}", "ok", f"footer-section-{OWNER}"]
    assert document.blocks[1].props == {"heading": "Crew"}


def test_jobs_props_never_carry_listings() -> None:
    raw = {"content": [{"type": "Jobs", "id": "j", "props": {"heading": "Roles", "jobs": [{"id": 1}]}}]}

    document = normalize(raw, owner_id=OWNER)

    assert document.blocks[1].props == {"heading": "Roles"}


@pytest.mark.parametrize("raw", [[1, 2, 3], "page", 42, True])
def test_non_object_input_degrades_to_empty_document(raw: object) -> None:
    assert normalize(raw, owner_id=OWNER) == empty_document()


def test_normalize_is_idempotent() -> None:
    raw = {
        "content": [
            {"type": "Footer", "id": "f", "props": {"text": "bye"}},
            {"type": "Benefits", "props": {"heading": "Perks"}},
            {"type": "Benefits", "props": {"heading": "Perks"}},
            {"type": "Video", "id": "v", "props": {"autoplay": "true"}},
            {"type": "Video", "id": "v", "props": {"autoplay": "false"}},
            {"type": "Nope", "id": "n", "props": {}},
        ],
        "root": {"props": {"title": "Careers"}},
    }

    once = normalize(raw, owner_id=OWNER)
    twice = normalize(once, owner_id=OWNER)
    from_wire = normalize(once.to_page_data(), owner_id=OWNER)

    assert twice == once
    assert from_wire == once
    assert once.root_props == {"title": "Careers"}


def test_empty_document_is_a_fixed_point() -> None:
    assert normalize(empty_document(), owner_id=OWNER) == empty_document()


def test_model_shape_is_accepted() -> None:
    raw = {"blocks": [{"type": "HeroSection", "id": "h", "props": {}}], "root_props": {"lang": "en"}}

    document = normalize(raw, owner_id=OWNER)

    assert _ids(document) == ["h", f"footer-section-{OWNER}"]
    assert document.root_props == {"lang": "en"}


def _hero_document(**props: object) -> Document:
    return Document(blocks=[Block(id="h", type=BlockType.HERO, props=dict(props))])


def test_banner_fills_empty_hero_background() -> None:
    document = inject_assets(_hero_document(backgroundImageUrl=""), PageAssets(banner_url="https://cdn/banner.png"))

    hero = document.blocks[0]
    assert hero.props["backgroundImageUrl"] == "https://cdn/banner.png"
    assert hero.props["backgroundStyle"] == "image"


def test_banner_does_not_override_manual_background() -> None:
    original = _hero_document(backgroundImageUrl="https://cdn/manual.png", backgroundStyle="image")

    document = inject_assets(original, PageAssets(banner_url="https://cdn/new-banner.png"))

    assert document.blocks[0].props["backgroundImageUrl"] == "https://cdn/manual.png"


def test_cleared_banner_clears_hero_background() -> None:
    original = _hero_document(backgroundImageUrl="https://cdn/banner.png", backgroundStyle="image")

    document = inject_assets(
        original,
        PageAssets(),
        previous=PageAssets(banner_url="https://cdn/banner.png"),
    )

    assert "backgroundImageUrl" not in document.blocks[0].props
    assert document.blocks[0].props["backgroundStyle"] == "solid"


def test_initial_load_without_banner_keeps_manual_background() -> None:
    original = _hero_document(backgroundImageUrl="https://cdn/manual.png", backgroundStyle="image")

    document = inject_assets(original, PageAssets())

    assert document.blocks[0].props["backgroundImageUrl"] == "https://cdn/manual.png"


def test_logo_and_video_are_injected_with_company_alt_text() -> None:
    document = inject_assets(
        _hero_document(),
        PageAssets(logo_url="https://cdn/logo.png", video_url="https://cdn/culture.mp4"),
        company_name="Acme",
    )

    props = document.blocks[0].props
    assert props["logoUrl"] == "https://cdn/logo.png"
    assert props["logoAlt"] == "Acme Logo"
    assert props["cultureVideoUrl"] == "https://cdn/culture.mp4"


def test_inject_assets_leaves_input_untouched() -> None:
    original = _hero_document()

    inject_assets(original, PageAssets(logo_url="https://cdn/logo.png"))

    assert original.blocks[0].props == {}


def test_inject_assets_without_hero_is_noop() -> None:
    document = Document(blocks=[Block(id="j", type=BlockType.JOBS, props={})])

    assert inject_assets(document, PageAssets(banner_url="https://cdn/b.png")) is document
