from __future__ import annotations

import pytest

from career_pages.services.document import normalize
from career_pages.services.page_templates import (
    UnknownTemplateError,
    apply_template,
    get_template,
    list_templates,
)


def test_catalog_lists_templates_in_order() -> None:
    assert [template.id for template in list_templates()] == [
        "modern-minimal",
        "corporate-classic",
        "startup-bold",
        "blank",
    ]


def test_unknown_template_raises() -> None:
    with pytest.raises(UnknownTemplateError, match='Template with id "retro" not found'):
        get_template("retro")


def test_apply_template_returns_independent_copy() -> None:
    first = apply_template("modern-minimal")
    first["content"][0]["props"]["title"] = "Changed"

    assert apply_template("modern-minimal")["content"][0]["props"]["title"] == "Join Our Mission to Build the Future"


def test_apply_template_personalises_generic_hero_title() -> None:
    page_data = apply_template("startup-bold", company_name="Acme")

    assert page_data["content"][0]["props"]["title"] == "Acme careers"
    assert get_template("startup-bold").page_data["content"][0]["props"]["title"] == "Join the Revolution"


def test_every_template_normalizes_cleanly() -> None:
    for template in list_templates():
        document = normalize(template.page_data, owner_id="page-1")
        types = [block.type.value for block in document.blocks]
        assert types[0] == "HeroSection"
        assert types[-1] == "FooterSection"
        assert len({block.id for block in document.blocks}) == len(document.blocks)
        if template.page_data["content"]:
            assert len(document.blocks) >= len(template.page_data["content"])
