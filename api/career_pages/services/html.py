from __future__ import annotations

import json
import logging
from functools import lru_cache
from pathlib import Path
from typing import Any

from jinja2 import Environment, FileSystemLoader, select_autoescape
from markupsafe import Markup

from career_pages.schemas.jobs import Job
from career_pages.schemas.render import LegacyJobsView, RenderTree, SectionView
from career_pages.services.renderer import FALLBACK_MESSAGE, FALLBACK_TEMPLATE

logger = logging.getLogger(__name__)

TEMPLATE_DIR = Path(__file__).resolve().parent.parent / "templates"


@lru_cache
def get_environment() -> Environment:
    return Environment(
        loader=FileSystemLoader(str(TEMPLATE_DIR)),
        autoescape=select_autoescape(["html"]),
        trim_blocks=True,
        lstrip_blocks=True,
    )


def render_section_html(section: SectionView, environment: Environment | None = None) -> Markup:
    environment = environment or get_environment()
    try:
        template = environment.get_template(section.template)
        return Markup(template.render(section=section, data=section.data))
    except Exception:
        logger.exception(
            "block template failed block_id=%s type=%s template=%s",
            section.block_id,
            section.block_type,
            section.template,
        )
    fallback = environment.get_template(FALLBACK_TEMPLATE)
    heading = section.data.get("heading") or section.data.get("title") or section.block_type
    return Markup(
        fallback.render(
            section=section,
            data={"heading": heading, "message": FALLBACK_MESSAGE},
        )
    )


def style_attribute(style: dict[str, str]) -> str:
    return "; ".join(f"{name}: {value}" for name, value in style.items())


def render_page_html(
    tree: RenderTree,
    *,
    company: dict[str, Any],
    jobs: list[Job] | None = None,
    careers_url: str | None = None,
) -> str:
    environment = get_environment()
    sections = [render_section_html(section, environment) for section in tree.sections]
    return environment.get_template("page.html").render(
        tree=tree,
        company=company,
        sections=sections,
        page_style=style_attribute(tree.style),
        json_ld=_json_ld_markup(company, jobs, careers_url),
    )


def render_legacy_html(
    view: LegacyJobsView,
    *,
    company: dict[str, Any],
    jobs: list[Job] | None = None,
    careers_url: str | None = None,
) -> str:
    return get_environment().get_template("legacy.html").render(
        view=view,
        company=company,
        page_style=style_attribute(view.style),
        json_ld=_json_ld_markup(company, jobs, careers_url),
    )


def _json_ld_markup(company: dict[str, Any], jobs: list[Job] | None, careers_url: str | None) -> Markup | None:
    if jobs is None or careers_url is None:
        return None
    payload = json.dumps(build_structured_data(company, jobs, careers_url), default=str)
    # A literal "</" would close the surrounding script element.
    return Markup(payload.replace("</", "<\\/"))


def build_structured_data(company: dict[str, Any], jobs: list[Job], careers_url: str) -> list[dict[str, Any]]:
    """schema.org ``Organization`` followed by one ``JobPosting`` per job."""
    name = company.get("name") or ""
    logo = company.get("logo_url")
    organization = {
        "@context": "https://schema.org",
        "@type": "Organization",
        "name": name,
        "logo": logo,
        "url": careers_url,
    }
    return [organization, *(_job_posting(job, name, logo, careers_url) for job in jobs)]


def _job_posting(job: Job, company_name: str, logo: str | None, careers_url: str) -> dict[str, Any]:
    posting: dict[str, Any] = {
        "@context": "https://schema.org",
        "@type": "JobPosting",
        "title": job.title,
        "description": job.description or f"{job.title} at {company_name}",
        "identifier": {"@type": "PropertyValue", "name": company_name, "value": str(job.id)},
        "datePosted": job.created_at.isoformat() if job.created_at else None,
        "employmentType": job.employment_type or "FULL_TIME",
        "hiringOrganization": {
            "@type": "Organization",
            "name": company_name,
            "logo": logo,
            "sameAs": careers_url,
        },
    }
    if job.expires_at:
        posting["validThrough"] = job.expires_at.isoformat()
    if job.location:
        posting["jobLocation"] = {
            "@type": "Place",
            "address": {"@type": "PostalAddress", "addressLocality": job.location},
        }
    if job.salary_range:
        low, _, high = job.salary_range.partition("-")
        posting["baseSalary"] = {
            "@type": "MonetaryAmount",
            "currency": job.currency or "USD",
            "value": {
                "@type": "QuantitativeValue",
                "minValue": low.strip() or None,
                "maxValue": high.strip() or None,
            },
        }
    return posting
