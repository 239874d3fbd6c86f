from __future__ import annotations

import copy
from dataclasses import dataclass
from typing import Any

JOBS_EMPTY_MESSAGE = "No open positions at the moment. Check back soon!"


class UnknownTemplateError(LookupError):
    """Raised when a page template id is not in the catalog."""


@dataclass(frozen=True, slots=True)
class PageTemplate:
    id: str
    name: str
    description: str
    suggested_primary_color: str
    page_data: dict[str, Any]


def _jobs_block(layout: str, heading: str = "Open Positions") -> dict[str, Any]:
    return {
        "type": "JobsSection",
        "id": "jobs-1",
        "props": {
            "heading": heading,
            "layout": layout,
            "density": "comfortable",
            "background": "plain",
            "emptyStateMessage": JOBS_EMPTY_MESSAGE,
            "buttonVariant": "ghost",
            "badgeVariant": "secondary",
        },
    }


MODERN_MINIMAL = PageTemplate(
    id="modern-minimal",
    name="Modern Minimal",
    description="Clean, professional layout with focus on content",
    suggested_primary_color="#2563eb",
    page_data={
        "root": {"props": {}},
        "content": [
            {
                "type": "HeroSection",
                "id": "hero-1",
                "props": {
                    "title": "Join Our Mission to Build the Future",
                    "subtitle": (
                        "We're looking for talented, passionate people to help us shape the next "
                        "generation of technology. Join a team that values innovation, creativity, "
                        "and collaboration."
                    ),
                    "primaryCtaLabel": "View Open Positions",
                    "primaryCtaHref": "#jobs",
                    "secondaryCtaLabel": "Learn More About Us",
                    "secondaryCtaHref": "#about",
                    "alignment": "center",
                    "size": "tall",
                    "backgroundStyle": "solid",
                    "primaryCtaVariant": "secondary",
                    "primaryCtaSize": "lg",
                },
            },
            {
                "type": "BenefitsSection",
                "id": "benefits-1",
                "props": {
                    "heading": "Benefits & Perks",
                    "benefits": [
                        {
                            "title": "Health & Wellness",
                            "description": "Comprehensive health, dental, and vision insurance for you and your family.",
                            "icon": "Heart",
                            "iconColor": "#ef4444",
                        },
                        {
                            "title": "Competitive Salary",
                            "description": "Industry-leading compensation packages with equity options.",
                            "icon": "DollarSign",
                            "iconColor": "#3b82f6",
                        },
                        {
                            "title": "Learning & Development",
                            "description": "Annual learning budget and access to courses, conferences, and workshops.",
                            "icon": "GraduationCap",
                            "iconColor": "#8b5cf6",
                        },
                        {
                            "title": "Flexible Work",
                            "description": "Remote-first culture with flexible hours and work-from-anywhere options.",
                            "icon": "Home",
                            "iconColor": "#10b981",
                        },
                    ],
                    "styleVariant": "cards",
                },
            },
            _jobs_block("cards"),
        ],
    },
)

CORPORATE_CLASSIC = PageTemplate(
    id="corporate-classic",
    name="Corporate Classic",
    description="Traditional, structured layout perfect for established companies",
    suggested_primary_color="#1e40af",
    page_data={
        "root": {"props": {}},
        "content": [
            {
                "type": "HeroSection",
                "id": "hero-1",
                "props": {
                    "title": "Build Your Career With Us",
                    "subtitle": "Join a team that values excellence, integrity, and innovation.",
                    "primaryCtaLabel": "Explore Opportunities",
                    "primaryCtaHref": "#jobs",
                    "secondaryCtaLabel": "About Us",
                    "secondaryCtaHref": "#about",
                    "alignment": "center",
                    "size": "tall",
                    "backgroundStyle": "solid",
                    "primaryCtaVariant": "secondary",
                    "primaryCtaSize": "default",
                },
            },
            {
                "type": "BenefitsSection",
                "id": "benefits-1",
                "props": {
                    "heading": "Benefits & Perks",
                    "benefits": [
                        {
                            "title": "Competitive Compensation",
                            "description": "Market-leading salary and benefits package.",
                            "icon": "DollarSign",
                            "iconColor": "#1e40af",
                        },
                        {
                            "title": "Professional Development",
                            "description": "Training programs and career advancement opportunities.",
                            "icon": "GraduationCap",
                            "iconColor": "#7c3aed",
                        },
                        {
                            "title": "Work-Life Balance",
                            "description": "Flexible schedules and generous time off policies.",
                            "icon": "Home",
                            "iconColor": "#059669",
                        },
                    ],
                    "styleVariant": "panels",
                },
            },
            _jobs_block("list"),
        ],
    },
)

STARTUP_BOLD = PageTemplate(
    id="startup-bold",
    name="Startup Bold",
    description="Vibrant, energetic layout perfect for fast-growing startups",
    suggested_primary_color="#dc2626",
    page_data={
        "root": {"props": {}},
        "content": [
            {
                "type": "HeroSection",
                "id": "hero-1",
                "props": {
                    "title": "Join the Revolution",
                    "subtitle": "We're building something amazing. Come help us change the world.",
                    "primaryCtaLabel": "See Open Roles",
                    "primaryCtaHref": "#jobs",
                    "secondaryCtaLabel": "Meet the Team",
                    "secondaryCtaHref": "#team",
                    "alignment": "center",
                    "size": "tall",
                    "backgroundStyle": "gradient",
                    "primaryCtaVariant": "secondary",
                    "primaryCtaSize": "lg",
                },
            },
            {
                "type": "BenefitsSection",
                "id": "benefits-1",
                "props": {
                    "heading": "Benefits & Perks",
                    "benefits": [
                        {
                            "title": "Equity Participation",
                            "description": "Own a piece of what we're building together.",
                            "icon": "Briefcase",
                            "iconColor": "#dc2626",
                        },
                        {
                            "title": "Fast-Paced Growth",
                            "description": "Rapid career advancement in a dynamic environment.",
                            "icon": "Zap",
                            "iconColor": "#f59e0b",
                        },
                    ],
                    "styleVariant": "cards",
                },
            },
            {
                "type": "TeamSection",
                "id": "team-1",
                "props": {
                    "heading": "Meet Our Leadership Team",
                    "description": (
                        "Our experienced leadership team is committed to creating an environment "
                        "where everyone can thrive and do their best work."
                    ),
                    "members": [
                        {
                            "name": "Sarah Johnson",
                            "role": "CEO & Founder",
                            "image": "",
                            "bio": "Leading the company vision with 15+ years in tech.",
                            "skills": ["Leadership", "Strategy"],
                        },
                        {
                            "name": "Michael Chen",
                            "role": "CTO",
                            "image": "",
                            "bio": "Driving technical innovation and engineering excellence.",
                            "skills": ["Engineering", "Architecture"],
                        },
                    ],
                    "background": "plain",
                    "align": "center",
                },
            },
            _jobs_block("cards"),
        ],
    },
)

BLANK = PageTemplate(
    id="blank",
    name="Blank Page",
    description="Start with an empty page and build your own layout",
    suggested_primary_color="#000000",
    page_data={"root": {"props": {}}, "content": []},
)

TEMPLATES: dict[str, PageTemplate] = {
    template.id: template for template in (MODERN_MINIMAL, CORPORATE_CLASSIC, STARTUP_BOLD, BLANK)
}


def list_templates() -> list[PageTemplate]:
    return list(TEMPLATES.values())


def get_template(template_id: str) -> PageTemplate:
    template = TEMPLATES.get(template_id)
    if template is None:
        raise UnknownTemplateError(f'Template with id "{template_id}" not found')
    return template


def apply_template(template_id: str, company_name: str | None = None) -> dict[str, Any]:
    """Return a fresh copy of the template's page data, personalised with the company name."""
    page_data = copy.deepcopy(get_template(template_id).page_data)
    if company_name:
        for block in page_data["content"]:
            if block.get("type") != "HeroSection":
                continue
            title = block["props"].get("title")
            if title and ("our team" in title or "Join" in title):
                block["props"]["title"] = f"{company_name} careers"
    return page_data
