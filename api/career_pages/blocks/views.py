"""View-model builders for each block type.

Every builder takes the block's props (already merged over the type's default
props) plus the runtime data, and returns the plain mapping a block template
consumes. Builders only reference palette variables (``var(--...)``), never
literal colors.
"""

from __future__ import annotations

from collections import OrderedDict
from typing import Any
from urllib.parse import urlencode

from career_pages.schemas.jobs import Job, JobFilters, Pagination, RuntimeData

EDITOR_JOBS_NOTE = "(Jobs will appear on published page)"
OTHER_GROUP = "Other"

HEADING_STYLE = "color: var(--heading-color)"
TEXT_STYLE = "color: var(--text-color)"
ON_PRIMARY_STYLE = "color: var(--text-on-primary)"
CARD_STYLE = "background-color: var(--card-bg); border-color: var(--card-border)"


def build_hero_view(props: dict[str, Any], runtime: RuntimeData) -> dict[str, Any]:
    background_style = props.get("backgroundStyle") or "solid"
    if background_style == "gradient":
        background_css = "background: linear-gradient(135deg, var(--primary) 0%, var(--primary-strong) 100%)"
    else:
        background_css = "background-color: var(--primary)"

    image_url = props.get("backgroundImageUrl") or None
    text_style = ON_PRIMARY_STYLE if props.get("textColor") != "dark" else "color: var(--text-on-light)"

    view: dict[str, Any] = {
        "title": props.get("title") or "",
        "subtitle": props.get("subtitle") or None,
        "alignment": props.get("alignment") or "center",
        "size": props.get("size") or "tall",
        "background_css": background_css,
        "background_image_url": image_url if background_style == "image" else None,
        "text_style": text_style,
        "primary_cta": _cta(props, "primary"),
        "secondary_cta": _cta(props, "secondary"),
        "logo": None,
        "culture_video_url": props.get("cultureVideoUrl") or None,
    }
    if props.get("logoUrl"):
        view["logo"] = {"url": props["logoUrl"], "alt": props.get("logoAlt") or "Company Logo"}
    return view


def _cta(props: dict[str, Any], prefix: str) -> dict[str, Any] | None:
    label = props.get(f"{prefix}CtaLabel")
    href = props.get(f"{prefix}CtaHref")
    if not label or not href:
        return None
    return {
        "label": label,
        "href": href,
        "variant": props.get(f"{prefix}CtaVariant") or ("secondary" if prefix == "primary" else "outline"),
        "size": props.get(f"{prefix}CtaSize") or "default",
        # CTAs invert the hero colors.
        "style": "background-color: var(--secondary); color: var(--primary)",
    }


def build_benefits_view(props: dict[str, Any], runtime: RuntimeData) -> dict[str, Any]:
    items = []
    for benefit in props.get("benefits") or []:
        icon_color = benefit.get("iconColor")
        items.append(
            {
                "title": benefit.get("title") or "",
                "description": benefit.get("description") or None,
                "icon": benefit.get("icon") or "Sparkles",
                "icon_style": f"color: {icon_color}" if icon_color else "color: var(--primary)",
            }
        )
    variant = props.get("styleVariant") or "cards"
    return {
        "heading": props.get("heading") or "",
        "style_variant": variant,
        "item_style": "background-color: var(--primary-soft)" if variant == "panels" else CARD_STYLE,
        "heading_style": HEADING_STYLE,
        "text_style": TEXT_STYLE,
        "items": items,
    }


def build_team_view(props: dict[str, Any], runtime: RuntimeData) -> dict[str, Any]:
    members = []
    for member in props.get("members") or []:
        members.append(
            {
                "name": member.get("name") or "",
                "role": member.get("role") or None,
                "image": member.get("image") or None,
                "bio": member.get("bio") or None,
                "skills": [item["skill"] for item in member.get("skills") or [] if item.get("skill")],
            }
        )
    accent = props.get("background") == "accentStrip"
    return {
        "heading": props.get("heading") or "",
        "description": props.get("description") or None,
        "align": props.get("align") or "left",
        "section_style": "background-color: var(--primary-soft)" if accent else None,
        "heading_style": HEADING_STYLE,
        "text_style": TEXT_STYLE,
        "members": members,
    }


def build_video_view(props: dict[str, Any], runtime: RuntimeData) -> dict[str, Any]:
    video_url = props.get("videoUrl") or None
    return {
        "title": props.get("title") or "Message from Us",
        "description": props.get("description") or None,
        "align": props.get("align") or "center",
        "video_url": video_url,
        "has_video": video_url is not None,
        "autoplay": bool(props.get("autoplay")),
        "controls": props.get("controls") is not False,
        "loop": bool(props.get("loop")),
        "empty_message": "No video uploaded",
        "heading_style": HEADING_STYLE,
    }


def build_footer_view(props: dict[str, Any], runtime: RuntimeData) -> dict[str, Any]:
    return {
        "text": props.get("text") or "",
        "show_powered_by": props.get("showPoweredBy") is not False,
        "style": "background-color: var(--page-bg); color: var(--text-color)",
    }


def build_jobs_view(props: dict[str, Any], runtime: RuntimeData) -> dict[str, Any]:
    jobs = list(runtime.jobs)
    layout = props.get("layout") or "list"
    heading = props.get("heading") or "Open positions"
    empty_message = props.get("emptyStateMessage") or "No open positions at the moment. Check back soon!"

    filtered = filter_jobs(jobs, runtime.filters)
    pagination = paginate(len(filtered), runtime.pagination)
    visible = page_slice(filtered, pagination)
    cards = [job_card(job) for job in visible]

    view: dict[str, Any] = {
        "heading": heading,
        "empty_message": empty_message,
        "layout": layout,
        "density": props.get("density") or "comfortable",
        "background": props.get("background") or "plain",
        "button_variant": props.get("buttonVariant") or "ghost",
        "badge_variant": props.get("badgeVariant") or "secondary",
        "heading_style": HEADING_STYLE,
        "text_style": TEXT_STYLE,
        "card_style": CARD_STYLE,
        "has_jobs": bool(jobs),
        "editor_note": EDITOR_JOBS_NOTE if runtime.mode == "editor" and not jobs else None,
        "filter_options": filter_options(jobs),
        "filters": runtime.filters.model_dump(),
        "has_active_filters": runtime.filters.is_active(),
        "count_label": count_label(len(filtered), filtered=runtime.filters.is_active()),
        "jobs": cards,
        "groups": [],
        "pagination": pagination_view(pagination, runtime.filters),
    }
    if layout == "team":
        view["groups"] = group_jobs(visible, key="team")
    elif layout == "location":
        view["groups"] = group_jobs(visible, key="location")
    return view


def filter_jobs(jobs: list[Job], filters: JobFilters) -> list[Job]:
    search = (filters.search or "").strip().lower()
    results = []
    for job in jobs:
        if search:
            in_title = search in (job.title or "").lower()
            in_description = search in (job.description or "").lower()
            if not in_title and not in_description:
                continue
        if _is_set(filters.location) and job.location != filters.location:
            continue
        if _is_set(filters.job_type) and job.job_type != filters.job_type:
            continue
        if _is_set(filters.team) and job.team != filters.team:
            continue
        results.append(job)
    return results


def _is_set(value: str | None) -> bool:
    return bool(value) and value != "all"


def filter_options(jobs: list[Job]) -> dict[str, list[str]]:
    return {
        "locations": sorted({job.location for job in jobs if job.location}),
        "job_types": sorted({job.job_type for job in jobs if job.job_type}),
        "teams": sorted({job.team for job in jobs if job.team}),
    }


def group_jobs(jobs: list[Job], *, key: str) -> list[dict[str, Any]]:
    groups: OrderedDict[str, list[dict[str, Any]]] = OrderedDict()
    for job in jobs:
        name = getattr(job, key) or OTHER_GROUP
        groups.setdefault(name, []).append(job_card(job))
    return [{"name": name, "jobs": cards} for name, cards in groups.items()]


def job_card(job: Job) -> dict[str, Any]:
    return {
        "id": str(job.id),
        "title": job.title,
        "location": job.location,
        "job_type": job.job_type,
        "job_type_label": format_job_type(job.job_type) if job.job_type else None,
        "team": job.team,
        "href": f"#job-{job.id}",
    }


def format_job_type(job_type: str) -> str:
    return " ".join(word[:1].upper() + word[1:] for word in job_type.split("-"))


def count_label(count: int, *, filtered: bool) -> str:
    noun = "job" if count == 1 else "jobs"
    suffix = "found" if filtered else "available"
    return f"{count} {noun} {suffix}"


def paginate(total_items: int, requested: Pagination | None) -> Pagination | None:
    """Recompute page totals for ``total_items`` and clamp the requested page."""
    if requested is None:
        return None
    per_page = requested.per_page
    total_pages = max(1, -(-total_items // per_page))
    return Pagination(
        page=min(requested.page, total_pages),
        total_pages=total_pages,
        total_items=total_items,
        per_page=per_page,
    )


def page_slice(items: list[Any], pagination: Pagination | None) -> list[Any]:
    if pagination is None:
        return list(items)
    start = (pagination.page - 1) * pagination.per_page
    return list(items[start : start + pagination.per_page])


def pagination_view(pagination: Pagination | None, filters: JobFilters | None = None) -> dict[str, Any] | None:
    if pagination is None or pagination.total_pages <= 1:
        return None
    page = min(pagination.page, pagination.total_pages)
    start = (page - 1) * pagination.per_page
    end = min(start + pagination.per_page, pagination.total_items)
    return {
        "page": page,
        "total_pages": pagination.total_pages,
        "total_items": pagination.total_items,
        "range_label": f"Showing {start + 1}-{end} of {pagination.total_items}",
        "pages": page_window(page, pagination.total_pages),
        "previous": page - 1 if page > 1 else None,
        "next": page + 1 if page < pagination.total_pages else None,
        "query": _filter_query(filters),
    }


def _filter_query(filters: JobFilters | None) -> str:
    """Query-string prefix that keeps active filters on page links."""
    params = filters.query_params() if filters is not None else []
    return f"{urlencode(params)}&" if params else ""


def page_window(current: int, total: int, max_visible: int = 5) -> list[int | None]:
    """Page numbers to show; ``None`` marks an ellipsis."""
    if total <= max_visible:
        return list(range(1, total + 1))
    if current <= 3:
        return [1, 2, 3, 4, None, total]
    if current >= total - 2:
        return [1, None, *range(total - 3, total + 1)]
    return [1, None, current - 1, current, current + 1, None, total]
