from typing import Any

from pydantic import BaseModel, Field

from career_pages.schemas.jobs import RenderMode


class SectionView(BaseModel):
    block_id: str
    block_type: str
    template: str
    data: dict[str, Any] = Field(default_factory=dict)
    failed: bool = False


class RenderTree(BaseModel):
    mode: RenderMode
    style: dict[str, str] = Field(default_factory=dict)
    sections: list[SectionView] = Field(default_factory=list)
    preview_banner: str | None = None


class LegacyJobsView(BaseModel):
    mode: RenderMode
    style: dict[str, str] = Field(default_factory=dict)
    heading: str = "Open Positions"
    subheading: str = "Find the role that fits you best."
    empty_message: str = "No open positions at the moment. Check back soon!"
    jobs: list[dict[str, Any]] = Field(default_factory=list)
    pagination: dict[str, Any] | None = None
    preview_banner: str | None = None


class RenderOut(BaseModel):
    """Either a block tree or, for pages without content, the legacy job list."""

    tree: RenderTree | None = None
    legacy: LegacyJobsView | None = None
