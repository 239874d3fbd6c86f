from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

RenderMode = Literal["editor", "preview", "public"]


class Job(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: str | int
    company_id: str | None = None
    title: str
    description: str | None = None
    location: str | None = None
    job_type: str | None = None
    published: bool = True
    team: str | None = None
    work_policy: str | None = None
    employment_type: str | None = None
    experience_level: str | None = None
    salary_range: str | None = None
    job_slug: str | None = None
    currency: str | None = None
    expires_at: datetime | None = None
    created_at: datetime | None = None


class Pagination(BaseModel):
    page: int = Field(default=1, ge=1)
    total_pages: int = Field(default=1, ge=0)
    total_items: int = Field(default=0, ge=0)
    per_page: int = Field(default=20, ge=1)


class JobFilters(BaseModel):
    search: str | None = None
    location: str | None = None
    job_type: str | None = None
    team: str | None = None

    def is_active(self) -> bool:
        return any(
            value and value != "all"
            for value in (self.search, self.location, self.job_type, self.team)
        )

    def query_params(self) -> list[tuple[str, str]]:
        """Active filters under the query parameter names the public pages read."""
        params = (("search", self.search), ("location", self.location), ("type", self.job_type), ("team", self.team))
        return [(name, value) for name, value in params if value and value != "all"]


class RuntimeData(BaseModel):
    """Data injected at render time; never stored in the page document."""

    jobs: list[Job] = Field(default_factory=list)
    pagination: Pagination | None = None
    filters: JobFilters = Field(default_factory=JobFilters)
    mode: RenderMode = "public"
