from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel, Field

from career_pages.blocks.props import FieldSpec

AssetKind = Literal["logo", "banner", "video"]
HEX_COLOR_PATTERN = r"^#(?:[0-9a-fA-F]{3}|[0-9a-fA-F]{6})$"


class ThemeOut(BaseModel):
    primaryColor: str
    secondaryColor: str | None = None


class CareerPageOut(BaseModel):
    id: str
    company_id: str
    company_slug: str
    published: bool = False
    theme: ThemeOut
    palette: dict[str, str] = Field(default_factory=dict)
    logo_url: str | None = None
    banner_url: str | None = None
    video_url: str | None = None
    updated_at: datetime | None = None


class PageDocumentOut(BaseModel):
    career_page_id: str
    content: list[dict[str, Any]] = Field(default_factory=list)
    root: dict[str, Any] = Field(default_factory=lambda: {"props": {}})


class DraftPutRequest(BaseModel):
    content: list[Any] = Field(default_factory=list)
    root: dict[str, Any] = Field(default_factory=lambda: {"props": {}})


class ThemePatchRequest(BaseModel):
    primaryColor: str | None = Field(default=None, pattern=HEX_COLOR_PATTERN)
    secondaryColor: str | None = Field(default=None, pattern=HEX_COLOR_PATTERN)


class AssetOut(BaseModel):
    kind: AssetKind
    path: str
    public_url: str
    page: CareerPageOut


class ActionOut(BaseModel):
    ok: bool
    error: str | None = None


class BlockCreateRequest(BaseModel):
    type: str = Field(min_length=1)
    index: int | None = Field(default=None, ge=0)
    props: dict[str, Any] | None = None


class BlockPatchRequest(BaseModel):
    props: dict[str, Any]


class BlockDuplicateRequest(BaseModel):
    overrides: dict[str, Any] | None = None


class BlockMoveRequest(BaseModel):
    to_index: int = Field(ge=0)


class TemplateApplyRequest(BaseModel):
    template_id: str = Field(min_length=1)


class BlockCatalogEntry(BaseModel):
    type: str
    label: str
    can_delete: bool
    can_duplicate: bool
    fields: list[FieldSpec] = Field(default_factory=list)
    default_props: dict[str, Any] = Field(default_factory=dict)


class TemplateSummary(BaseModel):
    id: str
    name: str
    description: str
    suggested_primary_color: str


class EditorStateOut(BaseModel):
    career_page_id: str
    content: list[dict[str, Any]] = Field(default_factory=list)
    root: dict[str, Any] = Field(default_factory=lambda: {"props": {}})
    error: str | None = None
    blocks: list[BlockCatalogEntry] = Field(default_factory=list)
    templates: list[TemplateSummary] = Field(default_factory=list)
