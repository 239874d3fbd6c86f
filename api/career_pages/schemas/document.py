from enum import Enum
from typing import Any

from pydantic import BaseModel, Field


class BlockType(str, Enum):
    HERO = "HeroSection"
    BENEFITS = "BenefitsSection"
    TEAM = "TeamSection"
    JOBS = "JobsSection"
    VIDEO = "VideoSection"
    FOOTER = "FooterSection"


class Block(BaseModel):
    id: str
    type: BlockType
    props: dict[str, Any] = Field(default_factory=dict)


class Document(BaseModel):
    """Ordered list of content blocks making up a career page body."""

    blocks: list[Block] = Field(default_factory=list)
    root_props: dict[str, Any] = Field(default_factory=dict)

    @property
    def is_empty(self) -> bool:
        return not self.blocks

    def to_page_data(self) -> dict[str, Any]:
        """Persisted wire shape: ``{"content": [...], "root": {"props": {...}}}``."""
        return {
            "content": [
                {"type": block.type.value, "id": block.id, "props": block.props}
                for block in self.blocks
            ],
            "root": {"props": dict(self.root_props)},
        }


class PageData(BaseModel):
    content: list[dict[str, Any]] = Field(default_factory=list)
    root: dict[str, Any] = Field(default_factory=lambda: {"props": {}})
