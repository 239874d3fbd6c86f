from __future__ import annotations

import copy
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from functools import lru_cache
from types import MappingProxyType, UnionType
from typing import Any, Literal, Union, get_args, get_origin

from pydantic import ValidationError

from career_pages.blocks import props as block_props
from career_pages.blocks import views
from career_pages.blocks.props import BlockProps, FieldOption, FieldSpec
from career_pages.schemas.document import BlockType
from career_pages.schemas.jobs import RuntimeData
from career_pages.schemas.render import SectionView

ViewBuilder = Callable[[dict[str, Any], RuntimeData], dict[str, Any]]

LONG_TEXT_FIELDS = {"subtitle", "description", "bio"}


class UnknownBlockTypeError(LookupError):
    """Raised when a block type is not part of the registry."""


class BlockPropsError(ValueError):
    """Raised when block props do not satisfy the type's schema."""


@dataclass(frozen=True, slots=True)
class BlockPermissions:
    can_delete: bool = True
    can_duplicate: bool = True


@dataclass(frozen=True, slots=True)
class BlockDefinition:
    type: BlockType
    label: str
    alias: str
    schema: type[BlockProps]
    default_props: Mapping[str, Any]
    permissions: BlockPermissions
    template: str
    builder: ViewBuilder | None


class BlockRegistry:
    """Read-only catalog of block types, their schemas and renderers."""

    def __init__(self, definitions: list[BlockDefinition]) -> None:
        self._definitions: Mapping[BlockType, BlockDefinition] = MappingProxyType(
            {definition.type: definition for definition in definitions}
        )
        names: dict[str, BlockType] = {}
        for definition in definitions:
            names[definition.type.value] = definition.type
            names[definition.alias] = definition.type
        self._names: Mapping[str, BlockType] = MappingProxyType(names)

    @property
    def types(self) -> list[BlockType]:
        return list(self._definitions)

    def resolve_type(self, name: Any) -> BlockType | None:
        if isinstance(name, BlockType):
            return name if name in self._definitions else None
        if not isinstance(name, str):
            return None
        return self._names.get(name)

    def is_known_type(self, name: Any) -> bool:
        return self.resolve_type(name) is not None

    def definition(self, name: Any) -> BlockDefinition:
        block_type = self.resolve_type(name)
        if block_type is None:
            raise UnknownBlockTypeError(f"unknown block type: {name!r}")
        return self._definitions[block_type]

    def get_schema(self, name: Any) -> type[BlockProps]:
        return self.definition(name).schema

    def get_default_props(self, name: Any) -> dict[str, Any]:
        return copy.deepcopy(dict(self.definition(name).default_props))

    def get_permissions(self, name: Any) -> BlockPermissions:
        return self.definition(name).permissions

    def has_renderer(self, name: Any) -> bool:
        block_type = self.resolve_type(name)
        if block_type is None:
            return False
        return callable(self._definitions[block_type].builder)

    def validate_props(self, name: Any, raw_props: Mapping[str, Any]) -> dict[str, Any]:
        """Return props restricted to the schema's keys, with values coerced."""
        schema = self.get_schema(name)
        try:
            model = schema.model_validate(dict(raw_props))
        except ValidationError as exc:
            raise BlockPropsError(str(exc)) from exc
        return model.model_dump(mode="json", exclude_unset=True)

    def describe(self, name: Any) -> list[FieldSpec]:
        return describe_fields(self.get_schema(name))

    def render(
        self,
        name: Any,
        block_id: str,
        props: Mapping[str, Any],
        runtime: RuntimeData,
    ) -> SectionView:
        definition = self.definition(name)
        if definition.builder is None:
            raise UnknownBlockTypeError(f"block type has no renderer: {definition.type.value}")
        merged = {**self.get_default_props(definition.type), **dict(props)}
        data = definition.builder(merged, runtime)
        return SectionView(
            block_id=block_id,
            block_type=definition.type.value,
            template=definition.template,
            data=data,
        )


def describe_fields(schema: type[BlockProps]) -> list[FieldSpec]:
    return [_describe_field(name, field.annotation) for name, field in schema.model_fields.items()]


def _describe_field(name: str, annotation: Any) -> FieldSpec:
    if get_origin(annotation) in (Union, UnionType):
        annotation = next(arg for arg in get_args(annotation) if arg is not type(None))

    origin = get_origin(annotation)
    if origin is Literal:
        options = [FieldOption(label=str(value).title(), value=str(value)) for value in get_args(annotation)]
        return FieldSpec(name=name, kind="select", options=options)
    if origin is list:
        (item_schema,) = get_args(annotation)
        return FieldSpec(name=name, kind="array", item_fields=describe_fields(item_schema))
    if annotation is bool:
        return FieldSpec(name=name, kind="boolean")
    return FieldSpec(name=name, kind="textarea" if name in LONG_TEXT_FIELDS else "text")


def _definition(
    block_type: BlockType,
    label: str,
    alias: str,
    schema: type[BlockProps],
    defaults: dict[str, Any],
    builder: ViewBuilder,
    *,
    pinned: bool = False,
) -> BlockDefinition:
    return BlockDefinition(
        type=block_type,
        label=label,
        alias=alias,
        schema=schema,
        default_props=MappingProxyType(defaults),
        permissions=BlockPermissions(can_delete=not pinned, can_duplicate=not pinned),
        template=f"blocks/{alias.lower()}.html",
        builder=builder,
    )


@lru_cache
def build_default_registry() -> BlockRegistry:
    return BlockRegistry(
        [
            _definition(
                BlockType.HERO,
                "Hero",
                "Hero",
                block_props.HeroProps,
                block_props.HERO_DEFAULTS,
                views.build_hero_view,
                pinned=True,
            ),
            _definition(
                BlockType.BENEFITS,
                "Benefits",
                "Benefits",
                block_props.BenefitsProps,
                block_props.BENEFITS_DEFAULTS,
                views.build_benefits_view,
            ),
            _definition(
                BlockType.TEAM,
                "Team",
                "Team",
                block_props.TeamProps,
                block_props.TEAM_DEFAULTS,
                views.build_team_view,
            ),
            _definition(
                BlockType.JOBS,
                "Open positions",
                "Jobs",
                block_props.JobsProps,
                block_props.JOBS_DEFAULTS,
                views.build_jobs_view,
            ),
            _definition(
                BlockType.VIDEO,
                "Video",
                "Video",
                block_props.VideoProps,
                block_props.VIDEO_DEFAULTS,
                views.build_video_view,
            ),
            _definition(
                BlockType.FOOTER,
                "Footer",
                "Footer",
                block_props.FooterProps,
                block_props.FOOTER_DEFAULTS,
                views.build_footer_view,
                pinned=True,
            ),
        ]
    )
