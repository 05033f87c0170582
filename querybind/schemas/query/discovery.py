"""
Filter metadata discovery.

Builds `EntitySchema` descriptions for entity types at registration time and
derives the ordered list of filterable `AttributeDescriptor`s from them.

Two builders are provided:
- `schema_from_pydantic`: Pydantic models; filterable fields carry a `Filterable`
  marker in their `Annotated` metadata. Fields follow `model_fields` order, so
  fields inherited from a parent model come before the ones a subclass adds.
- `schema_from_sqlalchemy`: SQLAlchemy mapped classes; filterable columns carry a
  `Filterable` under `info["filterable"]`. Columns follow mapper order, inherited
  columns first; relationships become nested attributes.

The relative order of inherited and subclass attributes is an implementation
detail; callers should not rely on it.
"""

from __future__ import annotations

import enum
import types
import typing
from functools import lru_cache
from typing import Any

import sqlalchemy as sa
from pydantic import BaseModel
from sqlalchemy.exc import NoInspectionAvailable
from sqlalchemy.orm import Mapper

from querybind.core.root_logger import get_logger

from .attributes import (
    AttributeDescriptor,
    AttributeInfo,
    EntitySchema,
    EntitySchemaRegistry,
    Filterable,
    is_plain_class,
    type_tag_for,
)

logger = get_logger("discovery")

FILTERABLE_INFO_KEY = "filterable"


def _unwrap_annotation(annotation: Any) -> Any:
    """Strips `Annotated`, `Optional` and single-type unions down to the underlying type."""
    origin = typing.get_origin(annotation)
    if origin is typing.Annotated:
        return _unwrap_annotation(typing.get_args(annotation)[0])

    if origin is typing.Union or origin is types.UnionType:
        members = [arg for arg in typing.get_args(annotation) if arg is not type(None)]
        if len(members) == 1:
            return _unwrap_annotation(members[0])
    return annotation


def _attribute_info(name: str, python_type: Any, filterable: Filterable | None) -> AttributeInfo:
    enum_type = python_type if is_plain_class(python_type) and issubclass(python_type, enum.Enum) else None
    return AttributeInfo(
        name=name,
        value_type=type_tag_for(python_type),
        enum_type=enum_type,
        filterable=filterable,
    )


def schema_from_pydantic(entity_type: type) -> EntitySchema | None:
    """
    Describes a Pydantic model.

    Returns:
        EntitySchema | None: The schema, or None when `entity_type` is not a Pydantic model.
    """
    if not isinstance(entity_type, type) or not issubclass(entity_type, BaseModel):
        return None

    attributes: list[AttributeInfo] = []
    for field_name, field_info in entity_type.model_fields.items():
        filterable = next((m for m in field_info.metadata if isinstance(m, Filterable)), None)
        python_type = _unwrap_annotation(field_info.annotation)

        if is_plain_class(python_type) and issubclass(python_type, BaseModel):
            attributes.append(AttributeInfo(name=field_name, value_type=None, target=python_type))
            continue

        attributes.append(_attribute_info(field_name, python_type, filterable))

    return EntitySchema(entity_type, attributes)


def _column_python_type(column: sa.ColumnElement) -> Any:
    try:
        return column.type.python_type
    except NotImplementedError:
        return None


def schema_from_sqlalchemy(entity_type: type) -> EntitySchema | None:
    """
    Describes a SQLAlchemy mapped class.

    Returns:
        EntitySchema | None: The schema, or None when `entity_type` is not mapped.
    """
    try:
        mapper = sa.inspect(entity_type)
    except NoInspectionAvailable:
        return None
    if not isinstance(mapper, Mapper):
        return None

    attributes: list[AttributeInfo] = []
    for prop in mapper.column_attrs:
        column = prop.columns[0]
        filterable = column.info.get(FILTERABLE_INFO_KEY)
        if filterable is not None and not isinstance(filterable, Filterable):
            logger.warning(f"Ignoring invalid filterable marker on {mapper.class_.__name__}.{prop.key}: {filterable!r}")
            filterable = None
        attributes.append(_attribute_info(prop.key, _column_python_type(column), filterable))

    for relationship in mapper.relationships:
        attributes.append(AttributeInfo(name=relationship.key, value_type=None, target=relationship.mapper.class_))

    return EntitySchema(entity_type, attributes)


def default_registry() -> EntitySchemaRegistry:
    """Creates a registry that can describe Pydantic models and SQLAlchemy mapped classes."""
    return EntitySchemaRegistry(builders=[schema_from_pydantic, schema_from_sqlalchemy])


schema_registry = default_registry()
"""Registry used when callers do not supply their own."""


@lru_cache
def _discover(entity_type: type, registry: EntitySchemaRegistry) -> tuple[AttributeDescriptor, ...]:
    schema = registry.get(entity_type)

    by_param: dict[str, AttributeDescriptor] = {}
    for info in schema.attributes:
        if info.filterable is None:
            continue

        descriptor = info.descriptor()
        previous = by_param.get(descriptor.param_name)
        if previous is not None:
            logger.warning(
                f"Filter parameter '{descriptor.param_name}' on {schema.name} is declared by both "
                f"'{previous.attribute_name}' and '{descriptor.attribute_name}'; using '{descriptor.attribute_name}'"
            )
        by_param[descriptor.param_name] = descriptor

    return tuple(by_param.values())


def discover(entity_type: type, registry: EntitySchemaRegistry | None = None) -> tuple[AttributeDescriptor, ...]:
    """
    Returns the filterable attributes of `entity_type` in discovery order.

    When two attributes map to the same request parameter, the later-discovered one
    wins and takes the earlier one's position; a warning is logged. The result is
    cached per entity type and registry.

    Raises:
        ConfigurationError: If the entity type cannot be described.
    """
    return _discover(entity_type, registry or schema_registry)
