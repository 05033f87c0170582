"""
This module describes which attributes of an entity type can be queried and how.

Key components:
- `FilterOp` and `TypeTag`: the closed sets of comparison operators and value types.
- `Filterable`: the marker attached to an attribute declaration to make it filterable,
  e.g. `Annotated[str, Filterable(op=FilterOp.LIKE)]` on a Pydantic model, or
  `mapped_column(info={"filterable": Filterable()})` on a SQLAlchemy model.
- `AttributeDescriptor`: one filterable attribute as seen by the request binder.
- `AttributeInfo` / `EntitySchema`: the explicit schema description of an entity type,
  built once at registration time and looked up by type identity.
- `EntitySchemaRegistry`: the lookup table, with dot-separated path resolution
  (e.g. "address.city") across nested entity types.
"""

from __future__ import annotations

import enum
import uuid
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
import typing
from typing import Any, NamedTuple

from querybind.core.exceptions import AttributeResolutionError, ConfigurationError


class FilterOp(str, enum.Enum):
    """Comparison operators for filterable attributes, in the order predicates are built."""

    EQUALS = "equals"  # ?status=active, ?deleted_at=null, ?deleted_at=!null
    LIKE = "like"  # ?name=john matches %john%, case-insensitive
    GREATER_THAN = "greater_than"  # ?min_price=100
    LESS_THAN = "less_than"  # ?max_price=500
    IN = "in"  # ?status=active,pending
    BETWEEN = "between"  # ?created=2024-01-01,2024-12-31
    IS_NULL = "is_null"
    IS_NOT_NULL = "is_not_null"


class TypeTag(str, enum.Enum):
    """Declared value type of an attribute; drives coercion of raw parameter strings."""

    STRING = "string"
    INTEGER = "integer"
    UNSIGNED_INTEGER = "unsigned_integer"
    FLOAT = "float"  # 32-bit
    DOUBLE = "double"  # 64-bit
    BOOLEAN = "boolean"
    DECIMAL = "decimal"
    DATE = "date"
    DATETIME = "datetime"
    ENUM = "enum"
    UUID = "uuid"

    @property
    def is_ordered(self) -> bool:
        """Whether values of this type support strict `<` / `>` comparisons."""
        return self not in (TypeTag.BOOLEAN, TypeTag.ENUM)


@dataclass(frozen=True)
class Filterable:
    """
    Marks an attribute as filterable through request parameters.

    Attributes:
        op: comparison operator used for the filter. Defaults to `FilterOp.EQUALS`.
        param: request parameter name. Defaults to the attribute name.
        value_type: overrides the type tag inferred from the attribute's annotation,
            e.g. `TypeTag.UNSIGNED_INTEGER` or `TypeTag.FLOAT` for an `int` / `float` field.
    """

    op: FilterOp = FilterOp.EQUALS
    param: str | None = None
    value_type: TypeTag | None = None


class AttributeDescriptor(NamedTuple):
    """A filterable attribute of an entity type, as matched against request parameters."""

    attribute_name: str
    param_name: str
    value_type: TypeTag
    operator: FilterOp = FilterOp.EQUALS
    enum_type: type[enum.Enum] | None = None


class AttributeInfo(NamedTuple):
    """
    Everything the engine knows about one attribute of an entity type.

    `target` is set when the attribute refers to another entity type, which makes
    it traversable in dot-separated paths. `filterable` is set when the attribute
    is exposed as a request filter.
    """

    name: str
    value_type: TypeTag | None
    enum_type: type[enum.Enum] | None = None
    target: type | None = None
    filterable: Filterable | None = None

    def descriptor(self) -> AttributeDescriptor:
        """Builds the request-facing descriptor of a filterable attribute."""
        if self.filterable is None:
            raise ValueError(f"Attribute '{self.name}' is not filterable")

        value_type = self.filterable.value_type or self.value_type
        if value_type is None:
            raise ConfigurationError(f"Filterable attribute '{self.name}' has no declared value type")

        return AttributeDescriptor(
            attribute_name=self.name,
            param_name=self.filterable.param or self.name,
            value_type=value_type,
            operator=self.filterable.op,
            enum_type=self.enum_type,
        )


_PYTHON_TYPE_TAGS: list[tuple[type, TypeTag]] = [
    # Order matters: bool is an int, datetime is a date.
    (bool, TypeTag.BOOLEAN),
    (int, TypeTag.INTEGER),
    (float, TypeTag.DOUBLE),
    (Decimal, TypeTag.DECIMAL),
    (datetime, TypeTag.DATETIME),
    (date, TypeTag.DATE),
    (enum.Enum, TypeTag.ENUM),
    (uuid.UUID, TypeTag.UUID),
    (str, TypeTag.STRING),
]


def is_plain_class(candidate: Any) -> bool:
    """Whether `candidate` is a class, excluding parameterized generics such as `list[str]`."""
    return isinstance(candidate, type) and typing.get_origin(candidate) is None


def type_tag_for(python_type: Any) -> TypeTag | None:
    """
    Maps a Python type to its `TypeTag`.

    Returns:
        TypeTag | None: The matching tag, or None when the type is not a supported scalar.
    """
    if not is_plain_class(python_type):
        return None

    for candidate, tag in _PYTHON_TYPE_TAGS:
        if issubclass(python_type, candidate):
            return tag
    return None


class EntitySchema:
    """
    Explicit description of an entity type's attributes, in declaration order.

    Instances are read-only once built and are safe to share between concurrent requests.
    """

    def __init__(self, entity_type: type, attributes: Iterable[AttributeInfo]) -> None:
        self.entity_type = entity_type
        self._attributes: dict[str, AttributeInfo] = {}
        for info in attributes:
            self._attributes[info.name] = info

    def __repr__(self) -> str:
        return f"<EntitySchema {self.name}: {', '.join(self._attributes)}>"

    def __contains__(self, name: object) -> bool:
        return name in self._attributes

    @property
    def name(self) -> str:
        return getattr(self.entity_type, "__name__", str(self.entity_type))

    @property
    def attributes(self) -> list[AttributeInfo]:
        return list(self._attributes.values())

    def get(self, name: str) -> AttributeInfo | None:
        return self._attributes.get(name)


SchemaBuilder = Callable[[type], EntitySchema | None]


class EntitySchemaRegistry:
    """
    Maps entity types to their `EntitySchema`.

    Schemas are either registered explicitly, or built on first lookup by the
    registry's builders (see `querybind.schemas.query.discovery` for the builders
    covering Pydantic models and SQLAlchemy mapped classes).
    """

    def __init__(self, builders: Iterable[SchemaBuilder] | None = None) -> None:
        self._schemas: dict[type, EntitySchema] = {}
        self._builders: list[SchemaBuilder] = list(builders or [])

    def register(self, schema: EntitySchema) -> EntitySchema:
        self._schemas[schema.entity_type] = schema
        return schema

    def add_builder(self, builder: SchemaBuilder) -> None:
        self._builders.append(builder)

    def is_registered(self, entity_type: type) -> bool:
        return entity_type in self._schemas

    def get(self, entity_type: type) -> EntitySchema:
        """
        Returns the schema for `entity_type`, building it on first use.

        Raises:
            ConfigurationError: If no schema is registered and no builder can describe the type.
        """
        schema = self._schemas.get(entity_type)
        if schema is not None:
            return schema

        if not isinstance(entity_type, type):
            raise ConfigurationError(f"Entity type {entity_type!r} is not a class")

        for builder in self._builders:
            schema = builder(entity_type)
            if schema is not None:
                return self.register(schema)

        raise ConfigurationError(f"No entity schema is registered for '{entity_type.__name__}'")

    def resolve_path(self, entity_type: type, path: str) -> AttributeInfo:
        """
        Resolves a potentially nested attribute path (e.g. "address.city") to the
        `AttributeInfo` of its last segment.

        Each segment is looked up on the schema of the previous segment's target type.

        Raises:
            AttributeResolutionError: If the path is empty, a segment does not exist,
                or a non-final segment does not refer to another entity type.
        """
        schema = self.get(entity_type)
        root_name = schema.name
        segments = path.split(".") if path else []
        if not segments or not all(segments):
            raise AttributeResolutionError(path, root_name, "empty attribute name")

        info: AttributeInfo | None = None
        for i, segment in enumerate(segments):
            info = schema.get(segment)
            if info is None:
                raise AttributeResolutionError(path, root_name, f"'{segment}' does not exist on '{schema.name}'")

            if i < len(segments) - 1:
                if info.target is None:
                    raise AttributeResolutionError(path, root_name, f"'{segment}' is not a nested entity")
                try:
                    schema = self.get(info.target)
                except ConfigurationError as e:
                    raise AttributeResolutionError(path, root_name, str(e)) from e

        if info is None or (info.target is not None and info.value_type is None):
            raise AttributeResolutionError(path, root_name, "path does not end on a value attribute")

        return info
