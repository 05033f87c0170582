"""
An in-memory queryable store.

Entities are plain Python objects (or dicts) kept in lists per entity type, and
predicates are evaluated directly against their attribute values. Comparison
semantics follow SQL where they differ from Python's: a missing (`None`) value
never matches a comparison, `Like` reads the value as text (enum members by
name), and strings sort case-insensitively with `None` first in ascending order.
"""

import enum
from collections.abc import Iterable
from typing import Any

from querybind.schemas.query.predicate import (
    And,
    Between,
    Equals,
    In,
    IsNotNull,
    IsNull,
    Like,
    Or,
    Predicate,
    Range,
    RangeBound,
)
from querybind.schemas.response.pagination import OrderDirection


def read_path(item: Any, path: str) -> Any:
    """Reads a dot-separated attribute path from an object or dict; a missing link yields None."""
    value = item
    for segment in path.split("."):
        if value is None:
            return None
        if isinstance(value, dict):
            value = value.get(segment)
        else:
            value = getattr(value, segment, None)
    return value


def _as_text(value: Any) -> str:
    if isinstance(value, enum.Enum):
        return value.name
    return str(value)


def matches(predicate: Predicate | None, item: Any) -> bool:
    """Evaluates a predicate tree against one entity."""
    if predicate is None:
        return True
    if isinstance(predicate, And):
        return all(matches(term, item) for term in predicate.terms)
    if isinstance(predicate, Or):
        return any(matches(term, item) for term in predicate.terms)

    value = read_path(item, predicate.path)

    if isinstance(predicate, IsNull):
        return value is None
    if isinstance(predicate, IsNotNull):
        return value is not None
    if value is None:
        return False

    if isinstance(predicate, Equals):
        return value == predicate.value
    if isinstance(predicate, Like):
        return predicate.value in _as_text(value).lower()
    if isinstance(predicate, Range):
        if predicate.bound is RangeBound.GREATER_THAN:
            return value > predicate.value
        return value < predicate.value
    if isinstance(predicate, In):
        return value in predicate.values
    if isinstance(predicate, Between):
        return predicate.lower <= value <= predicate.upper

    raise TypeError(f"Unsupported predicate: {type(predicate).__name__}")


def _sort_key(path: str):
    def key(item: Any) -> tuple:
        value = read_path(item, path)
        if isinstance(value, str):
            value = value.lower()
        return (value is not None, value if value is not None else 0)

    return key


class InMemoryStore:
    """
    Keeps entities in memory, grouped by entity type.

    Example:
        >>> store = InMemoryStore({Customer: customers})
        >>> store.add(Customer, Customer(id=13, name="Jo"))
    """

    def __init__(self, entities: dict[type, Iterable[Any]] | None = None) -> None:
        self._entities: dict[type, list[Any]] = {}
        for entity_type, items in (entities or {}).items():
            self.add(entity_type, *items)

    def add(self, entity_type: type, *items: Any) -> None:
        self._entities.setdefault(entity_type, []).extend(items)

    def all(self, entity_type: type) -> list[Any]:
        return list(self._entities.get(entity_type, []))

    def count(self, entity_type: type, predicate: Predicate | None) -> int:
        return sum(1 for item in self._entities.get(entity_type, []) if matches(predicate, item))

    def query(
        self,
        entity_type: type,
        predicate: Predicate | None,
        sort_field: str | None,
        direction: OrderDirection,
        offset: int,
        limit: int,
    ) -> list[Any]:
        selected = [item for item in self._entities.get(entity_type, []) if matches(predicate, item)]
        if sort_field:
            selected.sort(key=_sort_key(sort_field), reverse=OrderDirection(direction) is OrderDirection.desc)
        return selected[offset : offset + limit]
