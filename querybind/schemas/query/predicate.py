"""
This module defines the predicate expression tree handed to queryable stores.

A predicate is an immutable tagged variant: `Equals`, `Like`, `Range`, `In`,
`Between`, `IsNull`, `IsNotNull`, `And` or `Or`. Stores translate the tree into
their own query language (see `querybind.repos`), dispatching on the variant type.

Attribute paths are dot-separated (e.g. "address.city") and have already been
validated against the entity schema when the predicate is built. Values are
already coerced to the attribute's declared type.

`str(predicate)` renders an SQL-like description intended for logging, e.g.
`lower(name) LIKE '%jo%' AND status IN ('active', 'pending')`.
"""

from __future__ import annotations

import enum
from collections.abc import Iterable
from typing import Annotated, Any, Literal

from pydantic import Field

from querybind.schemas._querybind import _QueryBindModel


def _literal(value: Any) -> str:
    if value is None:
        return "NULL"
    if isinstance(value, bool):
        return "TRUE" if value else "FALSE"
    if isinstance(value, enum.Enum):
        return repr(value.name)
    if isinstance(value, int | float):
        return str(value)
    return repr(str(value))


class RangeBound(str, enum.Enum):
    GREATER_THAN = ">"
    LESS_THAN = "<"


class _Predicate(_QueryBindModel):
    def __str__(self) -> str:
        return self.render()

    def render(self) -> str:
        raise NotImplementedError


class Equals(_Predicate):
    kind: Literal["equals"] = "equals"
    path: str
    value: Any

    def render(self) -> str:
        return f"{self.path} = {_literal(self.value)}"


class Like(_Predicate):
    """Case-insensitive substring match; the attribute is compared as text."""

    kind: Literal["like"] = "like"
    path: str
    value: str
    """The substring to look for, already lower-cased."""

    def render(self) -> str:
        return f"lower({self.path}) LIKE '%{self.value}%'"


class Range(_Predicate):
    """Strict inequality against a single bound."""

    kind: Literal["range"] = "range"
    path: str
    bound: RangeBound
    value: Any

    def render(self) -> str:
        return f"{self.path} {self.bound.value} {_literal(self.value)}"


class In(_Predicate):
    kind: Literal["in"] = "in"
    path: str
    values: tuple[Any, ...]

    def render(self) -> str:
        return f"{self.path} IN ({', '.join(_literal(v) for v in self.values)})"


class Between(_Predicate):
    """Inclusive range test: `lower <= path <= upper`."""

    kind: Literal["between"] = "between"
    path: str
    lower: Any
    upper: Any

    def render(self) -> str:
        return f"{self.path} BETWEEN {_literal(self.lower)} AND {_literal(self.upper)}"


class IsNull(_Predicate):
    kind: Literal["is_null"] = "is_null"
    path: str

    def render(self) -> str:
        return f"{self.path} IS NULL"


class IsNotNull(_Predicate):
    kind: Literal["is_not_null"] = "is_not_null"
    path: str

    def render(self) -> str:
        return f"{self.path} IS NOT NULL"


class And(_Predicate):
    kind: Literal["and"] = "and"
    terms: tuple[Predicate, ...]

    def render(self) -> str:
        return " AND ".join(f"({t.render()})" if isinstance(t, Or) else t.render() for t in self.terms)


class Or(_Predicate):
    kind: Literal["or"] = "or"
    terms: tuple[Predicate, ...]

    def render(self) -> str:
        return " OR ".join(f"({t.render()})" if isinstance(t, And) else t.render() for t in self.terms)


Predicate = Annotated[
    Equals | Like | Range | In | Between | IsNull | IsNotNull | And | Or,
    Field(discriminator="kind"),
]

And.model_rebuild()
Or.model_rebuild()


def and_(terms: Iterable[Predicate]) -> Predicate | None:
    """Combines terms with AND; a single term is returned as is and no terms yield None."""
    collected = tuple(terms)
    if not collected:
        return None
    if len(collected) == 1:
        return collected[0]
    return And(terms=collected)


def or_(terms: Iterable[Predicate]) -> Predicate | None:
    """Combines terms with OR; a single term is returned as is and no terms yield None."""
    collected = tuple(terms)
    if not collected:
        return None
    if len(collected) == 1:
        return collected[0]
    return Or(terms=collected)
