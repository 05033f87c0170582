"""
This module provides a queryable store backed by a SQLAlchemy session.

`SqlAlchemyStore` translates the predicate tree into SQLAlchemy expressions over
a mapped class:
- Nested paths (e.g. "address.city") are compiled into relationship `has()` /
  `any()` conditions, so filtering never duplicates rows.
- `Like` compares the lower-cased attribute, cast to text, with the value
  treated literally (`%` and `_` have no wildcard meaning).
- Ordering by a nested path outer-joins the relationships on the way, and string
  columns are ordered case-insensitively.
"""

from collections.abc import Sequence
from typing import Any

import sqlalchemy as sa
from sqlalchemy import ColumnElement, Select, func, select
from sqlalchemy.orm import Session, aliased
from sqlalchemy.sql import sqltypes

from querybind.core.root_logger import get_logger
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


class SqlAlchemyStore:
    """
    A read-only queryable store over the mapped classes of a SQLAlchemy session.

    Errors raised by the database are logged, the session is rolled back, and the
    error is re-raised to the caller.
    """

    def __init__(self, session: Session) -> None:
        self.session = session
        self.logger = get_logger("store_sqlalchemy")

    def _log_exception(self, entity_type: type, e: Exception) -> None:
        self.logger.error(f"Error processing query for model={entity_type.__name__}")
        self.logger.error(e)

    def _leaf_condition(self, attribute: Any, predicate: Predicate) -> ColumnElement[bool]:
        if isinstance(predicate, Equals):
            return attribute == predicate.value
        if isinstance(predicate, Like):
            text = attribute if isinstance(attribute.type, sqltypes.String) else sa.cast(attribute, sa.String)
            return func.lower(text, type_=sa.String).contains(predicate.value, autoescape=True)
        if isinstance(predicate, Range):
            if predicate.bound is RangeBound.GREATER_THAN:
                return attribute > predicate.value
            return attribute < predicate.value
        if isinstance(predicate, In):
            return attribute.in_(predicate.values)
        if isinstance(predicate, Between):
            return attribute.between(predicate.lower, predicate.upper)
        if isinstance(predicate, IsNull):
            return attribute.is_(None)
        if isinstance(predicate, IsNotNull):
            return attribute.is_not(None)

        raise TypeError(f"Unsupported predicate: {type(predicate).__name__}")

    def _path_condition(self, entity_type: Any, segments: list[str], predicate: Predicate) -> ColumnElement[bool]:
        attribute = getattr(entity_type, segments[0])
        if len(segments) == 1:
            return self._leaf_condition(attribute, predicate)

        relationship = attribute.property
        inner = self._path_condition(relationship.mapper.class_, segments[1:], predicate)
        return attribute.any(inner) if relationship.uselist else attribute.has(inner)

    def condition(self, entity_type: type, predicate: Predicate) -> ColumnElement[bool]:
        """Compiles a predicate tree into a boolean SQLAlchemy expression over `entity_type`."""
        if isinstance(predicate, And):
            return sa.and_(*(self.condition(entity_type, term) for term in predicate.terms))
        if isinstance(predicate, Or):
            return sa.or_(*(self.condition(entity_type, term) for term in predicate.terms))
        return self._path_condition(entity_type, predicate.path.split("."), predicate)

    def _filtered(self, entity_type: type, predicate: Predicate | None) -> Select:
        query = select(entity_type)
        if predicate is not None:
            query = query.where(self.condition(entity_type, predicate))
        return query

    def add_order_by_to_query(self, query: Select, entity_type: type, sort_field: str, direction: OrderDirection) -> Select:
        """
        Orders the query by a possibly nested attribute path.

        Relationships on the path are outer-joined so entities without the related
        row are kept. Paths through collections are ignored with a warning.
        """
        current: Any = entity_type
        segments = sort_field.split(".")
        for segment in segments[:-1]:
            relationship_attr = getattr(current, segment)
            if relationship_attr.property.uselist:
                self.logger.warning(f"Not ordering {entity_type.__name__} by '{sort_field}': '{segment}' is a collection")
                return query

            target = aliased(relationship_attr.property.mapper.class_)
            query = query.outerjoin(relationship_attr.of_type(target))
            current = target

        order_attr = getattr(current, segments[-1])

        # For string types, apply lower() for case-insensitive sorting
        if isinstance(order_attr.type, sqltypes.String):
            attr_to_order = func.lower(order_attr)
        else:
            attr_to_order = order_attr

        if OrderDirection(direction) is OrderDirection.desc:
            return query.order_by(attr_to_order.desc())
        return query.order_by(attr_to_order.asc())

    def count(self, entity_type: type, predicate: Predicate | None) -> int:
        count_query = select(func.count()).select_from(self._filtered(entity_type, predicate).subquery())
        try:
            return self.session.scalar(count_query) or 0
        except Exception as e:
            self._log_exception(entity_type, e)
            self.session.rollback()
            raise

    def query(
        self,
        entity_type: type,
        predicate: Predicate | None,
        sort_field: str | None,
        direction: OrderDirection,
        offset: int,
        limit: int,
    ) -> Sequence[Any]:
        query = self._filtered(entity_type, predicate)
        if sort_field:
            query = self.add_order_by_to_query(query, entity_type, sort_field, direction)
        query = query.limit(limit).offset(offset)

        try:
            return self.session.scalars(query).unique().all()
        except Exception as e:
            self._log_exception(entity_type, e)
            self.session.rollback()
            raise
