"""
This module defines the contract between the query binding engine and the data
it queries.

A queryable store executes two read-only operations over an entity type: counting
the entities that match a predicate, and fetching one sorted window of them. The
predicate is the immutable tree built by `querybind.schemas.query.builder`; a
`None` predicate means "no filtering".
"""

from collections.abc import Sequence
from typing import Any, Protocol, runtime_checkable

from querybind.schemas.query.predicate import Predicate
from querybind.schemas.response.pagination import OrderDirection


@runtime_checkable
class QueryableStore(Protocol):
    def count(self, entity_type: type, predicate: Predicate | None) -> int:
        """Returns the number of entities of `entity_type` matching `predicate`."""
        ...

    def query(
        self,
        entity_type: type,
        predicate: Predicate | None,
        sort_field: str | None,
        direction: OrderDirection,
        offset: int,
        limit: int,
    ) -> Sequence[Any]:
        """
        Returns at most `limit` matching entities, skipping the first `offset`.

        `sort_field` is a dot-separated attribute path that has already been
        resolved against the entity schema; when it is None the store returns
        entities in its default order.
        """
        ...
