"""
This module composes the predicate tree of one invocation from its free-text
search term and its active filter values.

Operator semantics, given the raw value `v` of a filter:

- EQUALS: `null` / `!null` (case-insensitive) test for nullity and are never
  coerced; any other value is coerced and compared for equality.
- LIKE: case-insensitive substring match on the attribute read as text.
- GREATER_THAN / LESS_THAN: strict comparison; the attribute type must be ordered.
- IN: `v` is split on commas, each part trimmed and coerced.
- BETWEEN: `v` must hold exactly two comma-separated bounds; inclusive range.
  Any other number of parts yields no predicate.
- IS_NULL / IS_NOT_NULL: `v` is ignored.

A value that cannot be coerced, or a search attribute that does not resolve,
drops that single predicate with a warning; the rest of the query is unaffected.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping

from querybind.core.exceptions import AttributeResolutionError, CoercionError
from querybind.core.root_logger import get_logger

from .attributes import AttributeDescriptor, EntitySchemaRegistry, FilterOp
from .coercion import coerce
from .discovery import schema_registry
from .predicate import Between, Equals, In, IsNotNull, IsNull, Like, Predicate, Range, RangeBound, and_, or_

logger = get_logger("builder")

NULL_MARKER = "null"
NOT_NULL_MARKER = "!null"


class PredicateBuilder:
    """
    Builds predicates for one entity type.

    Instances hold no per-request state and can be shared.
    """

    def __init__(self, entity_type: type, registry: EntitySchemaRegistry | None = None) -> None:
        self.entity_type = entity_type
        self.registry = registry or schema_registry

    def search_predicate(self, search_attributes: Iterable[str], search_term: str | None) -> Predicate | None:
        """
        Builds the OR-group of case-insensitive substring matches for a search term.

        Returns None when the term is blank or no search attribute resolves.
        """
        if search_term is None or not search_term.strip():
            return None

        value = search_term.lower()
        likes: list[Predicate] = []
        for path in search_attributes:
            try:
                self.registry.resolve_path(self.entity_type, path)
            except AttributeResolutionError as e:
                logger.warning(f"Skipping search attribute '{path}' for search='{search_term}': {e}")
                continue
            likes.append(Like(path=path, value=value))

        return or_(likes)

    def filter_predicate(self, descriptor: AttributeDescriptor, raw: str) -> Predicate | None:
        """
        Builds the predicate of a single active filter.

        Returns:
            Predicate | None: The predicate, or None for a BETWEEN value without exactly two bounds.

        Raises:
            CoercionError: If the value (or one of its parts) cannot be converted to the attribute's type.
        """
        path = descriptor.attribute_name
        op = descriptor.operator

        if op is FilterOp.EQUALS:
            marker = raw.strip().lower()
            if marker == NULL_MARKER:
                return IsNull(path=path)
            if marker == NOT_NULL_MARKER:
                return IsNotNull(path=path)
            return Equals(path=path, value=self._coerce(descriptor, raw))

        if op is FilterOp.LIKE:
            return Like(path=path, value=raw.lower())

        if op in (FilterOp.GREATER_THAN, FilterOp.LESS_THAN):
            self._require_ordered(descriptor, raw)
            bound = RangeBound.GREATER_THAN if op is FilterOp.GREATER_THAN else RangeBound.LESS_THAN
            return Range(path=path, bound=bound, value=self._coerce(descriptor, raw))

        if op is FilterOp.IN:
            parts = [part.strip() for part in raw.split(",")]
            values = tuple(self._coerce(descriptor, part) for part in parts if part)
            if not values:
                logger.debug(f"Ignoring filter '{descriptor.param_name}={raw}': no values")
                return None
            return In(path=path, values=values)

        if op is FilterOp.BETWEEN:
            parts = raw.split(",")
            if len(parts) != 2:
                logger.debug(f"Ignoring filter '{descriptor.param_name}={raw}': expected exactly two bounds")
                return None
            self._require_ordered(descriptor, raw)
            lower, upper = (self._coerce(descriptor, part.strip()) for part in parts)
            return Between(path=path, lower=lower, upper=upper)

        if op is FilterOp.IS_NULL:
            return IsNull(path=path)

        if op is FilterOp.IS_NOT_NULL:
            return IsNotNull(path=path)

        raise ValueError(f"Unsupported filter operator: {op}")

    def build(
        self,
        descriptors: Iterable[AttributeDescriptor],
        search_attributes: Iterable[str],
        search_term: str | None,
        active_filters: Mapping[AttributeDescriptor, str],
    ) -> Predicate | None:
        """
        Combines the search OR-group and every active filter predicate with AND.

        Args:
            descriptors (Iterable[AttributeDescriptor]): The entity's filterable attributes,
                in discovery order; filter predicates follow this order.
            search_attributes (Iterable[str]): Attribute paths matched by the search term.
            search_term (str | None): The free-text search term, if any.
            active_filters (Mapping[AttributeDescriptor, str]): Raw values of the active filters.

        Returns:
            Predicate | None: The combined predicate; a single predicate is returned
                unwrapped, and None means the query is unfiltered.
        """
        predicates: list[Predicate] = []

        search = self.search_predicate(search_attributes, search_term)
        if search is not None:
            predicates.append(search)

        for descriptor in descriptors:
            raw = active_filters.get(descriptor)
            if raw is None:
                continue

            try:
                predicate = self.filter_predicate(descriptor, raw)
            except CoercionError as e:
                logger.warning(f"Dropping filter '{descriptor.param_name}={raw}': {e}")
                continue

            if predicate is not None:
                predicates.append(predicate)

        return and_(predicates)

    def _coerce(self, descriptor: AttributeDescriptor, raw: str):
        return coerce(raw, descriptor.value_type, descriptor.enum_type)

    def _require_ordered(self, descriptor: AttributeDescriptor, raw: str) -> None:
        if not descriptor.value_type.is_ordered:
            raise CoercionError(raw, descriptor.value_type.value, "values of this type cannot be compared by order")
