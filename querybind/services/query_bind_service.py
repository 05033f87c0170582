"""
This module provides the entry point of the query binding engine.

`QueryBindService.execute` turns the raw request parameters of one invocation
into a `ResultPage`:

1. discover the entity's filterable attributes and resolve the request,
2. build the predicate from the search term and the active filters,
3. count the matching entities, then fetch the requested window.

The service is stateless; one instance can serve concurrent requests.
"""

from collections.abc import Mapping
from typing import Any

from querybind.core.exceptions import AttributeResolutionError, BindingExecutionError
from querybind.repos.store_protocol import QueryableStore
from querybind.schemas.query.attributes import EntitySchemaRegistry
from querybind.schemas.query.binding import get_binding_config
from querybind.schemas.query.builder import PredicateBuilder
from querybind.schemas.query.discovery import discover, schema_registry
from querybind.schemas.query.params import SEARCH_PARAM, BindingConfig, ResolvedRequest, resolve
from querybind.schemas.response.pagination import OrderDirection, ResultPage

from . import BaseService


class QueryBindService(BaseService):
    def __init__(self, registry: EntitySchemaRegistry | None = None) -> None:
        super().__init__()
        self.registry = registry or schema_registry

    def _sort_path(self, entity_type: type, sort_field: str) -> str | None:
        """Returns the sort field when it resolves on the entity, otherwise None (store-default order)."""
        try:
            self.registry.resolve_path(entity_type, sort_field)
        except AttributeResolutionError as e:
            self._logger.warning(f"Ignoring sort='{sort_field}': {e}")
            return None
        return sort_field

    @staticmethod
    def _active_filter_display(request: ResolvedRequest) -> dict[str, str]:
        display: dict[str, str] = {}
        if request.search_term is not None:
            display[SEARCH_PARAM] = request.search_term
        for descriptor, raw in request.active_filters.items():
            display[descriptor.param_name] = raw
        return display

    def execute(
        self,
        entity_type: type,
        config: BindingConfig,
        raw_params: Mapping[str, Any],
        store: QueryableStore,
    ) -> ResultPage:
        """
        Runs a bound query for one invocation.

        Args:
            entity_type (type): The entity type to list.
            config (BindingConfig): The endpoint's binding configuration.
            raw_params (Mapping[str, Any]): The request parameters.
            store (QueryableStore): The store to count and fetch entities from.

        Returns:
            ResultPage: The requested page. Filters whose values cannot be used are
                left out, and an unknown sort field leaves the page in store order.

        Raises:
            ConfigurationError: If the entity type cannot be described.
            BindingExecutionError: If the store fails to count or fetch entities.
        """
        descriptors = discover(entity_type, self.registry)
        request = resolve(raw_params, config, descriptors)

        builder = PredicateBuilder(entity_type, self.registry)
        predicate = builder.build(descriptors, config.search_attributes, request.search_term, request.active_filters)

        try:
            total = int(store.count(entity_type, predicate))
        except Exception as e:
            self._logger.error(f"Counting {entity_type.__name__} failed: {e}")
            raise BindingExecutionError(f"Counting '{entity_type.__name__}' entities failed: {e}") from e

        total_pages = -(-total // request.size)
        sort_field = self._sort_path(entity_type, request.sort_field)
        direction = OrderDirection(request.direction)

        try:
            content = store.query(entity_type, predicate, sort_field, direction, request.offset, request.size)
        except Exception as e:
            self._logger.error(f"Querying {entity_type.__name__} failed: {e}")
            raise BindingExecutionError(f"Querying '{entity_type.__name__}' entities failed: {e}") from e

        page = ResultPage(
            content=list(content),
            page=request.page,
            size=request.size,
            total_elements=total,
            total_pages=total_pages,
            sort_field=request.sort_field,
            direction=direction,
            active_filters=self._active_filter_display(request),
        )

        self._logger.debug(f"{entity_type.__name__} where {predicate or 'TRUE'}: {page}")
        return page

    def execute_for(self, endpoint: Any, raw_params: Mapping[str, Any], store: QueryableStore) -> ResultPage:
        """
        Runs the query binding declared on an endpoint with `query_bind`.

        Raises:
            ConfigurationError: If the endpoint has no binding configuration.
            BindingExecutionError: If the store fails.
        """
        config = get_binding_config(endpoint)
        return self.execute(config.entity_type, config, raw_params, store)
