"""
FastAPI integration: populates a `ResultPage` from the current request.

    get_customers = QueryBindDependency(CustomerListPage, generate_store).as_dependency()

    @router.get("/customers")
    def list_customers(page: ResultPage = Depends(get_customers)): ...

Only GET requests are bound; for any other method the dependency yields None.
"""

from collections.abc import Callable
from typing import Any

from fastapi import Depends, Request

from querybind.core.root_logger import get_logger
from querybind.repos.store_protocol import QueryableStore
from querybind.schemas.query.binding import get_binding_config
from querybind.schemas.query.params import BindingConfig
from querybind.schemas.response.pagination import ResultPage
from querybind.services.query_bind_service import QueryBindService

logger = get_logger("dependencies")


class QueryBindDependency:
    """
    Executes an endpoint's query binding against the request's query parameters.

    Args:
        endpoint: An endpoint decorated with `query_bind`, or a `BindingConfig`.
        get_store: A FastAPI dependency providing the `QueryableStore` to query.
        service (QueryBindService | None, optional): The service to execute with.

    Raises:
        ConfigurationError: If `endpoint` has no binding configuration.
    """

    def __init__(
        self,
        endpoint: Any,
        get_store: Callable[..., QueryableStore],
        service: QueryBindService | None = None,
    ) -> None:
        self.config = endpoint if isinstance(endpoint, BindingConfig) else get_binding_config(endpoint)
        self.get_store = get_store
        self.service = service or QueryBindService()

    def bind(self, request: Request, store: QueryableStore) -> ResultPage | None:
        if request.method != "GET":
            logger.debug(f"Skipping query binding for {request.method} {request.url.path}")
            return None

        return self.service.execute(self.config.entity_type, self.config, request.query_params, store)

    def as_dependency(self) -> Callable[..., ResultPage | None]:
        """Returns the dependency callable to pass to `fastapi.Depends`."""

        def query_bind_dependency(request: Request, store: QueryableStore = Depends(self.get_store)) -> ResultPage | None:
            return self.bind(request, store)

        return query_bind_dependency
