"""
Declares query bindings on endpoints.

An endpoint (a page or controller class, or a route function) is bound to an
entity type with the `query_bind` decorator:

    @query_bind(Customer, search_attributes=("name", "email"), default_sort="name")
    class CustomerListPage: ...

The `BindingConfig` is created once, when the endpoint is defined, and is read
back with `get_binding_config`. Subclasses inherit the binding of their parent.
"""

from collections.abc import Callable
from typing import Any, TypeVar

from querybind.core.exceptions import ConfigurationError

from .params import BindingConfig

BINDING_ATTR = "__query_binding__"

E = TypeVar("E")


def query_bind(entity_type: type, **options: Any) -> Callable[[E], E]:
    """
    Binds an endpoint to an entity type.

    Args:
        entity_type (type): The entity type listed by the endpoint.
        **options: Any other `BindingConfig` field, e.g. `default_page_size=10`
            or `search_attributes=("name",)`.

    Raises:
        pydantic.ValidationError: If the options do not form a valid configuration.
    """
    config = BindingConfig(entity_type=entity_type, **options)

    def decorator(endpoint: E) -> E:
        setattr(endpoint, BINDING_ATTR, config)
        return endpoint

    return decorator


def get_binding_config(endpoint: Any) -> BindingConfig:
    """
    Returns the binding configuration declared on an endpoint.

    Raises:
        ConfigurationError: If the endpoint has no binding configuration.
    """
    config = getattr(endpoint, BINDING_ATTR, None)
    if not isinstance(config, BindingConfig):
        name = getattr(endpoint, "__name__", repr(endpoint))
        raise ConfigurationError(f"Endpoint '{name}' has no query binding configuration")
    return config
