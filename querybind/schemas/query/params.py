"""
This module resolves the raw request parameters of one invocation into a
`ResolvedRequest`, applying the defaults and clamps of the endpoint's `BindingConfig`.

Reserved parameter names are `page`, `size`, `sort`, `direction` and `search`;
every other name is matched against the `param_name` of the entity's filterable
attributes. Values are raw strings; a value that is empty after stripping whitespace
is treated as absent.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any, Literal

from pydantic import Field, field_validator, model_validator

from querybind.core.config import get_app_settings
from querybind.schemas._querybind import _QueryBindModel

from .attributes import AttributeDescriptor
from .coercion import INT64_MAX, INT64_MIN

PAGE_PARAM = "page"
SIZE_PARAM = "size"
SORT_PARAM = "sort"
DIRECTION_PARAM = "direction"
SEARCH_PARAM = "search"

RESERVED_PARAMS = frozenset({PAGE_PARAM, SIZE_PARAM, SORT_PARAM, DIRECTION_PARAM, SEARCH_PARAM})

Direction = Literal["asc", "desc"]


class BindingConfig(_QueryBindModel):
    """
    Per-endpoint query binding configuration.

    Fields left unspecified take their defaults from the application settings
    (`DEFAULT_PAGE_SIZE`, `MAX_PAGE_SIZE`, `DEFAULT_SORT`, `DEFAULT_DIRECTION`)
    at creation time. A created config is immutable.
    """

    entity_type: type
    """The entity type the endpoint lists, e.g. a SQLAlchemy mapped class or a Pydantic model."""
    default_page_size: int = Field(default_factory=lambda: get_app_settings().DEFAULT_PAGE_SIZE)
    max_page_size: int = Field(default_factory=lambda: get_app_settings().MAX_PAGE_SIZE)
    search_attributes: tuple[str, ...] = ()
    """Attribute paths matched by the free-text `search` parameter, e.g. ("name", "address.city")."""
    default_sort: str = Field(default_factory=lambda: get_app_settings().DEFAULT_SORT)
    default_direction: Direction = Field(default_factory=lambda: get_app_settings().DEFAULT_DIRECTION)

    @field_validator("default_direction", mode="before")
    @classmethod
    def normalize_direction(cls, v: Any) -> Any:
        return v.strip().lower() if isinstance(v, str) else v

    @field_validator("search_attributes", mode="before")
    @classmethod
    def split_search_attributes(cls, v: Any) -> Any:
        # A single comma-separated string is accepted as well
        if isinstance(v, str):
            return tuple(part.strip() for part in v.split(",") if part.strip())
        return v

    @model_validator(mode="after")
    def check_page_sizes(self) -> BindingConfig:
        if self.default_page_size < 1:
            raise ValueError("default_page_size must be greater than 0")
        if self.max_page_size < self.default_page_size:
            raise ValueError("max_page_size must be greater than or equal to default_page_size")
        return self


@dataclass(frozen=True)
class ResolvedRequest:
    """The paging, sorting, search and filter values of a single invocation."""

    page: int
    size: int
    sort_field: str
    direction: Direction
    search_term: str | None = None
    active_filters: dict[AttributeDescriptor, str] = field(default_factory=dict)
    """Raw values of the filters present in the request, in discovery order."""

    @property
    def offset(self) -> int:
        return self.page * self.size


def get_param(raw_params: Mapping[str, Any], name: str) -> str | None:
    """
    Returns the value of a request parameter, or None when it is absent or blank.

    When a key is repeated, the first value wins. Repeated keys are recognized on
    mappings offering `getlist` (Starlette's `QueryParams`, multidicts) and on
    mappings holding lists of values (e.g. the output of `urllib.parse.parse_qs`).
    """
    getlist = getattr(raw_params, "getlist", None)
    if callable(getlist):
        values = getlist(name)
        value = values[0] if values else None
    else:
        value = raw_params.get(name)
        if isinstance(value, list | tuple):
            value = value[0] if value else None

    if value is None:
        return None

    value = str(value)
    if not value.strip():
        return None
    return value


def _parse_int(value: str | None) -> int | None:
    if value is None:
        return None
    text = value.strip()
    if not text.lstrip("+-").isdigit():
        return None
    try:
        parsed = int(text)
    except ValueError:
        return None
    return parsed if INT64_MIN <= parsed <= INT64_MAX else None


def resolve(
    raw_params: Mapping[str, Any],
    config: BindingConfig,
    descriptors: Iterable[AttributeDescriptor],
) -> ResolvedRequest:
    """
    Resolves raw request parameters against an endpoint's binding configuration.

    Args:
        raw_params (Mapping[str, Any]): Request parameter names mapped to raw string values.
        config (BindingConfig): The endpoint's binding configuration.
        descriptors (Iterable[AttributeDescriptor]): The entity's filterable attributes,
            in discovery order.

    Returns:
        ResolvedRequest: The resolved request. `page` is never negative, `offset` fits a 64-bit integer and `size`
            always lies within `[1, config.max_page_size]`; missing or unparsable
            values fall back to the configured defaults.
    """
    page = _parse_int(get_param(raw_params, PAGE_PARAM))
    page = max(page if page is not None else 0, 0)

    size = _parse_int(get_param(raw_params, SIZE_PARAM))
    size = min(max(size if size is not None else config.default_page_size, 1), config.max_page_size)
    if page * size > INT64_MAX:
        page = 0

    sort_field = get_param(raw_params, SORT_PARAM)
    sort_field = sort_field.strip() if sort_field is not None else config.default_sort

    direction_value = get_param(raw_params, DIRECTION_PARAM)
    if direction_value is None:
        direction: Direction = config.default_direction
    else:
        direction = "desc" if direction_value.strip().lower() == "desc" else "asc"

    active_filters: dict[AttributeDescriptor, str] = {}
    for descriptor in descriptors:
        value = get_param(raw_params, descriptor.param_name)
        if value is not None:
            active_filters[descriptor] = value

    return ResolvedRequest(
        page=page,
        size=size,
        sort_field=sort_field,
        direction=direction,
        search_term=get_param(raw_params, SEARCH_PARAM),
        active_filters=active_filters,
    )
