"""
This module defines the page-of-results value returned by a query binding.

It provides:
- `OrderDirection`: the ascending / descending sort direction.
- `ResultPage`: a generic, immutable page of entities together with the paging,
  sorting and filtering state that produced it, and helpers that build the
  links to the neighbouring pages.
"""

import enum
from typing import Any, Generic, TypeVar
from urllib.parse import parse_qs, urlencode, urlsplit, urlunsplit

from pydantic import Field, computed_field

from querybind.schemas._querybind import _QueryBindModel

T = TypeVar("T")


class OrderDirection(str, enum.Enum):
    """
    Enumeration for specifying the direction of ordering in queries.
    """

    asc = "asc"
    desc = "desc"


class ResultPage(_QueryBindModel, Generic[T]):
    """
    One page of query results.

    Pages are numbered from 0. `total_pages` is `ceil(total_elements / size)`, so an
    empty result has no pages at all; such a page is both first and last.

    Type Parameters:
        T: The type of the entities in `content`.
    """

    content: list[T] = Field(default_factory=list)
    """Entities of the current page, in store order."""
    page: int = Field(default=0, ge=0)
    """Current page number (0-indexed)."""
    size: int = Field(default=20, ge=1)
    """Requested number of entities per page."""
    total_elements: int = Field(default=0, ge=0)
    """Number of entities matching the predicate across all pages."""
    total_pages: int = Field(default=0, ge=0)
    sort_field: str | None = None
    """The requested sort field, reported even when the store could not order by it."""
    direction: OrderDirection = OrderDirection.asc
    active_filters: dict[str, str] = Field(default_factory=dict)
    """
    The request values that narrowed the result: `search` (when a term was given)
    followed by one entry per active filter parameter, in resolution order.
    """

    @computed_field  # type: ignore[prop-decorator]
    @property
    def has_next(self) -> bool:
        return self.page < self.total_pages - 1

    @computed_field  # type: ignore[prop-decorator]
    @property
    def has_previous(self) -> bool:
        return self.page > 0

    @computed_field  # type: ignore[prop-decorator]
    @property
    def is_first(self) -> bool:
        return self.page == 0

    @computed_field  # type: ignore[prop-decorator]
    @property
    def is_last(self) -> bool:
        return self.page >= self.total_pages - 1

    @computed_field  # type: ignore[prop-decorator]
    @property
    def is_empty(self) -> bool:
        return not self.content

    @computed_field  # type: ignore[prop-decorator]
    @property
    def number_of_elements(self) -> int:
        return len(self.content)

    def __str__(self) -> str:
        sort = f"{self.sort_field} {self.direction.value}" if self.sort_field else "unsorted"
        return (
            f"ResultPage[page={self.page}/{self.total_pages}, size={self.size}, "
            f"total={self.total_elements}, sort={sort}, filters={self.active_filters}]"
        )

    def next_url(self, url: str) -> str | None:
        """
        Builds the link to the next page by setting `page` in the given URL's query string.

        Args:
            url (str): The current request URL (or path), including its query string.

        Returns:
            str | None: The link, or None when this is the last page.
        """
        if not self.has_next:
            return None
        return ResultPage.merge_query_parameters(url, {"page": self.page + 1})

    def previous_url(self, url: str) -> str | None:
        """
        Builds the link to the previous page by setting `page` in the given URL's query string.

        Returns:
            str | None: The link, or None when this is the first page.
        """
        if not self.has_previous:
            return None
        return ResultPage.merge_query_parameters(url, {"page": self.page - 1})

    @staticmethod
    def merge_query_parameters(url_path: str, params_to_merge: dict[str, Any]) -> str:
        """
        Constructs a URL string by merging new or updated query parameters with an existing URL path.

        Existing query parameters are preserved (including repeated keys and blank
        values); `params_to_merge` updates or adds to them.

        Args:
            url_path (str): The base URL or path string. Can include existing query parameters.
            params_to_merge (dict[str, Any]): Query parameters to add or update.

        Returns:
            str: The new URL string with merged query parameters.
        """
        scheme, netloc, path, query_string, fragment = urlsplit(url_path)

        existing_query_params = parse_qs(query_string, keep_blank_values=True)
        existing_query_params.update(params_to_merge)

        new_query_string = urlencode(existing_query_params, doseq=True)
        return urlunsplit((scheme, netloc, path, new_query_string, fragment))
