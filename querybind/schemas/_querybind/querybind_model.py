"""
This module defines the base Pydantic model shared by the query binding schemas.

`_QueryBindModel` generates camelCase aliases so that result pages serialize the
way API clients expect (`totalElements`, `activeFilters`, ...), while Python code
keeps using snake_case attribute names.
"""

from humps import camelize
from pydantic import BaseModel, ConfigDict


class _QueryBindModel(BaseModel):
    """
    A base Pydantic model for all query binding schemas.

    Instances are immutable once validated: configurations are shared across
    requests and result pages are handed to callers as finished values.
    """

    model_config = ConfigDict(
        alias_generator=camelize,  # Serialize as camelCase for API clients
        populate_by_name=True,  # Still accept snake_case field names
        from_attributes=True,
        frozen=True,
        arbitrary_types_allowed=True,
    )
