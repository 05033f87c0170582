class QueryBindException(Exception):
    """Base exception for every failure raised by the query binding engine."""

    def __init__(self, message: str = "Query binding failed"):
        self.message = message
        super().__init__(self.message)

    def __str__(self):
        return f"{self.message}"


class ConfigurationError(QueryBindException):
    """
    Raised when an endpoint has no binding configuration, or when the configured
    entity type cannot be described by the schema registry.
    """

    pass


class CoercionError(QueryBindException, ValueError):
    """Raised when a raw parameter value cannot be converted to an attribute's declared type."""

    def __init__(self, raw: str, value_type: str, reason: str | None = None):
        self.raw = raw
        self.value_type = value_type
        message = f"cannot convert '{raw}' to {value_type}"
        if reason:
            message += f": {reason}"
        super().__init__(message)


class AttributeResolutionError(QueryBindException, ValueError):
    """Raised when a dot-separated attribute path does not resolve on an entity type."""

    def __init__(self, path: str, entity_name: str, reason: str | None = None):
        self.path = path
        self.entity_name = entity_name
        message = f"attribute path '{path}' does not resolve on '{entity_name}'"
        if reason:
            message += f": {reason}"
        super().__init__(message)


class BindingExecutionError(QueryBindException):
    """Raised when the underlying store fails while counting or fetching a page."""

    ...


def registered_exceptions() -> dict:
    """Returns a dictionary of registered exceptions and their default messages."""
    return {
        ConfigurationError: "The endpoint's query binding is not configured correctly",
        BindingExecutionError: "The query could not be executed against the data store",
    }
