"""
This module provides the exception handlers that turn query binding failures
into JSON error responses.

- `ConfigurationError` -> 500: the endpoint's binding is broken; not the client's fault.
- `BindingExecutionError` -> 503: the data store could not answer the query.

The response body carries the default message from `registered_exceptions()`;
the underlying error is only logged.
"""

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from querybind.core.exceptions import BindingExecutionError, ConfigurationError, registered_exceptions
from querybind.core.root_logger import get_logger

logger = get_logger("handlers")

_STATUS_CODES: dict[type[Exception], int] = {
    ConfigurationError: status.HTTP_500_INTERNAL_SERVER_ERROR,
    BindingExecutionError: status.HTTP_503_SERVICE_UNAVAILABLE,
}


def log_wrapper(request: Request, exc: Exception, status_code: int) -> None:
    """
    Logs details of an exception in a structured format, delimiting the start
    and end of the error report.
    """
    title = f" {status_code} {type(exc).__name__} "
    logger.error(f" Start{title}".center(80, "-"))
    logger.error(f"Request: {request.method} {request.url}")
    logger.error(f"Error Details: {exc}")
    if exc.__cause__ is not None:
        logger.error(f"Caused By: {exc.__cause__!r}")
    logger.error(f" End{title}".center(80, "-"))


def register_query_bind_handlers(app: FastAPI) -> None:
    """
    Registers the query binding exception handlers with the FastAPI app.

    Args:
        app (FastAPI): The FastAPI application instance.
    """
    messages = registered_exceptions()

    for exception_type, status_code in _STATUS_CODES.items():
        message = messages[exception_type]

        def handler(request: Request, exc: Exception, status_code: int = status_code, message: str = message) -> JSONResponse:
            log_wrapper(request, exc, status_code)
            return JSONResponse(content={"detail": {"message": message}}, status_code=status_code)

        app.add_exception_handler(exception_type, handler)

    logger.debug("Registered query binding exception handlers.")
