"""
This module serves as the entry point for the `querybind.services` package.

It defines the `BaseService` class, which provides the logger shared by all
service classes.
"""

from logging import Logger

from querybind.core.root_logger import get_logger


class BaseService:
    """
    A base class for all service layer classes.

    Services inheriting from `BaseService` have a `_logger` named after the
    service module.
    """

    def __init__(self) -> None:
        self._logger: Logger = get_logger(self.__class__.__module__.rsplit(".", 1)[-1])
        """A logger instance for service-specific logging."""
