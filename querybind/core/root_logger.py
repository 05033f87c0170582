import logging

from querybind.core.config import get_app_settings
from querybind.core.logger.config import configured_logger

__root_logger: logging.Logger | None = None


def get_logger(module: str | None = None) -> logging.Logger:
    """
    Returns the package logger, configuring logging on first use.

    Args:
        module (str | None, optional): Name of a child logger, e.g. "query_bind_service".
            Defaults to None, which returns the package logger itself.
    """
    global __root_logger

    if __root_logger is None:
        settings = get_app_settings()
        __root_logger = configured_logger(
            mode=settings.LOG_MODE,
            config_override=settings.LOG_CONFIG_OVERRIDE,
            substitutions={"LOG_LEVEL": settings.LOG_LEVEL.upper()},
        )

    if module is None:
        return __root_logger

    return __root_logger.getChild(module)
