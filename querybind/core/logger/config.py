"""
Logging configuration for the query binding engine.

Configurations are `logging.config.dictConfig` documents stored as JSON next to
this module, one per mode (production, development, testing). A custom file can
replace them through the `LOG_CONFIG_OVERRIDE` setting. `${NAME}` placeholders in
a file (e.g. `${LOG_LEVEL}`) are filled in from the substitutions passed to
`configured_logger`; unknown placeholders are left as they are.
"""

import json
import logging
import pathlib
import string
import typing
from logging import config as logging_config

LOGGER_NAME = "querybind"

__dir = pathlib.Path(__file__).parent
__conf: dict[str, typing.Any] | None = None

_MODE_FILES: dict[str, str] = {
    "production": "logconf.prod.json",
    "development": "logconf.dev.json",
    "testing": "logconf.test.json",
}


def _log_config(path: pathlib.Path, substitutions: dict[str, str] | None = None) -> dict[str, typing.Any]:
    """
    Reads a logging configuration file, applying placeholder substitutions.

    Raises:
        FileNotFoundError: If the file does not exist.
        json.JSONDecodeError: If the file (after substitution) is not valid JSON.
    """
    contents = path.read_text(encoding="utf-8")
    if substitutions:
        contents = string.Template(contents).safe_substitute(substitutions)
    return json.loads(contents)


def config_path(mode: str, config_override: pathlib.Path | None = None) -> pathlib.Path:
    """Returns the configuration file used for a mode, honouring an override."""
    if config_override:
        return pathlib.Path(config_override)

    try:
        return __dir / _MODE_FILES[mode]
    except KeyError as e:
        raise ValueError(f"Invalid mode: {mode}") from e


def log_config() -> dict[str, typing.Any]:
    """
    Returns the logging configuration applied by the last `configured_logger` call.

    Raises:
        ValueError: If logging has not been configured yet.
    """
    if __conf is None:
        raise ValueError("Logger not configured, must call configured_logger first")
    return __conf


def configured_logger(
    *,
    mode: str,
    config_override: pathlib.Path | None = None,
    substitutions: dict[str, str] | None = None,
) -> logging.Logger:
    """
    Applies the logging configuration for a mode and returns the package logger.

    Args:
        mode (str): "production", "development" or "testing".
        config_override (pathlib.Path | None, optional): A custom configuration file
            used instead of the mode's file. Defaults to None.
        substitutions (dict[str, str] | None, optional): Values for `${NAME}` placeholders.

    Raises:
        ValueError: If the mode is unknown and no override is given.
    """
    global __conf

    __conf = _log_config(config_path(mode, config_override), substitutions)
    logging_config.dictConfig(config=__conf)
    return logging.getLogger(LOGGER_NAME)
