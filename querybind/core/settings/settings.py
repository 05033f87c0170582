from pathlib import Path
from typing import Literal

from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class AppSettings(BaseSettings):
    PRODUCTION: bool = False

    TESTING: bool = False

    LOG_CONFIG_OVERRIDE: Path | None = None
    """ path to custom logging configuration file"""

    LOG_LEVEL: str = "info"
    """ corresponds to standard Python Log levels """

    # ===============================================
    # Query Binding Defaults

    DEFAULT_PAGE_SIZE: int = 20
    """Page size used when an endpoint binding does not declare one"""

    MAX_PAGE_SIZE: int = 100
    """Upper bound for the `size` request parameter when an endpoint binding does not declare one"""

    DEFAULT_SORT: str = "id"

    DEFAULT_DIRECTION: Literal["asc", "desc"] = "asc"

    model_config = SettingsConfigDict(arbitrary_types_allowed=True, extra="allow")

    @property
    def LOG_MODE(self) -> str:
        if self.TESTING:
            return "testing"
        return "production" if self.PRODUCTION else "development"

    @field_validator("DEFAULT_DIRECTION", mode="before")
    @classmethod
    def normalize_direction(cls, v: str) -> str:
        return v.strip().lower() if isinstance(v, str) else v

    @model_validator(mode="after")
    def check_page_sizes(self) -> "AppSettings":
        if self.DEFAULT_PAGE_SIZE < 1:
            raise ValueError("DEFAULT_PAGE_SIZE must be at least 1")
        if self.MAX_PAGE_SIZE < self.DEFAULT_PAGE_SIZE:
            raise ValueError("MAX_PAGE_SIZE must be greater than or equal to DEFAULT_PAGE_SIZE")
        return self


def app_settings_constructor(
    production: bool,
    testing: bool,
    env_file: Path,
    env_encoding="utf-8",
) -> AppSettings:
    """
    app_settings_constructor is a factory function that returns an AppSettings object.
    AppSettings should not be instantiated directly, but rather
    through this factory function
    """

    return AppSettings(
        _env_file=env_file,  # type: ignore
        _env_file_encoding=env_encoding,  # type: ignore
        **{"PRODUCTION": production, "TESTING": testing},
    )
