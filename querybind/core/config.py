import os
from functools import lru_cache
from pathlib import Path

import dotenv

from querybind.core.settings import AppSettings, app_settings_constructor

CWD = Path(__file__).parent
BASE_DIR = Path(os.getenv("BASE_DIR", CWD.parent.parent))
ENV = BASE_DIR.joinpath(".env")

dotenv.load_dotenv(ENV)
PRODUCTION = os.getenv("PRODUCTION", "False").capitalize() == "True"
TESTING = os.getenv("TESTING", "False").capitalize() == "True"


@lru_cache
def get_app_settings() -> AppSettings:
    """Get the application settings."""
    return app_settings_constructor(
        env_file=ENV,
        production=PRODUCTION,
        testing=TESTING,
    )
