"""
Settings for the club ledger.

Values come from the process environment, optionally seeded
from a .env file in the working directory.
"""

import os
from functools import lru_cache

from dotenv import load_dotenv

load_dotenv()


def _flag(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).lower() in ("1", "true", "yes")


class Settings:
    """Ledger settings, read once from the environment."""

    APP_NAME: str = "Club Ledger"
    APP_VERSION: str = "0.1.0"
    DEBUG: bool = _flag("DEBUG")

    HOST: str = os.getenv("HOST", "0.0.0.0")
    PORT: int = int(os.getenv("PORT", "8000"))

    # SQLite by default so a single front desk can run without a server
    DATABASE_URL: str = os.getenv("DATABASE_URL", "sqlite:///./club_ledger.db")
    DATABASE_ECHO: bool = _flag("DATABASE_ECHO")

    ENVIRONMENT: str = os.getenv("ENVIRONMENT", "development")
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()

    # strftime pattern for dates in member statements
    EXPORT_DATE_FORMAT: str = os.getenv("EXPORT_DATE_FORMAT", "%Y/%m/%d")

    @property
    def is_sqlite(self) -> bool:
        return self.DATABASE_URL.startswith("sqlite")


@lru_cache()
def get_settings() -> Settings:
    """Cached so the environment is read a single time per process."""
    return Settings()
