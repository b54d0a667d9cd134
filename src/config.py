from __future__ import annotations

import logging

from pydantic_settings import BaseSettings, SettingsConfigDict

APP_NAME = "COMAR Compliance"
APP_VERSION = "0.1.0"

DEFAULT_STORAGE_KEY = "comar-audit-state"


class Settings(BaseSettings):
    """Runtime settings.

    Env:
      - COMAR_STORAGE_BACKEND: sqlite | memory | none
      - COMAR_DB_PATH: SQLite file. Empty string => no persistent storage (load returns empty, save is a no-op)
      - COMAR_STORAGE_KEY: key the document is stored under
      - COMAR_LOG_LEVEL
      - COMAR_RECENT_LIMIT: rows shown in the dashboard "Recent Activity" list
    """

    storage_backend: str = "sqlite"
    db_path: str = "/tmp/comar_audit.db"
    storage_key: str = DEFAULT_STORAGE_KEY
    log_level: str = "INFO"
    recent_limit: int = 5

    model_config = SettingsConfigDict(env_prefix="COMAR_", env_file=".env", extra="ignore")


settings = Settings()


def configure_logging(level: str | None = None) -> None:
    logging.basicConfig(
        level=(level or settings.log_level).upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
