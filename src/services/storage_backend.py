from __future__ import annotations

import logging
from typing import Callable, Dict, Optional

from sqlalchemy.orm import Session

from src.config import settings
from src.db.models import KeyValue

logger = logging.getLogger(__name__)


class StorageBackend:
    """Whole-value key-value storage. `put_text` replaces the previous value atomically."""

    name = "base"

    def get_text(self, key: str) -> Optional[str]:
        raise NotImplementedError

    def put_text(self, key: str, value: str) -> None:
        raise NotImplementedError


class MemoryBackend(StorageBackend):
    name = "memory"

    def __init__(self, initial: Dict[str, str] | None = None):
        self._data: Dict[str, str] = dict(initial or {})

    def get_text(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def put_text(self, key: str, value: str) -> None:
        self._data[key] = value


class SqlKeyValueBackend(StorageBackend):
    name = "sqlite"

    def __init__(self, session_factory: Callable[[], Session] | None = None):
        if session_factory is None:
            from src.db.session import db

            session_factory = db
        self._session_factory = session_factory

    def get_text(self, key: str) -> Optional[str]:
        with self._session_factory() as s:
            row = s.get(KeyValue, key)
            return row.value if row is not None else None

    def put_text(self, key: str, value: str) -> None:
        # single transaction: readers see either the old value or the new one
        with self._session_factory() as s:
            s.merge(KeyValue(key=key, value=value))
            s.commit()


def get_storage_backend() -> Optional[StorageBackend]:
    """Backend adapter.

    Env:
      - COMAR_STORAGE_BACKEND=sqlite|memory|none
      - COMAR_DB_PATH (sqlite)

    None => no persistence medium available.
    """
    backend = (settings.storage_backend or "sqlite").strip().lower()
    if backend == "none":
        return None
    if backend == "memory":
        return MemoryBackend()

    from src.db.session import engine, init_db

    if engine is None:
        logger.info("No SQLite path configured; running without persistent storage")
        return None
    init_db()
    return SqlKeyValueBackend()
