from __future__ import annotations

import logging
from pathlib import Path

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker

from src.config import settings

logger = logging.getLogger(__name__)

DB_PATH = (settings.db_path or "").strip()


def make_engine(db_path: str) -> Engine:
    Path(db_path).parent.mkdir(parents=True, exist_ok=True)
    return create_engine(
        f"sqlite:///{db_path}",
        connect_args={"check_same_thread": False},
    )


# Empty DB_PATH => no persistence medium; the state store then serves an empty document.
engine: Engine | None = make_engine(DB_PATH) if DB_PATH else None

SessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False) if engine is not None else None


def db():
    if SessionLocal is None:
        raise RuntimeError("Persistent storage is disabled (COMAR_DB_PATH is empty).")
    return SessionLocal()


def init_db(bind: Engine | None = None) -> None:
    from src.db.models import Base

    target = bind if bind is not None else engine
    if target is None:
        logger.info("init_db skipped: no storage engine configured")
        return
    Base.metadata.create_all(bind=target)
