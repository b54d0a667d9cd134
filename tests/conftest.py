import os

# Set before importing src.*: settings are read at import time.
os.environ.setdefault("COMAR_STORAGE_BACKEND", "memory")
os.environ.setdefault("COMAR_DB_PATH", "")

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from src.db.session import init_db
from src.services.state_store import StateStore
from src.services.storage_backend import MemoryBackend, SqlKeyValueBackend

FIXED_NOW = "2025-03-01T12:00:00.000Z"


@pytest.fixture
def fixed_now():
    return FIXED_NOW


@pytest.fixture
def backend():
    return MemoryBackend()


@pytest.fixture
def store(backend):
    return StateStore(backend, key="test-state")


@pytest.fixture
def fixed_store(backend):
    return StateStore(backend, key="test-state", clock=lambda: FIXED_NOW)


@pytest.fixture
def sqlite_session_factory(tmp_path):
    engine = create_engine(f"sqlite:///{tmp_path / 'comar_test.db'}")
    init_db(bind=engine)
    yield sessionmaker(bind=engine, autoflush=False, autocommit=False)
    engine.dispose()


@pytest.fixture
def sqlite_backend(sqlite_session_factory):
    return SqlKeyValueBackend(session_factory=sqlite_session_factory)
