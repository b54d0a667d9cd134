"""Canonical application document (findings, CAPAs, evidence).

The store is the only component that touches the storage backend. Every read
loads the whole document and every write replaces the whole document.

Concurrency: single user, no locking. Two tabs writing at the same time =>
the last save wins and the other tab's changes are lost.
"""

from __future__ import annotations

import json
import logging
from typing import Callable, Optional

from pydantic import ValidationError

from src.config import settings
from src.schemas.state import AppState, utcnow_iso
from src.services.storage_backend import StorageBackend, get_storage_backend

logger = logging.getLogger(__name__)

REQUIRED_KEYS = ("findings", "capas", "evidence")

Mutator = Callable[[AppState], AppState]


class StateStore:
    def __init__(
        self,
        backend: Optional[StorageBackend],
        key: str = settings.storage_key,
        clock: Callable[[], str] = utcnow_iso,
    ):
        self.backend = backend
        self.key = key
        self.clock = clock

    def _empty(self) -> AppState:
        return AppState.empty(self.clock())

    def load_document(self) -> AppState:
        """Return the persisted document, or a fresh empty one.

        Missing, unparseable, partial or schema-invalid payloads are discarded
        wholesale (no partial recovery) and never raised to the caller.
        """
        if self.backend is None:
            return self._empty()

        raw = self.backend.get_text(self.key)
        if not raw:
            return self._empty()

        try:
            parsed = json.loads(raw)
        except (ValueError, RecursionError):
            logger.warning("Stored document %r is not valid JSON; starting empty", self.key)
            return self._empty()

        if not isinstance(parsed, dict) or any(parsed.get(k) is None for k in REQUIRED_KEYS):
            logger.warning("Stored document %r lacks findings/capas/evidence; starting empty", self.key)
            return self._empty()

        try:
            return AppState.model_validate(parsed)
        except ValidationError as e:
            logger.warning("Stored document %r failed validation (%d errors); starting empty", self.key, e.error_count())
            return self._empty()

    def save_document(self, doc: AppState) -> AppState:
        """Persist `doc` with a refreshed `lastSaved`. Returns the stored value."""
        stamped = doc.model_copy(update={"last_saved": self.clock()})
        if self.backend is None:
            return stamped
        self.backend.put_text(self.key, stamped.to_json())
        logger.debug(
            "Saved %r: %d findings, %d capas, %d evidence",
            self.key,
            len(stamped.findings),
            len(stamped.capas),
            len(stamped.evidence),
        )
        return stamped

    def update_document(self, mutate: Mutator) -> AppState:
        """Load, apply `mutate`, persist, return the persisted value.

        `mutate` must return a new document and keep the finding/CAPA links
        consistent itself. If it raises, nothing is written.
        """
        current = self.load_document()
        candidate = mutate(current)
        return self.save_document(candidate)


_default_store: Optional[StateStore] = None


def get_store() -> StateStore:
    global _default_store
    if _default_store is None:
        _default_store = StateStore(get_storage_backend())
    return _default_store


def load_document() -> AppState:
    return get_store().load_document()


def save_document(doc: AppState) -> AppState:
    return get_store().save_document(doc)


def update_document(mutate: Mutator) -> AppState:
    return get_store().update_document(mutate)
