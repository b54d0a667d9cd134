"""CAPA mutations.

A CAPA is created only against a finding that has no CAPA yet. The finding's
`linkedCapaId` and the CAPA's `findingId` are kept in step here; the store
does no cross-entity validation.
"""

from __future__ import annotations

import logging
from datetime import date, datetime, timezone
from typing import Any, List, Optional

from pydantic import ValidationError

from src.schemas.state import AppState, Capa, CapaStatus, Finding, new_id, parse_iso, to_iso, utcnow_iso
from src.services.errors import NotFound, ValidationFailed
from src.services.state_store import StateStore, get_store

logger = logging.getLogger(__name__)

EDITABLE_CAPA_FIELDS = {
    "deficiency_summary",
    "root_cause",
    "corrective_action",
    "responsible_person",
    "due_date",
    "status",
    "verification_notes",
    "evidence_doc_ids",
}
LOCKED_CAPA_FIELDS = {"id", "finding_id", "created_at", "updated_at"}
REQUIRED_CAPA_FIELDS = {"deficiency_summary": "Deficiency summary", "corrective_action": "Corrective action"}


def due_date_iso(value: Any) -> Optional[str]:
    """Date input => full timestamp at midnight UTC. Empty => None."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return to_iso(value)
    if isinstance(value, date):
        return to_iso(datetime(value.year, value.month, value.day, tzinfo=timezone.utc))

    s = str(value).strip()
    if not s:
        return None
    try:
        if len(s) == 10:
            d = date.fromisoformat(s)
            return to_iso(datetime(d.year, d.month, d.day, tzinfo=timezone.utc))
        return to_iso(parse_iso(s))
    except ValueError as e:
        raise ValidationFailed(f"Due date must be YYYY-MM-DD (got {s!r}).") from e


def available_findings(doc: AppState) -> List[Finding]:
    """Findings that can still get a CAPA (one CAPA per finding)."""
    return [f for f in doc.findings if not f.linked_capa_id]


def finding_title_for(doc: AppState, capa: Capa) -> Optional[str]:
    f = doc.get_finding(capa.finding_id)
    return f.title if f else None


def create_capa(
    finding_id: str,
    deficiency_summary: str,
    corrective_action: str,
    *,
    root_cause: str = "",
    responsible_person: str = "",
    due_date: Any = None,
    store: StateStore | None = None,
) -> AppState:
    if not finding_id:
        raise ValidationFailed("Select a finding to link.")
    if not str(deficiency_summary or "").strip():
        raise ValidationFailed("Deficiency summary is required.")
    if not str(corrective_action or "").strip():
        raise ValidationFailed("Corrective action is required.")

    now = utcnow_iso()
    capa = Capa(
        id=new_id(),
        finding_id=finding_id,
        deficiency_summary=str(deficiency_summary).strip(),
        root_cause=str(root_cause or "").strip(),
        corrective_action=str(corrective_action).strip(),
        responsible_person=str(responsible_person or "").strip() or None,
        due_date=due_date_iso(due_date),
        status=CapaStatus.OPEN,
        verification_notes="",
        evidence_doc_ids=[],
        created_at=now,
        updated_at=now,
    )

    def _mutate(s: AppState) -> AppState:
        target = s.get_finding(finding_id)
        if target is None:
            raise NotFound(f"Finding {finding_id} not found.")
        if target.linked_capa_id:
            raise ValidationFailed("This finding already has a CAPA.")
        findings = [
            f.model_copy(update={"linked_capa_id": capa.id, "updated_at": now}) if f.id == finding_id else f
            for f in s.findings
        ]
        return s.model_copy(update={"findings": findings, "capas": [*s.capas, capa]})

    store = store or get_store()
    doc = store.update_document(_mutate)
    logger.info("Created CAPA %s for finding %s", capa.id, finding_id)
    return doc


def edit_capa(capa_id: str, store: StateStore | None = None, **changes: Any) -> AppState:
    """Replace editable fields in place, `updatedAt` refreshed. `findingId` never changes."""
    locked = set(changes) & LOCKED_CAPA_FIELDS
    if locked:
        raise ValidationFailed(f"CAPA field(s) cannot be changed: {', '.join(sorted(locked))}")
    unknown = set(changes) - EDITABLE_CAPA_FIELDS
    if unknown:
        raise ValidationFailed(f"CAPA field(s) not editable: {', '.join(sorted(unknown))}")
    for field, label in REQUIRED_CAPA_FIELDS.items():
        if field in changes and not str(changes[field] or "").strip():
            raise ValidationFailed(f"{label} is required.")
    if "due_date" in changes:
        changes["due_date"] = due_date_iso(changes["due_date"])

    now = utcnow_iso()

    def _mutate(s: AppState) -> AppState:
        if s.get_capa(capa_id) is None:
            raise NotFound(f"CAPA {capa_id} not found.")
        capas = []
        for c in s.capas:
            if c.id == capa_id:
                try:
                    c = Capa.model_validate({**c.model_dump(), **changes, "updated_at": now})
                except ValidationError as e:
                    raise ValidationFailed(f"Invalid CAPA value: {e.errors()[0].get('msg', '')}") from e
            capas.append(c)
        return s.model_copy(update={"capas": capas})

    store = store or get_store()
    return store.update_document(_mutate)


def delete_capa(capa_id: str, store: StateStore | None = None) -> AppState:
    """Remove the CAPA and clear `linkedCapaId` on any finding pointing at it."""

    def _mutate(s: AppState) -> AppState:
        if s.get_capa(capa_id) is None:
            raise NotFound(f"CAPA {capa_id} not found.")
        findings = [
            f.model_copy(update={"linked_capa_id": None}) if f.linked_capa_id == capa_id else f for f in s.findings
        ]
        capas = [c for c in s.capas if c.id != capa_id]
        return s.model_copy(update={"findings": findings, "capas": capas})

    store = store or get_store()
    doc = store.update_document(_mutate)
    logger.info("Deleted CAPA %s", capa_id)
    return doc
