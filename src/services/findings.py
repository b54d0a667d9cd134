"""Finding mutations. One function per user action, one document write each.

Pattern: validate input, compute `now`, build new values, hand a pure
transformer to `StateStore.update_document`.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterable, List, Optional

from pydantic import ValidationError

from src.schemas.state import (
    AppState,
    Category,
    Finding,
    FindingStatus,
    Severity,
    coerce_category,
    coerce_severity,
    new_id,
    utcnow_iso,
)
from src.services.errors import NotFound, ValidationFailed
from src.services.ingestion import read_findings_csv, split_lines
from src.services.state_store import StateStore, get_store

logger = logging.getLogger(__name__)

EDITABLE_FINDING_FIELDS = {"title", "comar_ref", "severity", "notes", "page_ref", "status", "category"}


@dataclass
class ImportResult:
    document: AppState
    created: List[Finding]
    skipped: int = 0

    @property
    def count(self) -> int:
        return len(self.created)


def new_finding(
    title: str,
    *,
    comar_ref: str = "",
    severity: Any = Severity.MINOR,
    category: Any = Category.OTHER,
    notes: str = "",
    page_ref: str = "",
    now: Optional[str] = None,
) -> Finding:
    """New Open finding with no CAPA link."""
    now = now or utcnow_iso()
    return Finding(
        id=new_id(),
        title=str(title or "").strip(),
        comar_ref=str(comar_ref or "").strip(),
        severity=coerce_severity(severity),
        notes=str(notes or "").strip(),
        page_ref=str(page_ref or "").strip(),
        status=FindingStatus.OPEN,
        category=coerce_category(category),
        linked_capa_id=None,
        created_at=now,
        updated_at=now,
    )


def finding_from_row(row: Dict[str, str], now: Optional[str] = None) -> Finding:
    return new_finding(
        row.get("title", ""),
        comar_ref=row.get("comarRef", ""),
        severity=row.get("severity", ""),
        category=row.get("category", ""),
        notes=row.get("notes", ""),
        page_ref=row.get("pageRef", ""),
        now=now,
    )


def _replace_finding(doc: AppState, finding_id: str, fn: Callable[[Finding], Finding]) -> AppState:
    if doc.get_finding(finding_id) is None:
        raise NotFound(f"Finding {finding_id} not found.")
    return doc.model_copy(update={"findings": [fn(f) if f.id == finding_id else f for f in doc.findings]})


def add_findings(findings: Iterable[Finding], store: StateStore | None = None) -> AppState:
    findings = list(findings)
    if not findings:
        raise ValidationFailed("No findings to add.")
    if any(not f.title.strip() for f in findings):
        raise ValidationFailed("Title is required.")

    store = store or get_store()
    doc = store.update_document(lambda s: s.model_copy(update={"findings": [*s.findings, *findings]}))
    logger.info("Added %d finding(s)", len(findings))
    return doc


def add_finding(
    title: str,
    *,
    comar_ref: str = "",
    severity: Any = Severity.MINOR,
    category: Any = Category.OTHER,
    notes: str = "",
    page_ref: str = "",
    store: StateStore | None = None,
) -> AppState:
    """Quick add. Blank title => ValidationFailed, document untouched."""
    if not str(title or "").strip():
        raise ValidationFailed("Title is required.")
    f = new_finding(title, comar_ref=comar_ref, severity=severity, category=category, notes=notes, page_ref=page_ref)
    return add_findings([f], store=store)


def edit_finding(finding_id: str, store: StateStore | None = None, **changes: Any) -> AppState:
    """Replace editable fields in place; `id` and `createdAt` are kept, `updatedAt` refreshed."""
    unknown = set(changes) - EDITABLE_FINDING_FIELDS
    if unknown:
        raise ValidationFailed(f"Finding field(s) not editable: {', '.join(sorted(unknown))}")
    if "title" in changes:
        changes["title"] = str(changes["title"] or "").strip()
        if not changes["title"]:
            raise ValidationFailed("Title is required.")
    for field, enum_cls in (("severity", Severity), ("category", Category)):
        if field in changes and str(getattr(changes[field], "value", changes[field])) not in {m.value for m in enum_cls}:
            raise ValidationFailed(f"Invalid {field}: {changes[field]!r}")

    now = utcnow_iso()

    def _apply(f: Finding) -> Finding:
        try:
            return Finding.model_validate({**f.model_dump(), **changes, "updated_at": now})
        except ValidationError as e:
            raise ValidationFailed(f"Invalid finding value: {e.errors()[0].get('msg', '')}") from e

    store = store or get_store()
    return store.update_document(lambda s: _replace_finding(s, finding_id, _apply))


def toggle_finding_status(finding_id: str, store: StateStore | None = None) -> AppState:
    now = utcnow_iso()

    def _flip(f: Finding) -> Finding:
        nxt = FindingStatus.RESOLVED if f.status == FindingStatus.OPEN else FindingStatus.OPEN
        return f.model_copy(update={"status": nxt, "updated_at": now})

    store = store or get_store()
    return store.update_document(lambda s: _replace_finding(s, finding_id, _flip))


def delete_finding(finding_id: str, store: StateStore | None = None) -> AppState:
    """Remove the finding. A linked CAPA stays in the document with a dangling findingId."""

    def _mutate(s: AppState) -> AppState:
        if s.get_finding(finding_id) is None:
            raise NotFound(f"Finding {finding_id} not found.")
        return s.model_copy(update={"findings": [f for f in s.findings if f.id != finding_id]})

    store = store or get_store()
    doc = store.update_document(_mutate)
    logger.info("Deleted finding %s", finding_id)
    return doc


def import_text_lines(
    text: str,
    severity: Any = Severity.MINOR,
    category: Any = Category.OTHER,
    store: StateStore | None = None,
) -> ImportResult:
    lines = split_lines(text)
    if not lines:
        raise ValidationFailed("Paste one finding per line.")
    now = utcnow_iso()
    created = [new_finding(line, severity=severity, category=category, now=now) for line in lines]
    return ImportResult(document=add_findings(created, store=store), created=created)


def import_csv(data: bytes | str, store: StateStore | None = None) -> ImportResult:
    """All rows are parsed first, then written in a single update."""
    rows, dropped = read_findings_csv(data)
    now = utcnow_iso()
    created = [finding_from_row(r, now=now) for r in rows]
    return ImportResult(document=add_findings(created, store=store), created=created, skipped=dropped)
