from __future__ import annotations

import uuid
from datetime import datetime, timezone
from enum import Enum
from typing import Any, List, Optional, Type, TypeVar

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


def to_iso(dt: datetime) -> str:
    """UTC ISO-8601 with milliseconds and `Z`: `2025-01-31T09:15:00.000Z`."""
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def parse_iso(value: str) -> datetime:
    return datetime.fromisoformat(str(value).replace("Z", "+00:00"))


def utcnow_iso() -> str:
    return to_iso(datetime.now(timezone.utc))


def new_id() -> str:
    return str(uuid.uuid4())


class Severity(str, Enum):
    CRITICAL = "Critical"
    MAJOR = "Major"
    MINOR = "Minor"


class Category(str, Enum):
    PERSONNEL = "Personnel"
    MEDICATION = "Medication"
    SAFETY = "Safety"
    OTHER = "Other"


class FindingStatus(str, Enum):
    OPEN = "Open"
    RESOLVED = "Resolved"


class CapaStatus(str, Enum):
    OPEN = "Open"
    IN_PROGRESS = "In Progress"
    DONE = "Done"


E = TypeVar("E", bound=Enum)


def _coerce(enum_cls: Type[E], value: Any, default: E) -> E:
    if isinstance(value, enum_cls):
        return value
    s = str(value or "").strip().lower()
    if not s:
        return default
    for member in enum_cls:
        if str(member.value).lower() == s:
            return member
    return default


def coerce_severity(value: Any, default: Severity = Severity.MINOR) -> Severity:
    """Unknown severity => default (never fails an import or a load)."""
    return _coerce(Severity, value, default)


def coerce_category(value: Any, default: Category = Category.OTHER) -> Category:
    return _coerce(Category, value, default)


class _DocModel(BaseModel):
    # Wire format is camelCase (comarRef, linkedCapaId, ...); Python code uses snake_case.
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)


class Finding(_DocModel):
    id: str
    title: str
    comar_ref: str = ""
    severity: Severity = Severity.MINOR
    notes: str = ""
    page_ref: str = ""
    status: FindingStatus = FindingStatus.OPEN
    category: Category = Category.OTHER
    linked_capa_id: Optional[str] = None
    created_at: str
    updated_at: str

    @field_validator("severity", mode="before")
    @classmethod
    def _severity(cls, v: Any) -> Severity:
        return coerce_severity(v)

    @field_validator("category", mode="before")
    @classmethod
    def _category(cls, v: Any) -> Category:
        return coerce_category(v)


class Capa(_DocModel):
    id: str
    finding_id: str
    deficiency_summary: str
    root_cause: str = ""
    corrective_action: str
    responsible_person: Optional[str] = None
    due_date: Optional[str] = None
    status: CapaStatus = CapaStatus.OPEN
    verification_notes: str = ""
    evidence_doc_ids: List[str] = Field(default_factory=list)
    created_at: str
    updated_at: str


class EvidenceDoc(_DocModel):
    """Metadata only; file bytes live in an external blob store keyed by `file_key`."""

    id: str
    file_key: str
    file_name: str
    mime: str = "application/octet-stream"
    size: int = 0
    linked_finding_id: Optional[str] = None
    linked_capa_id: Optional[str] = None
    uploaded_at: str


class AppState(_DocModel):
    """Root document. Every read loads all of it; every write replaces all of it."""

    findings: List[Finding]
    capas: List[Capa]
    evidence: List[EvidenceDoc]
    last_saved: str = Field(default_factory=utcnow_iso)

    @classmethod
    def empty(cls, now: str | None = None) -> "AppState":
        return cls(findings=[], capas=[], evidence=[], last_saved=now or utcnow_iso())

    def get_finding(self, finding_id: str) -> Optional[Finding]:
        return next((f for f in self.findings if f.id == finding_id), None)

    def get_capa(self, capa_id: str) -> Optional[Capa]:
        return next((c for c in self.capas if c.id == capa_id), None)

    def to_json(self) -> str:
        return self.model_dump_json(by_alias=True, exclude_none=True)
