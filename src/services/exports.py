from __future__ import annotations

from typing import List

import pandas as pd

from src.schemas.state import AppState
from src.services.ingestion import FINDING_CSV_COLUMNS

FINDINGS_EXPORT_COLUMNS: List[str] = FINDING_CSV_COLUMNS + ["status", "linkedCapaId", "createdAt", "updatedAt", "id"]

CAPAS_EXPORT_COLUMNS: List[str] = [
    "id",
    "findingId",
    "findingTitle",
    "deficiencySummary",
    "rootCause",
    "correctiveAction",
    "responsiblePerson",
    "dueDate",
    "status",
    "verificationNotes",
    "createdAt",
    "updatedAt",
]


def document_json(doc: AppState) -> bytes:
    """Full document, same shape as the stored value."""
    return doc.model_dump_json(by_alias=True, exclude_none=True, indent=2).encode("utf-8")


def findings_csv(doc: AppState) -> bytes:
    """Import header columns first, so the file can be imported again."""
    rows = []
    for f in doc.findings:
        d = f.model_dump(by_alias=True, mode="json")
        rows.append({c: d.get(c) or "" for c in FINDINGS_EXPORT_COLUMNS})
    return pd.DataFrame(rows, columns=FINDINGS_EXPORT_COLUMNS).to_csv(index=False).encode("utf-8")


def capas_csv(doc: AppState) -> bytes:
    titles = {f.id: f.title for f in doc.findings}
    rows = []
    for c in doc.capas:
        d = c.model_dump(by_alias=True, mode="json")
        d["findingTitle"] = titles.get(c.finding_id, "")
        rows.append({k: d.get(k) or "" for k in CAPAS_EXPORT_COLUMNS})
    return pd.DataFrame(rows, columns=CAPAS_EXPORT_COLUMNS).to_csv(index=False).encode("utf-8")
