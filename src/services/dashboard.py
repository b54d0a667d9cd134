from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Dict, List

import pandas as pd

from src.config import settings
from src.schemas.state import AppState, CapaStatus, Category, FindingStatus, Severity, parse_iso

OPEN_CAPA_STATUSES = (CapaStatus.OPEN, CapaStatus.IN_PROGRESS)

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


@dataclass
class DashboardCounts:
    open_findings: int
    open_capas: int
    evidence: int


def dashboard_counts(doc: AppState) -> DashboardCounts:
    return DashboardCounts(
        open_findings=sum(1 for f in doc.findings if f.status == FindingStatus.OPEN),
        open_capas=sum(1 for c in doc.capas if c.status in OPEN_CAPA_STATUSES),
        evidence=len(doc.evidence),
    )


def review_summary(doc: AppState) -> Dict[str, object]:
    def _tally(values, members) -> Dict[str, int]:
        out = {m.value: 0 for m in members}
        for v in values:
            out[v.value] = out.get(v.value, 0) + 1
        return out

    return {
        "findings": len(doc.findings),
        "capas": len(doc.capas),
        "evidence": len(doc.evidence),
        "by_severity": _tally((f.severity for f in doc.findings), Severity),
        "by_category": _tally((f.category for f in doc.findings), Category),
        "by_status": _tally((f.status for f in doc.findings), FindingStatus),
    }


def _ts(value: str) -> datetime:
    try:
        dt = parse_iso(value)
    except (TypeError, ValueError):
        return _EPOCH
    return dt if dt.tzinfo else dt.replace(tzinfo=timezone.utc)


def recent_activity(doc: AppState, limit: int | None = None) -> List[Dict[str, str]]:
    """Findings and CAPAs merged, most recently updated first."""
    limit = settings.recent_limit if limit is None else limit
    items = [
        {"id": f"finding:{f.id}", "kind": "Finding", "title": f.title, "when": f.updated_at} for f in doc.findings
    ] + [
        {"id": f"capa:{c.id}", "kind": "CAPA", "title": c.deficiency_summary, "when": c.updated_at} for c in doc.capas
    ]
    items.sort(key=lambda r: _ts(r["when"]), reverse=True)
    return items[: max(0, int(limit))]


def findings_frame(doc: AppState) -> pd.DataFrame:
    rows = [
        {
            "title": f.title,
            "comarRef": f.comar_ref,
            "severity": f.severity.value,
            "category": f.category.value,
            "status": f.status.value,
            "pageRef": f.page_ref,
            "hasCapa": bool(f.linked_capa_id),
            "updatedAt": f.updated_at,
        }
        for f in doc.findings
    ]
    return pd.DataFrame(
        rows, columns=["title", "comarRef", "severity", "category", "status", "pageRef", "hasCapa", "updatedAt"]
    )
