from __future__ import annotations

import io
import logging
from typing import Dict, List

import pandas as pd

from src.services.errors import ImportParseError

logger = logging.getLogger(__name__)

# header names are case-sensitive; any other column is ignored
FINDING_CSV_COLUMNS = ["title", "comarRef", "severity", "notes", "pageRef", "category"]


def split_lines(text: str | None) -> List[str]:
    """Bulk paste: one finding per non-blank line, surrounding whitespace dropped."""
    return [line.strip() for line in str(text or "").split("\n") if line.strip()]


def read_findings_csv(data: bytes | str) -> tuple[List[Dict[str, str]], int]:
    """Parse a findings CSV (header row required).

    Returns (usable rows, dropped row count). A row is usable when its title is
    non-blank; other rows are dropped. Raises ImportParseError when the file
    cannot be read or no usable row remains.
    """
    raw = data.encode("utf-8") if isinstance(data, str) else bytes(data or b"")
    try:
        df = pd.read_csv(
            io.BytesIO(raw),
            dtype=str,
            keep_default_na=False,
            skip_blank_lines=True,
            on_bad_lines="skip",
            encoding="utf-8-sig",
        )
    except pd.errors.EmptyDataError as e:
        raise ImportParseError("CSV appears empty.") from e
    except (pd.errors.ParserError, UnicodeDecodeError, ValueError) as e:
        logger.info("CSV import rejected: %s", e)
        raise ImportParseError("Failed to parse CSV.") from e

    df.columns = [str(c).strip() for c in df.columns]
    if "title" not in df.columns:
        raise ImportParseError("CSV header must include a 'title' column.")

    df = df[[c for c in FINDING_CSV_COLUMNS if c in df.columns]].fillna("")

    rows: List[Dict[str, str]] = []
    dropped = 0
    for rec in df.to_dict(orient="records"):
        row = {k: str(v).strip() for k, v in rec.items()}
        if not row.get("title"):
            dropped += 1
            continue
        rows.append(row)

    if not rows:
        raise ImportParseError("CSV appears empty.")
    if dropped:
        logger.info("CSV import dropped %d row(s) without a title", dropped)
    return rows, dropped
