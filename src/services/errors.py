from __future__ import annotations


class TrackerError(Exception):
    """Base error for finding/CAPA operations."""


class ValidationFailed(TrackerError, ValueError):
    """User input rejected before any write."""


class NotFound(TrackerError, LookupError):
    """Referenced finding or CAPA is not in the document."""


class ImportParseError(TrackerError):
    """Tabular import produced no usable rows."""
