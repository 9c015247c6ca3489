"""Error codes for structured logging and troubleshooting.

Error Code Convention:
    LD1xx - Schema constraint errors (raised at persistence time)
    LD2xx - Workflow errors (service layer)
    LD8xx - Configuration errors
    LD9xx - Storage errors
"""

from __future__ import annotations

from enum import Enum


class ErrorCode(Enum):
    """Structured error codes for observability and debugging."""

    # Constraint errors (LD1xx)
    LD100 = "LD100"  # Required field missing or blank
    LD101 = "LD101"  # Length limit exceeded
    LD102 = "LD102"  # Value out of range
    LD103 = "LD103"  # Unique constraint violated
    LD104 = "LD104"  # Referenced row missing

    # Workflow errors (LD2xx)
    LD200 = "LD200"  # Entity not found
    LD201 = "LD201"  # Duplicate natural key
    LD202 = "LD202"  # Operation not valid in current state

    # Configuration errors (LD8xx)
    LD800 = "LD800"  # Invalid configuration value
    LD801 = "LD801"  # Config file unreadable

    # Storage errors (LD9xx)
    LD900 = "LD900"  # SQLite write failed
    LD901 = "LD901"  # Schema migration failed
    LD902 = "LD902"  # Stale row version (concurrent update)


def describe(code: ErrorCode) -> str:
    """Short human description of *code*, for CLI output."""
    return _DESCRIPTIONS[code]


_DESCRIPTIONS = {
    ErrorCode.LD100: "required field missing",
    ErrorCode.LD101: "length limit exceeded",
    ErrorCode.LD102: "value out of range",
    ErrorCode.LD103: "unique constraint violated",
    ErrorCode.LD104: "referenced row missing",
    ErrorCode.LD200: "entity not found",
    ErrorCode.LD201: "duplicate natural key",
    ErrorCode.LD202: "invalid state for operation",
    ErrorCode.LD800: "invalid configuration",
    ErrorCode.LD801: "config file unreadable",
    ErrorCode.LD900: "storage write failed",
    ErrorCode.LD901: "schema migration failed",
    ErrorCode.LD902: "stale row version",
}
