"""ComplianceViolation aggregate and its resolution workflow."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from .enums import ViolationSeverity, ViolationStatus

UNKNOWN_LOCATION = "Unknown location"


@dataclass
class ComplianceViolation:
    """A single rule infraction reported by a scanner.

    ``project_id`` is required at persistence time; ``analysis_id`` is set
    when the violation was found by a specific run.
    """

    project_id: Optional[int] = None
    rule_id: Optional[str] = None
    rule_name: Optional[str] = None
    rule_category: Optional[str] = None
    severity: Optional[ViolationSeverity] = None
    message: Optional[str] = None
    analysis_id: Optional[int] = None
    id: Optional[int] = None

    # ── Location ──────────────────────────────────────────────────
    file_path: Optional[str] = None
    line_number: Optional[int] = None
    column_number: Optional[int] = None

    code_snippet: Optional[str] = None
    suggestion: Optional[str] = None

    # ── Workflow ──────────────────────────────────────────────────
    status: Optional[ViolationStatus] = ViolationStatus.OPEN
    resolved_by: Optional[str] = None
    resolved_at: Optional[datetime] = None
    resolution_notes: Optional[str] = None
    false_positive: bool = False
    suppressed_until: Optional[datetime] = None
    suppression_reason: Optional[str] = None

    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    version: Optional[int] = None

    # ── transitions ───────────────────────────────────────────────

    def resolve(self, resolved_by: str, notes: Optional[str] = None, now: Optional[datetime] = None) -> None:
        self.status = ViolationStatus.RESOLVED
        self.resolved_by = resolved_by
        self.resolved_at = now or datetime.now()
        self.resolution_notes = notes

    def mark_as_false_positive(self, reason: Optional[str] = None, now: Optional[datetime] = None) -> None:
        self.false_positive = True
        self.status = ViolationStatus.FALSE_POSITIVE
        self.resolution_notes = reason
        self.resolved_at = now or datetime.now()

    def suppress(self, until: Optional[datetime], reason: Optional[str] = None) -> None:
        """Suppress until *until*; ``None`` means indefinitely."""
        self.status = ViolationStatus.SUPPRESSED
        self.suppressed_until = until
        self.suppression_reason = reason

    def mark_in_progress(self) -> None:
        self.status = ViolationStatus.IN_PROGRESS

    def mark_wont_fix(self, resolved_by: str, notes: Optional[str] = None, now: Optional[datetime] = None) -> None:
        self.status = ViolationStatus.WONT_FIX
        self.resolved_by = resolved_by
        self.resolved_at = now or datetime.now()
        self.resolution_notes = notes

    # ── derived ───────────────────────────────────────────────────

    def is_active(self, now: Optional[datetime] = None) -> bool:
        """OPEN, or SUPPRESSED with no end or an end still in the future."""
        if self.status is ViolationStatus.OPEN:
            return True
        if self.status is ViolationStatus.SUPPRESSED:
            if self.suppressed_until is None:
                return True
            return (now or datetime.now()) < self.suppressed_until
        return False

    @property
    def location(self) -> str:
        """``file[:line[:column]]``; the column is shown only with a line."""
        if self.file_path is None:
            return UNKNOWN_LOCATION
        if self.line_number is None:
            return self.file_path
        if self.column_number is None:
            return f"{self.file_path}:{self.line_number}"
        return f"{self.file_path}:{self.line_number}:{self.column_number}"

    @property
    def priority(self) -> Optional[int]:
        return self.severity.priority if self.severity else None

    def __repr__(self) -> str:
        severity = self.severity.name if self.severity else None
        status = self.status.name if self.status else None
        return (
            f"ComplianceViolation(id={self.id}, rule_id={self.rule_id!r}, severity={severity}, "
            f"status={status}, location={self.location!r})"
        )
