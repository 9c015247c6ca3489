"""Analysis aggregate: one scan run against a Project.

The in-memory record is deliberately permissive: missing references,
negative counts and out-of-range scores are accepted here and rejected by
the persistence layer at save time. Transitions never refuse to run;
callers (the service layer) are responsible for invoking them in order.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Optional

from .enums import AnalysisStatus, AnalysisType
from .scoring import overall_score, penalty_score


@dataclass
class Analysis:
    """A single analysis run and its per-dimension scores."""

    project_id: Optional[int] = None
    user_id: Optional[int] = None
    type: AnalysisType = AnalysisType.FULL
    status: AnalysisStatus = AnalysisStatus.PENDING
    id: Optional[int] = None

    # ── Timing ────────────────────────────────────────────────────
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None
    duration_seconds: Optional[int] = None

    # ── Size ──────────────────────────────────────────────────────
    lines_analyzed: Optional[int] = None
    files_analyzed: Optional[int] = None

    # ── Dimension scores (0-100) ──────────────────────────────────
    compliance_score: Optional[float] = None
    quality_score: Optional[float] = None
    security_score: Optional[float] = None
    performance_score: Optional[float] = None

    # ── Violation tallies ─────────────────────────────────────────
    total_violations: Optional[int] = None
    critical_violations: Optional[int] = None
    warning_violations: Optional[int] = None
    info_violations: Optional[int] = None

    summary: Optional[str] = None
    metrics: dict[str, str] = field(default_factory=dict)
    errors: list[str] = field(default_factory=list)

    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    version: Optional[int] = None

    # ── lifecycle ─────────────────────────────────────────────────

    def start_analysis(self, now: Optional[datetime] = None) -> None:
        """Move to IN_PROGRESS. Keeps an existing start time."""
        self.status = AnalysisStatus.IN_PROGRESS
        if self.start_time is None:
            self.start_time = now or datetime.now()

    def complete_analysis(self, now: Optional[datetime] = None) -> None:
        self.status = AnalysisStatus.COMPLETED
        self._finish(now)

    def fail_analysis(self, message: str, now: Optional[datetime] = None) -> None:
        self.status = AnalysisStatus.FAILED
        self._finish(now)
        self.errors.append(message)

    def cancel_analysis(self, now: Optional[datetime] = None) -> None:
        """Caller-driven cancellation; valid from any state."""
        self.status = AnalysisStatus.CANCELLED
        self._finish(now)

    def _finish(self, now: Optional[datetime]) -> None:
        self.end_time = now or datetime.now()
        if self.start_time is not None:
            self.duration_seconds = int((self.end_time - self.start_time).total_seconds())

    # ── metrics and errors ────────────────────────────────────────

    def add_metric(self, key: str, value: Any) -> None:
        self.metrics[key] = value if isinstance(value, str) else str(value)

    def add_error(self, message: str) -> None:
        self.errors.append(message)

    def set_error_message(self, message: str) -> None:
        """Replace the whole error list with *message*."""
        self.errors = [message]

    # ── scoring ───────────────────────────────────────────────────

    def set_security_violations(self, count: int) -> None:
        self.security_score = penalty_score(count)

    def set_performance_issues(self, count: int) -> None:
        self.performance_score = penalty_score(count)

    def set_compliance_violations(self, count: int) -> None:
        self.compliance_score = penalty_score(count)

    @property
    def overall_score(self) -> Optional[float]:
        """Mean of compliance, quality, security and performance scores."""
        return overall_score(
            [self.compliance_score, self.quality_score, self.security_score, self.performance_score]
        )

    def set_tallies(self, critical: int, warning: int, info: int) -> None:
        self.critical_violations = critical
        self.warning_violations = warning
        self.info_violations = info
        self.total_violations = critical + warning + info

    def __repr__(self) -> str:
        return (
            f"Analysis(id={self.id}, project_id={self.project_id}, status={self.status.name}, "
            f"type={self.type.name}, compliance_score={self.compliance_score})"
        )
