"""Compliance violations and their severity/status aggregates."""

from __future__ import annotations

from datetime import datetime
from typing import Iterable, Optional

from ...domain import ComplianceViolation, ViolationSeverity, ViolationStatus
from ...domain.enums import TERMINAL_VIOLATION_STATUSES
from ..rows import row_to_violation, violation_to_row
from ..schema import validate_violation
from ..timing import timed
from .base import BaseRepository, Where

# Mirrors ComplianceViolation.is_active for use in SQL.
_ACTIVE_CLAUSE = "status = ? OR (status = ? AND (suppressed_until IS NULL OR suppressed_until > ?))"

OUTSTANDING_STATUSES = tuple(s for s in ViolationStatus if s not in TERMINAL_VIOLATION_STATUSES)


class ViolationRepository(BaseRepository[ComplianceViolation]):
    table = "compliance_violations"
    entity_name = "ComplianceViolation"
    metric_name = "violation"
    sortable = frozenset(
        {"id", "created_at", "updated_at", "severity", "status", "rule_id", "file_path", "line_number", "resolved_at"}
    )

    def _to_row(self, entity: ComplianceViolation):
        return violation_to_row(entity)

    def _from_row(self, row) -> ComplianceViolation:
        return row_to_violation(row)

    def _validate(self, entity: ComplianceViolation) -> None:
        validate_violation(entity)

    def _filter(
        self,
        where: Where,
        project_id: Optional[int] = None,
        analysis_id: Optional[int] = None,
        severity: Optional[ViolationSeverity | Iterable[ViolationSeverity]] = None,
        status: Optional[ViolationStatus | Iterable[ViolationStatus]] = None,
        rule_id: Optional[str] = None,
        rule_category: Optional[str] = None,
        file_path: Optional[str] = None,
        file_path_contains: Optional[str] = None,
        message_contains: Optional[str] = None,
        rule_name_contains: Optional[str] = None,
        false_positive: Optional[bool] = None,
        resolved_by: Optional[str] = None,
        line_between: Optional[tuple[int, int]] = None,
        created_between: Optional[tuple[datetime, datetime]] = None,
        resolved_between: Optional[tuple[datetime, datetime]] = None,
    ) -> None:
        where.eq("project_id", project_id).eq("analysis_id", analysis_id)
        where.eq("severity", _many(severity)).eq("status", _many(status))
        where.eq("rule_id", rule_id).eq("rule_category", rule_category)
        where.eq("file_path", file_path).contains("file_path", file_path_contains)
        where.contains("message", message_contains).contains("rule_name", rule_name_contains)
        where.eq("false_positive", false_positive).eq("resolved_by", resolved_by)
        where.between("line_number", line_between)
        where.between("created_at", created_between)
        where.between("resolved_at", resolved_between)

    @staticmethod
    def _active(where: Where, now: Optional[datetime]) -> Where:
        return where.raw(
            _ACTIVE_CLAUSE,
            ViolationStatus.OPEN,
            ViolationStatus.SUPPRESSED,
            now or datetime.now(),
        )

    @timed("find_active")
    def find_active(
        self,
        project_id: Optional[int] = None,
        analysis_id: Optional[int] = None,
        now: Optional[datetime] = None,
        order_by: Optional[str] = None,
    ) -> list[ComplianceViolation]:
        """OPEN violations plus SUPPRESSED ones whose suppression has not lapsed."""
        where = self._active(Where().eq("project_id", project_id).eq("analysis_id", analysis_id), now)
        return self._select(where, order_by=order_by)

    def count_active(
        self,
        project_id: Optional[int] = None,
        analysis_id: Optional[int] = None,
        now: Optional[datetime] = None,
    ) -> int:
        where = self._active(Where().eq("project_id", project_id).eq("analysis_id", analysis_id), now)
        return self._count(where)

    def find_expired_suppressions(self, now: Optional[datetime] = None) -> list[ComplianceViolation]:
        """SUPPRESSED violations whose end date has passed."""
        where = Where().eq("status", ViolationStatus.SUPPRESSED)
        where.is_null("suppressed_until", False).raw("suppressed_until <= ?", now or datetime.now())
        return self._select(where, order_by="id")

    @timed("count_by_severity")
    def count_by_severity(
        self,
        project_id: Optional[int] = None,
        analysis_id: Optional[int] = None,
        statuses: Optional[Iterable[ViolationStatus]] = None,
    ) -> dict[ViolationSeverity, int]:
        """Row count per severity (zero where none), optionally limited to *statuses*."""
        where = Where().eq("project_id", project_id).eq("analysis_id", analysis_id)
        if statuses is not None:
            where.eq("status", list(statuses))
        counts = {severity: 0 for severity in ViolationSeverity}
        rows = self._execute(
            f"SELECT severity, COUNT(*) AS n FROM compliance_violations{where.sql()} GROUP BY severity",
            where.params,
        ).fetchall()
        for row in rows:
            counts[ViolationSeverity(row["severity"])] = int(row["n"])
        return counts

    def count_outstanding_by_severity(self, analysis_id: int) -> dict[ViolationSeverity, int]:
        """Per-severity counts of the analysis's violations not yet closed out."""
        return self.count_by_severity(analysis_id=analysis_id, statuses=OUTSTANDING_STATUSES)

    def count_by_status(self, project_id: Optional[int] = None) -> dict[ViolationStatus, int]:
        where = Where().eq("project_id", project_id)
        counts = {status: 0 for status in ViolationStatus}
        rows = self._execute(
            f"SELECT status, COUNT(*) AS n FROM compliance_violations{where.sql()} GROUP BY status",
            where.params,
        ).fetchall()
        for row in rows:
            counts[ViolationStatus(row["status"])] = int(row["n"])
        return counts

    def count_by_category(self, project_id: int, active_only: bool = True) -> dict[str, int]:
        """Violation count per rule category, largest first."""
        where = Where().eq("project_id", project_id)
        if active_only:
            self._active(where, None)
        rows = self._execute(
            f"SELECT rule_category, COUNT(*) AS n FROM compliance_violations{where.sql()} "
            "GROUP BY rule_category ORDER BY n DESC, rule_category",
            where.params,
        ).fetchall()
        return {row["rule_category"]: int(row["n"]) for row in rows}


def _many(value):
    """Pass single enums through; materialize other iterables for IN (...)."""
    if value is None or isinstance(value, (ViolationSeverity, ViolationStatus)):
        return value
    return list(value)
