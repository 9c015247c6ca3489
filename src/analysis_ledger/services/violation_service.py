"""Violation intake and the resolution workflow.

Every transition saves the violation and recounts the tallies of the
analysis that found it in the same unit of work, so a failure in either
step leaves both untouched.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Iterable, Optional, Union

from ..domain import ComplianceViolation, ViolationSeverity
from ..exceptions import InvalidStateError, WorkflowError
from ..logging_config import get_logger
from .base import LedgerService

logger = get_logger(__name__)


@dataclass
class Finding:
    """One record reported by the scanning collaborator."""

    rule_id: str
    rule_name: str
    rule_category: str
    severity: Union[ViolationSeverity, str]
    message: str
    file_path: Optional[str] = None
    line_number: Optional[int] = None
    column_number: Optional[int] = None
    code_snippet: Optional[str] = None
    suggestion: Optional[str] = None

    def to_violation(self) -> ComplianceViolation:
        severity = self.severity
        if isinstance(severity, str):
            severity = ViolationSeverity(severity.upper())
        return ComplianceViolation(
            rule_id=self.rule_id,
            rule_name=self.rule_name,
            rule_category=self.rule_category,
            severity=severity,
            message=self.message,
            file_path=self.file_path,
            line_number=self.line_number,
            column_number=self.column_number,
            code_snippet=self.code_snippet,
            suggestion=self.suggestion,
        )


class ViolationService(LedgerService):
    def ingest(
        self,
        project_id: int,
        findings: Iterable[Finding],
        analysis_id: Optional[int] = None,
    ) -> list[ComplianceViolation]:
        """Store scanner findings as OPEN violations and recount the analysis."""
        with self.db.transaction():
            project = self._require(self.repos.projects, project_id)
            analysis = None
            if analysis_id is not None:
                analysis = self._require(self.repos.analyses, analysis_id)
                if analysis.project_id != project_id:
                    raise WorkflowError(
                        f"Analysis {analysis_id} belongs to project {analysis.project_id}, not {project_id}",
                        details={"analysis_id": str(analysis_id), "project_id": str(project_id)},
                    )
            violations = []
            for finding in findings:
                violation = finding.to_violation()
                violation.analysis_id = analysis_id
                project.add_violation(violation)
                violations.append(violation)
            self.repos.violations.save_all(violations)
            if analysis is not None:
                self._refresh_tallies(analysis)
        logger.info("Ingested %d violations for project %d", len(violations), project_id)
        return violations

    def get(self, violation_id: int) -> Optional[ComplianceViolation]:
        return self.repos.violations.get(violation_id)

    def _transition(
        self,
        violation_id: int,
        apply: Callable[[ComplianceViolation], None],
        label: str,
    ) -> ComplianceViolation:
        with self.db.transaction():
            violation = self._require(self.repos.violations, violation_id)
            if violation.status.is_terminal:
                logger.warning("Violation %d is %s; refusing %s", violation_id, violation.status.name, label)
                raise InvalidStateError("ComplianceViolation", violation_id, violation.status.name, "a non-terminal status")
            apply(violation)
            self.repos.violations.save(violation)
            if violation.analysis_id is not None:
                analysis = self._require(self.repos.analyses, violation.analysis_id)
                self._refresh_tallies(analysis)
        logger.info("Violation %d %s", violation_id, label)
        return violation

    def resolve(
        self, violation_id: int, resolved_by: str, notes: Optional[str] = None, now: Optional[datetime] = None
    ) -> ComplianceViolation:
        return self._transition(violation_id, lambda v: v.resolve(resolved_by, notes, now), "resolved")

    def mark_false_positive(
        self, violation_id: int, reason: Optional[str] = None, now: Optional[datetime] = None
    ) -> ComplianceViolation:
        return self._transition(
            violation_id, lambda v: v.mark_as_false_positive(reason, now), "marked false positive"
        )

    def suppress(
        self, violation_id: int, until: Optional[datetime], reason: Optional[str] = None
    ) -> ComplianceViolation:
        return self._transition(violation_id, lambda v: v.suppress(until, reason), "suppressed")

    def mark_in_progress(self, violation_id: int) -> ComplianceViolation:
        return self._transition(violation_id, lambda v: v.mark_in_progress(), "in progress")

    def mark_wont_fix(
        self, violation_id: int, resolved_by: str, notes: Optional[str] = None, now: Optional[datetime] = None
    ) -> ComplianceViolation:
        return self._transition(violation_id, lambda v: v.mark_wont_fix(resolved_by, notes, now), "won't fix")

    def active_for_project(self, project_id: int, now: Optional[datetime] = None) -> list[ComplianceViolation]:
        """Active violations, most severe first."""
        active = self.repos.violations.find_active(project_id=project_id, now=now)
        return sorted(active, key=lambda v: (v.severity.priority, v.id))
