"""Project aggregate root."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from .analysis import Analysis
from .enums import ProjectStatus
from .violation import ComplianceViolation


@dataclass
class Project:
    """A software project whose analysis runs and violations are tracked.

    ``analyses`` and ``violations`` hold whatever children have been loaded
    or attached in memory; the database is the source of truth for the full
    sets. Use ``add_analysis`` / ``add_violation`` so the child's
    ``project_id`` always points back here.
    """

    name: Optional[str] = None
    description: Optional[str] = None
    owner_id: Optional[int] = None
    status: Optional[ProjectStatus] = ProjectStatus.ACTIVE
    id: Optional[int] = None

    repository_url: Optional[str] = None
    project_path: Optional[str] = None
    technology_stack: Optional[str] = None
    files_count: Optional[int] = None
    directories_count: Optional[int] = None
    lines_of_code: Optional[int] = None
    last_analysis_date: Optional[datetime] = None

    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    version: Optional[int] = None

    analyses: list[Analysis] = field(default_factory=list, compare=False, repr=False)
    violations: list[ComplianceViolation] = field(default_factory=list, compare=False, repr=False)

    def add_analysis(self, analysis: Analysis) -> None:
        if not any(a is analysis for a in self.analyses):
            self.analyses.append(analysis)
        analysis.project_id = self.id

    def add_violation(self, violation: ComplianceViolation) -> None:
        if not any(v is violation for v in self.violations):
            self.violations.append(violation)
        violation.project_id = self.id

    def update_last_analysis_date(self, now: Optional[datetime] = None) -> None:
        self.last_analysis_date = now or datetime.now()
