"""Workflow services over the repositories."""

from __future__ import annotations

from ..persistence import LatencyRecorder, LedgerDB, Repositories
from .analysis_service import AnalysisService
from .base import LedgerService
from .project_service import ProjectService
from .violation_service import Finding, ViolationService


class Ledger:
    """Repositories and services bound to one open database.

    Usage::

        with LedgerDB(config) as db:
            ledger = Ledger(db)
            project = ledger.projects.create(Project(name="api"))
    """

    def __init__(self, db: LedgerDB, recorder: LatencyRecorder | None = None) -> None:
        self.db = db
        self.repos = Repositories(db, recorder)
        self.projects = ProjectService(self.repos)
        self.analyses = AnalysisService(self.repos)
        self.violations = ViolationService(self.repos)


__all__ = [
    "Ledger",
    "LedgerService",
    "ProjectService",
    "AnalysisService",
    "ViolationService",
    "Finding",
]
