"""SQLite persistence: database lifecycle, repositories and latency timing."""

from __future__ import annotations

from .database import LedgerDB
from .repositories import (
    AnalysisRepository,
    Page,
    ProjectRepository,
    UserRepository,
    ViolationRepository,
)
from .timing import LatencyRecorder, LatencySummary, p95_ms


class Repositories:
    """The four repositories bound to one database and one recorder."""

    def __init__(self, db: LedgerDB, recorder: LatencyRecorder | None = None) -> None:
        self.db = db
        self.recorder = recorder
        self.users = UserRepository(db, recorder)
        self.projects = ProjectRepository(db, recorder)
        self.analyses = AnalysisRepository(db, recorder)
        self.violations = ViolationRepository(db, recorder)


__all__ = [
    "LedgerDB",
    "Repositories",
    "UserRepository",
    "ProjectRepository",
    "AnalysisRepository",
    "ViolationRepository",
    "Page",
    "LatencyRecorder",
    "LatencySummary",
    "p95_ms",
]
