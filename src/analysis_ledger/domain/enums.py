"""Closed status/severity taxonomies shared by the ledger aggregates.

Each enum's value is its storage name. Display metadata (human label,
severity priority) lives in constant lookup tables beside the enum so the
persisted representation never depends on presentation text.
"""

from __future__ import annotations

from enum import Enum
from typing import Iterable


class ProjectStatus(Enum):
    """Lifecycle status of a Project, changed only by explicit request."""

    ACTIVE = "ACTIVE"
    ARCHIVED = "ARCHIVED"
    SUSPENDED = "SUSPENDED"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"

    @property
    def display_name(self) -> str:
        return _PROJECT_STATUS_NAMES[self]


class AnalysisStatus(Enum):
    """Analysis state machine: PENDING -> IN_PROGRESS -> COMPLETED | FAILED.

    Any state may move to CANCELLED.
    """

    PENDING = "PENDING"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"
    CANCELLED = "CANCELLED"

    @property
    def display_name(self) -> str:
        return _ANALYSIS_STATUS_NAMES[self]

    @property
    def is_finished(self) -> bool:
        return self in (AnalysisStatus.COMPLETED, AnalysisStatus.FAILED, AnalysisStatus.CANCELLED)


class AnalysisType(Enum):
    FULL = "FULL"
    INCREMENTAL = "INCREMENTAL"
    COMPLIANCE = "COMPLIANCE"
    SECURITY = "SECURITY"
    PERFORMANCE = "PERFORMANCE"

    @property
    def display_name(self) -> str:
        return _ANALYSIS_TYPE_NAMES[self]


class ViolationSeverity(Enum):
    """Severity of a rule infraction. Priority 1 is the most severe."""

    CRITICAL = "CRITICAL"
    HIGH = "HIGH"
    MEDIUM = "MEDIUM"
    LOW = "LOW"
    INFO = "INFO"

    @property
    def display_name(self) -> str:
        return _SEVERITY_TABLE[self][0]

    @property
    def priority(self) -> int:
        return _SEVERITY_TABLE[self][1]

    @classmethod
    def by_priority(cls, priority: int) -> "ViolationSeverity":
        for severity, (_, rank) in _SEVERITY_TABLE.items():
            if rank == priority:
                return severity
        raise ValueError(f"No severity with priority {priority}")


class ViolationStatus(Enum):
    """Resolution workflow status. OPEN is initial.

    RESOLVED, FALSE_POSITIVE and WONT_FIX are terminal for the named
    transitions; the status field itself can still be assigned directly.
    """

    OPEN = "OPEN"
    IN_PROGRESS = "IN_PROGRESS"
    RESOLVED = "RESOLVED"
    FALSE_POSITIVE = "FALSE_POSITIVE"
    SUPPRESSED = "SUPPRESSED"
    WONT_FIX = "WONT_FIX"

    @property
    def display_name(self) -> str:
        return _VIOLATION_STATUS_NAMES[self]

    @property
    def is_terminal(self) -> bool:
        return self in TERMINAL_VIOLATION_STATUSES


class UserRole(Enum):
    ADMIN = "ADMIN"
    DEVELOPER = "DEVELOPER"
    VIEWER = "VIEWER"

    @property
    def display_name(self) -> str:
        return _USER_ROLE_NAMES[self]


_PROJECT_STATUS_NAMES = {
    ProjectStatus.ACTIVE: "Active",
    ProjectStatus.ARCHIVED: "Archived",
    ProjectStatus.SUSPENDED: "Suspended",
    ProjectStatus.IN_PROGRESS: "In Progress",
    ProjectStatus.COMPLETED: "Completed",
}

_ANALYSIS_STATUS_NAMES = {
    AnalysisStatus.PENDING: "Pending",
    AnalysisStatus.IN_PROGRESS: "In Progress",
    AnalysisStatus.COMPLETED: "Completed",
    AnalysisStatus.FAILED: "Failed",
    AnalysisStatus.CANCELLED: "Cancelled",
}

_ANALYSIS_TYPE_NAMES = {
    AnalysisType.FULL: "Full Analysis",
    AnalysisType.INCREMENTAL: "Incremental Analysis",
    AnalysisType.COMPLIANCE: "Compliance Check",
    AnalysisType.SECURITY: "Security Scan",
    AnalysisType.PERFORMANCE: "Performance Analysis",
}

# severity -> (display name, priority)
_SEVERITY_TABLE = {
    ViolationSeverity.CRITICAL: ("Critical", 1),
    ViolationSeverity.HIGH: ("High", 2),
    ViolationSeverity.MEDIUM: ("Medium", 3),
    ViolationSeverity.LOW: ("Low", 4),
    ViolationSeverity.INFO: ("Info", 5),
}

_VIOLATION_STATUS_NAMES = {
    ViolationStatus.OPEN: "Open",
    ViolationStatus.IN_PROGRESS: "In Progress",
    ViolationStatus.RESOLVED: "Resolved",
    ViolationStatus.FALSE_POSITIVE: "False Positive",
    ViolationStatus.SUPPRESSED: "Suppressed",
    ViolationStatus.WONT_FIX: "Won't Fix",
}

_USER_ROLE_NAMES = {
    UserRole.ADMIN: "Administrator",
    UserRole.DEVELOPER: "Developer",
    UserRole.VIEWER: "Viewer",
}

TERMINAL_VIOLATION_STATUSES = frozenset(
    {ViolationStatus.RESOLVED, ViolationStatus.FALSE_POSITIVE, ViolationStatus.WONT_FIX}
)


def sort_by_priority(severities: Iterable[ViolationSeverity]) -> list[ViolationSeverity]:
    """Most severe first."""
    return sorted(severities, key=lambda s: s.priority)
