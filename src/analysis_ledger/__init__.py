"""
Analysis Ledger - persistence and workflow core for code-analysis runs.

Tracks Analysis runs against Projects, scores them, and moves each
ComplianceViolation through its resolution workflow on top of SQLite, with
a measured P95 latency contract for every repository operation.
"""

__version__ = "0.1.0"

from .config import LedgerConfig, load_config
from .domain import (
    Analysis,
    AnalysisStatus,
    AnalysisType,
    ComplianceViolation,
    Project,
    ProjectStatus,
    User,
    UserRole,
    ViolationSeverity,
    ViolationStatus,
)
from .exceptions import LedgerError
from .persistence import LedgerDB, Repositories
from .services import Finding, Ledger

__all__ = [
    "__version__",
    "LedgerConfig",
    "load_config",
    "LedgerDB",
    "Repositories",
    "Ledger",
    "Finding",
    "LedgerError",
    "Analysis",
    "AnalysisStatus",
    "AnalysisType",
    "ComplianceViolation",
    "Project",
    "ProjectStatus",
    "User",
    "UserRole",
    "ViolationSeverity",
    "ViolationStatus",
]
