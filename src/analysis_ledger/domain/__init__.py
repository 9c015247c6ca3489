"""Domain model: taxonomies, scoring and the ledger aggregates."""

from .analysis import Analysis
from .enums import (
    AnalysisStatus,
    AnalysisType,
    ProjectStatus,
    UserRole,
    ViolationSeverity,
    ViolationStatus,
)
from .project import Project
from .scoring import compliance_level, overall_score, penalty_score, risk_level
from .user import User
from .violation import UNKNOWN_LOCATION, ComplianceViolation

__all__ = [
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
    "UNKNOWN_LOCATION",
    "penalty_score",
    "overall_score",
    "compliance_level",
    "risk_level",
]
