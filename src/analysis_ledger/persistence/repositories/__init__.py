"""Repositories over the ledger tables."""

from .analysis_repository import AnalysisRepository
from .base import BaseRepository, Page, Where
from .project_repository import ProjectRepository
from .user_repository import UserRepository
from .violation_repository import OUTSTANDING_STATUSES, ViolationRepository

__all__ = [
    "BaseRepository",
    "Page",
    "Where",
    "UserRepository",
    "ProjectRepository",
    "AnalysisRepository",
    "ViolationRepository",
    "OUTSTANDING_STATUSES",
]
