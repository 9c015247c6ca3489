"""Shared plumbing for the workflow services."""

from __future__ import annotations

from typing import TypeVar

from ..domain import Analysis, ViolationSeverity
from ..exceptions import EntityNotFoundError
from ..logging_config import get_logger
from ..persistence import Repositories
from ..persistence.repositories import BaseRepository

logger = get_logger(__name__)

T = TypeVar("T")


class LedgerService:
    """Base for services: holds the repositories and the unit of work."""

    def __init__(self, repos: Repositories) -> None:
        self.repos = repos
        self.db = repos.db

    def _require(self, repo: BaseRepository[T], entity_id: int) -> T:
        entity = repo.get(entity_id)
        if entity is None:
            logger.warning("%s %s not found", repo.entity_name, entity_id)
            raise EntityNotFoundError(repo.entity_name, entity_id)
        return entity

    def _refresh_tallies(self, analysis: Analysis) -> Analysis:
        """Recount the analysis's outstanding violations and save the tallies.

        critical = CRITICAL, warning = HIGH + MEDIUM, info = LOW + INFO.
        """
        counts = self.repos.violations.count_outstanding_by_severity(analysis.id)
        analysis.set_tallies(
            critical=counts[ViolationSeverity.CRITICAL],
            warning=counts[ViolationSeverity.HIGH] + counts[ViolationSeverity.MEDIUM],
            info=counts[ViolationSeverity.LOW] + counts[ViolationSeverity.INFO],
        )
        self.repos.analyses.save(analysis)
        logger.debug(
            "Analysis %d tallies: total=%d critical=%d", analysis.id, analysis.total_violations, analysis.critical_violations
        )
        return analysis
