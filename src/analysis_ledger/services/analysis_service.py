"""Analysis workflows.

Each public method is one unit of work: it loads what it needs, applies a
named transition on the aggregate and saves, all inside a single
transaction. The aggregate itself never refuses a transition; the guards
below are where out-of-order requests are turned away.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Mapping, Optional

from ..domain import Analysis, AnalysisStatus, AnalysisType
from ..exceptions import InvalidStateError
from ..logging_config import get_logger
from ..persistence import Page
from .base import LedgerService

logger = get_logger(__name__)

_STARTABLE = (AnalysisStatus.PENDING, AnalysisStatus.IN_PROGRESS)
_FAILABLE = (AnalysisStatus.PENDING, AnalysisStatus.IN_PROGRESS)


def _expect(analysis: Analysis, allowed: tuple[AnalysisStatus, ...]) -> None:
    if analysis.status not in allowed:
        expected = " or ".join(s.name for s in allowed)
        logger.warning("Analysis %d is %s, expected %s", analysis.id, analysis.status.name, expected)
        raise InvalidStateError("Analysis", analysis.id, analysis.status.name, expected)


class AnalysisService(LedgerService):
    def request_analysis(
        self,
        project_id: int,
        user_id: int,
        analysis_type: AnalysisType = AnalysisType.FULL,
    ) -> Analysis:
        """Create a PENDING analysis attached to the project."""
        with self.db.transaction():
            project = self._require(self.repos.projects, project_id)
            user = self._require(self.repos.users, user_id)
            analysis = Analysis(user_id=user.id, type=analysis_type)
            project.add_analysis(analysis)
            self.repos.analyses.save(analysis)
        logger.info("Requested %s analysis %d for project %d", analysis_type.name, analysis.id, project_id)
        return analysis

    def get(self, analysis_id: int) -> Optional[Analysis]:
        return self.repos.analyses.get(analysis_id)

    def start(self, analysis_id: int, now: Optional[datetime] = None) -> Analysis:
        with self.db.transaction():
            analysis = self._require(self.repos.analyses, analysis_id)
            _expect(analysis, _STARTABLE)
            analysis.start_analysis(now)
            self.repos.analyses.save(analysis)
        logger.info("Analysis %d started", analysis_id)
        return analysis

    def complete(self, analysis_id: int, now: Optional[datetime] = None) -> Analysis:
        """Finish the run and stamp the project's last analysis date."""
        with self.db.transaction():
            analysis = self._require(self.repos.analyses, analysis_id)
            _expect(analysis, (AnalysisStatus.IN_PROGRESS,))
            analysis.complete_analysis(now)
            self.repos.analyses.save(analysis)
            project = self._require(self.repos.projects, analysis.project_id)
            project.update_last_analysis_date(analysis.end_time)
            self.repos.projects.save(project)
        logger.info("Analysis %d completed in %ss", analysis_id, analysis.duration_seconds)
        return analysis

    def fail(self, analysis_id: int, message: str, now: Optional[datetime] = None) -> Analysis:
        with self.db.transaction():
            analysis = self._require(self.repos.analyses, analysis_id)
            _expect(analysis, _FAILABLE)
            analysis.fail_analysis(message, now)
            self.repos.analyses.save(analysis)
        logger.info("Analysis %d failed: %s", analysis_id, message)
        return analysis

    def cancel(self, analysis_id: int, now: Optional[datetime] = None) -> Analysis:
        """Cancel from any state."""
        with self.db.transaction():
            analysis = self._require(self.repos.analyses, analysis_id)
            previous = analysis.status
            analysis.cancel_analysis(now)
            self.repos.analyses.save(analysis)
        logger.info("Analysis %d cancelled (was %s)", analysis_id, previous.name)
        return analysis

    def record_scores(
        self,
        analysis_id: int,
        security_violations: Optional[int] = None,
        performance_issues: Optional[int] = None,
        compliance_violations: Optional[int] = None,
        quality_score: Optional[float] = None,
        lines_analyzed: Optional[int] = None,
        files_analyzed: Optional[int] = None,
        summary: Optional[str] = None,
        metrics: Optional[Mapping[str, Any]] = None,
    ) -> Analysis:
        """Derive dimension scores from counts and store scan results.

        Arguments left as ``None`` keep their current values.
        """
        with self.db.transaction():
            analysis = self._require(self.repos.analyses, analysis_id)
            if security_violations is not None:
                analysis.set_security_violations(security_violations)
            if performance_issues is not None:
                analysis.set_performance_issues(performance_issues)
            if compliance_violations is not None:
                analysis.set_compliance_violations(compliance_violations)
            if quality_score is not None:
                analysis.quality_score = quality_score
            if lines_analyzed is not None:
                analysis.lines_analyzed = lines_analyzed
            if files_analyzed is not None:
                analysis.files_analyzed = files_analyzed
            if summary is not None:
                analysis.summary = summary
            for key, value in (metrics or {}).items():
                analysis.add_metric(key, value)
            self.repos.analyses.save(analysis)
        logger.info("Analysis %d scores recorded (overall=%s)", analysis_id, analysis.overall_score)
        return analysis

    def refresh_tallies(self, analysis_id: int) -> Analysis:
        with self.db.transaction():
            analysis = self._require(self.repos.analyses, analysis_id)
            return self._refresh_tallies(analysis)

    def retry_failed(self, analysis_id: int) -> Analysis:
        """Queue a fresh PENDING run with the failed run's project, user and type."""
        with self.db.transaction():
            failed = self._require(self.repos.analyses, analysis_id)
            _expect(failed, (AnalysisStatus.FAILED,))
            project = self._require(self.repos.projects, failed.project_id)
            retry = Analysis(user_id=failed.user_id, type=failed.type)
            project.add_analysis(retry)
            self.repos.analyses.save(retry)
        logger.info("Analysis %d retried as %d", analysis_id, retry.id)
        return retry

    def latest_for_project(
        self, project_id: int, analysis_type: Optional[AnalysisType] = None
    ) -> Optional[Analysis]:
        return self.repos.analyses.latest_for_project(project_id, analysis_type=analysis_type)

    def list_for_project(self, project_id: int, page: int = 0, size: Optional[int] = None) -> Page[Analysis]:
        return self.repos.analyses.find_page(page=page, size=size, order_by="-created_at", project_id=project_id)
