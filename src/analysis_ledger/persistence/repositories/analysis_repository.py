"""Analyses, with their metric map and error list kept in child tables."""

from collections import defaultdict
from datetime import datetime
from typing import Optional

from ...domain import Analysis, AnalysisStatus, AnalysisType
from ..rows import analysis_to_row, row_to_analysis
from ..schema import validate_analysis
from ..timing import timed
from .base import CHUNK_SIZE, BaseRepository, Where

_SCORE_COLUMNS = ("compliance_score", "quality_score", "security_score", "performance_score")


class AnalysisRepository(BaseRepository[Analysis]):
    table = "analyses"
    entity_name = "Analysis"
    metric_name = "analysis"
    sortable = frozenset(
        {
            "id",
            "created_at",
            "updated_at",
            "start_time",
            "end_time",
            "duration_seconds",
            "status",
            *_SCORE_COLUMNS,
            "total_violations",
        }
    )

    def _to_row(self, entity: Analysis):
        return analysis_to_row(entity)

    def _from_row(self, row) -> Analysis:
        return row_to_analysis(row)

    def _validate(self, entity: Analysis) -> None:
        validate_analysis(entity)

    def _write_children(self, entity: Analysis) -> None:
        self._execute("DELETE FROM analysis_metrics WHERE analysis_id = ?", (entity.id,))
        self._execute("DELETE FROM analysis_errors WHERE analysis_id = ?", (entity.id,))
        if entity.metrics:
            self._executemany(
                "INSERT INTO analysis_metrics (analysis_id, metric_key, metric_value) VALUES (?, ?, ?)",
                [(entity.id, k, v) for k, v in entity.metrics.items()],
            )
        if entity.errors:
            self._executemany(
                "INSERT INTO analysis_errors (analysis_id, position, error_message) VALUES (?, ?, ?)",
                [(entity.id, i, msg) for i, msg in enumerate(entity.errors)],
            )

    def _attach_children(self, entities: list[Analysis]) -> None:
        by_id = {a.id: a for a in entities}
        metrics: dict[int, dict[str, str]] = defaultdict(dict)
        errors: dict[int, list[str]] = defaultdict(list)

        ids = list(by_id)
        for start in range(0, len(ids), CHUNK_SIZE):
            chunk = ids[start : start + CHUNK_SIZE]
            placeholders = ", ".join("?" * len(chunk))
            for row in self._execute(
                f"SELECT analysis_id, metric_key, metric_value FROM analysis_metrics "
                f"WHERE analysis_id IN ({placeholders})",
                chunk,
            ):
                metrics[row["analysis_id"]][row["metric_key"]] = row["metric_value"]
            for row in self._execute(
                f"SELECT analysis_id, error_message FROM analysis_errors "
                f"WHERE analysis_id IN ({placeholders}) ORDER BY analysis_id, position",
                chunk,
            ):
                errors[row["analysis_id"]].append(row["error_message"])

        for analysis_id, analysis in by_id.items():
            analysis.metrics = metrics.get(analysis_id, {})
            analysis.errors = errors.get(analysis_id, [])

    def _filter(
        self,
        where: Where,
        project_id: Optional[int] = None,
        user_id: Optional[int] = None,
        status: Optional[AnalysisStatus] = None,
        analysis_type: Optional[AnalysisType] = None,
        created_between: Optional[tuple[datetime, datetime]] = None,
        start_between: Optional[tuple[datetime, datetime]] = None,
        end_between: Optional[tuple[datetime, datetime]] = None,
        duration_between: Optional[tuple[int, int]] = None,
        compliance_score_between: Optional[tuple[float, float]] = None,
        quality_score_between: Optional[tuple[float, float]] = None,
        security_score_between: Optional[tuple[float, float]] = None,
        performance_score_between: Optional[tuple[float, float]] = None,
        total_violations_between: Optional[tuple[int, int]] = None,
        critical_violations_between: Optional[tuple[int, int]] = None,
        lines_analyzed_between: Optional[tuple[int, int]] = None,
        files_analyzed_between: Optional[tuple[int, int]] = None,
        summary_contains: Optional[str] = None,
    ) -> None:
        where.eq("project_id", project_id).eq("user_id", user_id)
        where.eq("status", status).eq("analysis_type", analysis_type)
        where.between("created_at", created_between)
        where.between("start_time", start_between)
        where.between("end_time", end_between)
        where.between("duration_seconds", duration_between)
        where.between("compliance_score", compliance_score_between)
        where.between("quality_score", quality_score_between)
        where.between("security_score", security_score_between)
        where.between("performance_score", performance_score_between)
        where.between("total_violations", total_violations_between)
        where.between("critical_violations", critical_violations_between)
        where.between("lines_analyzed", lines_analyzed_between)
        where.between("files_analyzed", files_analyzed_between)
        where.contains("summary", summary_contains)

    @timed("latest_for_project")
    def latest_for_project(
        self,
        project_id: int,
        analysis_type: Optional[AnalysisType] = None,
        status: Optional[AnalysisStatus] = None,
    ) -> Optional[Analysis]:
        """Most recently created analysis of the project, optionally filtered."""
        where = Where().eq("project_id", project_id).eq("analysis_type", analysis_type).eq("status", status)
        found = self._select(where, order_by="-created_at", limit=1)
        return found[0] if found else None

    def find_long_running(self, started_before: datetime) -> list[Analysis]:
        """IN_PROGRESS analyses whose start time is older than *started_before*."""
        where = Where().eq("status", AnalysisStatus.IN_PROGRESS).before("start_time", started_before)
        return self._select(where, order_by="start_time")

    def average_score(self, project_id: int, column: str = "compliance_score") -> Optional[float]:
        """Mean of a score column over the project's COMPLETED analyses."""
        if column not in _SCORE_COLUMNS:
            raise ValueError(f"Unknown score column {column!r}")
        row = self._execute(
            f"SELECT AVG({column}) FROM analyses WHERE project_id = ? AND status = ?",
            (project_id, AnalysisStatus.COMPLETED.value),
        ).fetchone()
        return float(row[0]) if row[0] is not None else None

    @timed("count_by_status")
    def count_by_status(self, project_id: Optional[int] = None) -> dict[AnalysisStatus, int]:
        where = Where().eq("project_id", project_id)
        counts = {status: 0 for status in AnalysisStatus}
        rows = self._execute(
            f"SELECT status, COUNT(*) AS n FROM analyses{where.sql()} GROUP BY status", where.params
        ).fetchall()
        for row in rows:
            counts[AnalysisStatus(row["status"])] = int(row["n"])
        return counts
