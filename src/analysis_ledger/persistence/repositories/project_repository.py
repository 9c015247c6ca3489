"""Projects: the aggregate roots that own analyses and violations."""

from datetime import datetime
from typing import Optional

from ...domain import Project, ProjectStatus
from ..rows import project_to_row, row_to_project
from ..schema import validate_project
from ..timing import timed
from .base import BaseRepository, Where


class ProjectRepository(BaseRepository[Project]):
    table = "projects"
    entity_name = "Project"
    metric_name = "project"
    sortable = frozenset(
        {"id", "name", "status", "created_at", "updated_at", "last_analysis_date", "lines_of_code"}
    )

    def _to_row(self, entity: Project):
        return project_to_row(entity)

    def _from_row(self, row) -> Project:
        return row_to_project(row)

    def _validate(self, entity: Project) -> None:
        validate_project(entity)

    def _filter(
        self,
        where: Where,
        owner_id: Optional[int] = None,
        status: Optional[ProjectStatus] = None,
        name_contains: Optional[str] = None,
        description_contains: Optional[str] = None,
        technology_stack_contains: Optional[str] = None,
        created_between: Optional[tuple[datetime, datetime]] = None,
        last_analysis_between: Optional[tuple[datetime, datetime]] = None,
        never_analyzed: Optional[bool] = None,
        lines_of_code_between: Optional[tuple[int, int]] = None,
    ) -> None:
        where.eq("owner_id", owner_id).eq("status", status)
        where.contains("name", name_contains)
        where.contains("description", description_contains)
        where.contains("technology_stack", technology_stack_contains)
        where.between("created_at", created_between)
        where.between("last_analysis_date", last_analysis_between)
        where.is_null("last_analysis_date", never_analyzed)
        where.between("lines_of_code", lines_of_code_between)

    @timed("get_by_name")
    def get_by_name(self, name: str) -> Optional[Project]:
        found = self._select(Where().eq("name", name))
        return found[0] if found else None

    def exists_by_name(self, name: str) -> bool:
        return self._count(Where().eq("name", name)) > 0

    def get_by_repository_url(self, url: str) -> Optional[Project]:
        found = self._select(Where().eq("repository_url", url), limit=1)
        return found[0] if found else None

    def get_by_project_path(self, path: str) -> Optional[Project]:
        found = self._select(Where().eq("project_path", path), limit=1)
        return found[0] if found else None

    def find_needing_analysis(self, cutoff: datetime) -> list[Project]:
        """ACTIVE projects never analyzed or last analyzed before *cutoff*."""
        where = Where().eq("status", ProjectStatus.ACTIVE)
        where.raw("last_analysis_date IS NULL OR last_analysis_date < ?", cutoff)
        return self._select(where, order_by="last_analysis_date")

    @timed("count_by_status")
    def count_by_status(self) -> dict[ProjectStatus, int]:
        """Row count for every ProjectStatus (zero where none)."""
        counts = {status: 0 for status in ProjectStatus}
        rows = self._execute("SELECT status, COUNT(*) AS n FROM projects GROUP BY status").fetchall()
        for row in rows:
            counts[ProjectStatus(row["status"])] = int(row["n"])
        return counts
