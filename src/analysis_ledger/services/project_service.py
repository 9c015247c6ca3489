"""Project workflows: creation, renames, status changes, structure updates."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Optional

from ..domain import Project, ProjectStatus
from ..exceptions import DuplicateEntityError
from ..logging_config import get_logger
from ..persistence import Page
from .base import LedgerService

logger = get_logger(__name__)

# Fields ``update`` may change; status goes through the named transitions.
UPDATABLE_FIELDS = frozenset(
    {
        "name",
        "description",
        "owner_id",
        "repository_url",
        "project_path",
        "technology_stack",
        "files_count",
        "directories_count",
        "lines_of_code",
    }
)


class ProjectService(LedgerService):
    def create(self, project: Project) -> Project:
        """Persist a new project. The name must be unused; status starts ACTIVE."""
        with self.db.transaction():
            if project.name is not None and self.repos.projects.exists_by_name(project.name):
                logger.warning("Project name %r already taken", project.name)
                raise DuplicateEntityError("Project", "name", project.name)
            project.status = ProjectStatus.ACTIVE
            self.repos.projects.save(project)
        logger.info("Created project %d (%s)", project.id, project.name)
        return project

    def get(self, project_id: int) -> Optional[Project]:
        return self.repos.projects.get(project_id)

    def get_by_name(self, name: str) -> Optional[Project]:
        return self.repos.projects.get_by_name(name)

    def get_with_children(self, project_id: int) -> Project:
        """Load the project together with all of its analyses and violations."""
        project = self._require(self.repos.projects, project_id)
        for analysis in self.repos.analyses.find(project_id=project_id, order_by="created_at"):
            project.add_analysis(analysis)
        for violation in self.repos.violations.find(project_id=project_id):
            project.add_violation(violation)
        return project

    def list_page(self, page: int = 0, size: Optional[int] = None, **criteria: Any) -> Page[Project]:
        return self.repos.projects.find_page(page=page, size=size, order_by="name", **criteria)

    def update(self, project_id: int, **changes: Any) -> Project:
        unknown = set(changes) - UPDATABLE_FIELDS
        if unknown:
            raise TypeError(f"Cannot update project field(s): {', '.join(sorted(unknown))}")
        with self.db.transaction():
            project = self._require(self.repos.projects, project_id)
            new_name = changes.get("name")
            if new_name is not None and new_name != project.name and self.repos.projects.exists_by_name(new_name):
                logger.warning("Cannot rename project %d: %r already taken", project_id, new_name)
                raise DuplicateEntityError("Project", "name", new_name)
            for field_name, value in changes.items():
                setattr(project, field_name, value)
            self.repos.projects.save(project)
        logger.info("Updated project %d: %s", project_id, ", ".join(sorted(changes)))
        return project

    def delete(self, project_id: int) -> None:
        """Delete the project; its analyses and violations go with it."""
        with self.db.transaction():
            project = self._require(self.repos.projects, project_id)
            self.repos.projects.delete(project)
        logger.info("Deleted project %d (%s)", project_id, project.name)

    def change_status(self, project_id: int, status: ProjectStatus) -> Project:
        with self.db.transaction():
            project = self._require(self.repos.projects, project_id)
            previous = project.status
            project.status = status
            self.repos.projects.save(project)
        logger.info("Project %d: %s -> %s", project_id, previous.name, status.name)
        return project

    def archive(self, project_id: int) -> Project:
        return self.change_status(project_id, ProjectStatus.ARCHIVED)

    def activate(self, project_id: int) -> Project:
        return self.change_status(project_id, ProjectStatus.ACTIVE)

    def record_structure(
        self,
        project_id: int,
        files_count: int,
        directories_count: int,
        technology_stack: Optional[str] = None,
        lines_of_code: Optional[int] = None,
        now: Optional[datetime] = None,
    ) -> Project:
        """Store what a scan learned about the project layout."""
        with self.db.transaction():
            project = self._require(self.repos.projects, project_id)
            project.files_count = files_count
            project.directories_count = directories_count
            if technology_stack is not None:
                project.technology_stack = technology_stack
            if lines_of_code is not None:
                project.lines_of_code = lines_of_code
            project.update_last_analysis_date(now)
            self.repos.projects.save(project)
        logger.info("Project %d structure: %d files, %d dirs", project_id, files_count, directories_count)
        return project

    def count_by_status(self) -> dict[ProjectStatus, int]:
        return self.repos.projects.count_by_status()
