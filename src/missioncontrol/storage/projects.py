"""Project persistence."""

from __future__ import annotations

import logging

from missioncontrol.core.models import CreateProject, Project

from .base import EntityStore, query_errors
from .errors import LastProjectError, NotFound

log = logging.getLogger(__name__)

__all__ = ["ProjectStore"]

_PROJECT_COLUMNS = "id, name, description, created_at"


class ProjectStore(EntityStore):
    def list_projects(self) -> list[Project]:
        handle = self.handle
        with query_errors("fetch projects"):
            rows = handle.fetch_all(
                f"SELECT {_PROJECT_COLUMNS} FROM projects ORDER BY created_at ASC, id ASC"
            )
        return [Project.from_row(row) for row in rows]

    def get_project(self, project_id: int) -> Project:
        handle = self.handle
        with query_errors("fetch project"):
            row = handle.fetch_one(
                f"SELECT {_PROJECT_COLUMNS} FROM projects WHERE id = ?", (project_id,)
            )
        if row is None:
            raise NotFound("Project", project_id)
        return Project.from_row(row)

    def create_project(self, project: CreateProject) -> Project:
        handle = self.handle
        with query_errors("create project"):
            row = handle.fetch_one(
                f"INSERT INTO projects (name, description) VALUES (?, ?) RETURNING {_PROJECT_COLUMNS}",
                (project.name, project.description),
            )
        log.info("Created project %r", project.name)
        return Project.from_row(row)

    def delete_project(self, project_id: int) -> None:
        """Delete a project together with its tasks and drawings.

        Raises:
            NotFound: no project has ``project_id``.
            LastProjectError: it is the only remaining project.
        """

        handle = self.handle
        with query_errors("delete project"), handle.transaction():
            exists = handle.fetch_one("SELECT 1 FROM projects WHERE id = ?", (project_id,))
            if exists is None:
                raise NotFound("Project", project_id)
            count = handle.fetch_one("SELECT COUNT(*) FROM projects")[0]
            if count <= 1:
                raise LastProjectError(project_id)

            tasks = handle.execute("DELETE FROM tasks WHERE project_id = ?", (project_id,))
            drawings = handle.execute("DELETE FROM drawings WHERE project_id = ?", (project_id,))
            handle.execute("DELETE FROM projects WHERE id = ?", (project_id,))
        log.info(
            "Deleted project %s (%d task(s), %d drawing(s))", project_id, tasks, drawings
        )
