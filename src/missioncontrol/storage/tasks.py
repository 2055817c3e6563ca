"""Task persistence."""

from __future__ import annotations

import logging

from missioncontrol.core.models import CreateTask, Task, TaskUpdate

from .base import EntityStore, query_errors
from .connection import ConnectionHandle
from .errors import NotFound
from .updates import TASK_COLUMNS, build_task_update

log = logging.getLogger(__name__)

__all__ = ["TaskStore"]

_TASK_COLUMNS = ", ".join(TASK_COLUMNS)


class TaskStore(EntityStore):
    def list_tasks(self, project_id: int) -> list[Task]:
        handle = self.handle
        with query_errors("fetch tasks"):
            rows = handle.fetch_all(
                f"SELECT {_TASK_COLUMNS} FROM tasks WHERE project_id = ? "
                "ORDER BY created_at ASC, id ASC",
                (project_id,),
            )
        return [Task.from_row(row) for row in rows]

    def create_task(self, task: CreateTask) -> Task:
        """Insert a task; without a project id it goes to the first project."""

        handle = self.handle
        with query_errors("create task"), handle.transaction():
            project_id = task.project_id
            if project_id is None:
                project_id = _first_project_id(handle)
            if handle.fetch_one("SELECT 1 FROM projects WHERE id = ?", (project_id,)) is None:
                raise NotFound("Project", project_id)
            row = handle.fetch_one(
                "INSERT INTO tasks (text, duration, completed, project_id) VALUES (?, ?, 0, ?) "
                f"RETURNING {_TASK_COLUMNS}",
                (task.text, task.duration, project_id),
            )
        return Task.from_row(row)

    def update_task(self, task_id: int, changes: TaskUpdate) -> Task:
        """Apply a partial update and return the updated task.

        Raises:
            NoFieldsToUpdate: ``changes`` is empty; nothing is executed.
            NotFound: no task has ``task_id``.
        """

        statement = build_task_update(task_id, changes)
        handle = self.handle
        with query_errors("update task"):
            row = handle.fetch_one(statement.sql, statement.params)
        if row is None:
            raise NotFound("Task", task_id)
        return Task.from_row(row)

    def delete_task(self, task_id: int) -> None:
        handle = self.handle
        with query_errors("delete task"):
            deleted = handle.execute("DELETE FROM tasks WHERE id = ?", (task_id,))
        if not deleted:
            raise NotFound("Task", task_id)


def _first_project_id(handle: ConnectionHandle) -> int:
    project_id = handle.fetch_one("SELECT MIN(id) FROM projects")[0]
    # fall back to the column default
    return 1 if project_id is None else int(project_id)
