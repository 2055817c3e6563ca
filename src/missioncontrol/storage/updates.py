"""
Partial-update statement construction.

The builder only knows a fixed, ordered list of updatable task columns;
each one is included when the matching field on :class:`TaskUpdate` is
present. It performs no I/O.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any, NamedTuple

from missioncontrol.core.models import TaskUpdate

from .errors import NoFieldsToUpdate

__all__ = ["PreparedStatement", "TASK_COLUMNS", "TASK_UPDATE_FIELDS", "build_task_update"]

TASK_COLUMNS = ("id", "text", "completed", "duration", "created_at", "project_id")


class PreparedStatement(NamedTuple):
    sql: str
    params: tuple[Any, ...]


def _bool_to_int(value: bool) -> int:
    return 1 if value else 0


# (field on TaskUpdate, column, storage conversion); order is fixed
TASK_UPDATE_FIELDS: tuple[tuple[str, str, Callable[[Any], Any]], ...] = (
    ("text", "text", str),
    ("completed", "completed", _bool_to_int),
    ("duration", "duration", int),
)


def build_task_update(task_id: int, changes: TaskUpdate) -> PreparedStatement:
    """Return an ``UPDATE tasks ... RETURNING`` statement touching only present fields.

    Raises:
        NoFieldsToUpdate: ``changes`` has no field set.
    """

    assignments: list[str] = []
    params: list[Any] = []
    for field_name, column, to_storage in TASK_UPDATE_FIELDS:
        value = getattr(changes, field_name)
        if value is None:
            continue
        assignments.append(f"{column} = ?")
        params.append(to_storage(value))

    if not assignments:
        raise NoFieldsToUpdate()

    params.append(int(task_id))
    sql = (
        f"UPDATE tasks SET {', '.join(assignments)} WHERE id = ? "
        f"RETURNING {', '.join(TASK_COLUMNS)}"
    )
    return PreparedStatement(sql, tuple(params))
