# MissionControl
# Copyright © 2025 The MissionControl Authors
# Licensed under CC BY-NC-SA 4.0 International
# http://creativecommons.org/licenses/by-nc-sa/4.0/

"""Entity and request models shared by the stores and the command layer."""

from __future__ import annotations

import sqlite3

from pydantic import BaseModel, ConfigDict, Field

__all__ = [
    "Project",
    "CreateProject",
    "Task",
    "CreateTask",
    "TaskUpdate",
    "DrawingSnapshot",
    "SaveDrawing",
]


class Project(BaseModel):
    id: int
    name: str
    description: str | None = None
    created_at: str

    @classmethod
    def from_row(cls, row: sqlite3.Row) -> Project:
        return cls(
            id=row["id"],
            name=row["name"],
            description=row["description"],
            created_at=row["created_at"],
        )


class CreateProject(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = Field(min_length=1)
    description: str | None = None


class Task(BaseModel):
    id: int
    text: str
    completed: bool = False
    duration: int = 25
    created_at: str
    project_id: int

    @classmethod
    def from_row(cls, row: sqlite3.Row) -> Task:
        # completed is stored as 0/1
        return cls(
            id=row["id"],
            text=row["text"],
            completed=row["completed"] != 0,
            duration=row["duration"],
            created_at=row["created_at"],
            project_id=row["project_id"],
        )


class CreateTask(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    text: str
    duration: int = Field(default=25, gt=0)
    project_id: int | None = Field(default=None, alias="projectId")


class TaskUpdate(BaseModel):
    """Sparse task change; ``None`` means "leave unchanged"."""

    text: str | None = None
    completed: bool | None = None
    duration: int | None = Field(default=None, gt=0)


class DrawingSnapshot(BaseModel):
    id: int
    elements: str
    app_state: str
    updated_at: str
    project_id: int

    @classmethod
    def from_row(cls, row: sqlite3.Row) -> DrawingSnapshot:
        return cls(
            id=row["id"],
            elements=row["elements"],
            app_state=row["app_state"],
            updated_at=row["updated_at"],
            project_id=row["project_id"],
        )


class SaveDrawing(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    elements: str
    app_state: str
    project_id: int = Field(alias="projectId")
