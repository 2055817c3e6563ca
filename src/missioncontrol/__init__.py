# MissionControl
# Copyright © 2025 The MissionControl Authors
# Licensed under CC BY-NC-SA 4.0 International
# http://creativecommons.org/licenses/by-nc-sa/4.0/

"""Public package interface for the MissionControl persistence layer."""

from missioncontrol.app.context import AppContext
from missioncontrol.core.models import (
    CreateProject,
    CreateTask,
    DrawingSnapshot,
    Project,
    SaveDrawing,
    Task,
    TaskUpdate,
)
from missioncontrol.storage import (
    ConnectionManager,
    StorageError,
    StorageSettings,
)

__version__ = "0.1.0"

__all__ = [
    "AppContext",
    "ConnectionManager",
    "StorageSettings",
    "StorageError",
    "Project",
    "CreateProject",
    "Task",
    "CreateTask",
    "TaskUpdate",
    "DrawingSnapshot",
    "SaveDrawing",
]
