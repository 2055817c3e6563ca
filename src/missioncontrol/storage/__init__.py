"""
SQLite storage for MissionControl: connection lifecycle, schema and entity stores.
"""

from __future__ import annotations

from .connection import ConnectionHandle, ConnectionManager, ConnectionState
from .drawings import DrawingStore
from .errors import (
    ConnectionFailed,
    ConstraintError,
    LastProjectError,
    NoFieldsToUpdate,
    NotFound,
    NoWritableLocation,
    PathAttempt,
    QueryError,
    SchemaError,
    StorageError,
)
from .paths import StoragePathResolver
from .projects import ProjectStore
from .schema import SchemaProvisioner
from .settings import StorageSettings
from .tasks import TaskStore
from .updates import PreparedStatement, build_task_update

__all__ = [
    "ConnectionHandle",
    "ConnectionManager",
    "ConnectionState",
    "DrawingStore",
    "ProjectStore",
    "TaskStore",
    "SchemaProvisioner",
    "StoragePathResolver",
    "StorageSettings",
    "PreparedStatement",
    "build_task_update",
    "StorageError",
    "PathAttempt",
    "NoWritableLocation",
    "ConnectionFailed",
    "SchemaError",
    "NoFieldsToUpdate",
    "NotFound",
    "LastProjectError",
    "ConstraintError",
    "QueryError",
]
