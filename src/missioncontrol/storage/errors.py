"""
Error taxonomy for the MissionControl storage layer.

Every failure the storage core can produce is a :class:`StorageError`
subclass so the command layer can surface it without inspecting raw
``sqlite3`` exceptions.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path

__all__ = [
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


class StorageError(RuntimeError):
    """Base class for all storage failures."""


@dataclass(frozen=True)
class PathAttempt:
    """One rejected candidate directory and why it was rejected."""

    path: Path
    stage: str
    error: str

    def __str__(self) -> str:
        return f"{self.path} ({self.stage}): {self.error}"


class NoWritableLocation(StorageError):
    """Raised when no candidate directory can hold the database file."""

    def __init__(self, attempts: Sequence[PathAttempt]):
        self.attempts = list(attempts)
        if self.attempts:
            detail = "\n".join(f"  - {attempt}" for attempt in self.attempts)
        else:
            detail = "  (no candidate directories were available)"
        super().__init__(f"Could not find a writable directory for the database. Tried:\n{detail}")


class ConnectionFailed(StorageError):
    """Raised after every connection attempt has failed."""

    def __init__(self, url: str, attempts: int, last_error: BaseException | None):
        self.url = url
        self.attempts = attempts
        self.last_error = last_error
        super().__init__(
            f"All {attempts} connection attempts to {url} failed. Last error: {last_error}"
        )


class SchemaError(StorageError):
    """Raised when schema provisioning fails on an open connection."""

    def __init__(self, step: str, cause: BaseException):
        self.step = step
        self.cause = cause
        super().__init__(f"Failed to {step}: {cause}")


class NoFieldsToUpdate(StorageError, ValueError):
    """Raised when a partial update names no fields."""

    def __init__(self, message: str = "No fields to update"):
        super().__init__(message)


class NotFound(StorageError, LookupError):
    """Raised when an id-targeted operation matches no row."""

    def __init__(self, entity: str, entity_id: int):
        self.entity = entity
        self.entity_id = entity_id
        super().__init__(f"{entity} {entity_id} not found")


class LastProjectError(StorageError):
    """Raised when deleting the only remaining project."""

    def __init__(self, project_id: int):
        self.project_id = project_id
        super().__init__("Cannot delete the last project")


class ConstraintError(StorageError):
    """Raised when a write violates a database constraint."""


class QueryError(StorageError):
    """Wraps an unexpected ``sqlite3.Error`` raised while running a query."""

    def __init__(self, action: str, cause: BaseException):
        self.action = action
        self.cause = cause
        super().__init__(f"Failed to {action}: {cause}")
