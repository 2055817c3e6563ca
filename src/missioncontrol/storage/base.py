"""
Shared plumbing for the entity stores.

Stores never hold a connection themselves; every operation asks the
:class:`ConnectionManager` for the shared handle.
"""

from __future__ import annotations

import logging
import sqlite3
from collections.abc import Iterator
from contextlib import contextmanager

from .connection import ConnectionHandle, ConnectionManager
from .errors import ConstraintError, QueryError, StorageError

log = logging.getLogger(__name__)

__all__ = ["EntityStore", "query_errors"]


@contextmanager
def query_errors(action: str) -> Iterator[None]:
    """Translate ``sqlite3`` failures raised inside the block into storage errors."""

    try:
        yield
    except StorageError:
        raise
    except sqlite3.IntegrityError as exc:
        log.error("Failed to %s: %s", action, exc)
        raise ConstraintError(f"Failed to {action}: {exc}") from exc
    except sqlite3.Error as exc:
        log.error("Failed to %s: %s", action, exc)
        raise QueryError(action, exc) from exc


class EntityStore:
    """Base class giving stores access to the shared connection handle."""

    def __init__(self, manager: ConnectionManager) -> None:
        self.manager = manager

    @property
    def handle(self) -> ConnectionHandle:
        return self.manager.get_handle()
