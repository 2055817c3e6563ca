# MissionControl
# Copyright © 2025 The MissionControl Authors
# Licensed under CC BY-NC-SA 4.0 International
# http://creativecommons.org/licenses/by-nc-sa/4.0/

"""Application context owning the database connection and entity stores."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path

from missioncontrol.core.logging_config import setup_logging
from missioncontrol.storage.connection import ConnectionManager
from missioncontrol.storage.drawings import DrawingStore
from missioncontrol.storage.paths import StoragePathResolver
from missioncontrol.storage.projects import ProjectStore
from missioncontrol.storage.settings import StorageSettings
from missioncontrol.storage.tasks import TaskStore

log = logging.getLogger(__name__)

__all__ = ["AppContext"]


@dataclass
class AppContext:
    """
    Explicitly constructed owner of the process-wide connection.

    Build one per process (or per test) and hand its stores to whatever
    needs them; nothing in the package reaches for a module-level global.
    """

    connections: ConnectionManager
    projects: ProjectStore
    tasks: TaskStore
    drawings: DrawingStore
    log_dir: Path | None = None

    @classmethod
    def create(
        cls,
        settings: StorageSettings | None = None,
        *,
        environ: Mapping[str, str] | None = None,
        configure_logging: bool = False,
    ) -> AppContext:
        log_dir = setup_logging() if configure_logging else None
        settings = settings or StorageSettings.from_env(environ)
        manager = ConnectionManager(
            settings, resolver=StoragePathResolver(settings, environ=environ)
        )
        return cls.from_manager(manager, log_dir=log_dir)

    @classmethod
    def from_manager(cls, manager: ConnectionManager, *, log_dir: Path | None = None) -> AppContext:
        return cls(
            connections=manager,
            projects=ProjectStore(manager),
            tasks=TaskStore(manager),
            drawings=DrawingStore(manager),
            log_dir=log_dir,
        )

    def init_database(self) -> str:
        """Eagerly initialise the database and return the status message."""

        status = self.connections.initialize()
        log.info(status)
        return status
