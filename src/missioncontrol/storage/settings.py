"""
Storage configuration for the MissionControl database.

Defaults match the layout earlier releases wrote to disk, so an existing
``todos.db`` keeps being picked up after an upgrade.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass

from missioncontrol.app import flags

__all__ = ["StorageSettings", "DEFAULT_PROJECT_NAME", "DEFAULT_PROJECT_DESCRIPTION"]

DEFAULT_PROJECT_NAME = "Default Project"
DEFAULT_PROJECT_DESCRIPTION = "Your first project"


@dataclass(frozen=True)
class StorageSettings:
    """Immutable knobs for locating, opening and seeding the database."""

    app_dir_name: str = "missioncontrol"
    database_filename: str = "todos.db"
    probe_filename: str = "test_write.tmp"
    connect_attempts: int = 3
    retry_delay: float = 1.0
    default_project_name: str = DEFAULT_PROJECT_NAME
    default_project_description: str = DEFAULT_PROJECT_DESCRIPTION
    wal_journal: bool = False
    foreign_keys: bool = True
    busy_timeout_ms: int = 5000

    def __post_init__(self) -> None:
        if self.connect_attempts < 1:
            raise ValueError("connect_attempts must be >= 1")
        if self.retry_delay < 0:
            raise ValueError("retry_delay must be >= 0")
        if not self.database_filename:
            raise ValueError("database_filename must be a non-empty string")

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> StorageSettings:
        """Build settings with feature toggles taken from ``MISSIONCONTROL_FEATURES``."""

        env = os.environ if environ is None else environ
        features = flags.parse_features(env.get(flags.ENV_VAR, ""))
        return cls(
            wal_journal=features.get("wal", False),
            foreign_keys=features.get("foreign_keys", True),
        )

    def pragmas(self) -> dict[str, object]:
        """Return the pragma map applied to every freshly opened connection."""

        opts: dict[str, object] = {
            "foreign_keys": self.foreign_keys,
            "busy_timeout_ms": self.busy_timeout_ms,
        }
        if self.wal_journal:
            opts["journal_mode"] = "WAL"
        return opts
