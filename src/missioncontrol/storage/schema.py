"""
Schema provisioning for the MissionControl database.

Every statement is ``CREATE ... IF NOT EXISTS`` so provisioning can run
against a fresh file or one written by an earlier session.
"""

from __future__ import annotations

import logging
import sqlite3

from .errors import SchemaError
from .settings import StorageSettings
from .sqlite_utils import transaction

log = logging.getLogger(__name__)

__all__ = ["SCHEMA_VERSION", "TABLE_STATEMENTS", "SchemaProvisioner", "get_user_version"]

SCHEMA_VERSION = 1

# Dependency order: projects is referenced by the other two tables.
TABLE_STATEMENTS: tuple[tuple[str, str], ...] = (
    (
        "projects",
        """
        CREATE TABLE IF NOT EXISTS projects (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            name TEXT NOT NULL UNIQUE,
            description TEXT,
            created_at TEXT NOT NULL DEFAULT CURRENT_TIMESTAMP
        )
        """,
    ),
    (
        "tasks",
        """
        CREATE TABLE IF NOT EXISTS tasks (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            text TEXT NOT NULL,
            completed INTEGER NOT NULL DEFAULT 0,
            duration INTEGER NOT NULL DEFAULT 25,
            created_at TEXT NOT NULL DEFAULT CURRENT_TIMESTAMP,
            project_id INTEGER REFERENCES projects(id) DEFAULT 1
        )
        """,
    ),
    (
        "drawings",
        """
        CREATE TABLE IF NOT EXISTS drawings (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            elements TEXT NOT NULL,
            app_state TEXT NOT NULL,
            updated_at TEXT NOT NULL DEFAULT CURRENT_TIMESTAMP,
            project_id INTEGER REFERENCES projects(id) DEFAULT 1
        )
        """,
    ),
)


class SchemaProvisioner:
    """Create the tables if needed and seed the default project."""

    def __init__(self, settings: StorageSettings | None = None) -> None:
        self.settings = settings or StorageSettings()

    def provision(self, conn: sqlite3.Connection) -> bool:
        """Apply the schema to ``conn``.

        Returns True when the default project was inserted.

        Raises:
            SchemaError: a table could not be created or the default project
                could not be seeded.
        """

        for table, statement in TABLE_STATEMENTS:
            try:
                conn.execute(statement)
            except sqlite3.Error as exc:
                log.error("Failed to create %s table: %s", table, exc)
                raise SchemaError(f"create {table} table", exc) from exc

        seeded = self._seed_default_project(conn)

        try:
            previous = get_user_version(conn)
            if previous != SCHEMA_VERSION:
                set_user_version(conn, SCHEMA_VERSION)
                log.info("Schema version stamped: %d -> %d", previous, SCHEMA_VERSION)
        except sqlite3.Error as exc:
            raise SchemaError("stamp schema version", exc) from exc

        log.info("Database tables verified (schema version %d)", SCHEMA_VERSION)
        return seeded

    def _seed_default_project(self, conn: sqlite3.Connection) -> bool:
        try:
            with transaction(conn):
                count = conn.execute("SELECT COUNT(*) FROM projects").fetchone()[0]
                if count:
                    return False
                conn.execute(
                    "INSERT INTO projects (name, description) VALUES (?, ?)",
                    (self.settings.default_project_name, self.settings.default_project_description),
                )
        except sqlite3.Error as exc:
            log.error("Failed to create default project: %s", exc)
            raise SchemaError("create default project", exc) from exc

        log.info("Default project %r created", self.settings.default_project_name)
        return True


def get_user_version(conn: sqlite3.Connection) -> int:
    """Return the PRAGMA user_version value."""

    cur = conn.execute("PRAGMA user_version")
    row = cur.fetchone()
    return int(row[0]) if row and row[0] is not None else 0


def set_user_version(conn: sqlite3.Connection, version: int) -> None:
    """Update the PRAGMA user_version value."""

    conn.execute(f"PRAGMA user_version = {int(version)}")
