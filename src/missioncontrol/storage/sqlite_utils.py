"""
Utility helpers for the SQLite-backed MissionControl database.

Connection helpers, pragmas, cursor/transaction context managers.
"""

from __future__ import annotations

import sqlite3
from collections.abc import Iterator, Mapping
from contextlib import contextmanager
from pathlib import Path
from typing import Any, cast

__all__ = ["database_url", "open_db", "set_pragmas", "db_cursor", "transaction"]


# ---- Connections ------------------------------------------------------------


def database_url(path: str | Path, *, mode: str = "rwc") -> str:
    """Return the display URL for ``path`` (``sqlite:<absolute-path>?mode=rwc``)."""

    return f"sqlite:{Path(path).as_posix()}?mode={mode}"


def open_db(
    path: str | Path,
    *,
    mode: str = "rwc",
    pragmas: Mapping[str, object] | None = None,
) -> sqlite3.Connection:
    """
    Open a SQLite database with predictable defaults.

    mode: "ro" (read-only), "rw", "rwc" (create if needed). Default: "rwc".
    The connection runs in autocommit mode; use :func:`transaction` for
    multi-statement writes.
    """
    uri = f"file:{Path(path).as_posix()}?mode={mode}"
    conn = sqlite3.connect(uri, uri=True, check_same_thread=False, isolation_level=None)
    conn.row_factory = sqlite3.Row
    if pragmas:
        try:
            set_pragmas(conn, pragmas)
        except (sqlite3.Error, ValueError):
            conn.close()
            raise
    return conn


def set_pragmas(conn: sqlite3.Connection, opts: Mapping[str, object]) -> None:
    """Apply the connection pragmas in ``opts``.

    Supported keys are ``foreign_keys``, ``journal_mode`` and
    ``busy_timeout_ms``; any other key raises ``ValueError``.
    """

    for key, value in opts.items():
        name = str(key).lower()
        if name == "foreign_keys":
            conn.execute(f"PRAGMA foreign_keys={'ON' if value else 'OFF'}")
        elif name == "journal_mode":
            conn.execute(f"PRAGMA journal_mode={value}")
        elif name == "busy_timeout_ms":
            conn.execute(f"PRAGMA busy_timeout={int(cast(Any, value))}")
        else:
            raise ValueError(f"Unsupported pragma: {key!r}")


# ---- Cursors / Transactions -------------------------------------------------


@contextmanager
def db_cursor(conn: sqlite3.Connection) -> Iterator[sqlite3.Cursor]:
    """Context manager that closes the cursor after use."""

    cur = conn.cursor()
    try:
        yield cur
    finally:
        cur.close()


@contextmanager
def transaction(
    conn: sqlite3.Connection,
    *,
    begin: str = "BEGIN IMMEDIATE",
) -> Iterator[sqlite3.Connection]:
    """
    Transaction wrapper that commits on success and rolls back on error.
    Uses BEGIN IMMEDIATE by default to reduce write contention.
    """

    conn.execute(begin)
    try:
        yield conn
        conn.execute("COMMIT")
    except BaseException:
        conn.execute("ROLLBACK")
        raise
