"""
Lazy, once-only connection management for the MissionControl database.

:class:`ConnectionManager` owns the single :class:`ConnectionHandle` for the
process. The first caller of :meth:`ConnectionManager.get_handle` resolves
the storage path, opens the database (retrying transient failures),
provisions the schema and caches the handle; later callers get the cached
handle without any I/O.

One lock guards both the handle and the initialisation state, and it is
held across the whole check-and-initialise region. Concurrent first
callers therefore block on the lock and find the handle ready instead of
opening and provisioning the database a second time. A failed
initialisation leaves nothing cached, so the next caller starts over from
path resolution.

Usage:
    manager = ConnectionManager()
    handle = manager.get_handle()
    rows = handle.fetch_all("SELECT * FROM projects")
"""

from __future__ import annotations

import enum
import logging
import sqlite3
import threading
import time
from collections.abc import Callable, Iterator, Sequence
from contextlib import contextmanager
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from .errors import ConnectionFailed
from .paths import StoragePathResolver
from .schema import SchemaProvisioner
from .settings import StorageSettings
from .sqlite_utils import database_url, db_cursor, open_db, transaction

log = logging.getLogger(__name__)

__all__ = ["ConnectionState", "ConnectionHandle", "ConnectionManager"]

Opener = Callable[..., sqlite3.Connection]

STATUS_ALREADY_INITIALIZED = "Database already initialized"


class ConnectionState(enum.Enum):
    UNINITIALIZED = "uninitialized"
    INITIALIZING = "initializing"
    READY = "ready"


@dataclass
class ConnectionHandle:
    """The shared database connection plus what was learned while opening it."""

    path: Path
    url: str
    conn: sqlite3.Connection
    is_new_database: bool = False
    _lock: threading.RLock = field(
        default_factory=threading.RLock, init=False, repr=False, compare=False
    )

    # ------------------------------------------------------------------ #
    # Query helpers                                                      #
    # ------------------------------------------------------------------ #
    def fetch_all(self, sql: str, params: Sequence[Any] = ()) -> list[sqlite3.Row]:
        with self._lock, db_cursor(self.conn) as cur:
            cur.execute(sql, tuple(params))
            return cur.fetchall()

    def fetch_one(self, sql: str, params: Sequence[Any] = ()) -> sqlite3.Row | None:
        # fetchall() steps RETURNING statements to completion before the cursor closes
        rows = self.fetch_all(sql, params)
        return rows[0] if rows else None

    def execute(self, sql: str, params: Sequence[Any] = ()) -> int:
        """Run a write statement and return the number of affected rows."""

        with self._lock, db_cursor(self.conn) as cur:
            cur.execute(sql, tuple(params))
            return cur.rowcount

    @contextmanager
    def transaction(self) -> Iterator[ConnectionHandle]:
        """Hold the handle exclusively for a ``BEGIN IMMEDIATE`` ... ``COMMIT`` block."""

        with self._lock, transaction(self.conn):
            yield self


class ConnectionManager:
    """Owns the lazily created :class:`ConnectionHandle`."""

    def __init__(
        self,
        settings: StorageSettings | None = None,
        *,
        resolver: StoragePathResolver | None = None,
        provisioner: SchemaProvisioner | None = None,
        opener: Opener = open_db,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.settings = settings or StorageSettings()
        self.resolver = resolver or StoragePathResolver(self.settings)
        self.provisioner = provisioner or SchemaProvisioner(self.settings)
        self._opener = opener
        self._sleep = sleep

        self._lock = threading.Lock()
        self._state = ConnectionState.UNINITIALIZED
        self._handle: ConnectionHandle | None = None

    # ------------------------------------------------------------------ #
    # Public API                                                         #
    # ------------------------------------------------------------------ #
    @property
    def state(self) -> ConnectionState:
        return self._state

    @property
    def is_initialized(self) -> bool:
        return self._state is ConnectionState.READY

    def get_handle(self) -> ConnectionHandle:
        """Return the shared handle, initialising the database on first use.

        Raises:
            NoWritableLocation: no candidate directory is writable.
            ConnectionFailed: every connection attempt failed.
            SchemaError: the connection opened but provisioning failed.
        """

        handle = self._handle
        if handle is not None:
            return handle

        with self._lock:
            handle = self._handle
            if handle is None:
                handle = self._initialize_locked()
            return handle

    def initialize(self) -> str:
        """Initialise the database if needed and return a human-readable status."""

        with self._lock:
            if self._handle is not None:
                return STATUS_ALREADY_INITIALIZED
            handle = self._initialize_locked()

        if handle.is_new_database:
            return f"New database created and initialized successfully at: {handle.url}"
        return f"Existing database initialized successfully at: {handle.url}"

    # ------------------------------------------------------------------ #
    # Initialisation (caller holds self._lock)                           #
    # ------------------------------------------------------------------ #
    def _initialize_locked(self) -> ConnectionHandle:
        self._state = ConnectionState.INITIALIZING
        log.info("Starting database initialization")
        try:
            # Resolution is deterministic; failures are not retried.
            resolved = self.resolver.resolve()
            db_path = resolved.resolve()
            url = database_url(db_path)
            is_new = not db_path.exists()
            if is_new:
                log.info("Creating new database file at %s", db_path)

            conn = self._connect_with_retry(db_path, url)
            try:
                seeded = self.provisioner.provision(conn)
            except BaseException:
                conn.close()
                raise

            if is_new:
                log.info("New database tables created")
            elif seeded:
                log.info("Existing database had no projects; default project seeded")
            else:
                log.info("Database tables verified")

            handle = ConnectionHandle(path=db_path, url=url, conn=conn, is_new_database=is_new)
            self._handle = handle
            self._state = ConnectionState.READY
            log.info("Database initialization completed (%s)", url)
            return handle
        finally:
            if self._handle is None:
                self._state = ConnectionState.UNINITIALIZED

    def _connect_with_retry(self, db_path: Path, url: str) -> sqlite3.Connection:
        attempts = self.settings.connect_attempts
        delay = self.settings.retry_delay
        last_error: BaseException | None = None

        log.info("Connecting to database: %s", url)
        for attempt in range(1, attempts + 1):
            log.info("Connection attempt %d of %d", attempt, attempts)
            try:
                conn = self._opener(db_path, mode="rwc", pragmas=self.settings.pragmas())
            except (sqlite3.Error, OSError) as exc:
                last_error = exc
                log.warning("Failed to connect to database (attempt %d): %s", attempt, exc)
                if attempt < attempts:
                    log.info("Retrying in %.1f second(s)", delay)
                    self._sleep(delay)
                continue

            log.info("Database connected successfully on attempt %d", attempt)
            return conn

        log.error("All %d connection attempts to %s failed", attempts, url)
        raise ConnectionFailed(url, attempts, last_error) from last_error
