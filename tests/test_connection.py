import sqlite3
import threading
import time
from pathlib import Path

import pytest

from missioncontrol.storage.connection import ConnectionManager, ConnectionState
from missioncontrol.storage.errors import ConnectionFailed, NoWritableLocation, SchemaError
from missioncontrol.storage.paths import StoragePathResolver
from missioncontrol.storage.schema import SchemaProvisioner
from missioncontrol.storage.sqlite_utils import open_db


class _CountingProvisioner(SchemaProvisioner):
    def __init__(self, delay: float = 0.0, failures: int = 0):
        super().__init__()
        self.calls = 0
        self.delay = delay
        self.failures = failures

    def provision(self, conn):
        self.calls += 1
        if self.delay:
            time.sleep(self.delay)
        if self.failures:
            self.failures -= 1
            raise SchemaError("create projects table", sqlite3.OperationalError("disk I/O error"))
        return super().provision(conn)


class _CountingResolver(StoragePathResolver):
    calls = 0

    def resolve(self):
        self.calls += 1
        return super().resolve()


class _FlakyOpener:
    def __init__(self, failures: int):
        self.failures = failures
        self.calls = 0
        self.connections: list[sqlite3.Connection] = []

    def __call__(self, path, **kwargs):
        self.calls += 1
        if self.failures:
            self.failures -= 1
            raise sqlite3.OperationalError("unable to open database file")
        conn = open_db(path, **kwargs)
        self.connections.append(conn)
        return conn


def _resolver(tmp_path: Path, cls=StoragePathResolver) -> StoragePathResolver:
    return cls(environ={"XDG_DATA_HOME": str(tmp_path / "data")}, temp_dir=lambda: str(tmp_path / "tmp"))


def _manager(tmp_path: Path, **kwargs) -> tuple[ConnectionManager, list[float]]:
    sleeps: list[float] = []
    kwargs.setdefault("resolver", _resolver(tmp_path))
    manager = ConnectionManager(sleep=sleeps.append, **kwargs)
    return manager, sleeps


def _db_path(tmp_path: Path) -> Path:
    return tmp_path / "data" / "missioncontrol" / "todos.db"


def test_fresh_environment_creates_database_with_default_project(tmp_path):
    manager, sleeps = _manager(tmp_path)
    assert manager.state is ConnectionState.UNINITIALIZED
    assert not _db_path(tmp_path).exists()

    handle = manager.get_handle()

    assert _db_path(tmp_path).exists()
    assert handle.is_new_database
    assert handle.path == _db_path(tmp_path).resolve()
    assert manager.state is ConnectionState.READY
    assert manager.is_initialized
    assert sleeps == []
    rows = handle.fetch_all("SELECT name, description FROM projects")
    assert [(row["name"], row["description"]) for row in rows] == [
        ("Default Project", "Your first project")
    ]


def test_ready_manager_returns_cached_handle_without_io(tmp_path):
    opener = _FlakyOpener(failures=0)
    resolver = _resolver(tmp_path, _CountingResolver)
    manager, _ = _manager(tmp_path, opener=opener, resolver=resolver)

    first = manager.get_handle()
    second = manager.get_handle()

    assert first is second
    assert opener.calls == 1
    assert resolver.calls == 1


def test_initialize_reports_status(tmp_path):
    manager, _ = _manager(tmp_path)
    url = f"sqlite:{_db_path(tmp_path).resolve().as_posix()}?mode=rwc"

    assert manager.initialize() == f"New database created and initialized successfully at: {url}"
    assert manager.initialize() == "Database already initialized"

    reopened, _ = _manager(tmp_path)
    assert reopened.initialize() == f"Existing database initialized successfully at: {url}"
    assert not reopened.get_handle().is_new_database
    assert len(reopened.get_handle().fetch_all("SELECT id FROM projects")) == 1


def test_concurrent_first_use_provisions_once(tmp_path):
    provisioner = _CountingProvisioner(delay=0.05)
    manager, _ = _manager(tmp_path, provisioner=provisioner)
    workers = 16
    barrier = threading.Barrier(workers)
    handles = []
    errors = []

    def _worker():
        barrier.wait()
        try:
            handles.append(manager.get_handle())
        except Exception as exc:  # pragma: no cover - surfaced by the assert below
            errors.append(exc)

    threads = [threading.Thread(target=_worker) for _ in range(workers)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert errors == []
    assert provisioner.calls == 1
    assert len(handles) == workers
    assert all(handle is handles[0] for handle in handles)
    assert len(handles[0].fetch_all("SELECT id FROM projects")) == 1


def test_connection_retries_then_succeeds(tmp_path):
    opener = _FlakyOpener(failures=2)
    provisioner = _CountingProvisioner()
    manager, sleeps = _manager(tmp_path, opener=opener, provisioner=provisioner)

    handle = manager.get_handle()

    assert handle.conn is opener.connections[0]
    assert opener.calls == 3
    assert sleeps == [1.0, 1.0]
    assert sum(sleeps) == pytest.approx(2.0)
    assert provisioner.calls == 1
    assert manager.is_initialized


def test_connection_failure_after_all_attempts(tmp_path):
    opener = _FlakyOpener(failures=5)
    provisioner = _CountingProvisioner()
    manager, sleeps = _manager(tmp_path, opener=opener, provisioner=provisioner)

    with pytest.raises(ConnectionFailed) as excinfo:
        manager.get_handle()

    assert excinfo.value.attempts == 3
    assert isinstance(excinfo.value.last_error, sqlite3.OperationalError)
    assert "unable to open database file" in str(excinfo.value)
    assert opener.calls == 3
    assert sleeps == [1.0, 1.0]
    assert provisioner.calls == 0
    assert manager.state is ConnectionState.UNINITIALIZED


def test_unwritable_environment_fails_without_connecting(tmp_path):
    blocker = tmp_path / "blocker"
    blocker.write_text("x", encoding="utf-8")
    resolver = StoragePathResolver(environ={}, temp_dir=lambda: str(blocker))
    opener = _FlakyOpener(failures=0)
    manager, sleeps = _manager(tmp_path, resolver=resolver, opener=opener)

    with pytest.raises(NoWritableLocation):
        manager.get_handle()

    assert opener.calls == 0
    assert sleeps == []
    assert not manager.is_initialized


def test_schema_failure_is_not_cached_and_retries_from_resolution(tmp_path):
    opener = _FlakyOpener(failures=0)
    provisioner = _CountingProvisioner(failures=1)
    resolver = _resolver(tmp_path, _CountingResolver)
    manager, sleeps = _manager(tmp_path, opener=opener, provisioner=provisioner, resolver=resolver)

    with pytest.raises(SchemaError):
        manager.get_handle()

    assert opener.calls == 1
    assert sleeps == []
    assert manager.state is ConnectionState.UNINITIALIZED
    with pytest.raises(sqlite3.ProgrammingError):
        opener.connections[0].execute("SELECT 1")

    handle = manager.get_handle()

    assert resolver.calls == 2
    assert opener.calls == 2
    assert provisioner.calls == 2
    assert handle.conn is opener.connections[1]
    assert manager.is_initialized


def test_incompatible_existing_database_raises_schema_error(tmp_path):
    db_path = _db_path(tmp_path)
    db_path.parent.mkdir(parents=True)
    with sqlite3.connect(db_path) as conn:
        conn.execute("CREATE TABLE projects (id INTEGER PRIMARY KEY, title TEXT)")
    conn.close()

    manager, _ = _manager(tmp_path)

    with pytest.raises(SchemaError) as excinfo:
        manager.get_handle()

    assert excinfo.value.step == "create default project"
    assert not manager.is_initialized


def test_handle_transaction_rolls_back_on_error(tmp_path):
    manager, _ = _manager(tmp_path)
    handle = manager.get_handle()

    with pytest.raises(RuntimeError):
        with handle.transaction():
            handle.execute("INSERT INTO projects (name) VALUES (?)", ("Scratch",))
            raise RuntimeError("abort")

    names = [row["name"] for row in handle.fetch_all("SELECT name FROM projects")]
    assert names == ["Default Project"]
