import sqlite3

import pytest

from missioncontrol.app import flags
from missioncontrol.storage.settings import StorageSettings
from missioncontrol.storage.sqlite_utils import database_url, open_db, set_pragmas


def _pragma(conn: sqlite3.Connection, name: str):
    return conn.execute(f"PRAGMA {name}").fetchone()[0]


def test_default_settings_pragmas_are_applied(tmp_path):
    conn = open_db(tmp_path / "todos.db", pragmas=StorageSettings.from_env({}).pragmas())

    assert _pragma(conn, "foreign_keys") == 1
    assert _pragma(conn, "busy_timeout") == 5000
    assert str(_pragma(conn, "journal_mode")).lower() != "wal"


def test_feature_pragmas_are_applied(tmp_path):
    settings = StorageSettings.from_env({flags.ENV_VAR: "wal,!foreign_keys"})

    conn = open_db(tmp_path / "todos.db", pragmas=settings.pragmas())

    assert _pragma(conn, "foreign_keys") == 0
    assert str(_pragma(conn, "journal_mode")).lower() == "wal"


def test_unsupported_pragma_is_rejected(tmp_path):
    conn = open_db(tmp_path / "todos.db")

    with pytest.raises(ValueError):
        set_pragmas(conn, {"cache_size": 2000})

    with pytest.raises(ValueError):
        open_db(tmp_path / "other.db", pragmas={"synchronous": "OFF"})


def test_from_env_reads_process_environment(monkeypatch):
    monkeypatch.setenv(flags.ENV_VAR, "wal")

    assert StorageSettings.from_env().wal_journal

    monkeypatch.delenv(flags.ENV_VAR)
    assert not StorageSettings.from_env().wal_journal


def test_database_url_uses_posix_path(tmp_path):
    path = tmp_path / "todos.db"

    assert database_url(path) == f"sqlite:{path.as_posix()}?mode=rwc"
