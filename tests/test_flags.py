import pytest

from missioncontrol.app import flags
from missioncontrol.storage.settings import StorageSettings


def test_parse_features_handles_all_token_forms():
    parsed = flags.parse_features(" wal , !foreign-keys, -beta, sync=off, fast=yes, bogus=maybe,, ")

    assert parsed == {
        "wal": True,
        "foreign_keys": False,
        "beta": False,
        "sync": False,
        "fast": True,
    }


def test_settings_defaults():
    settings = StorageSettings.from_env({})

    assert settings.database_filename == "todos.db"
    assert settings.connect_attempts == 3
    assert settings.retry_delay == pytest.approx(1.0)
    assert settings.pragmas() == {"foreign_keys": True, "busy_timeout_ms": 5000}


def test_settings_from_features():
    settings = StorageSettings.from_env({flags.ENV_VAR: "wal,!foreign_keys"})

    assert settings.wal_journal
    assert not settings.foreign_keys
    assert settings.pragmas()["journal_mode"] == "WAL"
    assert settings.pragmas()["foreign_keys"] is False


@pytest.mark.parametrize(
    "overrides",
    [{"connect_attempts": 0}, {"retry_delay": -1.0}, {"database_filename": ""}],
)
def test_settings_reject_invalid_values(overrides):
    with pytest.raises(ValueError):
        StorageSettings(**overrides)
