"""
Locate a writable directory for the MissionControl database.

Candidates are probed in a fixed priority order:

1. ``$XDG_DATA_HOME/<app>``
2. ``$HOME/.local/share/<app>``
3. ``$HOME/.<app>``
4. ``%APPDATA%/<app>``
5. ``<system temp>/<app>``

A candidate wins when its directory can be created and a marker file can be
written to it and removed again. The database file itself does not need to
exist yet.
"""

from __future__ import annotations

import logging
import os
import tempfile
from collections.abc import Callable, Iterator, Mapping
from pathlib import Path

from .errors import NoWritableLocation, PathAttempt
from .settings import StorageSettings

log = logging.getLogger(__name__)

__all__ = ["StoragePathResolver"]


class StoragePathResolver:
    """Pick the first writable candidate directory and return the database path."""

    def __init__(
        self,
        settings: StorageSettings | None = None,
        *,
        environ: Mapping[str, str] | None = None,
        temp_dir: Callable[[], str] = tempfile.gettempdir,
    ) -> None:
        self.settings = settings or StorageSettings()
        self._environ = environ
        self._temp_dir = temp_dir

    @property
    def environ(self) -> Mapping[str, str]:
        return os.environ if self._environ is None else self._environ

    def _env(self, name: str) -> str | None:
        value = self.environ.get(name)
        return value or None

    def candidates(self) -> Iterator[Path]:
        """Yield candidate directories in priority order, skipping unset variables."""

        app = self.settings.app_dir_name

        xdg_data_home = self._env("XDG_DATA_HOME")
        if xdg_data_home:
            yield Path(xdg_data_home) / app

        home = self._env("HOME")
        if home:
            yield Path(home) / ".local" / "share" / app
            yield Path(home) / f".{app}"

        appdata = self._env("APPDATA")
        if appdata:
            yield Path(appdata) / app

        yield Path(self._temp_dir()) / app

    def resolve(self) -> Path:
        """Return ``<first writable candidate>/<database filename>``.

        Raises:
            NoWritableLocation: every candidate failed directory creation or
                the write probe. The exception lists each attempt.
        """

        attempts: list[PathAttempt] = []
        for directory in self.candidates():
            try:
                directory.mkdir(parents=True, exist_ok=True)
            except OSError as exc:
                log.warning("Cannot create directory %s: %s", directory, exc)
                attempts.append(PathAttempt(directory, "mkdir", str(exc)))
                continue

            probe = directory / self.settings.probe_filename
            try:
                probe.write_text("test", encoding="utf-8")
                probe.unlink()
            except OSError as exc:
                log.warning("Cannot write to directory %s: %s", directory, exc)
                attempts.append(PathAttempt(directory, "write-probe", str(exc)))
                continue

            db_path = directory / self.settings.database_filename
            if not db_path.exists():
                log.info("Database file %s does not exist yet; it will be created on connect", db_path)
            log.debug("Resolved database path %s after %d rejected candidate(s)", db_path, len(attempts))
            return db_path

        log.error("No writable location for the database (%d candidates tried)", len(attempts))
        raise NoWritableLocation(attempts)
