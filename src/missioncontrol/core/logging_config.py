# MissionControl
# Copyright © 2025 The MissionControl Authors
# Licensed under CC BY-NC-SA 4.0 International
# http://creativecommons.org/licenses/by-nc-sa/4.0/

"""Production-grade logging configuration with file rotation."""

from __future__ import annotations

import logging
import os
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path

PACKAGE_LOGGER = "missioncontrol"


def setup_logging(app_name: str = "MissionControl", console_level: int = logging.INFO) -> Path:
    """
    Configure logging with file rotation.

    Creates two log files:
    - missioncontrol.log: All DEBUG+ messages from the package (10 MB per file, 5 rotations)
    - errors.log: ERROR+ messages only (5 MB per file, 3 rotations)

    Args:
        app_name: Application name for log directory
        console_level: Minimum level for console output (default: INFO)

    Returns:
        Path to the log directory
    """
    log_dir = _get_log_directory(app_name)
    log_dir.mkdir(parents=True, exist_ok=True)

    root_logger = logging.getLogger()
    root_logger.setLevel(logging.INFO)

    # Remove any existing handlers (in case this is called multiple times)
    for handler in list(root_logger.handlers):
        if getattr(handler, "_missioncontrol", False):
            root_logger.removeHandler(handler)
            handler.close()

    detailed_formatter = logging.Formatter(
        "%(asctime)s | %(levelname)-8s | %(name)s:%(lineno)d | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    simple_formatter = logging.Formatter("%(levelname)-8s | %(name)s | %(message)s")

    pkg_logger = logging.getLogger(PACKAGE_LOGGER)
    pkg_logger.setLevel(logging.DEBUG)
    for handler in list(pkg_logger.handlers):
        pkg_logger.removeHandler(handler)
        handler.close()

    app_log_path = log_dir / "missioncontrol.log"
    app_handler = RotatingFileHandler(
        app_log_path,
        maxBytes=10 * 1024 * 1024,  # 10 MB
        backupCount=5,
        encoding="utf-8",
    )
    app_handler.setLevel(logging.DEBUG)
    app_handler.setFormatter(detailed_formatter)
    pkg_logger.addHandler(app_handler)

    # Error-only log (easier to scan for problems)
    error_log_path = log_dir / "errors.log"
    error_handler = RotatingFileHandler(
        error_log_path,
        maxBytes=5 * 1024 * 1024,  # 5 MB
        backupCount=3,
        encoding="utf-8",
    )
    error_handler.setLevel(logging.ERROR)
    error_handler.setFormatter(detailed_formatter)
    error_handler._missioncontrol = True  # type: ignore[attr-defined]
    root_logger.addHandler(error_handler)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(console_level)
    console_handler.setFormatter(simple_formatter)
    pkg_logger.addHandler(console_handler)

    log = logging.getLogger(__name__)
    log.info("=" * 70)
    log.info(f"{app_name} logging initialized")
    log.info(f"Log directory: {log_dir}")
    log.info(f"Main log: {app_log_path}")
    log.info(f"Error log: {error_log_path}")
    log.info(f"Platform: {sys.platform}, Python: {sys.version.split()[0]}")
    log.info("=" * 70)

    return log_dir


def _get_log_directory(app_name: str) -> Path:
    """
    Get platform-specific log directory.

    - Windows: %LOCALAPPDATA%\\AppName\\logs
    - macOS: ~/Library/Logs/AppName
    - Linux: ~/.local/share/AppName/logs
    """
    home = Path.home()

    if sys.platform == "win32":
        base = Path(os.environ.get("LOCALAPPDATA", home / "AppData" / "Local"))
        return base / app_name / "logs"

    elif sys.platform == "darwin":
        return home / "Library" / "Logs" / app_name

    else:
        # Linux/Unix: Use XDG Base Directory Specification
        xdg_data_home = os.environ.get("XDG_DATA_HOME") or home / ".local" / "share"
        return Path(xdg_data_home) / app_name / "logs"


def get_log_directory(app_name: str = "MissionControl") -> Path:
    """
    Get the log directory path without setting up logging.

    Useful for displaying log location to users or opening log folder.
    """
    return _get_log_directory(app_name)
