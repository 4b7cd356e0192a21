"""Logging helpers for the resume engine.

Handlers are installed on the ``resumer`` package logger rather than the
root logger, so embedding applications keep control of their own logging.
Console output goes to stderr; the CLI reserves stdout for JSON and PDF data.
"""

from __future__ import annotations

import logging
import logging.handlers
import os
import sys
from pathlib import Path
from typing import Any, Callable, MutableMapping

__all__ = [
    "PACKAGE_LOGGER",
    "setup_logging",
    "get_log_path",
    "BuildLogAdapter",
    "build_logger",
    "level_for",
]

PACKAGE_LOGGER = "resumer"
LOG_DIR_ENV = "RESUMER_LOG_DIR"
LOG_FILENAME = "resumer.log"
LOG_MAX_BYTES = 1_000_000
LOG_BACKUP_COUNT = 3

_DEFAULT_LOG_DIR = Path.home() / ".resumer" / "logs"
_FILE_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
_CONSOLE_FORMAT = "%(levelname)s %(name)s: %(message)s"
_NOISY_LOGGERS: tuple[str, ...] = ("asyncio", "httpx", "httpcore", "reportlab")
_installed: list[logging.Handler] = []
_LOG_PATH: Path | None = None


def setup_logging(
    level: int = logging.INFO,
    *,
    log_dir: Path | str | None = None,
    console: bool = True,
    force: bool = False,
) -> Path:
    """Attach a rotating file handler (and a stderr handler) to the package logger.

    Calling again without ``force`` keeps the existing configuration. With
    ``force`` the handlers installed earlier are closed and replaced.
    """

    global _LOG_PATH
    if _installed and not force and _LOG_PATH is not None:
        return _LOG_PATH

    package_logger = logging.getLogger(PACKAGE_LOGGER)
    _remove_installed(package_logger)

    target_dir = _resolve_log_dir(log_dir)
    target_dir.mkdir(parents=True, exist_ok=True)
    log_path = target_dir / LOG_FILENAME

    file_handler = logging.handlers.RotatingFileHandler(
        log_path, maxBytes=LOG_MAX_BYTES, backupCount=LOG_BACKUP_COUNT, encoding="utf-8"
    )
    file_handler.setFormatter(logging.Formatter(fmt=_FILE_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
    _installed.append(file_handler)
    if console:
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setFormatter(logging.Formatter(fmt=_CONSOLE_FORMAT))
        _installed.append(console_handler)

    for handler in _installed:
        handler.setLevel(level)
        package_logger.addHandler(handler)
    package_logger.setLevel(level)
    _tune_external_loggers(level)

    _LOG_PATH = log_path
    return log_path


def get_log_path() -> Path | None:
    """Return the log file of the active configuration, if any."""

    return _LOG_PATH


class BuildLogAdapter(logging.LoggerAdapter):
    """Prefix records with the build they concern.

    The build id is read through a callable so the prefix follows the session
    after a new build record is created mid-session.
    """

    def __init__(self, logger: logging.Logger, build_id_provider: Callable[[], str | None]) -> None:
        super().__init__(logger, {})
        self._build_id_provider = build_id_provider

    def process(self, msg: Any, kwargs: MutableMapping[str, Any]) -> tuple[Any, MutableMapping[str, Any]]:
        build_id = self._build_id_provider() or "unsaved"
        return f"[build={build_id}] {msg}", kwargs


def build_logger(name: str, build_id_provider: Callable[[], str | None]) -> BuildLogAdapter:
    """Return a logger whose records carry the current build id."""

    return BuildLogAdapter(logging.getLogger(name), build_id_provider)


def level_for(debug: bool) -> int:
    return logging.DEBUG if debug else logging.INFO


def _remove_installed(package_logger: logging.Logger) -> None:
    while _installed:
        handler = _installed.pop()
        package_logger.removeHandler(handler)
        handler.close()


def _resolve_log_dir(log_dir: Path | str | None) -> Path:
    return Path(log_dir or os.environ.get(LOG_DIR_ENV) or _DEFAULT_LOG_DIR).expanduser()


def _tune_external_loggers(package_level: int) -> None:
    # Third-party chatter stays at WARNING even in debug runs.
    quiet_level = max(logging.WARNING, package_level)
    for logger_name in _NOISY_LOGGERS:
        logging.getLogger(logger_name).setLevel(quiet_level)
