"""
Logging setup for the ``midiviz`` command line.

Library modules only create ``midiviz.*`` loggers. Handlers are attached here,
from a :class:`~midiviz.config.Settings`, by whatever process embeds the
pipeline.
"""

from __future__ import annotations

import logging
import sys
import traceback
from datetime import datetime
from pathlib import Path

from .config import Settings

_LOGGER = logging.getLogger("midiviz.logging")

PACKAGE_LOGGER = "midiviz"
LOG_FILE_NAME = "midiviz.log"

_CONSOLE_FORMAT = "%(level_prefix)s %(component)s: %(message)s"
_FILE_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
_FILE_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
_LEVEL_PREFIXES = {
    logging.DEBUG: "🐛",
    logging.INFO: "ℹ️",
    logging.WARNING: "⚠️",
    logging.ERROR: "❌",
    logging.CRITICAL: "💥",
}

_installed: list[logging.Handler] = []
_active: Settings | None = None


class _ComponentFormatter(logging.Formatter):
    """Console lines read ``⚠️ track: ...`` rather than ``midiviz.track``."""

    def format(self, record: logging.LogRecord) -> str:
        record.level_prefix = _LEVEL_PREFIXES.get(record.levelno, "")
        name = record.name
        if name.startswith(PACKAGE_LOGGER + "."):
            name = name[len(PACKAGE_LOGGER) + 1 :]
        record.component = name
        return super().format(record)


def log_path(settings: Settings) -> Path:
    return settings.log_dir / LOG_FILE_NAME


def _drop_installed(logger: logging.Logger) -> None:
    while _installed:
        handler = _installed.pop()
        logger.removeHandler(handler)
        handler.close()


def configure_logging(settings: Settings, *, force: bool = False) -> Path | None:
    """Attach console and file handlers to the ``midiviz`` logger.

    Calling again with equal settings does nothing. New settings replace the
    handlers installed by the previous call and leave foreign handlers alone.
    The console handler is skipped when the root logger already has handlers,
    so a host application (or pytest) keeps ownership of the console.

    Returns the log file in use, or ``None`` when it could not be opened.
    """
    global _active
    logger = logging.getLogger(PACKAGE_LOGGER)
    attached = bool(_installed) and all(handler in logger.handlers for handler in _installed)
    if _active == settings and attached and not force:
        return log_path(settings)

    _drop_installed(logger)
    logger.setLevel(logging.DEBUG)
    logger.propagate = True

    if force or not logging.getLogger().handlers:
        console = logging.StreamHandler(stream=sys.__stderr__)
        console.setLevel(logging.DEBUG if settings.debug else logging.INFO)
        console.setFormatter(_ComponentFormatter(_CONSOLE_FORMAT))
        logger.addHandler(console)
        _installed.append(console)

    _active = settings
    path = log_path(settings)
    try:
        settings.log_dir.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(path, encoding="utf-8")
    except OSError as exc:
        _LOGGER.warning("File logging disabled, cannot open %s: %s", path, exc)
        return None
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(logging.Formatter(_FILE_FORMAT, datefmt=_FILE_DATE_FORMAT))
    logger.addHandler(file_handler)
    _installed.append(file_handler)
    return path


def log_exception(context: str, exc: BaseException, settings: Settings) -> Path | None:
    """Append a timestamped traceback for ``exc`` to the settings' log file."""
    path = log_path(settings)
    stamp = datetime.now().isoformat(timespec="seconds")
    try:
        settings.log_dir.mkdir(parents=True, exist_ok=True)
        with path.open("a", encoding="utf-8") as handle:
            handle.write(f"[{stamp}] {context} failed: {type(exc).__name__}: {exc}\n")
            traceback.print_exception(type(exc), exc, exc.__traceback__, file=handle)
            handle.write("\n")
    except OSError as log_exc:
        _LOGGER.warning("Failed to write %s: %s", path, log_exc)
        return None
    return path
