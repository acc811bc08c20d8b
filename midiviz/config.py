from __future__ import annotations

import logging
import os
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field

_LOGGER = logging.getLogger("midiviz.config")

DEFAULT_BPM_ENV = "MIDIVIZ_DEFAULT_BPM"
EXPORT_FPS_ENV = "MIDIVIZ_EXPORT_FPS"
DEBUG_ENV = "MIDIVIZ_DEBUG"
LOG_DIR_ENV = "MIDIVIZ_LOG_DIR"

_DEFAULT_BPM = 120.0
_DEFAULT_EXPORT_FPS = 30
_FALSE_FLAGS = frozenset({"", "0", "false", "no", "off"})


def default_log_dir() -> Path:
    return Path.home() / ".cache" / "midiviz" / "logs"


def _env_int(name: str, default: int) -> int:
    value = os.environ.get(name)
    if value is None or value.strip() == "":
        return default
    try:
        return int(value)
    except ValueError:
        _LOGGER.debug("Ignoring non-integer %s=%r", name, value)
        return default


def _env_float(name: str, default: float) -> float:
    value = os.environ.get(name)
    if value is None or value.strip() == "":
        return default
    try:
        return float(value)
    except ValueError:
        _LOGGER.debug("Ignoring non-numeric %s=%r", name, value)
        return default


def _env_flag(name: str) -> bool:
    return os.environ.get(name, "").strip().lower() not in _FALSE_FLAGS


def _env_path(name: str, default: Path) -> Path:
    value = os.environ.get(name, "").strip()
    return Path(value).expanduser() if value else default


class Settings(BaseModel):
    """Process-level defaults for the CLI and headless export."""

    default_bpm: float = Field(default=_DEFAULT_BPM, gt=0)
    export_fps: int = Field(default=_DEFAULT_EXPORT_FPS, gt=0)
    debug: bool = False
    log_dir: Path = Field(default_factory=default_log_dir)

    model_config = ConfigDict(frozen=True, extra="forbid")


def load_settings() -> Settings:
    bpm = _env_float(DEFAULT_BPM_ENV, _DEFAULT_BPM)
    fps = _env_int(EXPORT_FPS_ENV, _DEFAULT_EXPORT_FPS)
    if bpm <= 0:
        _LOGGER.debug("Ignoring non-positive %s=%r", DEFAULT_BPM_ENV, bpm)
        bpm = _DEFAULT_BPM
    if fps <= 0:
        _LOGGER.debug("Ignoring non-positive %s=%r", EXPORT_FPS_ENV, fps)
        fps = _DEFAULT_EXPORT_FPS
    return Settings(
        default_bpm=bpm,
        export_fps=fps,
        debug=_env_flag(DEBUG_ENV),
        log_dir=_env_path(LOG_DIR_ENV, default_log_dir()),
    )
