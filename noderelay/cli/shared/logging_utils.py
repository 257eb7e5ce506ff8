"""Loguru helpers for consistent logging in CLI commands."""

from __future__ import annotations

import sys
from pathlib import Path

from loguru import logger

_SINK_IDS: dict[str, int] = {}


def configure_stderr_logging(level: str = "WARNING") -> None:
    """Replace the stderr sink so only records at `level` or above are shown."""
    stale = _SINK_IDS.pop("stderr", None)
    if stale is None:
        logger.remove()
    else:
        logger.remove(stale)
    _SINK_IDS["stderr"] = logger.add(sys.stderr, level=level.upper(), backtrace=False, diagnose=False)


def ensure_rotating_log_file(path: str | Path, level: str = "INFO") -> Path:
    """Ensure a rotating log sink writing to `path`."""
    log_path = Path(path).expanduser()
    key = str(log_path)
    if key in _SINK_IDS:
        return log_path
    log_path.parent.mkdir(parents=True, exist_ok=True)
    sink_id = logger.add(
        key,
        level=level.upper(),
        rotation="10 MB",
        retention="14 days",
        enqueue=True,
        encoding="utf-8",
        backtrace=False,
        diagnose=False,
    )
    _SINK_IDS[key] = sink_id
    return log_path
