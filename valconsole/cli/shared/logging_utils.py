"""Loguru helpers for the console front-end."""

from __future__ import annotations

import sys
from pathlib import Path

from loguru import logger

_SINK_IDS: dict[str, int] = {}


def get_log_dir() -> Path:
    return Path.home() / ".valconsole" / "logs"


def ensure_rotating_log_file(name: str, level: str = "DEBUG") -> Path:
    """Ensure a rotating log sink for the given session name."""
    log_path = get_log_dir() / f"{name}.log"
    if name in _SINK_IDS:
        return log_path
    log_path.parent.mkdir(parents=True, exist_ok=True)
    sink_id = logger.add(
        str(log_path),
        level=level,
        rotation="10 MB",
        retention="14 days",
        enqueue=True,
        encoding="utf-8",
        backtrace=False,
        diagnose=False,
    )
    _SINK_IDS[name] = sink_id
    return log_path


def configure_logging(verbose: bool = False, log_file: bool = False) -> Path | None:
    """Route valconsole logs: TRACE to stderr when verbose, DEBUG to a rotating file when asked."""
    logger.remove()
    _SINK_IDS.clear()
    if not verbose and not log_file:
        logger.disable("valconsole")
        return None
    logger.enable("valconsole")
    if verbose:
        logger.add(sys.stderr, level="TRACE", format="{message}")
    if log_file:
        return ensure_rotating_log_file("console")
    return None
