"""Utility functions for valconsole."""

from __future__ import annotations

import time
from pathlib import Path
from typing import Callable

Clock = Callable[[], int]


def wall_clock() -> int:
    """Current unix time in whole seconds."""
    return int(time.time())


def ensure_dir(path: Path) -> Path:
    """Ensure a directory exists, return it."""
    path.mkdir(parents=True, exist_ok=True)
    return path


def get_data_path() -> Path:
    """Get the valconsole data directory (~/.valconsole)."""
    return ensure_dir(Path.home() / ".valconsole")


def write_artifact(path: str | Path, data: bytes) -> Path:
    """Write a binary artifact, creating parent directories as needed."""
    target = Path(path).expanduser()
    if target.parent != Path("."):
        ensure_dir(target.parent)
    target.write_bytes(data)
    return target
