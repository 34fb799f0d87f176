"""Utility functions for valconsole."""

from valconsole.utils.helpers import ensure_dir, get_data_path, wall_clock, write_artifact

__all__ = ["ensure_dir", "get_data_path", "wall_clock", "write_artifact"]
