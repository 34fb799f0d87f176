"""Configuration loading utilities."""

import json
from pathlib import Path
from typing import Any

import pydantic

from valconsole.config.schema import ConsoleConfig

# console.json keys that were renamed on the Python side
RENAMED_KEYS: dict[str, str] = {
    "config": "transport_config",
}


def get_config_path() -> Path:
    """Get the default configuration file path (current directory, like the node tooling)."""
    return Path("console.json")


def load_config(config_path: Path | None = None) -> ConsoleConfig:
    """
    Load configuration from file.

    Args:
        config_path: Optional path to config file. Uses default if not provided.

    Returns:
        Loaded configuration object.
    """
    path = config_path or get_config_path()
    if not path.exists():
        raise FileNotFoundError(f"Console config not found: {path}")
    try:
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        raise ValueError(f"Failed to load config from {path}: {e}") from e
    if not isinstance(data, dict):
        raise ValueError(f"Failed to load config from {path}: top level must be an object")
    try:
        return ConsoleConfig(**_migrate_config(data))
    except pydantic.ValidationError as e:
        raise ValueError(f"Invalid config in {path}: {e}") from e


def _migrate_config(data: dict[str, Any]) -> dict[str, Any]:
    """Snake-case top-level keys and apply renames; the transport section is kept verbatim."""
    result: dict[str, Any] = {}
    for key, value in data.items():
        new_key = camel_to_snake(key)
        result[RENAMED_KEYS.get(new_key, new_key)] = value
    return result


def camel_to_snake(name: str) -> str:
    """Convert camelCase to snake_case."""
    result = []
    for i, char in enumerate(name):
        if char.isupper() and i > 0:
            result.append("_")
        result.append(char.lower())
    return "".join(result)
