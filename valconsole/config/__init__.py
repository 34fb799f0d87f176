"""Configuration module for valconsole."""

from valconsole.config.loader import get_config_path, load_config
from valconsole.config.schema import ConsoleConfig

__all__ = ["ConsoleConfig", "get_config_path", "load_config"]
