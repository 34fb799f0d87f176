"""Configuration schema using Pydantic.

The console reads one JSON file (``console.json`` by default). The ``config``
section is handed to the transport untouched; everything else drives the
console and the election workflow.
"""

from typing import Any, Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class ConsoleConfig(BaseSettings):
    """Root configuration for valconsole."""
    transport: str | None = None  # "module:attr" factory returning a Channel
    transport_config: dict[str, Any] | None = None  # "config" section of console.json, opaque
    wallet_id: str | None = None  # masterchain wallet, "-1:<64 hex>"
    max_factor: float | None = None
    bid_encoding: Literal["fixed", "abi"] = "fixed"
    abi_encoder: str | None = None  # "module:attr", required when bid_encoding == "abi"
    secondary_key: bool = False  # register a BLS key and embed it into the bid
    query_timeout: float = Field(default=30.0, gt=0)  # seconds per round trip

    model_config = SettingsConfigDict(
        env_prefix="VALCONSOLE_",
        env_nested_delimiter="__",
    )
