"""Authenticated channel contract and transport factory loading.

The encrypted transport itself lives outside this package. A transport is
plugged in through the console config as ``"module:attr"``; the referenced
callable receives the opaque ``config`` section and returns a Channel
(directly or as an awaitable).
"""

from __future__ import annotations

import importlib
import inspect
from typing import Any, Protocol, runtime_checkable

from loguru import logger

from valconsole.utils.exceptions import ConnectError


@runtime_checkable
class Channel(Protocol):
    async def query(self, data: bytes) -> bytes:
        """Send one request frame and wait for its full reply frame."""
        ...

    async def shutdown(self) -> None:
        ...


def load_object(ref: str) -> Any:
    """Resolve a ``module:attr`` reference."""
    module_ref, _, obj_name = ref.partition(":")
    module_ref = module_ref.strip()
    obj_name = obj_name.strip()
    if not module_ref or not obj_name:
        raise ValueError(f"expected 'module:attr', got {ref!r}")
    module = importlib.import_module(module_ref)
    target = module
    for part in obj_name.split("."):
        if not hasattr(target, part):
            raise AttributeError(f"{module_ref} has no attribute {obj_name}")
        target = getattr(target, part)
    return target


async def open_channel(transport: str | None, transport_config: dict[str, Any] | None) -> Channel:
    """Create a channel with the configured transport factory."""
    if not transport:
        raise ConnectError('config must name a "transport" factory (module:attr)')
    if transport_config is None:
        raise ConnectError('config must contain "config" section')
    try:
        factory = load_object(transport)
    except (ImportError, AttributeError, ValueError) as exc:
        raise ConnectError(f"can't load transport {transport}: {exc}") from exc
    try:
        channel = factory(transport_config)
        if inspect.isawaitable(channel):
            channel = await channel
    except ConnectError:
        raise
    except Exception as exc:
        raise ConnectError(f"can't connect with transport {transport}: {exc}") from exc
    if not isinstance(channel, Channel):
        raise ConnectError(f"transport {transport} returned {type(channel).__name__}, not a channel")
    logger.debug(f"channel opened via {transport}")
    return channel
