"""Control session: one channel, one command in flight at a time."""

from __future__ import annotations

import asyncio
import shlex
from typing import Sequence

from loguru import logger

from valconsole.config.schema import ConsoleConfig
from valconsole.control.commands import command_help, command_receive, command_send
from valconsole.tl.codec import deserialize_boxed, serialize_boxed
from valconsole.tl.schema import ControlQuery, ControlQueryError
from valconsole.transport.channel import Channel, open_channel
from valconsole.utils.exceptions import (
    ChannelError,
    ConsoleError,
    ParameterError,
    FormatError,
    RemoteError,
    TimeoutError,
    sanitize_error_message,
)
from valconsole.utils.helpers import Clock, wall_clock

ELECTION_BID_NAMES = ("election-bid", "election_bid", "ebid")
CONFIG_PARAM_NAMES = ("config_param", "cparam")
RECOVER_STAKE_NAMES = ("recover_stake",)


class ControlSession:
    """Owns one authenticated channel to the validator control endpoint.

    Use as an async context manager so the channel is released on every
    exit path::

        async with await ControlSession.connect(config) as session:
            text, raw = await session.execute("getstats")
    """

    def __init__(self, channel: Channel, config: ConsoleConfig, *, clock: Clock = wall_clock):
        self.config = config
        self.clock = clock
        self._channel = channel
        self._lock = asyncio.Lock()
        self._closed = False

    @classmethod
    async def connect(cls, config: ConsoleConfig, *, clock: Clock = wall_clock) -> "ControlSession":
        channel = await open_channel(config.transport, config.transport_config)
        return cls(channel, config, clock=clock)

    @property
    def closed(self) -> bool:
        return self._closed

    async def __aenter__(self) -> "ControlSession":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.shutdown()

    async def shutdown(self) -> None:
        """Release the channel; teardown errors are logged, never raised."""
        if self._closed:
            return
        self._closed = True
        try:
            await self._channel.shutdown()
        except Exception as exc:
            logger.warning(f"channel shutdown failed: {sanitize_error_message(str(exc))}")

    async def execute(self, line: str) -> tuple[str, bytes]:
        """Run one console line: a registry command or a local workflow."""
        try:
            tokens = shlex.split(line)
        except ValueError as exc:
            raise FormatError(f"can't parse command line: {exc}") from exc
        if not tokens:
            raise ParameterError("empty command")
        name, params = tokens[0], tokens[1:]
        if name in ELECTION_BID_NAMES:
            from valconsole.election.bid import process_election_bid
            return await process_election_bid(self, params)
        if name in CONFIG_PARAM_NAMES:
            from valconsole.state.config_param import process_config_param
            return process_config_param(params)
        if name in RECOVER_STAKE_NAMES:
            from valconsole.election.bid import process_recover_stake
            return process_recover_stake(params, clock=self.clock)
        if name == "help":
            return command_help(params[0] if params else None), b""
        return await self.process_command(name, params)

    async def process_command(self, name: str, params: Sequence[str]) -> tuple[str, bytes]:
        """One strict request/response round trip for a registry command."""
        params = [str(param) for param in params]
        query = command_send(name, params, self.clock)
        envelope = serialize_boxed(ControlQuery(data=serialize_boxed(query)))
        timeout = self.config.query_timeout
        async with self._lock:
            if self._closed:
                raise ChannelError("session is closed")
            logger.debug(f"query {name} ({query.tl_name}, {len(envelope)} bytes)")
            try:
                raw = await asyncio.wait_for(self._channel.query(envelope), timeout=timeout)
            except asyncio.TimeoutError as exc:
                raise TimeoutError(name, timeout).with_context(command=name, params=params) from exc
            except ConsoleError as exc:
                raise exc.with_context(command=name, params=params)
            except Exception as exc:
                raise ChannelError(f"Error receiving answer: {exc}").with_context(
                    command=name, params=params
                ) from exc
        try:
            answer = deserialize_boxed(raw)
            if isinstance(answer, ControlQueryError):
                raise RemoteError(answer.code, answer.message, command=name)
            result = command_receive(name, answer, params)
        except ConsoleError as exc:
            raise exc.with_context(command=name, params=params)
        logger.debug(f"answer {name} ({answer.tl_name})")
        return result
