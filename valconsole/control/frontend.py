"""Batch and interactive loops on top of a control session."""

from __future__ import annotations

import asyncio
from typing import Awaitable, Callable, Iterable

from loguru import logger

from valconsole.control.session import ControlSession
from valconsole.utils.exceptions import ConsoleError, format_command_error

EXIT_COMMANDS = {"quit"}

Emit = Callable[[str], None]


async def run_one(session: ControlSession, line: str, emit: Emit) -> bool:
    """Execute one line and print the result or the error text. Returns success."""
    try:
        text, _ = await session.execute(line)
    except ConsoleError as exc:
        logger.debug(f"command failed: {exc} {exc.details}")
        emit(format_command_error(exc))
        return False
    except (OSError, ValueError) as exc:
        emit(format_command_error(exc))
        return False
    except Exception as exc:
        logger.exception(f"unexpected failure in {line!r}")
        emit(format_command_error(exc))
        return False
    emit(text)
    return True


async def run_batch(
    session: ControlSession,
    commands: Iterable[str],
    emit: Emit,
    *,
    delay: float = 0.0,
) -> int:
    """Run scheduled commands in order; a failure is printed and the next command still runs.

    Returns the number of failed commands.
    """
    failures = 0
    for command in commands:
        if not await run_one(session, command.strip('"'), emit):
            failures += 1
        if delay > 0:
            await asyncio.sleep(delay)
    return failures


async def run_interactive(
    session: ControlSession,
    read_line: Callable[[], Awaitable[str | None]],
    emit: Emit,
) -> None:
    """Read lines until ``quit`` or end of input."""
    while True:
        line = await read_line()
        if line is None:
            return
        command = line.rstrip()
        if not command:
            continue
        if command in EXIT_COMMANDS:
            return
        await run_one(session, command, emit)
