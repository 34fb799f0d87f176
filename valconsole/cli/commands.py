"""CLI entry point for valconsole.

Batch mode runs every ``--cmd`` in order and exits; without ``--cmd`` the
console reads lines interactively until ``quit`` or end of input.
"""

import asyncio
from pathlib import Path

import typer
from prompt_toolkit import PromptSession
from prompt_toolkit.history import FileHistory
from prompt_toolkit.patch_stdout import patch_stdout
from rich.console import Console

from valconsole import __logo__, __version__
from valconsole.cli.shared.logging_utils import configure_logging
from valconsole.config.loader import get_config_path, load_config
from valconsole.config.schema import ConsoleConfig
from valconsole.control.frontend import run_batch, run_interactive
from valconsole.control.session import ControlSession
from valconsole.utils.exceptions import ConsoleError, format_command_error
from valconsole.utils.helpers import get_data_path

app = typer.Typer(
    name="valconsole",
    help=f"{__logo__} valconsole - validator node control console",
    add_completion=False,
)

console = Console()


def _emit(text: str) -> None:
    # Results may contain brackets; never interpret them as rich markup.
    console.print(text, markup=False, highlight=False, soft_wrap=True)


def _make_prompt_session() -> PromptSession:
    history_file = get_data_path() / "history" / "console_history"
    history_file.parent.mkdir(parents=True, exist_ok=True)
    return PromptSession(history=FileHistory(str(history_file)), multiline=False)


def _line_reader(prompt_session: PromptSession):
    async def read_line() -> str | None:
        try:
            with patch_stdout():
                return await prompt_session.prompt_async("> ")
        except (EOFError, KeyboardInterrupt):
            return None

    return read_line


async def _run_console(config: ConsoleConfig, commands: list[str], delay: float) -> int:
    async with await ControlSession.connect(config) as session:
        if commands:
            return await run_batch(session, commands, _emit, delay=delay)
        await run_interactive(session, _line_reader(_make_prompt_session()), _emit)
        return 0


def _load(config_path: Path) -> ConsoleConfig:
    try:
        return load_config(config_path)
    except FileNotFoundError as exc:
        raise typer.BadParameter(str(exc), param_hint="--config") from exc
    except ValueError as exc:
        raise typer.BadParameter(str(exc), param_hint="--config") from exc


@app.command()
def main(
    config_path: Path = typer.Option(
        get_config_path(), "--config", "-C", help="config for console"
    ),
    commands: list[str] = typer.Option(
        None, "--cmd", "-c", help="schedule command (repeatable); runs in batch mode"
    ),
    delay: float = typer.Option(
        0.0, "--delay", "--timeout", "-t", min=0.0, help="pause between batch commands, seconds"
    ),
    verbose: bool = typer.Option(False, "--verbose", help="trace every round trip and workflow step"),
    json_output: bool = typer.Option(False, "--json", "-j", help="machine-readable output, no banner"),
    log_file: bool = typer.Option(False, "--log-file", help="also log to ~/.valconsole/logs/console.log"),
):
    """Connect to a validator node and run control commands."""
    if not json_output:
        console.print(f"{__logo__} valconsole v{__version__}")

    log_path = configure_logging(verbose=verbose, log_file=log_file)
    if log_path and not json_output:
        console.print(f"[dim]Logging to {log_path}[/dim]")

    config = _load(config_path)
    try:
        failures = asyncio.run(_run_console(config, list(commands or []), delay))
    except ConsoleError as exc:
        # Connection failures are the only errors that escape the loops.
        console.print(format_command_error(exc), markup=False)
        raise typer.Exit(1)
    if failures:
        raise typer.Exit(1)


if __name__ == "__main__":
    app()
