"""Control protocol: command registry, session and console loops."""

from valconsole.control.commands import COMMANDS, Command, command_help, command_receive, command_send, get_command
from valconsole.control.session import ControlSession

__all__ = [
    "COMMANDS",
    "Command",
    "ControlSession",
    "command_help",
    "command_receive",
    "command_send",
    "get_command",
]
