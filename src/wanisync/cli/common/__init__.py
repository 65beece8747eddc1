"""Common CLI utilities shared by all commands."""

from .context import CliContext, LogLevel, get_cli_context, set_cli_context
from .error_handler import handle_cli_error
from .setup import create_container

__all__ = [
    "CliContext",
    "LogLevel",
    "create_container",
    "get_cli_context",
    "handle_cli_error",
    "set_cli_context",
]
