"""
CLI Context Management Module

Global CLI state shared by all Typer commands, held in a pydantic model
behind a ContextVar.

The context includes:
- verbose: Verbosity level (int, count-based)
- log_level: Logging level (str, enum-based)
- json_output: JSON output mode (bool)
"""

from __future__ import annotations

import contextvars
from enum import Enum

from pydantic import BaseModel, Field


class LogLevel(str, Enum):
    """Log level enumeration for type safety."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class CliContext(BaseModel):
    """
    CLI context model for managing global state.

    Attributes:
        verbose: Verbosity level (0 = normal, 1+ = verbose)
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        json_output: Whether to output in JSON format
    """

    verbose: int = Field(
        default=0,
        ge=0,
        description="Verbosity level (0 = normal, 1+ = verbose)",
    )

    log_level: LogLevel = Field(
        default=LogLevel.INFO,
        description="Logging level",
    )

    json_output: bool = Field(
        default=False,
        description="Whether to output in JSON format",
    )

    def is_verbose(self) -> bool:
        return self.verbose > 0

    def get_effective_log_level(self) -> str:
        """Log level after the verbose override (verbose forces DEBUG)."""
        if self.is_verbose():
            return LogLevel.DEBUG.value
        return self.log_level.value


cli_context_var: contextvars.ContextVar[CliContext | None] = contextvars.ContextVar(
    "cli_context",
    default=None,
)


def get_cli_context() -> CliContext:
    """
    Get the current CLI context.

    Returns a default context when the main callback has not run, e.g. when
    a handler is called directly.
    """
    context = cli_context_var.get()
    if context is None:
        return CliContext()
    return context


def set_cli_context(context: CliContext) -> None:
    cli_context_var.set(context)


def clear_cli_context() -> None:
    """Clear the current CLI context."""
    cli_context_var.set(None)
