"""
CLI Error Handling Utilities

Consistent error output and exit codes across CLI commands.
"""

from __future__ import annotations

import logging
import sys
from typing import Any

from wanisync.cli.json_formatter import format_json_output, write_json_output
from wanisync.shared.constants import CLIDefaults
from wanisync.shared.errors import (
    ApplicationError,
    ErrorCode,
    InfrastructureError,
    OperationCancelledError,
    WaniSyncError,
)

logger = logging.getLogger(__name__)

EXIT_INTERRUPTED = 130


def handle_cli_error(
    error: Exception,
    command: str,
    *,
    json_output: bool = False,
) -> int:
    """Handle CLI errors with consistent formatting and logging.

    Args:
        error: The exception that occurred
        command: The CLI command being executed
        json_output: Whether to output JSON format

    Returns:
        Exit code for the CLI command
    """
    error_context: dict[str, Any] = {
        "command": command,
        "error_type": type(error).__name__,
    }
    message, code, exit_code = _describe_error(error, error_context)
    _log_error(error, command, message, error_context)

    if json_output:
        write_json_output(
            format_json_output(
                success=False,
                command=command,
                errors=[message],
                data={
                    "error_code": code.value,
                    "error_type": type(error).__name__,
                    "exit_code": exit_code,
                },
            )
        )
    else:
        sys.stderr.write(f"Error: {message}\n")

    return exit_code


def _describe_error(
    error: Exception,
    error_context: dict[str, Any],
) -> tuple[str, ErrorCode, int]:
    """Map an exception to its message, error code and exit code."""
    if isinstance(error, (KeyboardInterrupt, OperationCancelledError)):
        error_context["interrupt_type"] = "user_interrupt"
        return "Command interrupted by user", ErrorCode.OPERATION_CANCELLED, EXIT_INTERRUPTED

    if isinstance(error, WaniSyncError):
        error_context["error_code"] = error.code.value
        if isinstance(error, ApplicationError):
            prefix = "Application error"
        elif isinstance(error, InfrastructureError):
            prefix = "Infrastructure error"
        else:
            prefix = "Invalid input"
        return f"{prefix}: {error.message}", error.code, CLIDefaults.EXIT_ERROR

    if isinstance(error, OSError):
        error_context["error_category"] = "file_system"
        return f"File system error: {error}", ErrorCode.CLI_UNEXPECTED_ERROR, CLIDefaults.EXIT_ERROR

    error_context["error_category"] = "unexpected"
    return f"Unexpected error: {error}", ErrorCode.CLI_UNEXPECTED_ERROR, CLIDefaults.EXIT_ERROR


def _log_error(
    error: Exception,
    command: str,
    message: str,
    error_context: dict[str, Any],
) -> None:
    if isinstance(error, (KeyboardInterrupt, OperationCancelledError)):
        logger.warning("Command interrupted: %s", message, extra={"context": error_context})
    elif isinstance(error, WaniSyncError):
        logger.error("CLI error in %s: %s", command, message, extra={"context": error_context})
    else:
        logger.exception("CLI error in %s: %s", command, message, extra={"context": error_context})
