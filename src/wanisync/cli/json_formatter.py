"""
JSON Output Formatter for WaniSync CLI

Envelope shared by every command when the --json flag is used.
"""

from __future__ import annotations

import sys
from datetime import datetime, timezone
from typing import Any

import orjson


def format_json_output(
    success: bool,
    command: str,
    data: Any | None = None,
    errors: list[str] | None = None,
    warnings: list[str] | None = None,
) -> bytes:
    """
    Format command output as JSON.

    Args:
        success: Whether the command executed successfully
        command: The command name (e.g., "sync", "leeches")
        data: The command's output data
        errors: List of error messages
        warnings: List of warning messages

    Returns:
        JSON-encoded bytes ready for output

    Example:
        >>> output = format_json_output(
        ...     success=True,
        ...     command="sync",
        ...     data={"collections": []}
        ... )
    """
    if errors is None:
        errors = []
    if warnings is None:
        warnings = []

    # If there are errors, success should be False
    if errors:
        success = False

    json_data = {
        "success": success,
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "command": command,
        "data": data,
        "errors": errors,
        "warnings": warnings,
    }

    return orjson.dumps(
        json_data,
        option=orjson.OPT_SORT_KEYS | orjson.OPT_INDENT_2,
    )


def write_json_output(payload: bytes) -> None:
    """Write a formatted envelope to stdout."""
    sys.stdout.buffer.write(payload)
    sys.stdout.buffer.write(b"\n")
    sys.stdout.buffer.flush()
