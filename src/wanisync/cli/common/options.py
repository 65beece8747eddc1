"""
Reusable Typer Options Module

Options shared by the main callback and the commands, used as
``Annotated[<type>, <option>]`` metadata.
"""

from __future__ import annotations

import typer

# Verbose option - count-based for multiple -v flags
verbose_option = typer.Option(
    "--verbose",
    "-v",
    count=True,
    help="Enable verbose output (equivalent to --log-level DEBUG).",
)

log_level_option = typer.Option(
    "--log-level",
    case_sensitive=False,
    help="Set the logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL). Default: INFO.",
)

json_output_option = typer.Option(
    "--json",
    help="Enable machine-readable JSON output instead of human-readable format.",
)

# Version option - for main app only
version_option = typer.Option(
    "--version",
    "-V",
    help="Show version information and exit.",
    is_eager=True,
)

config_file_option = typer.Option(
    "--config",
    "-c",
    help="TOML settings file (default: config/config.toml or wanisync.toml if present).",
    exists=True,
    file_okay=True,
    dir_okay=False,
    readable=True,
)
