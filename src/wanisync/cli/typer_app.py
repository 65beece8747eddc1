"""
WaniSync Typer CLI Application

Main Typer-based command line interface: global options are handled by the
callback, each command delegates to its handler module.
"""

from __future__ import annotations

from pathlib import Path
from typing import Annotated, List, Optional

import typer

from wanisync.cli.common.context import CliContext, LogLevel, set_cli_context
from wanisync.cli.common.options import (
    config_file_option,
    json_output_option,
    log_level_option,
    verbose_option,
    version_option,
)
from wanisync.cli.leeches_handler import handle_leeches_command
from wanisync.cli.sync_handler import handle_sync_command
from wanisync.shared.constants import CLICommands, CLIDefaults, CLIHelp
from wanisync.shared.logging import setup_structured_logger

__version__ = CLIDefaults.VERSION


def version_callback(value: bool) -> None:
    """Print version information and exit."""
    if value:
        typer.echo(CLIHelp.VERSION_TEXT.format(version=__version__))
        raise typer.Exit


app = typer.Typer(
    name=CLIHelp.APP_NAME,
    help=CLIHelp.APP_DESCRIPTION,
    add_completion=False,
    rich_markup_mode=CLIHelp.APP_STYLE,
    no_args_is_help=True,
    invoke_without_command=True,
)


@app.callback()
def main(
    verbose: Annotated[int, verbose_option] = 0,
    log_level: Annotated[LogLevel, log_level_option] = LogLevel.INFO,
    json_output: Annotated[bool, json_output_option] = False,
    version: Annotated[bool, version_option] = False,
) -> None:
    """
    Process the global options before any command runs.

    Args:
        verbose: Verbosity level (count-based)
        log_level: Logging level (enum-based)
        json_output: Whether to output in JSON format
        version: Whether to show version information
    """
    if version:
        version_callback(value=True)

    context = CliContext(
        verbose=verbose,
        log_level=log_level,
        json_output=json_output,
    )
    set_cli_context(context)

    # JSON mode keeps stdout machine-readable; logs go to stderr as JSON lines
    setup_structured_logger(
        level=context.get_effective_log_level(),
        use_rich_console=not json_output,
    )


@app.command(CLICommands.SYNC)
def sync_command_typer(
    collections: Optional[List[str]] = typer.Argument(
        None,
        help=CLIHelp.SYNC_COLLECTIONS_HELP,
    ),
    config_file: Annotated[Optional[Path], config_file_option] = None,
) -> None:
    """
    Bring cached collections up to date.

    Each collection is refreshed incrementally: a full download the first
    time, then only records changed since the last successful sync. A
    collection that fails keeps its cached data and the others still run.

    Examples:
        # Sync review statistics and assignments
        wanisync sync

        # Sync only assignments, with JSON output
        wanisync --json sync assignments
    """
    exit_code = handle_sync_command(collections, config_file)
    if exit_code != CLIDefaults.EXIT_SUCCESS:
        raise typer.Exit(exit_code)


@app.command(CLICommands.LEECHES, help=CLIHelp.LEECHES_HELP)
def leeches_command_typer(
    config_file: Annotated[Optional[Path], config_file_option] = None,
) -> None:
    """
    List leeches: subjects answered wrong often that are still at a low
    SRS stage. Thresholds come from the [leeches] settings section.
    """
    exit_code = handle_leeches_command(config_file)
    if exit_code != CLIDefaults.EXIT_SUCCESS:
        raise typer.Exit(exit_code)
