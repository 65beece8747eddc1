"""Leeches command handler for WaniSync CLI."""

from __future__ import annotations

import logging
from dataclasses import asdict
from pathlib import Path

from rich.console import Console
from rich.table import Table

from wanisync.cli.common.context import get_cli_context
from wanisync.cli.common.error_handler import handle_cli_error
from wanisync.cli.common.setup import create_container
from wanisync.cli.json_formatter import format_json_output, write_json_output
from wanisync.services.leeches import LeechReport
from wanisync.shared.constants import CLICommands, CLIDefaults

logger = logging.getLogger(__name__)


def handle_leeches_command(config_file: Path | None = None) -> int:
    """Find and print leeches.

    Collections that could not be refreshed are read from the cache and
    reported as warnings.
    """
    context = get_cli_context()
    try:
        finder = create_container(config_file).leech_finder()
        report = finder.find()
        logger.info("Found %d leeches", report.total)
    except Exception as e:  # noqa: BLE001
        return handle_cli_error(e, CLICommands.LEECHES, json_output=context.json_output)

    warnings = [f"{name} served from cache after a failed sync" for name in report.stale_collections]

    if context.json_output:
        write_json_output(
            format_json_output(
                success=True,
                command=CLICommands.LEECHES,
                data={
                    query: [asdict(leech) for leech in leeches]
                    for query, leeches in report.leeches.items()
                },
                warnings=warnings,
            )
        )
    else:
        console = Console()
        for warning in warnings:
            console.print(f"[yellow]Warning:[/yellow] {warning}")
        display_leeches(report, console)

    return CLIDefaults.EXIT_SUCCESS


def display_leeches(report: LeechReport, console: Console) -> None:
    for query, leeches in report.leeches.items():
        table = Table(title=f"{query} ({len(leeches)})")
        table.add_column("Subject", justify="right")
        table.add_column("Characters", style="cyan")
        table.add_column("Meanings")
        table.add_column("Readings")
        table.add_column("Incorrect", justify="right")
        table.add_column("SRS", justify="right")

        for leech in leeches:
            table.add_row(
                str(leech.subject_id),
                leech.characters or "",
                ", ".join(leech.meanings),
                ", ".join(leech.readings),
                str(leech.incorrect_count),
                str(leech.srs_stage),
            )

        console.print(table)

    console.print(f"[bold]{report.total}[/bold] leeches found")
