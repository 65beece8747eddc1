"""Sync command handler for WaniSync CLI."""

from __future__ import annotations

import logging
from pathlib import Path

from rich.console import Console
from rich.table import Table

from wanisync.cli.common.context import get_cli_context
from wanisync.cli.common.error_handler import handle_cli_error
from wanisync.cli.common.setup import create_container
from wanisync.cli.json_formatter import format_json_output, write_json_output
from wanisync.services.sync import ASSIGNMENTS, REVIEW_STATISTICS, SyncReport, SyncRequest, get_collection
from wanisync.shared.constants import CLICommands, CLIDefaults

logger = logging.getLogger(__name__)

DEFAULT_COLLECTIONS = (REVIEW_STATISTICS.name, ASSIGNMENTS.name)


def handle_sync_command(
    collections: list[str] | None,
    config_file: Path | None = None,
) -> int:
    """Sync the given collections and report each outcome.

    Failed collections are reported with their cached record count and do
    not stop the run.

    Returns:
        EXIT_SUCCESS when every collection synced, EXIT_ERROR otherwise
    """
    context = get_cli_context()
    try:
        names = [get_collection(name).name for name in collections or DEFAULT_COLLECTIONS]
        logger.info("Syncing %s", ", ".join(names))
        synchronizer = create_container(config_file).synchronizer()
        report = synchronizer.sync_many([SyncRequest(name) for name in names])
    except Exception as e:  # noqa: BLE001
        return handle_cli_error(e, CLICommands.SYNC, json_output=context.json_output)

    if context.json_output:
        write_json_output(
            format_json_output(
                success=not report.failed,
                command=CLICommands.SYNC,
                data={"collections": _collect_sync_data(report)},
                errors=[str(outcome.error) for outcome in report.failed],
            )
        )
    else:
        display_sync_results(report, Console())

    return CLIDefaults.EXIT_ERROR if report.failed else CLIDefaults.EXIT_SUCCESS


def _collect_sync_data(report: SyncReport) -> list[dict[str, object]]:
    return [
        {
            "collection": outcome.collection,
            "ok": outcome.ok,
            "records": len(outcome.records),
            "error": None if outcome.error is None else outcome.error.to_dict(),
        }
        for outcome in report.outcomes
    ]


def display_sync_results(report: SyncReport, console: Console) -> None:
    table = Table(title="Sync results")
    table.add_column("Collection", style="cyan")
    table.add_column("Status")
    table.add_column("Records", justify="right")
    table.add_column("Error", style="red")

    for outcome in report.outcomes:
        status = "[green]synced[/green]" if outcome.ok else "[yellow]cached[/yellow]"
        table.add_row(
            outcome.collection,
            status,
            str(len(outcome.records)),
            "" if outcome.error is None else outcome.error.message,
        )

    console.print(table)
