"""Command setup shared by the CLI handlers."""

from __future__ import annotations

from pathlib import Path

from dependency_injector import providers

from wanisync.cli.common.context import get_cli_context
from wanisync.config.loader import load_settings, resolve_api_token
from wanisync.containers import Container
from wanisync.shared.logging import setup_structured_logger


def create_container(config_file: Path | None = None) -> Container:
    """Build the service container for one command invocation.

    Loads settings from ``config_file`` (or the default locations), resolves
    the API token and reconfigures logging when a log file is configured.

    Raises:
        ConfigurationError: If settings or credentials are invalid
    """
    settings = resolve_api_token(load_settings(config_file))

    if settings.logging.file is not None:
        context = get_cli_context()
        setup_structured_logger(
            level=context.get_effective_log_level(),
            log_file=str(settings.logging.file),
            use_rich_console=not context.json_output,
        )

    container = Container()
    container.config.override(providers.Object(settings))
    return container
