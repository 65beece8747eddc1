"""
WaniSync Package Main Entry Point

Runs the CLI when the package is executed with ``python -m wanisync``.
"""

import logging
import sys

from wanisync.cli.common.error_handler import handle_cli_error
from wanisync.cli.typer_app import app

logger = logging.getLogger(__name__)


if __name__ == "__main__":
    try:
        app()
    except KeyboardInterrupt as e:
        logger.info("Command interrupted by user")
        sys.exit(handle_cli_error(e, "wanisync-main"))
    except SystemExit:
        # Preserve exit codes
        raise
    except Exception as e:  # noqa: BLE001
        sys.exit(handle_cli_error(e, "wanisync-main"))
