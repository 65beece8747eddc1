"""Bearer token loading.

The token lives in a small JSON file (``{"token": "..."}``) read once at
startup. A missing or malformed file is fatal.
"""

from __future__ import annotations

import logging
from pathlib import Path

import orjson

from wanisync.shared.errors import ErrorCode, create_config_error

logger = logging.getLogger(__name__)

TOKEN_FIELD = "token"


def load_api_token(token_file: str | Path) -> str:
    """Read the bearer token from ``token_file``.

    Args:
        token_file: Path of the JSON credential file

    Returns:
        The token string

    Raises:
        ConfigurationError: If the file is missing, unreadable, not a JSON
            object, or has no non-empty ``token`` field
    """
    path = Path(token_file)
    if not path.exists():
        raise create_config_error(
            f"Credential file not found: {path}",
            code=ErrorCode.CREDENTIALS_MISSING,
            file_path=str(path),
            operation="load_api_token",
        )

    try:
        payload = orjson.loads(path.read_bytes())
    except (OSError, orjson.JSONDecodeError) as e:
        raise create_config_error(
            f"Failed to read credential file: {path}",
            code=ErrorCode.CREDENTIALS_INVALID,
            file_path=str(path),
            operation="load_api_token",
            original_error=e,
        ) from e

    token = payload.get(TOKEN_FIELD) if isinstance(payload, dict) else None
    if not isinstance(token, str) or not token.strip():
        raise create_config_error(
            f"Credential file has no '{TOKEN_FIELD}' field: {path}",
            code=ErrorCode.CREDENTIALS_INVALID,
            file_path=str(path),
            operation="load_api_token",
        )

    logger.debug("Loaded API token from %s", path)
    return token.strip()
