"""WaniSync Error Handling Module

This module defines the error handling system for WaniSync, providing
structured error classes with context information.

The error hierarchy follows these principles:
- One Source of Truth: All error codes are defined in ErrorCode enum
- Structured Context: ErrorContext provides additional information
- Proper Exception Chaining: Original exceptions are preserved
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, Union

# Type alias for primitive context values (str, int, float, bool only)
PrimitiveContextValue = Union[str, int, float, bool]

# Default keys to mask in safe_dict
SAFE_DICT_MASK_KEYS: tuple[str, ...] = ("token",)


class ErrorCode(str, Enum):
    """Error codes for WaniSync.

    This enum serves as the single source of truth for all error codes
    used throughout the application.
    """

    # Network and API Errors
    NETWORK_ERROR = "NETWORK_ERROR"
    API_AUTHENTICATION_FAILED = "API_AUTHENTICATION_FAILED"
    API_RATE_LIMIT = "API_RATE_LIMIT"
    API_REQUEST_FAILED = "API_REQUEST_FAILED"
    API_TIMEOUT = "API_TIMEOUT"
    API_SERVER_ERROR = "API_SERVER_ERROR"
    API_INVALID_RESPONSE = "API_INVALID_RESPONSE"

    # Cache Errors
    CACHE_READ_FAILED = "CACHE_READ_FAILED"
    CACHE_WRITE_FAILED = "CACHE_WRITE_FAILED"
    CACHE_CORRUPTED = "CACHE_CORRUPTED"
    CACHE_SERIALIZATION_ERROR = "CACHE_SERIALIZATION_ERROR"
    INVALID_CACHE_KEY = "INVALID_CACHE_KEY"

    # Configuration Errors
    CONFIG_MISSING = "CONFIG_MISSING"
    CONFIG_INVALID = "CONFIG_INVALID"
    CREDENTIALS_MISSING = "CREDENTIALS_MISSING"
    CREDENTIALS_INVALID = "CREDENTIALS_INVALID"

    # Validation Errors
    VALIDATION_ERROR = "VALIDATION_ERROR"
    UNKNOWN_COLLECTION = "UNKNOWN_COLLECTION"

    # Application Errors
    OPERATION_CANCELLED = "OPERATION_CANCELLED"
    CLI_UNEXPECTED_ERROR = "CLI_UNEXPECTED_ERROR"


def _coerce_primitives(value: Any | None) -> dict[str, PrimitiveContextValue] | None:
    """Coerce additional_data values to primitives.

    Converts Path and Enum to primitive types.

    Raises:
        TypeError: If value is not a dict or contains unconvertible types
    """
    if value is None:
        return None

    if not isinstance(value, dict):
        error_msg = f"additional_data must be dict, got {type(value).__name__}"
        raise TypeError(error_msg)

    coerced: dict[str, PrimitiveContextValue] = {}
    for key, val in value.items():
        if isinstance(val, (str, int, float, bool)):
            coerced[key] = val
        elif isinstance(val, Path):
            coerced[key] = str(val)
        elif isinstance(val, Enum):
            coerced[key] = val.value
        else:
            error_msg = (
                f"Cannot coerce {type(val).__name__} to primitive type. "
                f"Only str, int, float, bool, Path, Enum are allowed."
            )
            raise TypeError(error_msg)

    return coerced


@dataclass(frozen=True)
class ErrorContext:
    """Context information for errors.

    Only primitive types (str, int, float, bool) are allowed in
    additional_data to ensure safe serialization.

    Attributes:
        file_path: Optional file path associated with the error
        operation: Optional operation name that caused the error
        collection: Optional collection name the error relates to
        additional_data: Optional dict with primitive values only
    """

    file_path: str | None = None
    operation: str | None = None
    collection: str | None = None
    additional_data: dict[str, PrimitiveContextValue] | None = None

    def __post_init__(self) -> None:
        if self.additional_data is not None:
            coerced = _coerce_primitives(self.additional_data)
            object.__setattr__(self, "additional_data", coerced)

    def safe_dict(self, *, mask_keys: tuple[str, ...] | None = None) -> dict[str, Any]:
        """Export context as dict with sensitive keys removed.

        Args:
            mask_keys: additional_data keys to exclude. Defaults to SAFE_DICT_MASK_KEYS.

        Returns:
            Dictionary with a guaranteed ``additional_data`` key.
        """
        if mask_keys is None:
            mask_keys = SAFE_DICT_MASK_KEYS

        data: dict[str, Any] = {}
        if self.file_path is not None:
            data["file_path"] = self.file_path
        if self.operation is not None:
            data["operation"] = self.operation
        if self.collection is not None:
            data["collection"] = self.collection

        data["additional_data"] = {
            key: value
            for key, value in (self.additional_data or {}).items()
            if key not in mask_keys
        }
        return data


class WaniSyncError(Exception):
    """Base exception class for all WaniSync errors."""

    def __init__(
        self,
        code: ErrorCode,
        message: str,
        context: ErrorContext | None = None,
        original_error: Exception | None = None,
    ) -> None:
        """Initialize WaniSyncError.

        Args:
            code: Error code from ErrorCode enum
            message: Human-readable error message
            context: Additional context information
            original_error: Original exception that caused this error
        """
        self.code = code
        self.message = message
        self.context = context or ErrorContext()
        self.original_error = original_error
        super().__init__(f"{code.value}: {message}")

    def __str__(self) -> str:
        return f"{self.code.value}: {self.message}"

    def to_dict(self) -> dict[str, Any]:
        """Convert error to dictionary for logging and JSON output."""
        return {
            "code": self.code.value,
            "message": self.message,
            "context": self.context.safe_dict(),
            "original_error": str(self.original_error) if self.original_error else None,
        }


class DomainError(WaniSyncError):
    """Errors raised when domain rules are violated.

    Examples:
    - Unknown collection name
    - Malformed record payloads
    """


class InfrastructureError(WaniSyncError):
    """Errors raised when talking to the network or the file system."""


class ApplicationError(WaniSyncError):
    """Application-level errors (configuration, command handling)."""


class WaniKaniAPIError(InfrastructureError):
    """Transport or protocol failure while talking to the WaniKani API.

    Attributes:
        status_code: HTTP status of the failed response, None for transport errors
    """

    def __init__(
        self,
        code: ErrorCode,
        message: str,
        context: ErrorContext | None = None,
        original_error: Exception | None = None,
        status_code: int | None = None,
    ) -> None:
        super().__init__(code, message, context, original_error)
        self.status_code = status_code


class CacheCorruptionError(InfrastructureError):
    """A persisted cache entry could not be read or parsed.

    Raised at load time and treated as fatal: continuing with a partial
    cache would trigger full refreshes across every collection.
    """


class ConfigurationError(ApplicationError):
    """Settings or credentials are missing or malformed."""


class OperationCancelledError(ApplicationError):
    """A cancellation event was set while an operation was in flight."""


def _code_for_status(status_code: int | None) -> ErrorCode:
    if status_code is None:
        return ErrorCode.NETWORK_ERROR
    if status_code in (401, 403):
        return ErrorCode.API_AUTHENTICATION_FAILED
    if status_code == 429:
        return ErrorCode.API_RATE_LIMIT
    if status_code >= 500:
        return ErrorCode.API_SERVER_ERROR
    return ErrorCode.API_REQUEST_FAILED


def create_api_error(
    message: str,
    *,
    status_code: int | None = None,
    endpoint: str | None = None,
    operation: str | None = None,
    original_error: Exception | None = None,
    code: ErrorCode | None = None,
) -> WaniKaniAPIError:
    """Create an API error, choosing the code from the HTTP status unless given."""
    if code is None:
        code = _code_for_status(status_code)

    additional_data: dict[str, PrimitiveContextValue] = {}
    if endpoint is not None:
        additional_data["endpoint"] = endpoint
    if status_code is not None:
        additional_data["status_code"] = status_code

    context = ErrorContext(
        operation=operation,
        additional_data=additional_data or None,
    )
    return WaniKaniAPIError(
        code,
        message,
        context,
        original_error,
        status_code=status_code,
    )


def create_config_error(
    message: str,
    *,
    code: ErrorCode = ErrorCode.CONFIG_INVALID,
    file_path: str | None = None,
    operation: str | None = None,
    original_error: Exception | None = None,
) -> ConfigurationError:
    """Create a configuration error with context."""
    context = ErrorContext(
        file_path=file_path,
        operation=operation,
    )
    return ConfigurationError(code, message, context, original_error)


def create_cancelled_error(operation: str, collection: str | None = None) -> OperationCancelledError:
    """Create the error raised when a cancellation event fires."""
    context = ErrorContext(operation=operation, collection=collection)
    return OperationCancelledError(
        ErrorCode.OPERATION_CANCELLED,
        f"Operation '{operation}' was cancelled",
        context,
    )
