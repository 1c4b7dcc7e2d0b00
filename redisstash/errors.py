"""
redisstash - Core Error Types

Defines the exception hierarchy for the Redis cache adapter.
All exceptions inherit from RedisStashError for consistent error handling.

Nothing here is retried automatically: every error surfaces to the caller,
who decides whether to call the operation again.
"""

from enum import Enum
from typing import Any


class ErrorCode(str, Enum):
    """
    Standard error codes for structured error responses.

    Used for client-side error recovery and log correlation.
    """

    # Configuration errors
    INVALID_CONFIG = "INVALID_CONFIG"
    CONFIG_INCONSISTENCY = "CONFIG_INCONSISTENCY"

    # Connection lifecycle errors
    CONNECTION_FAILED = "CONNECTION_FAILED"
    AUTH_FAILED = "AUTH_FAILED"
    SELECT_DB_FAILED = "SELECT_DB_FAILED"

    # Cache errors
    CACHE_FAILURE = "CACHE_FAILURE"
    NO_ACTIVE_KEY = "NO_ACTIVE_KEY"
    TRACKING_DISABLED = "TRACKING_DISABLED"
    STORAGE_REJECTED = "STORAGE_REJECTED"

    # Internal errors
    INTERNAL_ERROR = "INTERNAL_ERROR"


class RedisStashError(Exception):
    """Base exception for all redisstash errors."""

    code: ErrorCode = ErrorCode.INTERNAL_ERROR

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to dictionary for structured responses."""
        return {
            "error": self.__class__.__name__,
            "code": self.code.value,
            "message": self.message,
            "details": self.details,
        }


class ConfigurationError(RedisStashError):
    """Raised when configuration is invalid or missing."""

    code = ErrorCode.INVALID_CONFIG


class ConfigInconsistencyError(ConfigurationError):
    """
    Raised when a required option is absent from the fully-defaulted configuration.

    This is a programming invariant violation, not a user error: validation
    fills every connection option, so reaching this means the config object
    was built without it.
    """

    code = ErrorCode.CONFIG_INCONSISTENCY

    def __init__(self, option: str):
        super().__init__(f"Unexpected inconsistency in options: '{option}' is missing", {"option": option})


class CacheError(RedisStashError):
    """Base exception for cache-related errors."""

    code = ErrorCode.CACHE_FAILURE


class CacheConnectionError(CacheError):
    """Raised when the transport-level connect to Redis fails."""

    code = ErrorCode.CONNECTION_FAILED

    def __init__(self, host: str, port: int, details: dict[str, Any] | None = None):
        message = f"Could not connect to the Redis server {host}:{port}"
        super().__init__(message, {"host": host, "port": port, **(details or {})})


class AuthError(CacheError):
    """Raised when Redis rejects the configured credential."""

    code = ErrorCode.AUTH_FAILED

    def __init__(self, details: dict[str, Any] | None = None):
        super().__init__("Failed to authenticate with the Redis server", details)


class SelectDbError(CacheError):
    """Raised when Redis rejects the logical database selection."""

    code = ErrorCode.SELECT_DB_FAILED

    def __init__(self, index: int, details: dict[str, Any] | None = None):
        super().__init__(f"Redis server selecting database {index} failed", {"index": index, **(details or {})})


class NoActiveKeyError(CacheError):
    """Raised by parameterless calls when no previous call established an active key."""

    code = ErrorCode.NO_ACTIVE_KEY

    def __init__(self, operation: str):
        super().__init__(
            f"Cache must be started first: '{operation}' needs a key name or an active key",
            {"operation": operation},
        )


class TrackingDisabledError(CacheError):
    """Raised when enumeration or flush is requested while the stats key is empty."""

    code = ErrorCode.TRACKING_DISABLED

    def __init__(self, operation: str):
        super().__init__(
            f"Cached keys need to be enabled to use '{operation}' (set a non-empty stats_key)",
            {"operation": operation},
        )


class StorageError(CacheError):
    """Raised when Redis rejects a write command."""

    code = ErrorCode.STORAGE_REJECTED

    def __init__(self, key: str, details: dict[str, Any] | None = None):
        super().__init__(f"Failed storing the data in Redis for key '{key}'", {"key": key, **(details or {})})


class CacheOperationError(CacheError):
    """Raised when a read, delete or counter command fails at the store."""

    pass


def make_error_response(error: RedisStashError) -> dict[str, Any]:
    """
    Create a standardized error response from an adapter error.

    Example:
        >>> make_error_response(NoActiveKeyError("save"))
        {
            "success": False,
            "error_code": "NO_ACTIVE_KEY",
            "message": "Cache must be started first: ...",
            "details": {"operation": "save"}
        }
    """
    return {
        "success": False,
        "error_code": error.code.value,
        "message": error.message,
        "details": error.details,
    }


def extract_error_code(error: Exception) -> ErrorCode:
    """
    Extract the appropriate ErrorCode from any exception.

    Args:
        error: Exception to categorize

    Returns:
        The error's own code for adapter errors, INTERNAL_ERROR otherwise
    """
    if isinstance(error, RedisStashError):
        return error.code

    return ErrorCode.INTERNAL_ERROR
