"""
Exception classes for catbreeds.

This module defines all custom exceptions used throughout the application.
Each exception carries a human-readable message plus a details dictionary,
and a kind tag so failures can be classified without isinstance chains.

Exception Hierarchy:
    CatalogError (base)
        ConfigError - Configuration file issues
        TransportError - Remote API unreachable, timed out or non-2xx
        NotFoundError - Lookup or favorite toggle on an absent breed id
        CacheError - Local SQLite cache failures
"""

from enum import Enum


class ErrorKind(Enum):
    """Classification tag carried by every CatalogError."""
    CONFIG = "config"
    TRANSPORT = "transport"
    NOT_FOUND = "not_found"
    CACHE = "cache"
    UNKNOWN = "unknown"


class CatalogError(Exception):
    """
    Base exception for all catbreeds errors.

    All custom exceptions in this project inherit from this class,
    allowing callers to catch all catalog errors with a single
    except clause if desired.

    Attributes:
        message: Human-readable error description.
        details: Optional dictionary with additional context (e.g., breed id, URL).
        kind: ErrorKind tag for this error class.

    Example:
        try:
            # some operation
        except CatalogError as e:
            logger.error(f"Operation failed: {e.message}")
            if e.details:
                logger.debug(f"Details: {e.details}")
    """

    kind = ErrorKind.UNKNOWN

    def __init__(self, message: str, details: dict | None = None) -> None:
        """
        Initialize the base exception.

        Args:
            message: Human-readable error description that will be shown to the user.
            details: Optional dictionary containing additional context about the error.
                     Common keys include:
                     - 'breed_id': Breed id involved in the error
                     - 'url': URL that caused the error
                     - 'original_error': The underlying exception if wrapping another error
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        """Return the error message for display."""
        return self.message


class ConfigError(CatalogError):
    """
    Raised when there's an issue with the configuration file.

    This is a CRITICAL error that should stop program execution.

    Common causes:
        - config.yaml has invalid YAML syntax
        - Invalid field values (e.g., non-positive page size)

    Example:
        raise ConfigError(
            "'sync.page_size' must be a positive integer",
            details={'field': 'sync.page_size', 'value': 0}
        )
    """
    kind = ErrorKind.CONFIG


class TransportError(CatalogError):
    """
    Raised when a call to the remote Cat API fails.

    List, search and initialization paths treat this as the primary error:
    it is what callers see when both the remote source and the cache fallback
    fail. Image lookups absorb it locally.

    Common causes:
        - Network connectivity issues or DNS failure
        - Request timeout
        - Non-2xx response (including 429 rate limiting)
        - Response body is not the expected JSON

    Attributes:
        http_status: HTTP status code if a response was received.
        is_rate_limit: True if the API answered 429.

    Example:
        raise TransportError(
            "Failed to fetch breeds page: 503 Service Unavailable",
            details={'url': url, 'status_code': 503},
            http_status=503
        )
    """
    kind = ErrorKind.TRANSPORT

    def __init__(
        self,
        message: str,
        details: dict | None = None,
        http_status: int | None = None,
        is_rate_limit: bool = False
    ) -> None:
        super().__init__(message, details)
        self.http_status = http_status
        self.is_rate_limit = is_rate_limit


class NotFoundError(CatalogError):
    """
    Raised when a breed id is not present in the local cache.

    Example:
        raise NotFoundError(
            "Breed not found with ID: abys",
            details={'breed_id': 'abys'}
        )
    """
    kind = ErrorKind.NOT_FOUND


class CacheError(CatalogError):
    """
    Raised when there's an issue with the SQLite cache.

    Treated as secondary: when a remote call already failed, a cache error
    during fallback is logged and discarded in favour of the remote error.

    Common causes:
        - Database file is corrupted or locked
        - Permission denied when reading/writing
        - Schema version mismatch

    Example:
        raise CacheError(
            "Failed to read breeds page: database is locked",
            details={'path': '/path/to/breeds.db'}
        )
    """
    kind = ErrorKind.CACHE
