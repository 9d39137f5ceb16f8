"""
Error classification and call policies for the sync engine.

Two decisions are made here instead of being buried in nested try blocks:

    - Policy: a call either PROPAGATEs its failure to the caller as a
      Failure result, or DEGRADEs it to a default value (image lookups).
    - Classification: whether a failure looks network-caused, which the
      view state uses to flag cache-served data as offline.
"""

from enum import Enum, auto
from typing import Any, Callable

from catbreeds.core.exceptions import CatalogError, ErrorKind
from catbreeds.core.logger import get_logger
from catbreeds.core.result import Failure, Result, Success

logger = get_logger(__name__)


NETWORK_ERROR_PATTERNS = (
    "network",
    "connection",
    "timeout",
    "timed out",
    "unreachable",
    "resolve host",
)


class ErrorPolicy(Enum):
    """What attempt() does with a failed call."""
    PROPAGATE = auto()  # Return Failure(error)
    DEGRADE = auto()    # Log and return Success(default)


def is_network_error(message: str | None) -> bool:
    """
    Check whether an error message indicates a network-caused failure.

    Args:
        message: Error message, possibly None.

    Returns:
        True if the lowercased message contains any NETWORK_ERROR_PATTERNS.
    """
    if not message:
        return False
    msg = message.lower()
    return any(pattern in msg for pattern in NETWORK_ERROR_PATTERNS)


def classify_error(error: BaseException) -> ErrorKind:
    """Return the ErrorKind of a CatalogError, UNKNOWN for anything else."""
    if isinstance(error, CatalogError):
        return error.kind
    return ErrorKind.UNKNOWN


def attempt(
    fn: Callable[..., Any],
    *args: Any,
    policy: ErrorPolicy = ErrorPolicy.PROPAGATE,
    default: Any = None,
    **kwargs: Any
) -> Result:
    """
    Run fn(*args, **kwargs) and capture its outcome as a Result.

    Only CatalogError subclasses are captured; remote clients and the cache
    raise nothing else for expected failures, so other exceptions are bugs
    and propagate.

    Args:
        fn: Callable to run.
        policy: PROPAGATE returns Failure(error); DEGRADE returns
                Success(default) after logging the error at DEBUG.
        default: Value used by DEGRADE.
    """
    try:
        return Success(fn(*args, **kwargs))
    except CatalogError as e:
        if policy is ErrorPolicy.DEGRADE:
            logger.debug(f"Degraded {getattr(fn, '__name__', fn)!s}: {e.message}")
            return Success(default)
        return Failure(e)
