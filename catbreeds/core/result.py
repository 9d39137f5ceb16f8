"""
Result values returned across the catalog's public boundary.

Every public Sync Engine operation returns either Success(value) or
Failure(error) instead of raising. Callers branch on `ok` or use the
helpers below.

Usage:
    result = engine.get_breeds(page=2)
    if result.ok:
        show(result.value)
    else:
        show_error(result.error.message)
"""

from dataclasses import dataclass
from typing import Callable, Generic, TypeVar, Union

from catbreeds.core.exceptions import CatalogError, ErrorKind


T = TypeVar("T")
U = TypeVar("U")


@dataclass(frozen=True)
class Success(Generic[T]):
    """Successful outcome carrying the operation's payload."""

    value: T

    @property
    def ok(self) -> bool:
        return True

    @property
    def error(self) -> None:
        return None

    def unwrap(self) -> T:
        return self.value

    def value_or(self, default: T) -> T:
        return self.value

    def map(self, fn: Callable[[T], U]) -> "Success[U]":
        return Success(fn(self.value))


@dataclass(frozen=True)
class Failure:
    """
    Failed outcome carrying a classified CatalogError.

    Attributes:
        error: The error that ended the operation. Its message is
               human-readable and safe to show to the user.
    """

    error: CatalogError

    @property
    def ok(self) -> bool:
        return False

    @property
    def value(self) -> None:
        return None

    @property
    def kind(self) -> ErrorKind:
        return self.error.kind

    @property
    def message(self) -> str:
        return self.error.message

    def unwrap(self):
        raise self.error

    def value_or(self, default):
        return default

    def map(self, fn) -> "Failure":
        return self


Result = Union[Success[T], Failure]
