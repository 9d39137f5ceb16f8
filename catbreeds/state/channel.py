"""
Single-slot broadcast channel for view state.

Holds only the latest published value. Subscribers are called with every
new value; pollers read `value` or block in wait_for_update() until the
version moves past one they have seen. Old values are never queued.

Usage:
    channel = StateChannel(BreedListState())
    unsubscribe = channel.subscribe(render)
    channel.publish(new_state)
"""

import threading
from typing import Callable, Generic, TypeVar

from catbreeds.core.logger import get_logger

logger = get_logger(__name__)

T = TypeVar("T")


class StateChannel(Generic[T]):
    """
    Latest-value broadcast of immutable states.

    Attributes:
        value: The most recently published value.
        version: Incremented on every publish, starting at 0.
    """

    def __init__(self, initial: T) -> None:
        self._value = initial
        self._version = 0
        self._subscribers: list[Callable[[T], None]] = []
        self._condition = threading.Condition()

    @property
    def value(self) -> T:
        with self._condition:
            return self._value

    @property
    def version(self) -> int:
        with self._condition:
            return self._version

    def publish(self, value: T) -> None:
        """Replace the current value and notify subscribers and waiters."""
        with self._condition:
            subscribers = self._commit(value)
        self._notify(subscribers, value)

    def update(self, fn: Callable[[T], T]) -> T:
        """Atomically publish fn(current value) and return the new value."""
        with self._condition:
            new_value = fn(self._value)
            subscribers = self._commit(new_value)
        self._notify(subscribers, new_value)
        return new_value

    def _commit(self, value: T) -> list[Callable[[T], None]]:
        self._value = value
        self._version += 1
        self._condition.notify_all()
        return list(self._subscribers)

    @staticmethod
    def _notify(subscribers: list[Callable[[T], None]], value: T) -> None:
        # Called outside the lock so a subscriber may publish or read again
        for callback in subscribers:
            try:
                callback(value)
            except Exception:
                logger.exception("State subscriber raised; subscriber kept")

    def subscribe(self, callback: Callable[[T], None], replay: bool = True) -> Callable[[], None]:
        """
        Register a callback for future values.

        Args:
            callback: Called with each published value.
            replay: If True, callback is first called with the current value.

        Returns:
            A function that removes the subscription.
        """
        with self._condition:
            self._subscribers.append(callback)
            current = self._value

        if replay:
            callback(current)

        def unsubscribe() -> None:
            with self._condition:
                if callback in self._subscribers:
                    self._subscribers.remove(callback)

        return unsubscribe

    def wait_for_update(self, after_version: int, timeout: float | None = None) -> tuple[int, T]:
        """
        Block until a value newer than after_version is published.

        Returns:
            (version, value) at wake-up. If the timeout expires first, the
            unchanged current version and value are returned.
        """
        with self._condition:
            self._condition.wait_for(lambda: self._version > after_version, timeout=timeout)
            return self._version, self._value
