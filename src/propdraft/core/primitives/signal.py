# Copyright 2024-2025 David Gordon Nix
# SPDX-License-Identifier: Apache-2.0

"""
Observable state holders for the rendering layer.

A `State` always has a current value. Subscribing delivers that value
immediately, and every later `set` is delivered to all current subscribers
before `set` returns. Delivery is synchronous and happens on the caller's
thread; there is no scheduling.
"""

from __future__ import annotations

import logging
from typing import Callable, Generic, List, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class State(Generic[T]):
    """
    Holder of a single replaceable value with synchronous change delivery.

    Example:
        ```python
        dirty = State(False)
        unsubscribe = dirty.subscribe(lambda value: print("dirty:", value))
        # prints "dirty: False"
        dirty.set(True)
        # prints "dirty: True"
        unsubscribe()
        ```
    """

    def __init__(self, initial: T, name: str = "state"):
        self._value = initial
        self._name = name
        self._subscribers: List[Callable[[T], None]] = []

    @property
    def value(self) -> T:
        return self._value

    def set(self, value: T) -> None:
        """Replace the value and deliver it to every current subscriber."""
        self._value = value
        # Snapshot so subscribers may unsubscribe during delivery
        for callback in list(self._subscribers):
            self._deliver(callback, value)

    def subscribe(self, callback: Callable[[T], None]) -> Callable[[], None]:
        """
        Register a callback and deliver the current value to it.

        Returns:
            A callable that removes the subscription. Calling it twice is harmless.
        """
        self._subscribers.append(callback)
        self._deliver(callback, self._value)

        def unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)

    def _deliver(self, callback: Callable[[T], None], value: T) -> None:
        try:
            callback(value)
        except Exception as e:
            logger.warning(f"Error in '{self._name}' subscriber: {e}")

    def __repr__(self) -> str:
        return f"State({self._name}={self._value!r})"
