"""
LiveQuery Kernel: State Cell

A single-owner observable value. Writers hand in a pure transition
(previous snapshot -> next snapshot); the cell swaps the reference and
notifies subscribers. Snapshots are immutable, so observers can keep the
one they were handed.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Generic, TypeVar

T = TypeVar("T")

Listener = Callable[[T], None]


class StateCell(Generic[T]):
    """Observable holder for an immutable snapshot."""

    def __init__(self, initial: T) -> None:
        self._value = initial
        self._listeners: list[Listener] = []

    @property
    def value(self) -> T:
        return self._value

    def set(self, value: T) -> None:
        """Replace the snapshot and notify, unless it is the same object."""
        if value is self._value:
            return
        self._value = value
        for listener in list(self._listeners):
            listener(value)

    def update(self, transition: Callable[[T], T]) -> T:
        """Apply a pure transition over the current snapshot."""
        self.set(transition(self._value))
        return self._value

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a listener. Returns an unsubscribe callable."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe
