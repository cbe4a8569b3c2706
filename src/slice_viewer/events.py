"""Explicit change-subscription primitive for controller inputs."""

from __future__ import annotations

from collections.abc import Callable
from typing import Generic, TypeVar

T = TypeVar("T")

ChangeHandler = Callable[[T], None]


class Observable(Generic[T]):
    """A value that notifies registered handlers when it is set.

    Handlers run synchronously on the caller's thread, in registration
    order. Every ``set()`` notifies, even when the value is unchanged,
    so each keystroke reaches the handlers.
    """

    def __init__(self, initial: T) -> None:
        self._value = initial
        self._handlers: list[ChangeHandler[T]] = []

    @property
    def value(self) -> T:
        return self._value

    def set(self, value: T) -> None:
        self._value = value
        for handler in list(self._handlers):
            handler(value)

    def reset(self, value: T) -> None:
        """Replace the value without notifying handlers."""
        self._value = value

    def on_change(self, handler: ChangeHandler[T]) -> Callable[[], None]:
        """Register *handler*; returns a callable that unregisters it."""
        self._handlers.append(handler)

        def _unsubscribe() -> None:
            if handler in self._handlers:
                self._handlers.remove(handler)

        return _unsubscribe


__all__ = ["ChangeHandler", "Observable"]
