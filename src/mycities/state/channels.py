"""Value channels: a current value plus subscriber callbacks.

A :class:`ValueChannel` is owned and written by the store.  Consumers get
a :class:`ReadOnlyChannel` view that can read and subscribe but never
emit.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Generic, TypeVar

_logger = logging.getLogger(__name__)

T = TypeVar("T")

Subscriber = Callable[[T], None]
Unsubscribe = Callable[[], None]


class ValueChannel(Generic[T]):
    """Holds the latest value and notifies subscribers on every emit."""

    def __init__(self, initial: T, *, name: str = "") -> None:
        self._value = initial
        self._name = name
        self._subscribers: list[Subscriber[T]] = []
        self._readonly: ReadOnlyChannel[T] | None = None

    @property
    def name(self) -> str:
        return self._name

    @property
    def value(self) -> T:
        return self._value

    def emit(self, value: T) -> None:
        """Replace the current value and notify every subscriber."""
        self._value = value
        for callback in list(self._subscribers):
            self._notify(callback, value)

    def subscribe(self, callback: Subscriber[T], *, replay: bool = True) -> Unsubscribe:
        """Register *callback*; with *replay* it first receives the current value.

        Returns a function that removes the subscription.
        """
        self._subscribers.append(callback)
        if replay:
            self._notify(callback, self._value)

        def _unsubscribe() -> None:
            # Remove by identity so the same callable can be registered twice.
            for index, candidate in enumerate(self._subscribers):
                if candidate is callback:
                    del self._subscribers[index]
                    return

        return _unsubscribe

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)

    def as_readonly(self) -> ReadOnlyChannel[T]:
        if self._readonly is None:
            self._readonly = ReadOnlyChannel(self)
        return self._readonly

    def _notify(self, callback: Subscriber[T], value: T) -> None:
        try:
            callback(value)
        except Exception:
            _logger.warning("Subscriber to %s channel failed", self._name or "unnamed", exc_info=True)


class ReadOnlyChannel(Generic[T]):
    """Read/subscribe view over a :class:`ValueChannel`."""

    __slots__ = ("_channel",)

    def __init__(self, channel: ValueChannel[T]) -> None:
        self._channel = channel

    @property
    def name(self) -> str:
        return self._channel.name

    @property
    def value(self) -> T:
        return self._channel.value

    def subscribe(self, callback: Subscriber[T], *, replay: bool = True) -> Unsubscribe:
        return self._channel.subscribe(callback, replay=replay)
