"""Caller tokens: invocation latches decoupled from the store."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any


class Caller:
    """Callable that remembers whether (and how often) it was invoked.

    Hand it to code under test wherever a callback is expected, then
    ``yield wait_for_call(caller)`` in the script. Invocation may happen
    before, during, or after a run.
    """

    def __init__(self) -> None:
        self._count = 0
        self._listeners: list[Callable[[], None]] = []

    def __call__(self, *args: Any, **kwargs: Any) -> None:
        self._count += 1
        for listener in list(self._listeners):
            listener()

    @property
    def call_count(self) -> int:
        return self._count

    def was_called(self) -> bool:
        return self._count > 0

    def add_listener(self, listener: Callable[[], None]) -> Callable[[], None]:
        self._listeners.append(listener)

        def remove() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return remove

    def __repr__(self) -> str:
        return f"Caller(call_count={self._count})"


def create_caller() -> Caller:
    return Caller()


__all__ = ["Caller", "create_caller"]
