"""Shared type aliases and the store handle contract."""

from __future__ import annotations

from collections.abc import Callable, Generator
from typing import Any, Protocol, TypeVar

S = TypeVar("S")


class StoreHandle(Protocol[S]):
    """What the engine needs from a store.

    ``dispatch`` is synchronous: it returns only after every synchronous
    reaction (reducers, subscribers) has completed.
    """

    def dispatch(self, action: Any) -> Any: ...

    def get_state(self) -> S: ...

    def subscribe(self, listener: Callable[[], None]) -> Callable[[], None]: ...


ActionListener = Callable[[Any, Any], None]
Reducer = Callable[[Any, Any], Any]
InitStore = Callable[[ActionListener], StoreHandle[Any]]
Teardown = Callable[[], None]
InitializeFunction = Callable[[StoreHandle[Any]], "Teardown | None"]
Script = Generator[Any, Any, None]
ScriptFactory = Callable[[], Script]


__all__ = [
    "ActionListener",
    "InitStore",
    "InitializeFunction",
    "Reducer",
    "Script",
    "ScriptFactory",
    "StoreHandle",
    "Teardown",
]
