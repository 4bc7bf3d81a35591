"""Append-only record of every dispatch observed during a run."""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Any, Union

logger = logging.getLogger(__name__)

ActionMatcher = Union[str, type, Callable[[Any], bool]]


@dataclass(frozen=True)
class ActionRecord:
    """One observed dispatch paired with the state it produced."""

    sequence: int
    action: Any
    state_after: Any


def action_type(action: Any) -> str:
    """Best-effort type tag of an opaque action."""
    tag = getattr(action, "type", None)
    if isinstance(tag, str):
        return tag
    if isinstance(action, Mapping):
        tag = action.get("type")
        if isinstance(tag, str):
            return tag
    return type(action).__name__


def describe_matcher(matcher: ActionMatcher) -> str:
    if isinstance(matcher, str):
        return repr(matcher)
    if isinstance(matcher, type):
        return matcher.__name__
    return getattr(matcher, "__qualname__", repr(matcher))


def matches_action(matcher: ActionMatcher, action: Any) -> bool:
    if isinstance(matcher, str):
        return action_type(action) == matcher
    if isinstance(matcher, type):
        return isinstance(action, matcher)
    return bool(matcher(action))


class ActionLog:
    """Total, unfiltered observer of the store's dispatches.

    A dispatch that happens before :meth:`record` is wired into the store can
    never be observed; the log does not try to reconstruct it.
    """

    def __init__(self) -> None:
        self._records: list[ActionRecord] = []
        self._observers: list[Callable[[ActionRecord], None]] = []

    def __len__(self) -> int:
        return len(self._records)

    def record(self, action: Any, state_after: Any) -> ActionRecord:
        entry = ActionRecord(
            sequence=len(self._records), action=action, state_after=state_after
        )
        self._records.append(entry)
        logger.debug("recorded #%d %s", entry.sequence, action_type(action))
        for observer in list(self._observers):
            observer(entry)
        return entry

    def observe(self, observer: Callable[[ActionRecord], None]) -> Callable[[], None]:
        """Register ``observer`` for every future append; returns the detacher."""
        self._observers.append(observer)

        def detach() -> None:
            if observer in self._observers:
                self._observers.remove(observer)

        return detach

    def snapshot(self) -> tuple[ActionRecord, ...]:
        return tuple(self._records)

    def find(self, matcher: ActionMatcher, start: int = 0) -> int | None:
        """Index of the first record at or after ``start`` matching ``matcher``."""
        for index in range(start, len(self._records)):
            if matches_action(matcher, self._records[index].action):
                return index
        return None

    def __getitem__(self, index: int) -> ActionRecord:
        return self._records[index]


__all__ = [
    "ActionLog",
    "ActionMatcher",
    "ActionRecord",
    "action_type",
    "describe_matcher",
    "matches_action",
]
