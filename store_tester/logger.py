"""Reducer enhancer that reports every reduction to an action listener."""

from __future__ import annotations

import functools
from typing import Any

from store_tester.types import ActionListener, Reducer


def create_action_logger(listener: ActionListener):
    """Return an enhancer that wraps a reducer and reports each reduction.

    The listener receives ``(action, new_state)`` in reduction order, so a
    subscriber that dispatches from inside another dispatch is still recorded
    after the action that triggered it.

    Example:
        def init_store(on_action):
            enhance = create_action_logger(on_action)
            return MyStore(enhance(reducer), initial_state)
    """

    def enhance(reducer: Reducer) -> Reducer:
        @functools.wraps(reducer)
        def logged_reducer(state: Any, action: Any) -> Any:
            new_state = reducer(state, action)
            listener(action, new_state)
            return new_state

        return logged_reducer

    return enhance


__all__ = ["create_action_logger"]
