"""Fire-and-forget background work for simulating external dispatches."""

from __future__ import annotations

import asyncio
import inspect
import logging
import weakref
from collections.abc import Callable
from typing import Any

logger = logging.getLogger(__name__)


class BackgroundEffects:
    """Effects scheduled on one event loop, with the tasks they spawned.

    Tasks are held here until they finish so the loop does not drop them.
    A task that ends with an exception is kept in ``failures`` and handed to
    the loop's exception handler; nothing is re-raised into the script.
    """

    def __init__(self, loop: asyncio.AbstractEventLoop):
        self._loop = loop
        self.tasks: set[asyncio.Task[Any]] = set()
        self.failures: list[BaseException] = []

    def schedule(self, fn: Callable[..., Any], args: tuple[Any, ...]) -> asyncio.Handle:
        return self._loop.call_soon(self._start, fn, args)

    def _start(self, fn: Callable[..., Any], args: tuple[Any, ...]) -> None:
        result = fn(*args)
        if not inspect.isawaitable(result):
            return
        task = asyncio.ensure_future(result)
        self.tasks.add(task)
        task.add_done_callback(self._task_finished)

    def _task_finished(self, task: asyncio.Task[Any]) -> None:
        self.tasks.discard(task)
        if task.cancelled() or task.exception() is None:
            return
        error = task.exception()
        self.failures.append(error)
        logger.debug("background effect %r failed: %r", task, error)
        self._loop.call_exception_handler(
            {
                "message": "background effect raised",
                "exception": error,
                "task": task,
            }
        )


_effects_by_loop: weakref.WeakKeyDictionary[asyncio.AbstractEventLoop, BackgroundEffects] = (
    weakref.WeakKeyDictionary()
)


def background_effects(loop: asyncio.AbstractEventLoop | None = None) -> BackgroundEffects:
    """Return the effects registry of ``loop`` (default: the running loop)."""
    if loop is None:
        loop = asyncio.get_running_loop()
    effects = _effects_by_loop.get(loop)
    if effects is None:
        effects = _effects_by_loop[loop] = BackgroundEffects(loop)
    return effects


def run_async_effect(fn: Callable[..., Any], *args: Any) -> asyncio.Handle:
    """Schedule ``fn(*args)`` on the running loop, independent of the script.

    The effect runs on a later loop iteration. If ``fn`` returns an awaitable
    it is driven as a task tracked by :func:`background_effects`. The engine
    gives no flushing guarantee for this work: whatever it dispatches is an
    ordinary asynchronous event.
    """
    return background_effects().schedule(fn, args)


__all__ = ["BackgroundEffects", "background_effects", "run_async_effect"]
