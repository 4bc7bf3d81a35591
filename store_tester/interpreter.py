"""Directive interpreter: drives a script against the store's event stream.

The interpreter pulls one directive at a time from the script generator. Each
waiting directive registers its listeners (log appends, caller invocations,
timers, awaitable completion) together with one timeout timer on a
:class:`_PendingDirective`. Whichever listener settles it first wins and every
other listener is detached at once, so a resolved directive can never fire
again.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from enum import Enum, auto
from typing import Any

from store_tester.action_log import ActionLog, ActionRecord, matches_action
from store_tester.config import DEBUG_TRACE
from store_tester.directives import (
    Directive,
    DispatchActionDirective,
    WaitForActionDirective,
    WaitForCallDirective,
    WaitForDirective,
    WaitForInitializeFunctionDirective,
    WaitForMsDirective,
    WaitForPromiseDirective,
    WaitForStateDirective,
    WaitForSyncWorkToFinishDirective,
)
from store_tester.errors import (
    DirectiveTimeout,
    ScriptAssertionFailure,
    StoreTesterError,
    UnresolvableCondition,
)
from store_tester.result import DirectiveResult
from store_tester.types import Script, StoreHandle

logger = logging.getLogger(__name__)

_TRACE = logging.INFO if DEBUG_TRACE else logging.DEBUG

WAIT_FOR_TICK_SECONDS = 0.001


class InterpreterState(Enum):
    IDLE = auto()
    AWAITING_DIRECTIVE = auto()
    RESOLVED = auto()
    DONE = auto()


class _PendingDirective:
    """Outcome and listeners of the directive currently being waited on."""

    def __init__(self, loop: asyncio.AbstractEventLoop, directive: Directive):
        self.directive = directive
        self.future: asyncio.Future[Any] = loop.create_future()
        self._loop = loop
        self._started = loop.time()
        self._detachers: list[Callable[[], Any]] = []

    @property
    def done(self) -> bool:
        return self.future.done()

    def elapsed_ms(self) -> float:
        return (self._loop.time() - self._started) * 1000.0

    def attach(self, detacher: Callable[[], Any]) -> None:
        if self.done:
            detacher()
            return
        self._detachers.append(detacher)

    def resolve(self, value: Any = None) -> None:
        if self.done:
            return
        self.future.set_result(value)
        self.detach()

    def fail(self, error: StoreTesterError) -> None:
        if self.done:
            return
        self.future.set_exception(error)
        self.detach()

    def detach(self) -> None:
        while self._detachers:
            self._detachers.pop()()


class DirectiveInterpreter:
    """Scheduler for one run; holds the cursor and the per-directive listeners."""

    def __init__(self, log: ActionLog, store: StoreHandle[Any], error_timeout_ms: float):
        self._log = log
        self._store = store
        self._error_timeout_ms = error_timeout_ms
        self._cursor = 0
        self._append_listeners: list[Callable[[ActionRecord], None]] = []
        self._loop: asyncio.AbstractEventLoop | None = None
        self.state = InterpreterState.IDLE

    @property
    def cursor(self) -> int:
        return self._cursor

    async def run(self, script: Script) -> StoreTesterError | None:
        """Drive ``script`` to completion; returns the single error, if any."""
        if self.state is not InterpreterState.IDLE:
            raise RuntimeError("DirectiveInterpreter can only run once")
        self._loop = asyncio.get_running_loop()
        detach_log = self._log.observe(self._on_append)
        try:
            return await self._drive(script)
        finally:
            if self.state is not InterpreterState.RESOLVED:
                # Cancelled or failed outside the error taxonomy.
                self._close(script)
            detach_log()
            self._append_listeners.clear()
            self.state = InterpreterState.DONE

    async def _drive(self, script: Script) -> StoreTesterError | None:
        self.state = InterpreterState.AWAITING_DIRECTIVE
        send_value: Any = None
        while True:
            try:
                directive = script.send(send_value)
            except StopIteration:
                return self._finish(None)
            except Exception as exc:
                return self._finish(ScriptAssertionFailure(exc))

            try:
                send_value = await self._execute(directive)
            except StoreTesterError as error:
                self._close(script)
                return self._finish(error)

    def _finish(self, error: StoreTesterError | None) -> StoreTesterError | None:
        self.state = InterpreterState.RESOLVED
        if error is None:
            logger.log(_TRACE, "script completed (%d actions)", len(self._log))
        elif isinstance(error, DirectiveTimeout):
            logger.warning("%s", error)
        else:
            logger.log(_TRACE, "script resolved with %s", type(error).__name__)
        return error

    def _close(self, script: Script) -> None:
        # The first error is the run's error; a misbehaving finally block only gets logged.
        try:
            script.close()
        except Exception:
            logger.exception("script raised while being closed after an error")

    async def _execute(self, directive: Any) -> DirectiveResult[Any]:
        if not isinstance(directive, Directive):
            raise UnresolvableCondition(directive)
        logger.log(_TRACE, "directive %s (cursor=%d)", directive.kind, self._cursor)

        value: Any = None
        match directive:
            case DispatchActionDirective(action=action):
                self._dispatch(action)
            case WaitForActionDirective():
                await self._wait_for_action(directive)
            case WaitForStateDirective():
                await self._wait_for_state(directive)
            case WaitForCallDirective():
                await self._wait_for_call(directive)
            case WaitForDirective():
                await self._wait_for(directive)
            case WaitForMsDirective():
                await self._wait_for_ms(directive)
            case WaitForPromiseDirective():
                value = await self._wait_for_promise(directive)
            case WaitForInitializeFunctionDirective():
                self._advance_cursor(len(self._log))
                await asyncio.sleep(0)
            case WaitForSyncWorkToFinishDirective():
                await asyncio.sleep(0)
                self._advance_cursor(len(self._log))
            case _:
                raise UnresolvableCondition(directive)

        return DirectiveResult(
            actions=self._log.snapshot(), state=self._store.get_state(), value=value
        )

    def _advance_cursor(self, position: int) -> None:
        if position > self._cursor:
            logger.debug("cursor %d -> %d", self._cursor, position)
            self._cursor = position

    def _on_append(self, record: ActionRecord) -> None:
        for listener in list(self._append_listeners):
            listener(record)

    # -- per-directive wiring -------------------------------------------------

    def _begin(self, directive: Directive) -> _PendingDirective:
        assert self._loop is not None
        return _PendingDirective(self._loop, directive)

    def _guarded(self, pending: _PendingDirective, check: Callable[..., None]) -> Callable[..., None]:
        """Wrap a satisfaction check so it is inert once ``pending`` is settled."""

        def guarded(*args: Any) -> None:
            if pending.done:
                return
            try:
                check(*args)
            except Exception as exc:
                pending.fail(ScriptAssertionFailure(exc))

        return guarded

    def _listen_appends(
        self, pending: _PendingDirective, listener: Callable[[ActionRecord], None]
    ) -> None:
        if pending.done:
            return
        self._append_listeners.append(listener)

        def detach() -> None:
            if listener in self._append_listeners:
                self._append_listeners.remove(listener)

        pending.attach(detach)

    def _arm_timeout(self, pending: _PendingDirective) -> None:
        if pending.done:
            return
        assert self._loop is not None
        directive = pending.directive

        def expire() -> None:
            pending.fail(
                DirectiveTimeout(directive.kind, pending.elapsed_ms(), directive.describe())
            )

        handle = self._loop.call_later(self._error_timeout_ms / 1000.0, expire)
        pending.attach(handle.cancel)

    async def _settle(self, pending: _PendingDirective) -> Any:
        try:
            return await pending.future
        finally:
            pending.detach()

    def _dispatch(self, action: Any) -> None:
        start = len(self._log)
        try:
            self._store.dispatch(action)
        except Exception as exc:
            raise ScriptAssertionFailure(exc) from exc
        for index in range(start, len(self._log)):
            recorded = self._log[index].action
            if recorded is action or recorded == action:
                self._advance_cursor(index + 1)
                return
        self._advance_cursor(len(self._log))

    async def _wait_for_action(self, directive: WaitForActionDirective) -> None:
        pending = self._begin(directive)

        def scan() -> None:
            index = self._log.find(directive.matcher, self._cursor)
            if index is not None:
                self._advance_cursor(index + 1)
                pending.resolve()

        def on_append(record: ActionRecord) -> None:
            if record.sequence >= self._cursor and matches_action(directive.matcher, record.action):
                self._advance_cursor(record.sequence + 1)
                pending.resolve()

        self._guarded(pending, scan)()
        self._listen_appends(pending, self._guarded(pending, on_append))
        self._arm_timeout(pending)
        await self._settle(pending)

    async def _wait_for_state(self, directive: WaitForStateDirective) -> None:
        pending = self._begin(directive)

        def check_state(state: Any) -> None:
            if directive.predicate(state):
                pending.resolve()

        self._guarded(pending, check_state)(self._store.get_state())
        self._listen_appends(
            pending, self._guarded(pending, lambda record: check_state(record.state_after))
        )
        self._arm_timeout(pending)
        await self._settle(pending)

    async def _wait_for_call(self, directive: WaitForCallDirective) -> None:
        pending = self._begin(directive)
        caller = directive.caller
        if caller.was_called():
            pending.resolve()
        else:
            pending.attach(caller.add_listener(lambda: pending.resolve()))
        self._arm_timeout(pending)
        await self._settle(pending)

    async def _wait_for(self, directive: WaitForDirective) -> None:
        assert self._loop is not None
        loop = self._loop
        pending = self._begin(directive)

        def check() -> None:
            if directive.predicate():
                pending.resolve()

        guarded_check = self._guarded(pending, check)
        guarded_check()
        # Appends arrive mid-dispatch; re-check once the dispatch has returned.
        self._listen_appends(pending, lambda _record: loop.call_soon(guarded_check))

        tick: list[asyncio.TimerHandle] = []

        def on_tick() -> None:
            guarded_check()
            if not pending.done:
                tick[0] = loop.call_later(WAIT_FOR_TICK_SECONDS, on_tick)

        if not pending.done:
            tick.append(loop.call_later(WAIT_FOR_TICK_SECONDS, on_tick))
            pending.attach(lambda: tick[0].cancel())
        self._arm_timeout(pending)
        await self._settle(pending)

    async def _wait_for_ms(self, directive: WaitForMsDirective) -> None:
        assert self._loop is not None
        pending = self._begin(directive)
        if directive.ms <= self._error_timeout_ms:
            handle = self._loop.call_later(directive.ms / 1000.0, pending.resolve)
            pending.attach(handle.cancel)
        else:
            self._arm_timeout(pending)
        await self._settle(pending)

    async def _wait_for_promise(self, directive: WaitForPromiseDirective) -> Any:
        pending = self._begin(directive)
        owned = not asyncio.isfuture(directive.awaitable)
        future = asyncio.ensure_future(directive.awaitable)

        def on_done(settled: asyncio.Future[Any]) -> None:
            if settled.cancelled():
                pending.resolve(asyncio.CancelledError())
                return
            error = settled.exception()
            pending.resolve(error if error is not None else settled.result())

        if future.done():
            on_done(future)
        else:
            if owned:
                pending.attach(future.cancel)
            future.add_done_callback(on_done)
            pending.attach(lambda: future.remove_done_callback(on_done))
        self._arm_timeout(pending)
        return await self._settle(pending)


__all__ = ["DirectiveInterpreter", "InterpreterState", "WAIT_FOR_TICK_SECONDS"]
