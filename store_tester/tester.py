"""StoreTester - runs a directive script against a freshly built store."""

from __future__ import annotations

import asyncio
import inspect
import logging
from dataclasses import replace
from typing import Any, Generic, TypeVar

from store_tester.action_log import ActionLog
from store_tester.config import StoreTesterConfig
from store_tester.errors import InitializationFailure, StoreTesterError
from store_tester.initialization import InitializationController
from store_tester.interpreter import DirectiveInterpreter
from store_tester.result import RunResult, build_run_result
from store_tester.types import InitializeFunction, InitStore, Script, ScriptFactory, StoreHandle

logger = logging.getLogger(__name__)

S = TypeVar("S")

_UNSET: Any = object()


def _start_script(script: Script | ScriptFactory) -> Script:
    if inspect.isgenerator(script):
        return script
    if callable(script):
        produced = script()
        if inspect.isgenerator(produced):
            return produced
        raise TypeError(
            f"script must be a generator function, got a callable returning {type(produced).__name__}"
        )
    raise TypeError(f"script must be a generator or generator function, got {type(script).__name__}")


class StoreTester(Generic[S]):
    """Engine for exactly one run of one script.

    Example:
        tester = StoreTester(init_store=init_store, error_timeout_ms=10)

        def script():
            result = yield dispatch_action(increment())
            assert result.state["number"] == 1

        result = await tester.run(script)
        assert result.error is None
    """

    def __init__(
        self,
        config: StoreTesterConfig | None = None,
        *,
        init_store: InitStore = _UNSET,
        error_timeout_ms: float = _UNSET,
        throw_on_timeout: bool = _UNSET,
        initialize_function: InitializeFunction | None = _UNSET,
    ):
        overrides = {
            name: value
            for name, value in (
                ("init_store", init_store),
                ("error_timeout_ms", error_timeout_ms),
                ("throw_on_timeout", throw_on_timeout),
                ("initialize_function", initialize_function),
            )
            if value is not _UNSET
        }
        if config is None:
            if "init_store" not in overrides:
                raise TypeError("StoreTester requires init_store or a StoreTesterConfig")
            config = StoreTesterConfig(**overrides)
        elif overrides:
            config = replace(config, **overrides)
        self.config = config
        self.log = ActionLog()
        self.store: StoreHandle[S] | None = None
        self._interpreter: DirectiveInterpreter | None = None
        self._started = False

    @property
    def interpreter(self) -> DirectiveInterpreter | None:
        return self._interpreter

    async def run(self, script: Script | ScriptFactory) -> RunResult[S]:
        """Run ``script`` and return its frozen result.

        The result is built the moment the script resolves; teardown runs
        afterwards, so nothing it dispatches is part of the result. With
        ``throw_on_timeout`` the captured error is raised after teardown.
        """
        if self._started:
            raise RuntimeError("StoreTester instances run exactly once; create a new one")
        self._started = True
        generator = _start_script(script)

        store = self.config.init_store(self.log.record)
        self.store = store
        controller = InitializationController(self.config.initialize_function, self.log)

        error: StoreTesterError | None = None
        # Teardown runs once however this phase ends, cancellation included.
        try:
            try:
                controller.setup(store)
            except InitializationFailure as failure:
                logger.warning("%s", failure)
                error = failure
            else:
                self._interpreter = DirectiveInterpreter(
                    self.log, store, self.config.error_timeout_ms
                )
                error = await self._interpreter.run(generator)
            result = build_run_result(self.log, store, error)
        finally:
            controller.teardown()

        if error is not None and self.config.throw_on_timeout:
            raise error
        return result

    def run_sync(self, script: Script | ScriptFactory) -> RunResult[S]:
        """Run on a fresh event loop; for callers outside of asyncio."""
        return asyncio.run(self.run(script))


__all__ = ["StoreTester"]
