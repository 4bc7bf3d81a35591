"""Runs the optional setup callback and owns its teardown."""

from __future__ import annotations

import logging
from typing import Any

from store_tester.action_log import ActionLog
from store_tester.errors import InitializationFailure
from store_tester.types import InitializeFunction, StoreHandle, Teardown

logger = logging.getLogger(__name__)


class InitializationController:
    def __init__(self, initialize_function: InitializeFunction | None, log: ActionLog):
        self._initialize_function = initialize_function
        self._log = log
        self._teardown: Teardown | None = None
        self._torn_down = False
        self.setup_boundary: int | None = None

    def setup(self, store: StoreHandle[Any]) -> None:
        """Run ``initialize_function`` synchronously and capture its teardown.

        Raises InitializationFailure when the callback raises or returns a
        non-callable teardown.
        """
        if self._initialize_function is None:
            self.setup_boundary = len(self._log)
            return
        try:
            teardown = self._initialize_function(store)
        except Exception as exc:
            raise InitializationFailure(exc) from exc
        if teardown is not None and not callable(teardown):
            raise InitializationFailure(
                TypeError(
                    "initialize_function must return a teardown callable or None, "
                    f"got {type(teardown).__name__}"
                )
            )
        self._teardown = teardown
        self.setup_boundary = len(self._log)
        logger.debug("initialize_function dispatched %d action(s)", self.setup_boundary)

    def teardown(self) -> None:
        """Invoke the captured teardown at most once; its exceptions propagate."""
        if self._torn_down:
            return
        self._torn_down = True
        if self._teardown is None:
            return
        try:
            self._teardown()
        except Exception:
            logger.exception("teardown raised after the run result was frozen")
            raise


__all__ = ["InitializationController"]
