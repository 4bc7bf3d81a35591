"""Directives a test script yields to the store tester.

Directives are inert data: nothing happens until the interpreter receives one
from the script.

Usage:
    def script():
        yield dispatch_action(increment())
        result = yield wait_for_action("saved")
        assert result.state["status"] == "Ok"
"""

from __future__ import annotations

import inspect
import math
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any, ClassVar

from store_tester.action_log import ActionMatcher, describe_matcher
from store_tester.caller import Caller


def _coerce_finite_float(value: float, *, name: str) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise TypeError(f"{name} must be float, got {type(value).__name__}")
    coerced = float(value)
    if math.isnan(coerced) or math.isinf(coerced):
        raise ValueError(f"{name} must be finite, got {value!r}")
    return coerced


def _ensure_callable(value: Any, *, name: str) -> None:
    if not callable(value):
        raise TypeError(f"{name} must be callable, got {type(value).__name__}")


class Directive:
    """Base class of everything a script may yield."""

    kind: ClassVar[str] = "Directive"

    def describe(self) -> str:
        return self.kind


@dataclass(frozen=True)
class DispatchActionDirective(Directive):
    """Dispatch ``action`` synchronously through the store."""

    kind: ClassVar[str] = "DispatchAction"

    action: Any


@dataclass(frozen=True)
class WaitForActionDirective(Directive):
    """Wait for a not-yet-accounted-for action matching ``matcher``."""

    kind: ClassVar[str] = "WaitForAction"

    matcher: ActionMatcher

    def __post_init__(self) -> None:
        if not isinstance(self.matcher, (str, type)) and not callable(self.matcher):
            raise TypeError(
                "WaitForAction matcher must be str, type or callable, "
                f"got {type(self.matcher).__name__}"
            )

    def describe(self) -> str:
        return f"action {describe_matcher(self.matcher)} was not dispatched"


@dataclass(frozen=True)
class WaitForStateDirective(Directive):
    """Wait until ``predicate(state)`` holds."""

    kind: ClassVar[str] = "WaitForState"

    predicate: Callable[[Any], bool]

    def __post_init__(self) -> None:
        _ensure_callable(self.predicate, name="predicate")

    def describe(self) -> str:
        return "state predicate never became true"


@dataclass(frozen=True)
class WaitForCallDirective(Directive):
    """Wait until ``caller`` has been invoked at least once."""

    kind: ClassVar[str] = "WaitForCall"

    caller: Caller

    def __post_init__(self) -> None:
        if not isinstance(self.caller, Caller):
            raise TypeError(f"WaitForCall requires Caller, got {type(self.caller).__name__}")

    def describe(self) -> str:
        return "caller was not called"


@dataclass(frozen=True)
class WaitForDirective(Directive):
    """Wait until the zero-argument ``predicate`` returns true."""

    kind: ClassVar[str] = "WaitFor"

    predicate: Callable[[], bool]

    def __post_init__(self) -> None:
        _ensure_callable(self.predicate, name="predicate")

    def describe(self) -> str:
        return "condition never became true"


@dataclass(frozen=True)
class WaitForMsDirective(Directive):
    """Wait for ``ms`` milliseconds of wall-clock time."""

    kind: ClassVar[str] = "WaitForMs"

    ms: float

    def __post_init__(self) -> None:
        ms = _coerce_finite_float(self.ms, name="ms")
        if ms < 0.0:
            raise ValueError("ms must be >= 0.0")
        object.__setattr__(self, "ms", ms)

    def describe(self) -> str:
        return f"requested wait of {self.ms:.0f}ms exceeds the error timeout"


@dataclass(frozen=True)
class WaitForPromiseDirective(Directive):
    """Wait until ``awaitable`` settles, successfully or not."""

    kind: ClassVar[str] = "WaitForPromise"

    awaitable: Awaitable[Any]

    def __post_init__(self) -> None:
        if not inspect.isawaitable(self.awaitable):
            raise TypeError(
                f"WaitForPromise requires an awaitable, got {type(self.awaitable).__name__}"
            )

    def describe(self) -> str:
        return "awaitable did not settle"


@dataclass(frozen=True)
class WaitForInitializeFunctionDirective(Directive):
    """Mark everything logged so far as setup history."""

    kind: ClassVar[str] = "WaitForInitializeFunction"


@dataclass(frozen=True)
class WaitForSyncWorkToFinishDirective(Directive):
    """Let callbacks already queued on the loop run once, then mark them accounted for."""

    kind: ClassVar[str] = "WaitForSyncWorkToFinish"


def dispatch_action(action: Any) -> DispatchActionDirective:
    return DispatchActionDirective(action=action)


def wait_for_action(matcher: ActionMatcher) -> WaitForActionDirective:
    return WaitForActionDirective(matcher=matcher)


def wait_for_state(predicate: Callable[[Any], bool]) -> WaitForStateDirective:
    return WaitForStateDirective(predicate=predicate)


def wait_for_call(caller: Caller) -> WaitForCallDirective:
    return WaitForCallDirective(caller=caller)


def wait_for(predicate: Callable[[], bool]) -> WaitForDirective:
    return WaitForDirective(predicate=predicate)


def wait_for_ms(ms: float) -> WaitForMsDirective:
    return WaitForMsDirective(ms=ms)


def wait_for_promise(awaitable: Awaitable[Any]) -> WaitForPromiseDirective:
    return WaitForPromiseDirective(awaitable=awaitable)


def wait_for_initialize_function() -> WaitForInitializeFunctionDirective:
    return WaitForInitializeFunctionDirective()


def wait_for_sync_work_to_finish() -> WaitForSyncWorkToFinishDirective:
    return WaitForSyncWorkToFinishDirective()


def DispatchAction(action: Any) -> DispatchActionDirective:  # noqa: N802
    return DispatchActionDirective(action=action)


def WaitForAction(matcher: ActionMatcher) -> WaitForActionDirective:  # noqa: N802
    return WaitForActionDirective(matcher=matcher)


def WaitForState(predicate: Callable[[Any], bool]) -> WaitForStateDirective:  # noqa: N802
    return WaitForStateDirective(predicate=predicate)


def WaitForCall(caller: Caller) -> WaitForCallDirective:  # noqa: N802
    return WaitForCallDirective(caller=caller)


def WaitFor(predicate: Callable[[], bool]) -> WaitForDirective:  # noqa: N802
    return WaitForDirective(predicate=predicate)


def WaitForMs(ms: float) -> WaitForMsDirective:  # noqa: N802
    return WaitForMsDirective(ms=ms)


def WaitForPromise(awaitable: Awaitable[Any]) -> WaitForPromiseDirective:  # noqa: N802
    return WaitForPromiseDirective(awaitable=awaitable)


def WaitForInitializeFunction() -> WaitForInitializeFunctionDirective:  # noqa: N802
    return WaitForInitializeFunctionDirective()


def WaitForSyncWorkToFinish() -> WaitForSyncWorkToFinishDirective:  # noqa: N802
    return WaitForSyncWorkToFinishDirective()


__all__ = [
    "Directive",
    "DispatchAction",
    "DispatchActionDirective",
    "WaitFor",
    "WaitForAction",
    "WaitForActionDirective",
    "WaitForCall",
    "WaitForCallDirective",
    "WaitForDirective",
    "WaitForInitializeFunction",
    "WaitForInitializeFunctionDirective",
    "WaitForMs",
    "WaitForMsDirective",
    "WaitForPromise",
    "WaitForPromiseDirective",
    "WaitForState",
    "WaitForStateDirective",
    "WaitForSyncWorkToFinish",
    "WaitForSyncWorkToFinishDirective",
    "dispatch_action",
    "wait_for",
    "wait_for_action",
    "wait_for_call",
    "wait_for_initialize_function",
    "wait_for_ms",
    "wait_for_promise",
    "wait_for_state",
    "wait_for_sync_work_to_finish",
]
