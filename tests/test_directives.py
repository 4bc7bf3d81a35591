from __future__ import annotations

import math

import pytest

from store_tester import (
    DispatchAction,
    DispatchActionDirective,
    WaitForAction,
    WaitForActionDirective,
    WaitForMs,
    WaitForMsDirective,
    WaitFor,
    WaitForCall,
    WaitForInitializeFunction,
    WaitForPromise,
    WaitForState,
    WaitForSyncWorkToFinish,
    create_caller,
    wait_for,
    wait_for_action,
    wait_for_call,
    wait_for_initialize_function,
    wait_for_ms,
    wait_for_promise,
    wait_for_state,
    wait_for_sync_work_to_finish,
)


def test_factories_create_inert_directives() -> None:
    directive = DispatchAction({"type": "load"})
    assert isinstance(directive, DispatchActionDirective)
    assert directive.action == {"type": "load"}
    assert directive.kind == "DispatchAction"

    assert isinstance(WaitForAction("load"), WaitForActionDirective)
    assert wait_for_action("load") == WaitForAction("load")


class _Ready:
    def __await__(self):
        return iter(())


@pytest.mark.parametrize(
    ("alias", "args"),
    [
        (DispatchAction, ({"type": "load"},)),
        (WaitForAction, ("load",)),
        (WaitForState, (lambda state: True,)),
        (WaitForCall, (create_caller(),)),
        (WaitFor, (lambda: True,)),
        (WaitForMs, (1,)),
        (WaitForPromise, (_Ready(),)),
        (WaitForInitializeFunction, ()),
        (WaitForSyncWorkToFinish, ()),
    ],
    ids=lambda value: getattr(value, "__name__", None),
)
def test_capitalized_aliases_declare_concrete_types(alias, args) -> None:
    directive = alias(*args)
    assert directive.kind == alias.__name__
    assert alias.__annotations__["return"] == type(directive).__name__


def test_kinds_name_each_directive() -> None:
    caller = create_caller()
    kinds = [
        wait_for_state(lambda state: True).kind,
        wait_for_call(caller).kind,
        wait_for(lambda: True).kind,
        wait_for_ms(1).kind,
        wait_for_initialize_function().kind,
        wait_for_sync_work_to_finish().kind,
    ]
    assert kinds == [
        "WaitForState",
        "WaitForCall",
        "WaitFor",
        "WaitForMs",
        "WaitForInitializeFunction",
        "WaitForSyncWorkToFinish",
    ]


def test_wait_for_ms_coerces_to_float() -> None:
    effect = WaitForMs(5)
    assert isinstance(effect, WaitForMsDirective)
    assert effect.ms == 5.0


@pytest.mark.parametrize("value", [-1, -0.001])
def test_wait_for_ms_rejects_negative(value: float) -> None:
    with pytest.raises(ValueError, match=r"ms must be >= 0\.0"):
        wait_for_ms(value)


@pytest.mark.parametrize("value", [math.nan, math.inf])
def test_wait_for_ms_rejects_non_finite(value: float) -> None:
    with pytest.raises(ValueError, match="finite"):
        wait_for_ms(value)


def test_wait_for_ms_rejects_non_numbers() -> None:
    with pytest.raises(TypeError, match="ms must be float"):
        wait_for_ms("10")  # type: ignore[arg-type]


def test_wait_for_action_rejects_unusable_matcher() -> None:
    with pytest.raises(TypeError, match="matcher"):
        wait_for_action(42)  # type: ignore[arg-type]


def test_wait_for_call_requires_caller() -> None:
    with pytest.raises(TypeError, match="Caller"):
        wait_for_call(lambda: None)  # type: ignore[arg-type]


def test_predicates_must_be_callable() -> None:
    with pytest.raises(TypeError, match="predicate must be callable"):
        wait_for_state(True)  # type: ignore[arg-type]
    with pytest.raises(TypeError, match="predicate must be callable"):
        wait_for(None)  # type: ignore[arg-type]


def test_wait_for_promise_requires_awaitable() -> None:
    with pytest.raises(TypeError, match="awaitable"):
        wait_for_promise(42)  # type: ignore[arg-type]


def test_describe_mentions_matcher() -> None:
    assert "'saved'" in wait_for_action("saved").describe()
    assert "int" in wait_for_action(int).describe()
