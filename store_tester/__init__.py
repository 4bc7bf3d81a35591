"""
store_tester - deterministic integration tests for reactive stores.

A test script is a generator that yields directives. The engine dispatches
actions, waits for actions, state, callers, predicates, time and awaitables,
and races every wait against a shared error timeout.

Example:
    >>> from store_tester import StoreTester, dispatch_action, wait_for_action
    >>>
    >>> def script():
    ...     yield dispatch_action({"type": "load"})
    ...     result = yield wait_for_action("loaded")
    ...     assert result.state["ready"]
    >>>
    >>> result = await StoreTester(init_store=init_store).run(script)
"""

from store_tester.action_log import (
    ActionLog,
    ActionMatcher,
    ActionRecord,
    action_type,
)
from store_tester.caller import Caller, create_caller
from store_tester.config import StoreTesterConfig
from store_tester.directives import (
    Directive,
    DispatchAction,
    DispatchActionDirective,
    WaitFor,
    WaitForAction,
    WaitForActionDirective,
    WaitForCall,
    WaitForCallDirective,
    WaitForDirective,
    WaitForInitializeFunction,
    WaitForInitializeFunctionDirective,
    WaitForMs,
    WaitForMsDirective,
    WaitForPromise,
    WaitForPromiseDirective,
    WaitForState,
    WaitForStateDirective,
    WaitForSyncWorkToFinish,
    WaitForSyncWorkToFinishDirective,
    dispatch_action,
    wait_for,
    wait_for_action,
    wait_for_call,
    wait_for_initialize_function,
    wait_for_ms,
    wait_for_promise,
    wait_for_state,
    wait_for_sync_work_to_finish,
)
from store_tester.effects import BackgroundEffects, background_effects, run_async_effect
from store_tester.errors import (
    DirectiveTimeout,
    InitializationFailure,
    ScriptAssertionFailure,
    StoreTesterError,
    UnresolvableCondition,
)
from store_tester.interpreter import DirectiveInterpreter, InterpreterState
from store_tester.logger import create_action_logger
from store_tester.result import DirectiveResult, RunResult
from store_tester.tester import StoreTester
from store_tester.types import ActionListener, StoreHandle

__version__ = "0.1.0"

__all__ = [
    "ActionListener",
    "ActionLog",
    "ActionMatcher",
    "ActionRecord",
    "BackgroundEffects",
    "Caller",
    "Directive",
    "DirectiveInterpreter",
    "DirectiveResult",
    "DirectiveTimeout",
    "DispatchAction",
    "DispatchActionDirective",
    "InitializationFailure",
    "InterpreterState",
    "RunResult",
    "ScriptAssertionFailure",
    "StoreHandle",
    "StoreTester",
    "StoreTesterConfig",
    "StoreTesterError",
    "UnresolvableCondition",
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
    "action_type",
    "background_effects",
    "create_action_logger",
    "create_caller",
    "dispatch_action",
    "run_async_effect",
    "wait_for",
    "wait_for_action",
    "wait_for_call",
    "wait_for_initialize_function",
    "wait_for_ms",
    "wait_for_promise",
    "wait_for_state",
    "wait_for_sync_work_to_finish",
]
