"""Run and directive results, and the builder that freezes them."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Generic, TypeVar

from store_tester.action_log import ActionLog, ActionRecord
from store_tester.errors import StoreTesterError
from store_tester.types import StoreHandle

S = TypeVar("S")


@dataclass(frozen=True)
class DirectiveResult(Generic[S]):
    """Value a ``yield`` evaluates to once its directive resolves."""

    actions: tuple[ActionRecord, ...]
    state: S
    value: Any = None


@dataclass(frozen=True)
class RunResult(Generic[S]):
    """Outcome of a run, frozen before teardown executes."""

    actions: tuple[ActionRecord, ...]
    state: S
    error: StoreTesterError | None = None

    @property
    def is_ok(self) -> bool:
        return self.error is None

    @property
    def is_err(self) -> bool:
        return self.error is not None

    @property
    def dispatched_actions(self) -> list[Any]:
        """The recorded actions without their states."""
        return [record.action for record in self.actions]

    def display(self) -> str:
        if self.error is None:
            return f"Ok({len(self.actions)} actions, state={self.state!r})"
        return f"Err({self.error.format_full()})"


def build_run_result(
    log: ActionLog,
    store: StoreHandle[S],
    error: StoreTesterError | None,
) -> RunResult[S]:
    return RunResult(actions=log.snapshot(), state=store.get_state(), error=error)


__all__ = ["DirectiveResult", "RunResult", "build_run_result"]
