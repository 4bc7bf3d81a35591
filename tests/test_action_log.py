from __future__ import annotations

from dataclasses import dataclass

import pytest

from store_tester import ActionLog, ActionRecord, action_type, create_action_logger
from tests.slice_store import INITIAL_STATE, Action, SliceStore, reducer, set_ok_status


@dataclass(frozen=True)
class Loaded:
    items: tuple[str, ...] = ()


class TestActionLog:
    def test_record_assigns_sequence_equal_to_index(self) -> None:
        log = ActionLog()
        first = log.record("a", 1)
        second = log.record("b", 2)

        assert first == ActionRecord(sequence=0, action="a", state_after=1)
        assert second.sequence == 1
        assert len(log) == 2
        assert log[1] is second

    def test_snapshot_is_immutable_copy(self) -> None:
        log = ActionLog()
        log.record("a", 1)
        snapshot = log.snapshot()
        log.record("b", 2)

        assert isinstance(snapshot, tuple)
        assert len(snapshot) == 1

    def test_records_duplicates_without_deduplication(self) -> None:
        log = ActionLog()
        log.record(set_ok_status(), None)
        log.record(set_ok_status(), None)

        assert len(log) == 2

    def test_observers_are_notified_until_detached(self) -> None:
        log = ActionLog()
        seen: list[int] = []
        detach = log.observe(lambda record: seen.append(record.sequence))

        log.record("a", None)
        detach()
        log.record("b", None)

        assert seen == [0]

    def test_find_starts_at_given_index(self) -> None:
        log = ActionLog()
        log.record({"type": "x"}, None)
        log.record({"type": "y"}, None)
        log.record({"type": "x"}, None)

        assert log.find("x") == 0
        assert log.find("x", 1) == 2
        assert log.find("z") is None


@pytest.mark.parametrize(
    ("action", "expected"),
    [
        (set_ok_status(), "setOkStatus"),
        ({"type": "loaded"}, "loaded"),
        (Loaded(), "Loaded"),
    ],
)
def test_action_type(action, expected) -> None:
    assert action_type(action) == expected


def test_action_logger_reports_in_reduction_order() -> None:
    log = ActionLog()
    store = SliceStore(create_action_logger(log.record)(reducer), INITIAL_STATE)

    fired: list[bool] = []

    def react() -> None:
        if not fired:
            fired.append(True)
            store.dispatch(Action("ignored"))

    store.subscribe(react)
    store.dispatch(set_ok_status())

    assert [action_type(record.action) for record in log.snapshot()] == ["setOkStatus", "ignored"]
    assert log[0].state_after["status"] == "Ok"


def test_action_logger_keeps_reducer_name() -> None:
    enhanced = create_action_logger(lambda action, state: None)(reducer)
    assert enhanced.__name__ == "reducer"
