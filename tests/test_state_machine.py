"""Tests for sprintflow.workflow.state_machine module.

Tests the wrapper functions around the FSM.
The FSM itself is tested in test_fsm.py.
"""

import pytest

from sprintflow.lib.store import WorkstreamRecord
from sprintflow.workflow.state_machine import (
    WorkstreamState,
    InvalidTransition,
    parse_state,
    transition,
    get_state,
    can_transition,
)


def make_record(status="ready_to_start") -> WorkstreamRecord:
    return WorkstreamRecord(name="api", status=status)


class TestParseState:
    """Tests for parse_state() function."""

    def test_parse_valid_state(self):
        assert parse_state("ready_to_start") == WorkstreamState.READY_TO_START
        assert parse_state("merged_and_cleaned") == WorkstreamState.MERGED_AND_CLEANED

    def test_parse_none(self):
        assert parse_state(None) is None

    def test_parse_unknown(self):
        assert parse_state("bogus_state") is None
        assert parse_state("") is None


class TestWorkstreamStateEnum:
    """Tests for WorkstreamState enum."""

    def test_values_match_fsm(self):
        from sprintflow.workflow.fsm import STATES
        assert {s.value for s in WorkstreamState} == set(STATES)


class TestTransition:
    """Tests for transition() function."""

    def test_valid_transition(self):
        record = make_record()
        transition(record, WorkstreamState.IN_PROGRESS, reason="resume")
        assert record.status == "in_progress"

    def test_self_transition_is_noop(self):
        record = make_record("completed")
        transition(record, WorkstreamState.COMPLETED)
        assert record.status == "completed"

    def test_invalid_transition_raises(self):
        record = make_record("merged_and_cleaned")
        with pytest.raises(InvalidTransition) as exc_info:
            transition(record, WorkstreamState.IN_PROGRESS)
        assert exc_info.value.from_state == "merged_and_cleaned"
        assert exc_info.value.ws_name == "api"
        assert record.status == "merged_and_cleaned"

    def test_completed_to_in_progress_uses_reopen(self):
        record = make_record("completed")
        transition(record, WorkstreamState.IN_PROGRESS)
        assert record.status == "in_progress"

    def test_unknown_status_treated_as_ready(self):
        record = make_record("bogus")
        transition(record, WorkstreamState.IN_PROGRESS)
        assert record.status == "in_progress"

    def test_unknown_status_self_transition_normalizes(self):
        record = make_record("bogus")
        transition(record, WorkstreamState.READY_TO_START)
        assert record.status == "ready_to_start"

    def test_cleaned_cannot_go_back_to_ready(self):
        record = make_record("merged_and_cleaned")
        with pytest.raises(InvalidTransition):
            transition(record, WorkstreamState.READY_TO_START)
        assert record.status == "merged_and_cleaned"

    def test_hint_in_message(self):
        err = InvalidTransition("completed", WorkstreamState.IN_PROGRESS, "ui", hint="Use --reopen")
        assert "completed -> in_progress" in str(err)
        assert "Use --reopen" in str(err)


class TestQueries:
    """Tests for get_state and can_transition."""

    def test_get_state_defaults_unknown_to_ready(self):
        assert get_state(make_record("bogus")) == WorkstreamState.READY_TO_START

    def test_can_transition(self):
        assert can_transition(make_record(), WorkstreamState.COMPLETED)
        assert can_transition(make_record("completed"), WorkstreamState.COMPLETED)
        assert not can_transition(make_record("merged_and_cleaned"), WorkstreamState.COMPLETED)

