"""Destination-based API over the workstream FSM.

All transition logic lives in fsm.py - this module provides:
- WorkstreamState enum for type safety
- transition() function that maps a destination to an FSM trigger
- Convenience functions for state queries

Usage:
    from sprintflow.workflow.state_machine import transition, WorkstreamState

    transition(record, WorkstreamState.COMPLETED, reason="gates passed")
"""

import logging
from enum import Enum

from transitions import MachineError

from sprintflow.lib.store import WorkstreamRecord
from sprintflow.workflow.fsm import TRIGGER_FOR, WorkstreamFSM

logger = logging.getLogger(__name__)


class WorkstreamState(Enum):
    """All valid workstream states.

    Values match FSM state strings and the sprint store.
    """

    READY_TO_START = "ready_to_start"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"

    # Terminal
    MERGED_AND_CLEANED = "merged_and_cleaned"


class InvalidTransition(Exception):
    """Raised when attempting an invalid state transition."""

    def __init__(self, from_state: str, to_state: WorkstreamState, ws_name: str = "", hint: str = ""):
        self.from_state = from_state
        self.to_state = to_state
        self.ws_name = ws_name
        self.hint = hint
        super().__init__(
            f"Invalid transition: {from_state} -> {to_state.value}"
            + (f" (workstream: {ws_name})" if ws_name else "")
            + (f". {hint}" if hint else "")
        )


def parse_state(status_str: str | None) -> WorkstreamState | None:
    """Parse a status string into WorkstreamState enum.

    Returns None if status is unknown.
    """
    if status_str is None:
        return None
    for state in WorkstreamState:
        if state.value == status_str:
            return state
    return None


def transition(
    record: WorkstreamRecord,
    to_state: WorkstreamState,
    reason: str = "",
) -> None:
    """Transition a workstream record to a new state with validation.

    Only record.status changes; the caller saves the store.

    Args:
        record: Workstream record from the sprint store
        to_state: Target state to transition to
        reason: Optional reason for the transition (for logging)

    Raises:
        InvalidTransition: If the transition is not allowed
    """
    name = record.name
    reason_str = f" ({reason})" if reason else ""

    # Unknown stored status is normalized to ready_to_start here
    fsm = WorkstreamFSM(record)
    current_state = fsm.state

    # Self-transition is a no-op
    if current_state == to_state.value:
        logger.debug(f"[STATE] {name}: already in {to_state.value}, no-op")
        record.status = current_state
        return

    trigger = TRIGGER_FOR.get((current_state, to_state.value))
    if trigger is None:
        raise InvalidTransition(current_state, to_state, name)

    try:
        logger.info(f"[STATE] {name}: {current_state} -> {to_state.value}{reason_str}")
        getattr(fsm, trigger)()
    except MachineError as e:
        raise InvalidTransition(current_state, to_state, name) from e


def get_state(record: WorkstreamRecord) -> WorkstreamState:
    """Current state, with unknown statuses read as READY_TO_START."""
    return parse_state(record.status) or WorkstreamState.READY_TO_START


def can_transition(record: WorkstreamRecord, to_state: WorkstreamState) -> bool:
    """Check if a transition to the given state is valid."""
    current_state = get_state(record).value

    # Self-transition is always valid (no-op)
    if current_state == to_state.value:
        return True

    return (current_state, to_state.value) in TRIGGER_FOR

