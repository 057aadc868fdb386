"""Workstream status machine using the transitions library.

Each workstream record in the sprint store carries a status string. The
FSM wraps one record, validates triggers against the allowed transitions,
and writes the new status back onto the record. Persisting the store is
the caller's job.

Usage:
    from sprintflow.workflow.fsm import WorkstreamFSM

    fsm = WorkstreamFSM(record)
    fsm.resume()     # ready_to_start -> in_progress
    fsm.complete()   # in_progress -> completed
    fsm.clean()      # completed -> merged_and_cleaned
"""

import logging

from transitions import Machine

from sprintflow.lib.constants import (
    STATUS_CLEANED,
    STATUS_COMPLETED,
    STATUS_IN_PROGRESS,
    STATUS_READY,
)
from sprintflow.lib.store import WorkstreamRecord

logger = logging.getLogger(__name__)


# State values match WorkstreamState enum
STATES = [
    STATUS_READY,
    STATUS_IN_PROGRESS,
    STATUS_COMPLETED,
    STATUS_CLEANED,
]

# Each trigger becomes a method on the FSM
TRANSITIONS = [
    # Work starts
    {"trigger": "resume", "source": STATUS_READY, "dest": STATUS_IN_PROGRESS},

    # Finishing (directly from ready when nothing was tracked in between)
    {"trigger": "complete", "source": STATUS_IN_PROGRESS, "dest": STATUS_COMPLETED},
    {"trigger": "complete", "source": STATUS_READY, "dest": STATUS_COMPLETED},

    # Explicit reopen of finished work
    {"trigger": "reopen", "source": STATUS_COMPLETED, "dest": STATUS_IN_PROGRESS},

    # Cleanup is terminal
    {"trigger": "clean", "source": STATUS_READY, "dest": STATUS_CLEANED},
    {"trigger": "clean", "source": STATUS_IN_PROGRESS, "dest": STATUS_CLEANED},
    {"trigger": "clean", "source": STATUS_COMPLETED, "dest": STATUS_CLEANED},
]


def _build_trigger_lookup() -> dict[tuple[str, str], str]:
    """Build lookup from (source, dest) -> trigger name."""
    lookup: dict[tuple[str, str], str] = {}
    for t in TRANSITIONS:
        key = (t["source"], t["dest"])
        if key not in lookup:  # First trigger wins for a given source->dest
            lookup[key] = t["trigger"]
    return lookup


TRIGGER_FOR = _build_trigger_lookup()


class WorkstreamFSM:
    """State machine for one workstream record.

    - Loads initial state from record.status
    - Writes state changes back to record.status
    - Logs all transitions
    """

    def __init__(self, record: WorkstreamRecord):
        self.record = record
        self.ws_name = record.name

        initial = record.status
        if initial not in STATES:
            logger.warning(
                f"[FSM] {self.ws_name}: Unknown state '{initial}', defaulting to '{STATUS_READY}'"
            )
            initial = STATUS_READY

        self.machine = Machine(
            model=self,
            states=STATES,
            transitions=TRANSITIONS,
            initial=initial,
            auto_transitions=False,  # Only explicit transitions
            send_event=True,  # Pass EventData to callbacks
            after_state_change="on_state_change",  # Callback after any transition
        )

    def on_state_change(self, event) -> None:
        """Callback after any state transition. Updates the record and logs."""
        from_state = event.transition.source
        to_state = event.transition.dest
        trigger = event.event.name

        logger.info(f"[FSM] {self.ws_name}: {from_state} -> {to_state} ({trigger})")
        self.record.status = to_state
