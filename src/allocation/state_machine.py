"""
Finite state machine for a single allocation attempt.

Every attempt walks resolving -> ranking -> probing and ends in exactly
one terminal state. Terminal states map one-to-one onto the booking
status the caller receives; ``failed`` leaves the booking pending.

Usage:
    sm = AllocationStateMachine()
    sm.transition(AllocationTrigger.CANDIDATES_FOUND)
    assert sm.current_state == AllocationState.RANKING
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from src.schemas.booking_schema import BookingStatus

logger = logging.getLogger(__name__)


class AllocationState(str, Enum):
    """All possible states of an allocation attempt."""
    RESOLVING = "resolving"
    RANKING = "ranking"
    PROBING = "probing"
    ASSIGNED = "assigned"
    EXHAUSTED = "exhausted"
    NO_CANDIDATES = "no_candidates"
    FAILED = "failed"


class AllocationTrigger(str, Enum):
    """Events that cause state transitions."""
    CANDIDATES_FOUND = "candidates_found"
    NO_CANDIDATES = "no_candidates"
    RANKED = "ranked"
    CANDIDATE_BUSY = "candidate_busy"
    COMMIT_CONFLICT = "commit_conflict"
    COMMITTED = "committed"
    CANDIDATES_EXHAUSTED = "candidates_exhausted"
    COLLABORATOR_FAILED = "collaborator_failed"


TERMINAL_BOOKING_STATUS: dict[AllocationState, BookingStatus] = {
    AllocationState.ASSIGNED: BookingStatus.ASSIGNED,
    AllocationState.EXHAUSTED: BookingStatus.NO_PROFESSIONALS_AVAILABLE,
    AllocationState.NO_CANDIDATES: BookingStatus.NOT_SERVICEABLE,
}


@dataclass
class Transition:
    """A single valid state transition."""
    from_state: AllocationState
    to_state: AllocationState
    trigger: AllocationTrigger


@dataclass
class StateEntry:
    """Recorded history entry for a state visit."""
    state: AllocationState
    entered_at: datetime
    trigger: Optional[AllocationTrigger] = None
    detail: Optional[str] = None


class InvalidTransitionError(Exception):
    """Raised when a transition is not valid from the current state."""


class AllocationStateMachine:
    """Deterministic state machine controlling one allocation attempt."""

    TRANSITIONS: list[Transition] = [
        # --- Resolving ---
        Transition(AllocationState.RESOLVING, AllocationState.RANKING,
                   AllocationTrigger.CANDIDATES_FOUND),
        Transition(AllocationState.RESOLVING, AllocationState.NO_CANDIDATES,
                   AllocationTrigger.NO_CANDIDATES),
        Transition(AllocationState.RESOLVING, AllocationState.FAILED,
                   AllocationTrigger.COLLABORATOR_FAILED),

        # --- Ranking ---
        Transition(AllocationState.RANKING, AllocationState.PROBING,
                   AllocationTrigger.RANKED),
        Transition(AllocationState.RANKING, AllocationState.FAILED,
                   AllocationTrigger.COLLABORATOR_FAILED),

        # --- Probing loop ---
        Transition(AllocationState.PROBING, AllocationState.PROBING,
                   AllocationTrigger.CANDIDATE_BUSY),
        Transition(AllocationState.PROBING, AllocationState.PROBING,
                   AllocationTrigger.COMMIT_CONFLICT),
        Transition(AllocationState.PROBING, AllocationState.ASSIGNED,
                   AllocationTrigger.COMMITTED),
        Transition(AllocationState.PROBING, AllocationState.EXHAUSTED,
                   AllocationTrigger.CANDIDATES_EXHAUSTED),
        Transition(AllocationState.PROBING, AllocationState.FAILED,
                   AllocationTrigger.COLLABORATOR_FAILED),
    ]

    def __init__(self) -> None:
        self._current_state = AllocationState.RESOLVING
        self._history: list[StateEntry] = [
            StateEntry(state=AllocationState.RESOLVING, entered_at=datetime.now(timezone.utc))
        ]

    @property
    def current_state(self) -> AllocationState:
        return self._current_state

    def transition(
        self, trigger: AllocationTrigger, detail: Optional[str] = None
    ) -> AllocationState:
        """
        Execute a state transition.

        Args:
            trigger: The event triggering the transition.
            detail: Optional note stored in the history (e.g. the probed professional).

        Returns:
            The new allocation state.

        Raises:
            InvalidTransitionError: If no valid transition exists.
        """
        for t in self.TRANSITIONS:
            if t.from_state == self._current_state and t.trigger == trigger:
                old_state = self._current_state
                self._current_state = t.to_state
                self._history.append(StateEntry(
                    state=self._current_state,
                    entered_at=datetime.now(timezone.utc),
                    trigger=trigger,
                    detail=detail,
                ))
                logger.debug(
                    "Allocation transition: %s -> %s (trigger: %s)",
                    old_state.value, self._current_state.value, trigger.value,
                )
                return self._current_state

        valid = [t.value for t in self.get_valid_triggers()]
        raise InvalidTransitionError(
            f"No valid transition from '{self._current_state.value}' "
            f"with trigger '{trigger.value}'. Valid triggers: {valid}"
        )

    def get_valid_triggers(self) -> list[AllocationTrigger]:
        """Return all triggers valid from the current state."""
        return [t.trigger for t in self.TRANSITIONS if t.from_state == self._current_state]

    def get_history(self) -> list[StateEntry]:
        """Return the full state transition history."""
        return list(self._history)

    def get_state_trace(self) -> list[str]:
        """Return ordered list of state names visited."""
        return [entry.state.value for entry in self._history]

    def is_terminal(self) -> bool:
        return not self.get_valid_triggers()

    def booking_status(self) -> Optional[BookingStatus]:
        """Booking status for the current terminal state, or None if there is none."""
        return TERMINAL_BOOKING_STATUS.get(self._current_state)
