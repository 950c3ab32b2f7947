"""
Order Lifecycle State Machine
=============================
Formal phase transitions for a single order form submission.

State invariants:
- Exactly one phase is active at a time
- All transitions are validated against a fixed table
- State changes are logged and tracked
"""

import logging
from enum import Enum
from typing import Optional, Set, Dict
from datetime import datetime, timezone

from prometheus_client import Counter

from config import is_metrics_enabled

logger = logging.getLogger(__name__)


order_phase_transitions = Counter(
    'order_phase_transitions_total',
    'Order form phase transitions',
    ['from_phase', 'to_phase']
)


class OrderPhase(Enum):
    """
    Order submission phases.

    Phase flow:
        IDLE -> SUBMITTING -> COMPLETED
                           -> FAILED -> SUBMITTING (retry)
    """
    IDLE = "idle"               # Editing, nothing in flight
    SUBMITTING = "submitting"   # Gateway call pending
    COMPLETED = "completed"     # Endpoint accepted the send (terminal)
    FAILED = "failed"           # Transport failure, retry allowed


class StateTransitionError(Exception):
    """Raised when an invalid phase transition is attempted."""
    pass


def _now() -> datetime:
    return datetime.now(timezone.utc)


class OrderLifecycle:
    """
    Manages order phase transitions with validation.

    Enforces:
    - Valid transition paths only
    - Phase change logging
    - Transition metrics
    """

    VALID_TRANSITIONS: Dict[OrderPhase, Set[OrderPhase]] = {
        OrderPhase.IDLE: {OrderPhase.SUBMITTING},
        OrderPhase.SUBMITTING: {OrderPhase.COMPLETED, OrderPhase.FAILED},
        OrderPhase.FAILED: {OrderPhase.SUBMITTING, OrderPhase.IDLE},
        OrderPhase.COMPLETED: set()  # Terminal; start a new lifecycle instead
    }

    # Phases from which a fresh submit may start
    SUBMITTABLE = frozenset({OrderPhase.IDLE, OrderPhase.FAILED})

    def __init__(self, form_id: str, initial_phase: OrderPhase = OrderPhase.IDLE):
        self.form_id = form_id
        self._current_phase = initial_phase
        self._phase_history = [(initial_phase, _now())]
        self._transition_count = 0

        logger.info(
            "Order lifecycle initialized",
            extra={
                "form_id": form_id,
                "initial_phase": initial_phase.value
            }
        )

    @property
    def current_phase(self) -> OrderPhase:
        """Get current phase."""
        return self._current_phase

    @property
    def transition_count(self) -> int:
        return self._transition_count

    def can_transition_to(self, target_phase: OrderPhase) -> bool:
        """
        Check if transition to target phase is valid.

        Args:
            target_phase: Desired next phase

        Returns:
            True if transition is valid
        """
        return target_phase in self.VALID_TRANSITIONS.get(self._current_phase, set())

    def transition(self, target_phase: OrderPhase, reason: Optional[str] = None) -> bool:
        """
        Attempt phase transition with validation.

        Args:
            target_phase: Desired next phase
            reason: Optional reason for transition

        Returns:
            True if transition succeeded

        Raises:
            StateTransitionError: If transition is invalid
        """
        if not self.can_transition_to(target_phase):
            error_msg = (
                f"Invalid transition: {self._current_phase.value} -> {target_phase.value}"
            )
            logger.error(
                error_msg,
                extra={
                    "form_id": self.form_id,
                    "from_phase": self._current_phase.value,
                    "to_phase": target_phase.value,
                    "reason": reason
                }
            )
            raise StateTransitionError(error_msg)

        old_phase = self._current_phase
        self._current_phase = target_phase
        self._transition_count += 1
        self._phase_history.append((target_phase, _now()))

        if is_metrics_enabled():
            order_phase_transitions.labels(
                from_phase=old_phase.value,
                to_phase=target_phase.value
            ).inc()

        logger.info(
            f"Phase transition: {old_phase.value} -> {target_phase.value}",
            extra={
                "form_id": self.form_id,
                "from_phase": old_phase.value,
                "to_phase": target_phase.value,
                "reason": reason,
                "transition_count": self._transition_count
            }
        )

        return True

    def can_submit(self) -> bool:
        """Check if a new submission may start from the current phase."""
        return self._current_phase in self.SUBMITTABLE

    def is_terminal(self) -> bool:
        """Check if current phase is terminal."""
        return self._current_phase == OrderPhase.COMPLETED

    def is_submitting(self) -> bool:
        return self._current_phase == OrderPhase.SUBMITTING

    def get_phase_duration(self) -> float:
        """Get duration in current phase (seconds)."""
        _, entered_at = self._phase_history[-1]
        return (_now() - entered_at).total_seconds()

    def get_history(self) -> list:
        """Get phase transition history."""
        return [
            {
                "phase": phase.value,
                "timestamp": ts.isoformat(),
                "duration_seconds": (
                    (self._phase_history[i + 1][1] - ts).total_seconds()
                    if i + 1 < len(self._phase_history)
                    else (_now() - ts).total_seconds()
                )
            }
            for i, (phase, ts) in enumerate(self._phase_history)
        ]

    def phases(self) -> list:
        """Phases visited so far, oldest first."""
        return [phase for phase, _ in self._phase_history]

    def __repr__(self):
        return f"<OrderLifecycle form_id={self.form_id} phase={self._current_phase.value}>"
