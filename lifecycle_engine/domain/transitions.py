"""
Order status transition rules.

The transition table and the set of reversal pairs are plain data so the
policy can be audited and tested without going through the state machine.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, FrozenSet, List, Optional, Tuple

from .models import OrderStatus, TransitionRequest, require_exhaustive

S = OrderStatus

TRANSITION_TABLE: Dict[OrderStatus, FrozenSet[OrderStatus]] = require_exhaustive(
    {
        S.PENDING: frozenset({S.ACCEPTED, S.CANCELED}),
        S.ACCEPTED: frozenset({S.PENDING, S.PREPARING, S.CANCELED}),
        S.PREPARING: frozenset({S.ACCEPTED, S.READY, S.CANCELED}),
        S.READY: frozenset({S.PREPARING, S.OUT_FOR_DELIVERY, S.CANCELED}),
        S.OUT_FOR_DELIVERY: frozenset({S.READY, S.COMPLETED, S.CANCELED}),
        S.COMPLETED: frozenset(),
        S.CANCELED: frozenset({S.PENDING, S.ACCEPTED}),
    },
    "TRANSITION_TABLE",
)

# Moves to an earlier stage; these need an operator note.
REVERSAL_PAIRS: FrozenSet[Tuple[OrderStatus, OrderStatus]] = frozenset(
    {
        (S.ACCEPTED, S.PENDING),
        (S.PREPARING, S.ACCEPTED),
        (S.READY, S.PREPARING),
        (S.OUT_FOR_DELIVERY, S.READY),
        (S.CANCELED, S.PENDING),
        (S.CANCELED, S.ACCEPTED),
    }
)

REACTIVATION_TARGETS = frozenset({S.PENDING, S.ACCEPTED})


class StatusTransitionPolicy:
    """
    Table of legal operator transitions.

    ``allow_reactivation`` controls whether a canceled order may be moved
    back to pending/accepted. It defaults to the permissive behaviour.
    """

    def __init__(self, allow_reactivation: bool = True):
        self.allow_reactivation = allow_reactivation

    def allowed_next_statuses(self, current: OrderStatus) -> FrozenSet[OrderStatus]:
        allowed = TRANSITION_TABLE[current]
        if current == S.CANCELED and not self.allow_reactivation:
            return allowed - REACTIVATION_TARGETS
        return allowed

    def can_transition(self, current: OrderStatus, target: OrderStatus) -> bool:
        return target in self.allowed_next_statuses(current)

    def requires_justification(self, from_status: OrderStatus, to_status: OrderStatus) -> bool:
        """Only legal reversals need a note; a removed edge needs nothing."""
        return (
            (from_status, to_status) in REVERSAL_PAIRS
            and self.can_transition(from_status, to_status)
        )


class TransitionErrorKind(str, Enum):
    INVALID_TRANSITION = "invalid_transition"
    JUSTIFICATION_REQUIRED = "justification_required"


@dataclass(frozen=True)
class TransitionError:
    """A rejected transition, meant to be shown next to the triggering action."""
    kind: TransitionErrorKind
    from_status: OrderStatus
    to_status: OrderStatus
    message: str


@dataclass(frozen=True)
class TransitionResult:
    """
    Outcome of a transition attempt.

    On success ``status`` holds the new status; on failure it is None and
    ``error`` explains why. A failed result never reports a changed status.
    """
    from_status: OrderStatus
    requested: OrderStatus
    status: Optional[OrderStatus] = None
    justification: Optional[str] = None
    error: Optional[TransitionError] = None

    @property
    def ok(self) -> bool:
        return self.error is None


class OrderStatusMachine:
    """Validates single status transitions against a StatusTransitionPolicy."""

    def __init__(self, policy: Optional[StatusTransitionPolicy] = None):
        self.policy = policy or StatusTransitionPolicy()

    def attempt_transition(
        self,
        current: OrderStatus,
        target: OrderStatus,
        justification: Optional[str] = None,
    ) -> TransitionResult:
        """
        Validate moving an order from ``current`` to ``target``.

        Args:
            current: Status the order is in now
            target: Requested next status
            justification: Operator note, mandatory for reversals

        Returns:
            TransitionResult; business-rule failures are returned, not raised
        """
        if not self.policy.can_transition(current, target):
            return self._reject(
                TransitionErrorKind.INVALID_TRANSITION,
                current,
                target,
                f"Cannot move an order from '{current.value}' to '{target.value}'.",
            )

        note = justification.strip() if justification else ""

        if self.policy.requires_justification(current, target) and not note:
            return self._reject(
                TransitionErrorKind.JUSTIFICATION_REQUIRED,
                current,
                target,
                f"Moving an order back from '{current.value}' to '{target.value}' requires a reason.",
            )

        return TransitionResult(
            from_status=current,
            requested=target,
            status=target,
            justification=note or None,
        )

    def attempt(self, request: TransitionRequest) -> TransitionResult:
        return self.attempt_transition(
            request.from_status,
            request.to_status,
            request.justification,
        )

    def available_actions(self, current: OrderStatus) -> List[Tuple[OrderStatus, bool]]:
        """
        List reachable statuses with whether each needs a justification.

        Ordered by lifecycle position so UIs get a stable button order.
        """
        order = list(OrderStatus)
        targets = sorted(self.policy.allowed_next_statuses(current), key=order.index)
        return [
            (target, self.policy.requires_justification(current, target))
            for target in targets
        ]

    @staticmethod
    def _reject(
        kind: TransitionErrorKind,
        current: OrderStatus,
        target: OrderStatus,
        message: str,
    ) -> TransitionResult:
        return TransitionResult(
            from_status=current,
            requested=target,
            error=TransitionError(
                kind=kind,
                from_status=current,
                to_status=target,
                message=message,
            ),
        )
