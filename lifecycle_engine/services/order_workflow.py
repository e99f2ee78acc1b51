"""
Application service for operator status changes.

Reads the current status through an order store, validates the requested
change with ``OrderStatusMachine`` and, only on success, persists the new
status and records a history entry. Validation itself stays pure.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional, Protocol

import pendulum
from pendulum import DateTime

from ..domain.cancellation import CancellationPolicy
from ..domain.exceptions import OrderNotFoundError, TransitionRejected
from ..domain.models import OrderStatus
from ..domain.transitions import OrderStatusMachine, TransitionResult

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StatusHistoryEntry:
    """Audit record of an applied transition."""
    order_id: str
    from_status: OrderStatus
    to_status: OrderStatus
    justification: Optional[str]
    changed_at: DateTime


class OrderStoreProtocol(Protocol):
    """Protocol describing the order store behaviour needed by the service."""

    async def get_status(self, order_id: str) -> Optional[OrderStatus]:
        """Return the order's current status, or None if unknown."""

    async def save_status(self, order_id: str, status: OrderStatus) -> None:
        """Persist a new status."""

    async def append_history(self, entry: StatusHistoryEntry) -> None:
        """Record an applied transition."""


class OrderWorkflowService:
    """Coordinates status validation with persistence owned by the store."""

    def __init__(
        self,
        order_store: OrderStoreProtocol,
        machine: Optional[OrderStatusMachine] = None,
        cancellation_policy: Optional[CancellationPolicy] = None,
    ) -> None:
        self._order_store = order_store
        self._machine = machine or OrderStatusMachine()
        self._cancellation_policy = cancellation_policy or CancellationPolicy()

    async def change_status(
        self,
        order_id: str,
        target: OrderStatus,
        justification: Optional[str] = None,
        *,
        changed_at: Optional[DateTime] = None,
    ) -> TransitionResult:
        """
        Attempt a status change and persist it when valid.

        Raises:
            OrderNotFoundError: If the store has no such order
        """
        current = await self._current_status(order_id)
        result = self._machine.attempt_transition(current, target, justification)

        if not result.ok:
            logger.info(
                "Rejected status change for order %s: %s",
                order_id,
                result.error.message,
            )
            return result

        await self._order_store.save_status(order_id, result.status)
        await self._order_store.append_history(
            StatusHistoryEntry(
                order_id=order_id,
                from_status=current,
                to_status=result.status,
                justification=result.justification,
                changed_at=changed_at or pendulum.now("UTC"),
            )
        )
        logger.info(
            "Order %s moved from %s to %s",
            order_id,
            current.value,
            result.status.value,
        )
        return result

    async def change_status_or_raise(
        self,
        order_id: str,
        target: OrderStatus,
        justification: Optional[str] = None,
        *,
        changed_at: Optional[DateTime] = None,
    ) -> OrderStatus:
        """Like ``change_status`` but raises TransitionRejected on failure."""
        result = await self.change_status(
            order_id,
            target,
            justification,
            changed_at=changed_at,
        )
        if not result.ok:
            raise TransitionRejected(result.error)
        return result.status

    async def customer_can_cancel(self, order_id: str) -> bool:
        current = await self._current_status(order_id)
        return self._cancellation_policy.customer_can_cancel(current)

    async def _current_status(self, order_id: str) -> OrderStatus:
        current = await self._order_store.get_status(order_id)
        if current is None:
            raise OrderNotFoundError(f"Order not found: {order_id}")
        return current
