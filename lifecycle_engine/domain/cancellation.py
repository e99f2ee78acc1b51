"""
Customer-facing cancellation rules.

Independent from the operator transition table: operators may cancel any
non-terminal order, customers only before preparation starts.
"""

from typing import Mapping, Optional

from .models import OrderStatus, require_exhaustive

CUSTOMER_CANCELABLE = frozenset({OrderStatus.PENDING, OrderStatus.ACCEPTED})

DEFAULT_CANCELLATION_WARNINGS: Mapping[OrderStatus, Optional[str]] = require_exhaustive(
    {
        OrderStatus.PENDING: "You can cancel your order at any time until it is accepted.",
        OrderStatus.ACCEPTED: "You can still cancel your order. Once preparation starts, cancellation is no longer possible.",
        OrderStatus.PREPARING: "Your order is already being prepared and can no longer be canceled.",
        OrderStatus.READY: "Your order is ready and can no longer be canceled.",
        OrderStatus.OUT_FOR_DELIVERY: "Your order is on its way and can no longer be canceled.",
        OrderStatus.COMPLETED: None,
        OrderStatus.CANCELED: None,
    },
    "DEFAULT_CANCELLATION_WARNINGS",
)


class CancellationPolicy:
    """Answers whether a customer may still cancel, and why not."""

    def __init__(self, warnings: Optional[Mapping[OrderStatus, Optional[str]]] = None):
        self.warnings = (
            require_exhaustive(warnings, "cancellation warnings")
            if warnings is not None
            else DEFAULT_CANCELLATION_WARNINGS
        )

    def customer_can_cancel(self, status: OrderStatus) -> bool:
        return status in CUSTOMER_CANCELABLE

    def cancellation_warning(self, status: OrderStatus) -> Optional[str]:
        """Human-readable explanation, or None for terminal statuses."""
        return self.warnings[status]
