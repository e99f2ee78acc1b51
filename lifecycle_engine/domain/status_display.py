"""
Display metadata for order statuses.
"""

from dataclasses import dataclass
from typing import Mapping

from .models import OrderStatus, require_exhaustive


@dataclass(frozen=True)
class StatusDisplay:
    label: str
    color: str  # rich colour name
    icon: str
    description: str


STATUS_DISPLAY: Mapping[OrderStatus, StatusDisplay] = require_exhaustive(
    {
        OrderStatus.PENDING: StatusDisplay("Pending", "yellow", "clock", "Waiting for confirmation"),
        OrderStatus.ACCEPTED: StatusDisplay("Accepted", "blue", "check-circle", "Order accepted"),
        OrderStatus.PREPARING: StatusDisplay("Preparing", "dark_orange", "chef-hat", "Being prepared"),
        OrderStatus.READY: StatusDisplay("Ready", "magenta", "package-check", "Waiting for pickup or delivery"),
        OrderStatus.OUT_FOR_DELIVERY: StatusDisplay("Out for delivery", "cyan", "bike", "On the way"),
        OrderStatus.COMPLETED: StatusDisplay("Completed", "green", "check-circle-2", "Order completed"),
        OrderStatus.CANCELED: StatusDisplay("Canceled", "red", "x-circle", "Order canceled"),
    },
    "STATUS_DISPLAY",
)


def status_display(status: OrderStatus) -> StatusDisplay:
    return STATUS_DISPLAY[status]
