"""
Domain layer - Pure business logic without external dependencies.
"""

from .availability import AvailabilityEngine
from .cancellation import CancellationPolicy
from .models import (
    AvailabilitySnapshot,
    LocaleLabels,
    OpeningWindow,
    OperatingMode,
    OrderStatus,
    ScheduleException,
    TransitionRequest,
    WeekDaySchedule,
)
from .scheduling import DeliveryEstimate, DeliveryScheduler, DeliverySlot
from .time_window import is_instant_in_window
from .transitions import (
    OrderStatusMachine,
    StatusTransitionPolicy,
    TransitionError,
    TransitionErrorKind,
    TransitionResult,
)

__all__ = [
    "AvailabilityEngine",
    "AvailabilitySnapshot",
    "CancellationPolicy",
    "DeliveryEstimate",
    "DeliveryScheduler",
    "DeliverySlot",
    "LocaleLabels",
    "OpeningWindow",
    "OperatingMode",
    "OrderStatus",
    "OrderStatusMachine",
    "ScheduleException",
    "StatusTransitionPolicy",
    "TransitionError",
    "TransitionErrorKind",
    "TransitionRequest",
    "TransitionResult",
    "WeekDaySchedule",
    "is_instant_in_window",
]
