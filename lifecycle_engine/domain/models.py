"""
Domain models for order statuses and business opening hours.
"""

from dataclasses import dataclass, field
from datetime import date, datetime, time
from enum import Enum
from typing import Mapping, Optional, Tuple, TypeVar

V = TypeVar("V")


class OrderStatus(str, Enum):
    """Closed set of lifecycle stages an order can occupy."""
    PENDING = "pending"
    ACCEPTED = "accepted"
    PREPARING = "preparing"
    READY = "ready"
    OUT_FOR_DELIVERY = "out_for_delivery"
    COMPLETED = "completed"
    CANCELED = "canceled"


class OperatingMode(str, Enum):
    """Whether availability follows the schedule or is forced closed."""
    AUTOMATIC = "automatic"
    MANUAL_CLOSED = "manual_closed"


def require_exhaustive(mapping: Mapping[OrderStatus, V], name: str) -> Mapping[OrderStatus, V]:
    """
    Ensure a per-status table covers every OrderStatus.

    Called at import time so that adding a status without updating a table
    fails immediately instead of surfacing as a KeyError later.
    """
    missing = [status.value for status in OrderStatus if status not in mapping]
    if missing:
        raise RuntimeError(f"{name} is missing entries for: {', '.join(missing)}")
    return mapping


@dataclass(frozen=True)
class TransitionRequest:
    """A requested status change, built per call."""
    from_status: OrderStatus
    to_status: OrderStatus
    justification: Optional[str] = None


@dataclass(frozen=True)
class OpeningWindow:
    """
    A time-of-day interval during which the business is open.

    closes_at earlier than opens_at means the window wraps past midnight.
    Either side may be missing in stored configuration; such a window is
    malformed and is skipped during evaluation.
    """
    opens_at: Optional[time]
    closes_at: Optional[time]

    @property
    def is_malformed(self) -> bool:
        return self.opens_at is None or self.closes_at is None

    def __str__(self) -> str:
        opens = self.opens_at.strftime("%H:%M") if self.opens_at else "--:--"
        closes = self.closes_at.strftime("%H:%M") if self.closes_at else "--:--"
        return f"{opens}-{closes}"


@dataclass(frozen=True)
class WeekDaySchedule:
    """Recurring configuration for one weekday."""
    is_open: bool
    windows: Tuple[OpeningWindow, ...] = ()


@dataclass(frozen=True)
class ScheduleException:
    """
    A single-date override (holiday, special hours).

    When present for a date it replaces the weekly entry entirely.
    """
    date: date
    name: str
    is_open: bool
    windows: Tuple[OpeningWindow, ...] = ()

    def as_day_schedule(self) -> WeekDaySchedule:
        return WeekDaySchedule(is_open=self.is_open, windows=self.windows)


DEFAULT_WEEKDAY_NAMES = (
    "Monday",
    "Tuesday",
    "Wednesday",
    "Thursday",
    "Friday",
    "Saturday",
    "Sunday",
)


@dataclass(frozen=True)
class LocaleLabels:
    """
    Caller-supplied display text used in availability descriptions.

    Templates are formatted with ``time`` and, for ``opens_on``, ``weekday``.
    """
    weekdays: Tuple[str, ...] = DEFAULT_WEEKDAY_NAMES  # 0=Monday, 6=Sunday
    closes_at: str = "Closes at {time}"
    opens_at: str = "Opens at {time}"
    opens_on: str = "Opens {weekday} at {time}"
    closed: str = "Closed"
    closed_temporarily: str = "Closed temporarily"

    def __post_init__(self):
        if len(self.weekdays) != 7:
            raise ValueError(f"Expected 7 weekday labels, got {len(self.weekdays)}")

    def weekday_name(self, weekday: int) -> str:
        return self.weekdays[weekday]


DEFAULT_LABELS = LocaleLabels()


@dataclass(frozen=True)
class AvailabilitySnapshot:
    """
    The computed open/closed answer, valid only at ``evaluated_at``.
    """
    is_open: bool
    next_change_description: str
    evaluated_at: datetime
    active_exception: Optional[str] = None
    warnings: Tuple[str, ...] = field(default=())

    @property
    def has_warnings(self) -> bool:
        return bool(self.warnings)
