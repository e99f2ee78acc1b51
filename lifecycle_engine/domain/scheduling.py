"""
Delivery scheduling on top of the opening schedule.

Lists the times a customer may pick for a scheduled order and estimates
when an order placed now would arrive. Delivery durations are end-to-end
(preparation plus travel). Like the availability engine, nothing here reads
the system clock.
"""

from dataclasses import dataclass
from datetime import date, datetime
from typing import Iterable, List, Optional, Sequence

import pendulum
from pendulum import DateTime

from .availability import DAYS_TO_SCAN, AvailabilityEngine
from .exceptions import ClockNotProvided
from .models import OpeningWindow, OperatingMode, ScheduleException, WeekDaySchedule
from .time_window import MINUTES_PER_DAY, minutes_since_midnight

DEFAULT_SLOT_MINUTES = 30


@dataclass(frozen=True)
class DeliverySlot:
    """A delivery time a customer can choose."""
    starts_at: DateTime
    minutes_until: Optional[int] = None  # only for slots on the current day
    is_next_available: bool = False

    @property
    def label(self) -> str:
        return self.starts_at.format("HH:mm")


@dataclass(frozen=True)
class DeliveryEstimate:
    """
    Expected delivery window for an order placed at ``placed_at``.

    When the business is closed the window counts from the next opening.
    Both bounds are None when nothing opens within a week or the business
    is manually closed.
    """
    placed_at: datetime
    is_open: bool
    earliest: Optional[DateTime] = None
    latest: Optional[DateTime] = None

    @property
    def is_available(self) -> bool:
        return self.earliest is not None

    def __str__(self) -> str:
        if self.earliest is None or self.latest is None:
            return "-"
        return f"{self.earliest.format('HH:mm')}-{self.latest.format('HH:mm')}"


class DeliveryScheduler:
    """
    Builds delivery slots and estimates from the opening schedule.

    Algorithm for slots:
    1. Resolve the windows in effect on the date (an exception replaces the weekly entry)
    2. Step through each window every ``slot_minutes`` starting at its opening
    3. Stop at closing time minus the maximum delivery time (inclusive)
    4. On the current day, drop slots that cannot be reached within the minimum delivery time
    """

    def __init__(
        self,
        engine: Optional[AvailabilityEngine] = None,
        slot_minutes: int = DEFAULT_SLOT_MINUTES,
    ):
        if slot_minutes <= 0:
            raise ValueError(f"slot_minutes must be positive, got {slot_minutes}")
        self.engine = engine or AvailabilityEngine()
        self.slot_minutes = slot_minutes

    def available_slots(
        self,
        day: date,
        now: Optional[datetime],
        schedule: Sequence[WeekDaySchedule],
        exceptions: Iterable[ScheduleException] = (),
        mode: OperatingMode = OperatingMode.AUTOMATIC,
        min_delivery_minutes: int = 0,
        max_delivery_minutes: int = 0,
    ) -> List[DeliverySlot]:
        """
        List the delivery times that can be booked on ``day``.

        Args:
            day: Calendar date to schedule on
            now: Current instant in the business timezone
            schedule: Seven weekday entries, 0=Monday
            exceptions: Date-specific overrides
            mode: Manual closed yields no slots
            min_delivery_minutes: Shortest delivery time
            max_delivery_minutes: Longest delivery time

        Returns:
            Slots in chronological order; the first one of the current day
            is marked as next available

        Raises:
            ClockNotProvided: If ``now`` is None
            ValueError: If the delivery times are negative or inverted
        """
        if now is None:
            raise ClockNotProvided("An explicit evaluation instant is required.")
        _check_delivery_range(min_delivery_minutes, max_delivery_minutes)

        if mode == OperatingMode.MANUAL_CLOSED:
            return []

        instant = _as_pendulum(now)
        if isinstance(day, datetime):
            day = day.date()
        if day < instant.date():
            return []

        is_today = day == instant.date()
        reachable_after = instant.add(minutes=min_delivery_minutes)
        windows, _ = self.engine.windows_on(day, schedule, exceptions)

        minutes = sorted(
            {
                minute
                for window in windows
                for minute in self._slot_minutes(window, max_delivery_minutes)
            }
        )

        slots: List[DeliverySlot] = []
        for minute in minutes:
            starts_at = instant.on(day.year, day.month, day.day).at(minute // 60, minute % 60)

            if not is_today:
                slots.append(DeliverySlot(starts_at=starts_at))
                continue

            if starts_at <= reachable_after:
                continue

            slots.append(
                DeliverySlot(
                    starts_at=starts_at,
                    minutes_until=(starts_at - instant).in_minutes(),
                    is_next_available=not slots,
                )
            )

        return slots

    def delivery_estimate(
        self,
        now: Optional[datetime],
        schedule: Sequence[WeekDaySchedule],
        exceptions: Iterable[ScheduleException] = (),
        mode: OperatingMode = OperatingMode.AUTOMATIC,
        min_delivery_minutes: int = 0,
        max_delivery_minutes: int = 0,
    ) -> DeliveryEstimate:
        """
        Estimate when an order placed at ``now`` would be delivered.

        Open: ``now`` plus the delivery range. Closed: the next opening
        (later today or within a week) plus the delivery range.
        """
        if now is None:
            raise ClockNotProvided("An explicit evaluation instant is required.")
        _check_delivery_range(min_delivery_minutes, max_delivery_minutes)

        exceptions = list(exceptions)
        instant = _as_pendulum(now)
        snapshot = self.engine.evaluate(instant, schedule, exceptions, mode)

        if snapshot.is_open:
            start = instant
        elif mode == OperatingMode.MANUAL_CLOSED:
            start = None
        else:
            start = self._next_opening(instant, schedule, exceptions)

        if start is None:
            return DeliveryEstimate(placed_at=now, is_open=snapshot.is_open)

        return DeliveryEstimate(
            placed_at=now,
            is_open=snapshot.is_open,
            earliest=start.add(minutes=min_delivery_minutes),
            latest=start.add(minutes=max_delivery_minutes),
        )

    def _slot_minutes(self, window: OpeningWindow, max_delivery_minutes: int) -> range:
        """
        Slot start times within one window, as minutes since midnight.

        An overnight window only contributes slots up to midnight; the
        remainder belongs to the next date.
        """
        opens = minutes_since_midnight(window.opens_at)
        closes = minutes_since_midnight(window.closes_at)
        if closes < opens:
            closes += MINUTES_PER_DAY

        last = min(closes - max_delivery_minutes, MINUTES_PER_DAY - 1)
        return range(opens, last + 1, self.slot_minutes)

    def _next_opening(
        self,
        instant: DateTime,
        schedule: Sequence[WeekDaySchedule],
        exceptions: List[ScheduleException],
    ) -> Optional[DateTime]:
        now_minutes = instant.hour * 60 + instant.minute

        for offset in range(DAYS_TO_SCAN + 1):
            day = instant.add(days=offset)
            windows, _ = self.engine.windows_on(day.date(), schedule, exceptions)

            openings = [minutes_since_midnight(window.opens_at) for window in windows]
            if offset == 0:
                openings = [minute for minute in openings if minute > now_minutes]

            if openings:
                first = min(openings)
                return day.at(first // 60, first % 60)

        return None


def _check_delivery_range(min_minutes: int, max_minutes: int) -> None:
    if min_minutes < 0 or max_minutes < min_minutes:
        raise ValueError(
            f"Delivery times must satisfy 0 <= min <= max, got {min_minutes} and {max_minutes}"
        )


def _as_pendulum(value: datetime) -> DateTime:
    return value if isinstance(value, DateTime) else pendulum.instance(value)
