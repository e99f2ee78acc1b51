"""
Tests for delivery slots and delivery estimates.
"""

from datetime import date

import pendulum
import pytest

from lifecycle_engine.domain.exceptions import ClockNotProvided
from lifecycle_engine.domain.models import (
    OpeningWindow,
    OperatingMode,
    ScheduleException,
    WeekDaySchedule,
)
from lifecycle_engine.domain.scheduling import DeliveryScheduler
from lifecycle_engine.domain.time_window import parse_time_of_day

TZ = "America/Sao_Paulo"


def window(opens, closes) -> OpeningWindow:
    return OpeningWindow(parse_time_of_day(opens), parse_time_of_day(closes))


def open_day(*windows) -> WeekDaySchedule:
    return WeekDaySchedule(is_open=True, windows=tuple(windows))


CLOSED = WeekDaySchedule(is_open=False)

# Monday 2024-11-25
WEEK = [
    open_day(window("08:00", "14:00"), window("18:00", "23:00")),  # Monday
    CLOSED,
    open_day(window("09:00", "12:00")),  # Wednesday
    CLOSED,
    open_day(window("18:00", "02:00")),  # Friday, overnight
    CLOSED,
    CLOSED,
]


def at(value: str):
    return pendulum.parse(value, tz=TZ)


def labels(slots) -> list:
    return [slot.label for slot in slots]


class TestAvailableSlots:
    """Tests for DeliveryScheduler.available_slots."""

    def test_future_day_lists_every_half_hour_until_cutoff(self):
        """Last slot is closing time minus the longest delivery time."""
        slots = DeliveryScheduler().available_slots(
            date(2024, 11, 27), at("2024-11-25 10:00"), WEEK,
            min_delivery_minutes=30, max_delivery_minutes=60,
        )

        assert labels(slots) == ["09:00", "09:30", "10:00", "10:30", "11:00"]
        assert all(slot.minutes_until is None for slot in slots)
        assert not any(slot.is_next_available for slot in slots)
        assert slots[0].starts_at.timezone_name == TZ

    def test_today_drops_slots_that_cannot_be_reached(self):
        """At 12:10 with 30 minutes minimum, 12:30 is too soon and 13:00 is the first slot."""
        slots = DeliveryScheduler().available_slots(
            date(2024, 11, 25), at("2024-11-25 12:10"), WEEK,
            min_delivery_minutes=30, max_delivery_minutes=60,
        )

        assert labels(slots) == [
            "13:00",
            "18:00", "18:30", "19:00", "19:30", "20:00", "20:30", "21:00", "21:30", "22:00",
        ]
        assert slots[0].is_next_available
        assert slots[0].minutes_until == 50
        assert not any(slot.is_next_available for slot in slots[1:])

    def test_past_date_has_no_slots(self):
        slots = DeliveryScheduler().available_slots(
            date(2024, 11, 18), at("2024-11-25 10:00"), WEEK,
        )

        assert slots == []

    def test_closed_day_has_no_slots(self):
        slots = DeliveryScheduler().available_slots(
            date(2024, 11, 26), at("2024-11-25 10:00"), WEEK,
        )

        assert slots == []

    def test_exception_replaces_weekly_windows(self):
        exceptions = [
            ScheduleException(date(2024, 11, 26), "Special Tuesday", True, (window("10:00", "12:00"),)),
            ScheduleException(date(2024, 11, 27), "Holiday", False),
        ]
        scheduler = DeliveryScheduler()

        tuesday = scheduler.available_slots(
            date(2024, 11, 26), at("2024-11-25 10:00"), WEEK, exceptions,
            max_delivery_minutes=30,
        )
        wednesday = scheduler.available_slots(
            date(2024, 11, 27), at("2024-11-25 10:00"), WEEK, exceptions,
        )

        assert labels(tuesday) == ["10:00", "10:30", "11:00", "11:30"]
        assert wednesday == []

    def test_overnight_window_stops_at_midnight(self):
        slots = DeliveryScheduler().available_slots(
            date(2024, 11, 29), at("2024-11-25 10:00"), WEEK,
            max_delivery_minutes=60,
        )

        assert labels(slots)[0] == "18:00"
        assert labels(slots)[-1] == "23:30"
        assert len(slots) == 12

    def test_window_shorter_than_delivery_time(self):
        week = [open_day(window("10:00", "10:30"))] + [CLOSED] * 6

        slots = DeliveryScheduler().available_slots(
            date(2024, 12, 2), at("2024-11-25 10:00"), week,
            max_delivery_minutes=60,
        )

        assert slots == []

    def test_custom_slot_length(self):
        slots = DeliveryScheduler(slot_minutes=60).available_slots(
            date(2024, 11, 27), at("2024-11-25 10:00"), WEEK,
        )

        assert labels(slots) == ["09:00", "10:00", "11:00", "12:00"]

    def test_manual_closed_has_no_slots(self):
        slots = DeliveryScheduler().available_slots(
            date(2024, 11, 27), at("2024-11-25 10:00"), WEEK,
            mode=OperatingMode.MANUAL_CLOSED,
        )

        assert slots == []

    def test_invalid_delivery_range(self):
        with pytest.raises(ValueError, match="Delivery times"):
            DeliveryScheduler().available_slots(
                date(2024, 11, 27), at("2024-11-25 10:00"), WEEK,
                min_delivery_minutes=60, max_delivery_minutes=30,
            )

    def test_missing_clock_raises(self):
        with pytest.raises(ClockNotProvided):
            DeliveryScheduler().available_slots(date(2024, 11, 27), None, WEEK)

    def test_slot_length_must_be_positive(self):
        with pytest.raises(ValueError, match="slot_minutes"):
            DeliveryScheduler(slot_minutes=0)


class TestDeliveryEstimate:
    """Tests for DeliveryScheduler.delivery_estimate."""

    def test_open_counts_from_now(self):
        estimate = DeliveryScheduler().delivery_estimate(
            at("2024-11-25 13:00"), WEEK,
            min_delivery_minutes=30, max_delivery_minutes=60,
        )

        assert estimate.is_open
        assert str(estimate) == "13:30-14:00"
        assert estimate.latest == at("2024-11-25 14:00")

    def test_closed_counts_from_next_opening_today(self):
        estimate = DeliveryScheduler().delivery_estimate(
            at("2024-11-25 15:00"), WEEK,
            min_delivery_minutes=30, max_delivery_minutes=60,
        )

        assert not estimate.is_open
        assert estimate.earliest == at("2024-11-25 18:30")
        assert str(estimate) == "18:30-19:00"

    def test_closed_counts_from_next_open_day(self):
        """Tuesday is closed, so delivery starts after Wednesday's opening."""
        estimate = DeliveryScheduler().delivery_estimate(
            at("2024-11-25 23:30"), WEEK,
            min_delivery_minutes=30, max_delivery_minutes=60,
        )

        assert estimate.earliest == at("2024-11-27 09:30")
        assert estimate.latest == at("2024-11-27 10:00")

    def test_manual_closed_has_no_estimate(self):
        estimate = DeliveryScheduler().delivery_estimate(
            at("2024-11-25 13:00"), WEEK, mode=OperatingMode.MANUAL_CLOSED,
        )

        assert not estimate.is_available
        assert str(estimate) == "-"

    def test_nothing_open_all_week(self):
        estimate = DeliveryScheduler().delivery_estimate(
            at("2024-11-25 13:00"), [CLOSED] * 7,
        )

        assert not estimate.is_open
        assert estimate.earliest is None
        assert estimate.latest is None
