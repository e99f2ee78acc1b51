"""
Application service for answering "is the business open right now?".

The service fetches schedule configuration through a store adapter, reads
the wall clock in the business timezone and delegates the decision to the
domain-level ``AvailabilityEngine``. Keeping the clock read here leaves the
engine deterministic and lets tests pass fixed instants.
"""

from __future__ import annotations

import logging
from datetime import date
from typing import List, Optional, Protocol, Sequence

import pendulum
from pendulum import DateTime

from ..domain.availability import AvailabilityEngine
from ..domain.models import (
    DEFAULT_LABELS,
    AvailabilitySnapshot,
    LocaleLabels,
    OperatingMode,
    ScheduleException,
    WeekDaySchedule,
)
from ..domain.scheduling import DeliveryEstimate, DeliveryScheduler, DeliverySlot

logger = logging.getLogger(__name__)


class ScheduleStoreProtocol(Protocol):
    """Protocol describing the schedule store behaviour needed by the service."""

    async def get_schedule(self) -> Sequence[WeekDaySchedule]:
        """Return the seven weekly entries, 0=Monday."""

    async def get_exceptions(self) -> List[ScheduleException]:
        """Return all configured date exceptions."""

    async def get_mode(self) -> OperatingMode:
        """Return the current operating mode."""


class AvailabilityService:
    """
    Orchestrates schedule retrieval and availability evaluation.

    Data-quality warnings reported by the engine are logged here, once per
    evaluation, so misconfigured rows show up in operational logs.
    """

    def __init__(
        self,
        schedule_store: ScheduleStoreProtocol,
        engine: Optional[AvailabilityEngine] = None,
        *,
        scheduler: Optional[DeliveryScheduler] = None,
        timezone: str = "UTC",
        labels: LocaleLabels = DEFAULT_LABELS,
    ) -> None:
        self._schedule_store = schedule_store
        self._engine = engine or AvailabilityEngine()
        self._scheduler = scheduler or DeliveryScheduler(self._engine)
        self._timezone = timezone
        self._labels = labels

    def now(self) -> DateTime:
        """Current instant in the business timezone."""
        return pendulum.now(self._timezone)

    async def snapshot(self, at: Optional[DateTime] = None) -> AvailabilitySnapshot:
        """
        Evaluate availability at ``at`` (defaults to now).

        Aware instants are converted to the business timezone before
        evaluation; naive ones are taken as business-local wall time.
        """
        instant = self.now() if at is None else self._to_business_time(at)

        schedule = await self._schedule_store.get_schedule()
        exceptions = await self._schedule_store.get_exceptions()
        mode = await self._schedule_store.get_mode()

        result = self._engine.evaluate(
            instant,
            schedule,
            exceptions,
            mode,
            self._labels,
        )

        for warning in result.warnings:
            logger.warning("Schedule data issue: %s", warning)

        logger.debug(
            "Availability at %s: open=%s (%s)",
            instant.isoformat(),
            result.is_open,
            result.next_change_description,
        )
        return result

    async def delivery_slots(
        self,
        day: date,
        *,
        at: Optional[DateTime] = None,
        min_delivery_minutes: int = 0,
        max_delivery_minutes: int = 0,
    ) -> List[DeliverySlot]:
        """Bookable delivery times on ``day``, as seen at ``at`` (defaults to now)."""
        instant = self.now() if at is None else self._to_business_time(at)

        schedule = await self._schedule_store.get_schedule()
        exceptions = await self._schedule_store.get_exceptions()
        mode = await self._schedule_store.get_mode()

        slots = self._scheduler.available_slots(
            day,
            instant,
            schedule,
            exceptions,
            mode,
            min_delivery_minutes,
            max_delivery_minutes,
        )
        logger.debug("%d delivery slots on %s", len(slots), day.isoformat())
        return slots

    async def delivery_estimate(
        self,
        *,
        at: Optional[DateTime] = None,
        min_delivery_minutes: int = 0,
        max_delivery_minutes: int = 0,
    ) -> DeliveryEstimate:
        """Expected delivery window for an order placed at ``at`` (defaults to now)."""
        instant = self.now() if at is None else self._to_business_time(at)

        schedule = await self._schedule_store.get_schedule()
        exceptions = await self._schedule_store.get_exceptions()
        mode = await self._schedule_store.get_mode()

        return self._scheduler.delivery_estimate(
            instant,
            schedule,
            exceptions,
            mode,
            min_delivery_minutes,
            max_delivery_minutes,
        )

    def _to_business_time(self, at: DateTime) -> DateTime:
        if at.tzinfo is None:
            return pendulum.instance(at, tz=self._timezone)
        return pendulum.instance(at).in_timezone(self._timezone)
