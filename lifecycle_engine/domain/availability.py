"""
Business availability calculation.

Pure domain logic: the caller supplies the instant, the weekly schedule,
date exceptions and the operating mode. Nothing is read from the system
clock and nothing is cached between calls.
"""

from datetime import date, datetime
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

import pendulum
from pendulum import DateTime

from .exceptions import ClockNotProvided
from .models import (
    DEFAULT_LABELS,
    AvailabilitySnapshot,
    LocaleLabels,
    OpeningWindow,
    OperatingMode,
    ScheduleException,
    WeekDaySchedule,
)
from .time_window import format_time_of_day, is_instant_in_window, minutes_since_midnight

DAYS_TO_SCAN = 7

# (opens_minutes, closes_minutes, window)
_Span = Tuple[int, int, OpeningWindow]


class AvailabilityEngine:
    """
    Decides whether a business is open at a given instant.

    Precedence (highest wins):
    1. Manual closed mode
    2. A schedule exception dated today, replacing the weekly entry
    3. The weekly entry for today's weekday

    Data-quality problems (malformed windows, missing weekdays, duplicate
    exceptions) never abort the evaluation; they are skipped and reported
    in ``AvailabilitySnapshot.warnings``.
    """

    def evaluate(
        self,
        now: Optional[datetime],
        schedule: Sequence[WeekDaySchedule],
        exceptions: Iterable[ScheduleException] = (),
        mode: OperatingMode = OperatingMode.AUTOMATIC,
        labels: LocaleLabels = DEFAULT_LABELS,
    ) -> AvailabilitySnapshot:
        """
        Compute an availability snapshot.

        Args:
            now: Instant to evaluate, already in the business timezone
            schedule: Seven weekday entries, 0=Monday
            exceptions: Date-specific overrides
            mode: Automatic or manual closed
            labels: Locale text for the description

        Returns:
            AvailabilitySnapshot valid at ``now``

        Raises:
            ClockNotProvided: If ``now`` is None
        """
        if now is None:
            raise ClockNotProvided("An explicit evaluation instant is required.")

        if mode == OperatingMode.MANUAL_CLOSED:
            return AvailabilitySnapshot(
                is_open=False,
                next_change_description=labels.closed_temporarily,
                evaluated_at=now,
            )

        instant = now if isinstance(now, DateTime) else pendulum.instance(now)
        warnings: List[str] = []
        exceptions_by_day = self._index_exceptions(exceptions, warnings)

        today, exception = self._effective_day(
            instant, schedule, exceptions_by_day, labels, warnings
        )
        spans = self._valid_spans(today, self._day_label(instant, exception, labels), warnings)
        now_minutes = instant.hour * 60 + instant.minute
        active_exception = exception.name if exception else None

        def snapshot(is_open: bool, description: str) -> AvailabilitySnapshot:
            return AvailabilitySnapshot(
                is_open=is_open,
                next_change_description=description,
                evaluated_at=now,
                active_exception=active_exception,
                warnings=tuple(dict.fromkeys(warnings)),
            )

        if today.is_open:
            for opens, closes, window in spans:
                if is_instant_in_window(now_minutes, opens, closes):
                    return snapshot(
                        True,
                        labels.closes_at.format(time=format_time_of_day(window.closes_at)),
                    )

            later = [span for span in spans if span[0] > now_minutes and span[0] != span[1]]
            if later:
                _, _, window = min(later, key=lambda span: span[0])
                return snapshot(
                    False,
                    labels.opens_at.format(time=format_time_of_day(window.opens_at)),
                )

        next_opening = self._next_opening_day(instant, schedule, exceptions_by_day, labels, warnings)
        if next_opening is not None:
            weekday_name, window = next_opening
            return snapshot(
                False,
                labels.opens_on.format(
                    weekday=weekday_name,
                    time=format_time_of_day(window.opens_at),
                ),
            )

        return snapshot(False, labels.closed)

    def windows_on(
        self,
        day: date,
        schedule: Sequence[WeekDaySchedule],
        exceptions: Iterable[ScheduleException] = (),
        labels: LocaleLabels = DEFAULT_LABELS,
    ) -> Tuple[List[OpeningWindow], Tuple[str, ...]]:
        """
        Opening windows in effect on a calendar date.

        Applies the same exception-over-weekly precedence as ``evaluate``.
        Malformed and zero-length windows are dropped; a closed day yields
        no windows.

        Returns:
            (windows in configured order, data-quality warnings)
        """
        warnings: List[str] = []
        exceptions_by_day = self._index_exceptions(exceptions, warnings)
        instant = pendulum.datetime(day.year, day.month, day.day)

        effective, exception = self._effective_day(
            instant, schedule, exceptions_by_day, labels, warnings
        )
        windows: List[OpeningWindow] = []
        if effective.is_open:
            spans = self._valid_spans(
                effective, self._day_label(instant, exception, labels), warnings
            )
            windows = [window for opens, closes, window in spans if opens != closes]

        return windows, tuple(dict.fromkeys(warnings))

    def _next_opening_day(
        self,
        instant: DateTime,
        schedule: Sequence[WeekDaySchedule],
        exceptions_by_day: Dict[Tuple[int, int, int], ScheduleException],
        labels: LocaleLabels,
        warnings: List[str],
    ) -> Optional[Tuple[str, OpeningWindow]]:
        """
        Scan the following days for the first one with an opening.

        Returns the weekday label and that day's earliest window, or None
        when nothing opens within DAYS_TO_SCAN days.
        """
        for offset in range(1, DAYS_TO_SCAN + 1):
            day_instant = instant.add(days=offset)
            day, exception = self._effective_day(
                day_instant, schedule, exceptions_by_day, labels, warnings
            )

            if not day.is_open:
                continue

            spans = [
                span
                for span in self._valid_spans(
                    day, self._day_label(day_instant, exception, labels), warnings
                )
                if span[0] != span[1]
            ]
            if not spans:
                continue

            _, _, window = min(spans, key=lambda span: span[0])
            return labels.weekday_name(day_instant.weekday()), window

        return None

    def _effective_day(
        self,
        instant: DateTime,
        schedule: Sequence[WeekDaySchedule],
        exceptions_by_day: Dict[Tuple[int, int, int], ScheduleException],
        labels: LocaleLabels,
        warnings: List[str],
    ) -> Tuple[WeekDaySchedule, Optional[ScheduleException]]:
        """Resolve the configuration that applies on the instant's date."""
        exception = exceptions_by_day.get(_day_key(instant.date()))
        if exception is not None:
            return exception.as_day_schedule(), exception

        weekday = instant.weekday()
        entry = schedule[weekday] if weekday < len(schedule) else None
        if entry is None:
            warnings.append(
                f"No schedule entry for {labels.weekday_name(weekday)}; treating it as closed."
            )
            return WeekDaySchedule(is_open=False), None

        return entry, None

    @staticmethod
    def _valid_spans(day: WeekDaySchedule, day_label: str, warnings: List[str]) -> List[_Span]:
        """Convert a day's windows to minute spans, skipping malformed ones."""
        spans: List[_Span] = []
        if day.windows is None:
            warnings.append(f"No opening windows listed for {day_label}; treating it as closed.")
            return spans

        for position, window in enumerate(day.windows, start=1):
            if window is None or window.is_malformed:
                warnings.append(
                    f"Skipping malformed window #{position} on {day_label}: "
                    f"missing opening or closing time."
                )
                continue
            spans.append(
                (
                    minutes_since_midnight(window.opens_at),
                    minutes_since_midnight(window.closes_at),
                    window,
                )
            )
        return spans

    @staticmethod
    def _index_exceptions(
        exceptions: Iterable[ScheduleException],
        warnings: List[str],
    ) -> Dict[Tuple[int, int, int], ScheduleException]:
        """Index exceptions by date; the first entry for a date wins."""
        indexed: Dict[Tuple[int, int, int], ScheduleException] = {}
        for exception in exceptions:
            if exception.date is None:
                warnings.append(f"Ignoring schedule exception '{exception.name}' with no date.")
                continue
            key = _day_key(exception.date)
            if key in indexed:
                warnings.append(
                    f"Ignoring duplicate schedule exception '{exception.name}' "
                    f"for {exception.date.isoformat()}."
                )
                continue
            indexed[key] = exception
        return indexed

    @staticmethod
    def _day_label(instant: DateTime, exception: Optional[ScheduleException], labels: LocaleLabels) -> str:
        if exception is not None:
            return f"{exception.date.isoformat()} ({exception.name})"
        return labels.weekday_name(instant.weekday())


def _day_key(value: date) -> Tuple[int, int, int]:
    return value.year, value.month, value.day
