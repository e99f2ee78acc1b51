"""
Time-of-day helpers and the window membership check.

All comparisons work on minutes since midnight (0-1439).
"""

from datetime import time

import pendulum

MINUTES_PER_DAY = 24 * 60


def minutes_since_midnight(value: time) -> int:
    """Convert a time of day to minutes since midnight."""
    return value.hour * 60 + value.minute


def format_time_of_day(value: time) -> str:
    """Format a time of day as HH:MM."""
    return value.strftime("%H:%M")


def parse_time_of_day(value: str) -> time:
    """
    Parse an ``HH:MM`` string into a time.

    Raises:
        ValueError: If the string is not a valid 24-hour HH:MM time
    """
    text = value.strip()
    # "HH" alone also accepts a single digit
    if len(text) != 5:
        raise ValueError(f"Invalid time '{value}', expected HH:MM")

    try:
        return pendulum.from_format(text, "HH:mm").time()
    except ValueError as exc:
        raise ValueError(f"Invalid time '{value}', expected HH:MM between 00:00 and 23:59") from exc


def is_instant_in_window(now_minutes: int, opens_minutes: int, closes_minutes: int) -> bool:
    """
    Check whether an instant falls inside an opening window.

    A window whose close is earlier than its open wraps past midnight.
    A zero-length window (open == close) never matches. Inputs are expected
    to be normalized to 0-1439 by the caller.
    """
    if opens_minutes == closes_minutes:
        return False

    if closes_minutes < opens_minutes:
        return now_minutes >= opens_minutes or now_minutes < closes_minutes

    return opens_minutes <= now_minutes < closes_minutes
