"""Clock-time helpers for working hours and breaks."""

from __future__ import annotations

from datetime import date, datetime, time

from production_scheduler.errors import ConfigError


def parse_time_string(value: str) -> time:
    """
    Parse a 24-hour ``HH:MM`` clock time.

    Args:
        value: Clock time such as ``"07:30"``

    Returns:
        datetime.time for the given clock time

    Raises:
        ConfigError: If the value is not a valid ``HH:MM`` string
    """
    if not isinstance(value, str):
        raise ConfigError(f"Time of day must be a HH:MM string, got {value!r}")
    parts = value.strip().split(":")
    if len(parts) != 2 or not all(p.isdigit() for p in parts):
        raise ConfigError(f"Malformed time of day {value!r}, expected HH:MM")
    hours, minutes = int(parts[0]), int(parts[1])
    if not (0 <= hours <= 23 and 0 <= minutes <= 59):
        raise ConfigError(f"Time of day out of range: {value!r}")
    return time(hours, minutes)


def at_clock(day: date, hm: str) -> datetime:
    """Combine a calendar date with an ``HH:MM`` clock time."""
    return datetime.combine(day, parse_time_string(hm))


def minutes_between(start: datetime, end: datetime) -> int:
    """Whole minutes from ``start`` to ``end`` (negative if end is earlier)."""
    return int((end - start).total_seconds() // 60)


def js_weekday(day: date) -> int:
    """Weekday number as stored in working-hours tables (0 = Sunday .. 6 = Saturday)."""
    return (day.weekday() + 1) % 7
