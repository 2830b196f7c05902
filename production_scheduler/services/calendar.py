"""Working-day and working-hours resolution."""

from __future__ import annotations

from datetime import date, datetime, timedelta
from typing import Dict, Iterable, Optional

from production_scheduler.domain.models import DayHours, WorkWindow
from production_scheduler.services.timeplan import at_clock, js_weekday, minutes_between


def _as_date(value: date | datetime) -> date:
    return value.date() if isinstance(value, datetime) else value


class WorkCalendar:
    """
    Resolve per-weekday working hours and holidays into concrete windows.

    Weekdays are keyed 0 (Sunday) to 6 (Saturday). Weekends are never
    working days, even when hours are configured for them.
    """

    def __init__(
        self,
        working_hours: Dict[int, DayHours],
        holidays: Iterable[str] = (),
        max_search_days: int = 365,
    ):
        self.working_hours = working_hours
        self.holidays = set(holidays)
        self.max_search_days = max_search_days

    def is_working_day(self, day: date | datetime) -> bool:
        day = _as_date(day)
        if day.weekday() >= 5:
            return False
        if js_weekday(day) not in self.working_hours:
            return False
        return day.isoformat() not in self.holidays

    def next_workday(self, day: date | datetime) -> Optional[date]:
        """
        First working day strictly after ``day``.

        Returns None when none is found within ``max_search_days``.
        """
        candidate = _as_date(day) + timedelta(days=1)
        for _ in range(self.max_search_days):
            if self.is_working_day(candidate):
                return candidate
            candidate += timedelta(days=1)
        return None

    def work_hours(self, day: date | datetime) -> Optional[WorkWindow]:
        """
        Working window of ``day`` with breaks sorted by start time.

        Raises:
            ConfigError: If a configured clock time is malformed
        """
        day = _as_date(day)
        hours = self.working_hours.get(js_weekday(day))
        if hours is None:
            return None
        breaks = sorted(
            (at_clock(day, b.start_time), at_clock(day, b.end_time)) for b in hours.breaks
        )
        return WorkWindow(
            start=at_clock(day, hours.start_time),
            end=at_clock(day, hours.end_time),
            breaks=tuple(breaks),
        )

    def available_minutes(self, day: date | datetime) -> int:
        window = self.work_hours(day)
        if window is None:
            return 0
        total = minutes_between(window.start, window.end)
        for start, end in window.breaks:
            total -= minutes_between(start, end)
        return total

    def working_days(self, start: date | datetime, days: int) -> list[date]:
        """Working days in ``[start, start + days)``."""
        first = _as_date(start)
        return [
            first + timedelta(days=offset)
            for offset in range(days)
            if self.is_working_day(first + timedelta(days=offset))
        ]
