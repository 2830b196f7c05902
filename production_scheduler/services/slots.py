"""Earliest-slot search across working days."""

from __future__ import annotations

from datetime import date, datetime, timedelta
from typing import Dict, List, Optional, Sequence, Tuple

from production_scheduler.domain.models import ScheduledSlot, WorkWindow
from production_scheduler.services.calendar import WorkCalendar
from production_scheduler.services.capacity import capacity_of, fits_capacity
from production_scheduler.services.state import ScheduleState
from production_scheduler.services.timeplan import minutes_between

Window = Tuple[datetime, datetime]


def free_gaps(window: WorkWindow, day_slots: Sequence[ScheduledSlot], candidate: datetime) -> List[Window]:
    """
    Free intervals of a working day from ``candidate`` onwards.

    Committed slots and breaks are obstacles; the day closes at ``window.end``.
    A gap may start exactly where a slot ends.
    """
    obstacles = sorted([(s.start, s.end) for s in day_slots] + list(window.breaks))
    gaps: List[Window] = []
    cursor = max(candidate, window.start)
    for obs_start, obs_end in obstacles:
        if cursor >= window.end:
            break
        if obs_end <= cursor:
            continue
        if obs_start > cursor:
            gaps.append((cursor, min(obs_start, window.end)))
        cursor = max(cursor, obs_end)
    if cursor < window.end:
        gaps.append((cursor, window.end))
    return gaps


class SlotFinder:
    """
    Find the earliest window for an employee at a workstation.

    The search walks working days from ``min_start`` up to the horizon. Within
    a day it sweeps the gaps left between the employee's committed slots and
    the breaks, and accepts the first start whose interval fits the
    workstation's remaining concurrent capacity.
    """

    def __init__(
        self,
        calendar: WorkCalendar,
        state: ScheduleState,
        workstation_capacity: Dict[str, int],
        horizon: datetime,
    ):
        self.calendar = calendar
        self.state = state
        self.workstation_capacity = workstation_capacity
        self.horizon = horizon

    def has_workstation_capacity(
        self, workstation_id: str, date_str: str, start: datetime, end: datetime
    ) -> bool:
        existing = self.state.workstation_slots(date_str, workstation_id)
        if not existing:
            return True
        return fits_capacity(start, end, existing, capacity_of(self.workstation_capacity, workstation_id))

    def find_earliest_slot(
        self,
        employee_id: str,
        duration: int,
        workstation_id: str,
        min_start: datetime,
    ) -> Optional[Window]:
        """
        Earliest ``(start, end)`` of ``duration`` minutes on or after ``min_start``.

        Returns None when nothing fits before the horizon.
        """
        existing = sorted(self.state.employee_slots(employee_id), key=lambda s: s.start)
        span = timedelta(minutes=duration)
        search: Optional[date] = min_start.date()

        while search is not None and datetime.combine(search, datetime.min.time()) < self.horizon:
            if not self.calendar.is_working_day(search):
                search = self.calendar.next_workday(search)
                continue
            window = self.calendar.work_hours(search)
            if window is None:
                search += timedelta(days=1)
                continue

            date_str = search.isoformat()
            day_slots = [s for s in existing if s.start.date() == search]
            if min_start > window.start and min_start.date() == search:
                candidate = min_start
            else:
                candidate = window.start
            for slot in day_slots:
                if slot.start <= candidate < slot.end:
                    candidate = slot.end

            ws_ends = sorted({s.end for s in self.state.workstation_slots(date_str, workstation_id)})
            for gap_start, gap_end in free_gaps(window, day_slots, candidate):
                if minutes_between(gap_start, gap_end) < duration:
                    continue
                # feasibility under capacity can only improve at a slot end
                starts = [gap_start] + [t for t in ws_ends if gap_start < t and t + span <= gap_end]
                for start in starts:
                    if self.has_workstation_capacity(workstation_id, date_str, start, start + span):
                        return start, start + span

            search += timedelta(days=1)
        return None
