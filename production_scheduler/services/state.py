"""Mutable schedule state owned by one scheduling run."""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, Iterable, List, Set

from production_scheduler.domain.models import ScheduledSlot


@dataclass
class ScheduleState:
    """
    Per-run bookkeeping of committed slots.

    employee_schedule: employee id -> slots in commit order
    workstation_schedule: date (YYYY-MM-DD) -> workstation id -> slots
    task_end_times: task id -> end of its committed slot
    scheduled_task_ids: ids of committed tasks
    """

    employee_schedule: Dict[str, List[ScheduledSlot]] = field(default_factory=dict)
    workstation_schedule: Dict[str, Dict[str, List[ScheduledSlot]]] = field(
        default_factory=lambda: defaultdict(lambda: defaultdict(list))
    )
    task_end_times: Dict[str, datetime] = field(default_factory=dict)
    scheduled_task_ids: Set[str] = field(default_factory=set)

    @classmethod
    def for_employees(cls, employee_ids: Iterable[str]) -> "ScheduleState":
        return cls(employee_schedule={emp_id: [] for emp_id in employee_ids})

    def employee_slots(self, employee_id: str) -> List[ScheduledSlot]:
        return self.employee_schedule.get(employee_id, [])

    def workstation_slots(self, date_str: str, workstation_id: str) -> List[ScheduledSlot]:
        day = self.workstation_schedule.get(date_str)
        if not day:
            return []
        return day.get(workstation_id, [])

    def workload(self, employee_id: str) -> int:
        """Total committed minutes for an employee."""
        return sum(slot.duration_minutes for slot in self.employee_slots(employee_id))

    def commit(self, slot: ScheduledSlot) -> None:
        self.employee_schedule.setdefault(slot.employee_id, []).append(slot)
        self.workstation_schedule[slot.date_str][slot.workstation_id].append(slot)
        self.task_end_times[slot.task_id] = slot.end
        self.scheduled_task_ids.add(slot.task_id)

    def is_scheduled(self, task_id: str) -> bool:
        return task_id in self.scheduled_task_ids
