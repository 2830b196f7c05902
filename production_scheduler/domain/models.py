"""Domain models for production task scheduling."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Dict, FrozenSet, List, Optional, Tuple


class TaskStatus:
    """Task statuses as stored by the task-management system."""

    TODO = "TODO"
    HOLD = "HOLD"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"

    ALL = frozenset({TODO, HOLD, IN_PROGRESS, COMPLETED})
    SCHEDULABLE = frozenset({TODO, HOLD})


PRIORITIES = ("low", "medium", "high")


@dataclass(frozen=True)
class Project:
    """Owning project of a task (start and installation dates drive priority)."""

    id: str
    name: str = ""
    start_date: Optional[date] = None
    installation_date: Optional[date] = None
    status: str = "planned"
    client: str = ""


@dataclass(frozen=True)
class Workstation:
    id: str
    name: str = ""


@dataclass(frozen=True)
class ScheduleTask:
    """A unit of production work waiting to be placed on the calendar."""

    id: str
    title: str
    duration: int  # minutes
    status: str
    due_date: Optional[date] = None
    standard_task_id: Optional[str] = None
    priority: str = "medium"
    project: Optional[Project] = None
    workstations: Tuple[Workstation, ...] = ()

    @property
    def workstation_ids(self) -> List[str]:
        return [ws.id for ws in self.workstations]

    @property
    def project_id(self) -> Optional[str]:
        return self.project.id if self.project else None


@dataclass(frozen=True)
class Employee:
    """Schedulable resource with qualified task types and allowed workstations."""

    id: str
    name: str
    standard_tasks: FrozenSet[str] = frozenset()
    workstations: Tuple[str, ...] = ()

    def can_perform(self, standard_task_id: Optional[str]) -> bool:
        return standard_task_id is not None and standard_task_id in self.standard_tasks


@dataclass(frozen=True)
class BreakWindow:
    start_time: str  # HH:MM
    end_time: str  # HH:MM


@dataclass(frozen=True)
class DayHours:
    """Working hours of one weekday as clock times."""

    start_time: str
    end_time: str
    breaks: Tuple[BreakWindow, ...] = ()


@dataclass(frozen=True)
class WorkWindow:
    """Working hours resolved onto a concrete date."""

    start: datetime
    end: datetime
    breaks: Tuple[Tuple[datetime, datetime], ...] = ()


@dataclass(frozen=True)
class ScheduledSlot:
    """A task bound to an employee and a workstation for a concrete interval."""

    task_id: str
    employee_id: str
    workstation_id: str
    start: datetime
    end: datetime

    @property
    def duration_minutes(self) -> int:
        return int((self.end - self.start).total_seconds() // 60)

    @property
    def date_str(self) -> str:
        return self.start.strftime("%Y-%m-%d")


@dataclass(frozen=True)
class ScheduleStats:
    total_tasks: int
    scheduled_tasks: int
    unassigned_tasks: int
    employees_used: int
    total_minutes_scheduled: int
    average_utilization: float  # percent


@dataclass
class ScheduleResult:
    """Output of one scheduling run."""

    slots: List[ScheduledSlot]
    unassigned_tasks: List[ScheduleTask]
    employee_workloads: Dict[str, int]
    stats: ScheduleStats

    def slot_for(self, task_id: str) -> Optional[ScheduledSlot]:
        for slot in self.slots:
            if slot.task_id == task_id:
                return slot
        return None


@dataclass
class ValidationReport:
    valid: bool
    errors: List[str] = field(default_factory=list)
