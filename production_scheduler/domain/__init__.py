"""Domain models for the scheduling engine."""

from .models import (
    BreakWindow,
    DayHours,
    Employee,
    Project,
    ScheduledSlot,
    ScheduleResult,
    ScheduleStats,
    ScheduleTask,
    TaskStatus,
    ValidationReport,
    WorkWindow,
    Workstation,
)

__all__ = [
    "BreakWindow",
    "DayHours",
    "Employee",
    "Project",
    "ScheduledSlot",
    "ScheduleResult",
    "ScheduleStats",
    "ScheduleTask",
    "TaskStatus",
    "ValidationReport",
    "WorkWindow",
    "Workstation",
]
