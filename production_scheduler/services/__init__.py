"""Services for scheduling logic."""

from .calendar import WorkCalendar
from .capacity import assign_lanes, fits_capacity, peak_concurrency
from .completion import CapacityWarning, ProjectCompletion, capacity_warnings, project_completions
from .dependencies import DependencyGate
from .scoring import (
    PriorityWeights,
    WeightedPriorityScorer,
    employee_assignment_score,
    rank_tasks,
    task_priority_score,
)
from .slots import SlotFinder
from .state import ScheduleState
from .timeplan import parse_time_string

__all__ = [
    "WorkCalendar",
    "assign_lanes",
    "fits_capacity",
    "peak_concurrency",
    "CapacityWarning",
    "ProjectCompletion",
    "capacity_warnings",
    "project_completions",
    "DependencyGate",
    "PriorityWeights",
    "WeightedPriorityScorer",
    "employee_assignment_score",
    "rank_tasks",
    "task_priority_score",
    "SlotFinder",
    "ScheduleState",
    "parse_time_string",
]
