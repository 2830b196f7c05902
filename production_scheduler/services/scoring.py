"""Task priority and employee selection scoring."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Callable, Dict, List, Optional, Sequence

from production_scheduler.domain.models import Employee, ScheduleTask

NO_PROJECT_SCORE = -2000.0
FUTURE_PROJECT_SCORE = -1000.0

PROJECT_STATUS_POINTS: Dict[str, float] = {"in_progress": 50, "planned": 30, "on_hold": -20}
TASK_PRIORITY_POINTS: Dict[str, float] = {"high": 30, "medium": 15, "low": 5}

WORKLOAD_BASELINE = 10000
WORKSTATION_MATCH_BONUS = 500

# (task, now) -> score, higher schedules first
TaskScorer = Callable[[ScheduleTask, datetime], float]
# (employee, current workload minutes, task) -> score, higher is tried first
EmployeeScorer = Callable[[Employee, int, ScheduleTask], float]


@dataclass(frozen=True)
class PriorityWeights:
    installation: float = 0.4
    project_status: float = 0.25
    task_priority: float = 0.2
    due_date: float = 0.15


def days_until(target: date, now: datetime) -> float:
    """Fractional days from ``now`` to the start of ``target``."""
    delta = datetime.combine(target, datetime.min.time()) - now
    return delta.total_seconds() / 86400.0


def task_priority_score(
    task: ScheduleTask,
    now: datetime,
    weights: PriorityWeights = PriorityWeights(),
) -> float:
    """
    Weighted urgency of a task.

    Tasks without a project score -2000 and tasks of projects that have not
    started yet score -1000; both remain placeable. Otherwise the score sums
    installation urgency, project status, task priority and due-date urgency.

    Args:
        task: Task to score
        now: Reference moment for the day differences
        weights: Factor weights

    Returns:
        Score (higher = scheduled earlier)
    """
    project = task.project
    if project is None:
        return NO_PROJECT_SCORE
    if project.start_date is not None and project.start_date > now.date():
        return FUTURE_PROJECT_SCORE

    score = 0.0
    if project.installation_date is not None:
        score += max(0.0, 100 - days_until(project.installation_date, now)) * weights.installation
    score += PROJECT_STATUS_POINTS.get(project.status, 0) * weights.project_status
    score += TASK_PRIORITY_POINTS.get(task.priority, 0) * weights.task_priority
    if task.due_date is not None:
        score += max(0.0, 50 - days_until(task.due_date, now)) * weights.due_date
    return score


class WeightedPriorityScorer:
    """Task scorer with configurable factor weights."""

    def __init__(self, weights: Optional[PriorityWeights] = None):
        self.weights = weights or PriorityWeights()

    def __call__(self, task: ScheduleTask, now: datetime) -> float:
        return task_priority_score(task, now, self.weights)


def employee_assignment_score(employee: Employee, workload: int, task: ScheduleTask) -> float:
    """Prefer the least loaded employee, then one who can use a task workstation."""
    task_ws = task.workstation_ids
    match = any(ws in employee.workstations for ws in task_ws)
    return (WORKLOAD_BASELINE - workload) + (WORKSTATION_MATCH_BONUS if match else 0)


def rank_tasks(tasks: Sequence[ScheduleTask], scorer: TaskScorer, now: datetime) -> List[ScheduleTask]:
    """
    Order tasks by descending score, then earlier due date.

    The sort is stable, so exact ties keep their input order.
    """
    scores = {task.id: scorer(task, now) for task in tasks}
    return sorted(
        tasks,
        key=lambda t: (-scores[t.id], t.due_date is None, t.due_date or date.max),
    )
