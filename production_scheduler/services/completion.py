"""Per-project production completion against installation dates."""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import date, datetime
from typing import Dict, List, Optional, Sequence

from production_scheduler.domain.models import Project, ScheduleResult, ScheduleTask, TaskStatus
from production_scheduler.services.calendar import WorkCalendar
from production_scheduler.services.scoring import days_until

AT_RISK_DAYS = 3
ACTIVE_PROJECT_STATUSES = ("planned", "in_progress")


@dataclass(frozen=True)
class ProjectCompletion:
    project_id: str
    project_name: str
    client: str
    installation_date: Optional[date]
    last_production_step_end: Optional[datetime]
    status: str  # on_track | at_risk | overdue | pending
    days_remaining: Optional[int]


def completion_status(installation_date: Optional[date], last_step_end: Optional[datetime]) -> str:
    if last_step_end is None or installation_date is None:
        return "pending"
    margin = days_until(installation_date, last_step_end)
    if margin < 0:
        return "overdue"
    if margin < AT_RISK_DAYS:
        return "at_risk"
    return "on_track"


def project_completions(
    tasks: Sequence[ScheduleTask],
    result: ScheduleResult,
    last_production_step: Optional[str],
    now: datetime,
) -> List[ProjectCompletion]:
    """
    Summarise when each project's last production step is scheduled to finish.

    Args:
        tasks: Tasks passed to the scheduler (projects are taken from them)
        result: Result of the scheduling run
        last_production_step: Standard task id marking the final production step
        now: Reference moment for ``days_remaining``

    Returns:
        One entry per project, ordered by installation date
    """
    projects: Dict[str, Project] = {}
    last_end: Dict[str, datetime] = {}
    ends = {slot.task_id: slot.end for slot in result.slots}

    for task in tasks:
        if task.project is None:
            continue
        projects.setdefault(task.project.id, task.project)
        if last_production_step is None or task.standard_task_id != last_production_step:
            continue
        end = ends.get(task.id)
        if end is not None and (task.project.id not in last_end or end > last_end[task.project.id]):
            last_end[task.project.id] = end

    completions = []
    for project in projects.values():
        remaining = None
        if project.installation_date is not None:
            remaining = math.floor(days_until(project.installation_date, now))
        step_end = last_end.get(project.id)
        completions.append(
            ProjectCompletion(
                project_id=project.id,
                project_name=project.name,
                client=project.client,
                installation_date=project.installation_date,
                last_production_step_end=step_end,
                status=completion_status(project.installation_date, step_end),
                days_remaining=remaining,
            )
        )
    return sorted(completions, key=lambda c: (c.installation_date is None, c.installation_date or date.max))


@dataclass(frozen=True)
class CapacityWarning:
    project_id: str
    project_name: str
    installation_date: date
    required_minutes: int
    available_minutes: int
    shortfall: int
    severity: str  # warning | critical
    message: str


def production_minutes(
    tasks: Sequence[ScheduleTask],
    project_id: str,
    last_production_step: Optional[str],
    step_order: Sequence[str] = (),
) -> int:
    """
    Open work of a project up to and including the last production step.

    Without a ``step_order`` every open task counts. With one, tasks whose
    standard type is unknown to it or comes after the last step are skipped;
    tasks without a standard type always count.
    """
    position = {step: idx for idx, step in enumerate(step_order)}
    limit = position.get(last_production_step, math.inf) if step_order else math.inf
    total = 0
    for task in tasks:
        if task.project_id != project_id or task.status == TaskStatus.COMPLETED:
            continue
        if step_order and task.standard_task_id and position.get(task.standard_task_id, math.inf) > limit:
            continue
        total += task.duration
    return total


def capacity_warnings(
    tasks: Sequence[ScheduleTask],
    calendar: WorkCalendar,
    worker_count: int,
    last_production_step: Optional[str],
    now: datetime,
    step_order: Sequence[str] = (),
) -> List[CapacityWarning]:
    """
    Flag active projects whose production work exceeds the capacity left before installation.

    Available capacity is the working minutes (breaks excluded) from ``now``
    through the installation date, times the number of workers. A shortfall
    above half the available capacity is critical.

    Returns:
        Warnings ordered by installation date
    """
    projects: Dict[str, Project] = {}
    for task in tasks:
        project = task.project
        if project is None or project.installation_date is None:
            continue
        if project.status in ACTIVE_PROJECT_STATUSES:
            projects.setdefault(project.id, project)

    warnings = []
    for project in sorted(projects.values(), key=lambda p: p.installation_date):
        required = production_minutes(tasks, project.id, last_production_step, step_order)
        span = (project.installation_date - now.date()).days + 1
        per_worker = sum(calendar.available_minutes(day) for day in calendar.working_days(now, max(span, 0)))
        available = per_worker * max(worker_count, 1)
        if required <= available:
            continue
        shortfall = required - available
        warnings.append(
            CapacityWarning(
                project_id=project.id,
                project_name=project.name,
                installation_date=project.installation_date,
                required_minutes=required,
                available_minutes=available,
                shortfall=shortfall,
                severity="critical" if shortfall > available * 0.5 else "warning",
                message=(
                    f"Project {project.name or project.id} requires {round(required / 60)} hours of production "
                    f"work, but only {round(available / 60)} hours are available before installation"
                ),
            )
        )
    return warnings
