"""Multi-phase greedy scheduler for production tasks."""

from __future__ import annotations

from datetime import datetime
from typing import Dict, List, Optional, Sequence

from production_scheduler.config import SchedulerConfig
from production_scheduler.domain.models import (
    Employee,
    ScheduledSlot,
    ScheduleResult,
    ScheduleStats,
    ScheduleTask,
    TaskStatus,
    ValidationReport,
)
from production_scheduler.errors import ConfigError
from production_scheduler.services.calendar import WorkCalendar
from production_scheduler.services.dependencies import DependencyGate
from production_scheduler.services.scoring import (
    EmployeeScorer,
    TaskScorer,
    WeightedPriorityScorer,
    employee_assignment_score,
    rank_tasks,
)
from production_scheduler.services.slots import SlotFinder
from production_scheduler.services.state import ScheduleState
from production_scheduler.utils.logger import get_logger
from production_scheduler.validator import validate_slots

from .base import BaseScheduler

logger = get_logger(__name__)


class OptimalScheduler(BaseScheduler):
    """
    Assign TODO and HOLD tasks to employees and workstations.

    Each employee works one task at a time. Tasks are placed in three phases:
    TODO tasks by priority, then HOLD tasks in bounded sweeps as their limit
    tasks get scheduled, then one gap-filling pass over everything left.
    """

    name = "optimal"

    def __init__(
        self,
        config: SchedulerConfig,
        employees: Sequence[Employee],
        workstation_capacity: Optional[Dict[str, int]] = None,
        task_scorer: Optional[TaskScorer] = None,
        employee_scorer: Optional[EmployeeScorer] = None,
    ):
        """
        Args:
            config: Run parameters (window, hours, holidays, dependencies)
            employees: Roster; its order is the tie-break for equal scores
            workstation_capacity: Workstation id -> concurrent capacity
                (defaults to ``config.workstation_capacity``; unlisted = 1)
            task_scorer: Priority strategy (defaults to the weighted scorer)
            employee_scorer: Employee selection strategy

        Raises:
            ConfigError: If a workstation capacity is not positive
        """
        self.config = config
        self.employees: Dict[str, Employee] = {emp.id: emp for emp in employees}
        self.workstation_capacity = dict(
            config.workstation_capacity if workstation_capacity is None else workstation_capacity
        )
        for ws_id, capacity in self.workstation_capacity.items():
            if capacity <= 0:
                raise ConfigError(f"Capacity for workstation {ws_id} must be > 0")
        self.task_scorer: TaskScorer = task_scorer or WeightedPriorityScorer()
        self.employee_scorer: EmployeeScorer = employee_scorer or employee_assignment_score

        self.calendar = WorkCalendar(config.working_hours, config.holidays, config.max_workday_search)
        self.state = ScheduleState.for_employees(self.employees)
        self.slot_finder = SlotFinder(
            self.calendar, self.state, self.workstation_capacity, config.horizon
        )
        self.dependencies: Optional[DependencyGate] = None

    # --- filtering -------------------------------------------------------

    def _is_schedulable(self, task: ScheduleTask, today) -> bool:
        if not task.standard_task_id:
            return False
        if task.status not in TaskStatus.SCHEDULABLE:
            return False
        if task.project and task.project.start_date and task.project.start_date > today:
            return False
        return True

    # --- main algorithm --------------------------------------------------

    def schedule(self, tasks: Sequence[ScheduleTask]) -> ScheduleResult:
        now = self.config.reference_now()
        valid = [t for t in tasks if self._is_schedulable(t, now.date())]
        self.dependencies = DependencyGate(self.config.limit_tasks, valid, self.config.dependency_scope)

        ranked = rank_tasks(valid, self.task_scorer, now)
        todo = [t for t in ranked if t.status == TaskStatus.TODO]
        hold = [t for t in ranked if t.status == TaskStatus.HOLD]
        logger.info("Scheduling %d TODO and %d HOLD tasks (%d filtered out)",
                    len(todo), len(hold), len(tasks) - len(valid))

        unassigned: List[ScheduleTask] = []

        # Phase 1
        for task in todo:
            if not self.try_assign_task(task):
                unassigned.append(task)
        logger.info("Phase 1 complete: %d scheduled", len(self.state.scheduled_task_ids))

        # Phase 2
        remaining = [t.id for t in hold]
        max_iterations = len(hold) * self.config.hold_sweep_factor
        iterations = 0
        while remaining and iterations < max_iterations:
            iterations += 1
            progress = False
            for task in hold:
                if task.id not in remaining:
                    continue
                if self.state.is_scheduled(task.id):
                    remaining.remove(task.id)
                    continue
                if self.try_assign_task(task):
                    remaining.remove(task.id)
                    progress = True
            if not progress:
                break
        unassigned.extend(t for t in hold if t.id in remaining)
        logger.info("Phase 2 complete after %d sweep(s): %d scheduled",
                    iterations, len(self.state.scheduled_task_ids))

        # Phase 3
        still_unassigned = unassigned
        unassigned = []
        for task in still_unassigned:
            if self.state.is_scheduled(task.id):
                continue
            if not self.try_assign_task(task):
                unassigned.append(task)
        logger.info("Phase 3 complete: %d scheduled, %d unassigned",
                    len(self.state.scheduled_task_ids), len(unassigned))

        return self._build_result(valid, unassigned)

    def _min_start(self, task: ScheduleTask) -> Optional[datetime]:
        start = self.config.start_date
        if task.status != TaskStatus.HOLD or self.dependencies is None:
            return start
        gate = self.dependencies.earliest_start(task, self.state)
        if gate is None:
            return None
        return max(start, gate)

    def try_assign_task(self, task: ScheduleTask) -> bool:
        """
        Commit the task to the best employee/workstation with a free slot.

        Returns:
            True if a slot was committed
        """
        eligible = [emp for emp in self.employees.values() if emp.can_perform(task.standard_task_id)]
        if not eligible:
            logger.debug("Task %s: no employee qualified for %s", task.id, task.standard_task_id)
            return False

        min_start = self._min_start(task)
        if min_start is None:
            logger.debug("Task %s: waiting on limit tasks", task.id)
            return False

        scored = sorted(
            eligible,
            key=lambda emp: -self.employee_scorer(emp, self.state.workload(emp.id), task),
        )
        task_ws = task.workstation_ids
        for employee in scored:
            compatible = [ws for ws in task_ws if ws in employee.workstations]
            for ws_id in compatible or list(employee.workstations):
                window = self.slot_finder.find_earliest_slot(employee.id, task.duration, ws_id, min_start)
                if window is not None:
                    self._commit_slot(task, employee.id, ws_id, window[0], window[1])
                    return True

        logger.debug("Task %s: no slot before %s", task.id, self.config.horizon)
        return False

    def _commit_slot(
        self,
        task: ScheduleTask,
        employee_id: str,
        workstation_id: str,
        start: datetime,
        end: datetime,
    ) -> ScheduledSlot:
        slot = ScheduledSlot(task.id, employee_id, workstation_id, start, end)
        self.state.commit(slot)
        return slot

    # --- result ----------------------------------------------------------

    def _build_result(self, valid: List[ScheduleTask], unassigned: List[ScheduleTask]) -> ScheduleResult:
        slots = [slot for emp_id in self.employees for slot in self.state.employee_slots(emp_id)]
        workloads = {emp_id: self.state.workload(emp_id) for emp_id in self.employees}

        employees_used = sum(1 for minutes in workloads.values() if minutes > 0)
        total_minutes = sum(workloads.values())
        minutes_per_employee = sum(
            self.calendar.available_minutes(day)
            for day in self.calendar.working_days(self.config.start_date, self.config.days_to_schedule)
        )
        capacity = employees_used * minutes_per_employee
        stats = ScheduleStats(
            total_tasks=len(valid),
            scheduled_tasks=len(self.state.scheduled_task_ids),
            unassigned_tasks=len(unassigned),
            employees_used=employees_used,
            total_minutes_scheduled=total_minutes,
            average_utilization=(total_minutes / capacity) * 100 if capacity > 0 else 0.0,
        )
        logger.info("Scheduling complete: %s", stats)
        return ScheduleResult(slots=slots, unassigned_tasks=unassigned, employee_workloads=workloads, stats=stats)

    def validate(self) -> ValidationReport:
        slots = [slot for slots in self.state.employee_schedule.values() for slot in slots]
        return validate_slots(slots, self.workstation_capacity)
