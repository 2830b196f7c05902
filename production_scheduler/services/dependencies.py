"""Gating of HOLD tasks on their limit (predecessor) task types."""

from __future__ import annotations

from collections import defaultdict
from datetime import datetime
from typing import Dict, List, Optional, Sequence, Tuple

from production_scheduler.domain.models import ScheduleTask
from production_scheduler.services.state import ScheduleState

UNCONSTRAINED = datetime.min


class DependencyGate:
    """
    Resolve when a HOLD task may start.

    ``limit_tasks`` maps a standard task type to the limit types that must be
    finished first. With ``scope="project"`` only tasks of the same project
    count; a limit type that has no task in the project does not block.
    ``scope="global"`` looks at scheduled tasks of the limit type in any
    project and never blocks. ``scope="none"`` disables gating.
    """

    def __init__(
        self,
        limit_tasks: Dict[str, List[str]],
        tasks: Sequence[ScheduleTask],
        scope: str = "project",
    ):
        self.limit_tasks = limit_tasks
        self.scope = scope
        self._by_project: Dict[Tuple[Optional[str], str], List[str]] = defaultdict(list)
        self._by_type: Dict[str, List[str]] = defaultdict(list)
        for task in tasks:
            if task.standard_task_id is None:
                continue
            self._by_project[(task.project_id, task.standard_task_id)].append(task.id)
            self._by_type[task.standard_task_id].append(task.id)

    def limit_task_ids(self, task: ScheduleTask) -> List[str]:
        """Ids of the tasks gating ``task`` under the configured scope."""
        if self.scope == "none" or task.standard_task_id is None:
            return []
        ids: List[str] = []
        for limit_type in self.limit_tasks.get(task.standard_task_id, []):
            if self.scope == "project":
                ids.extend(self._by_project.get((task.project_id, limit_type), []))
            else:
                ids.extend(self._by_type.get(limit_type, []))
        return [task_id for task_id in ids if task_id != task.id]

    def earliest_start(self, task: ScheduleTask, state: ScheduleState) -> Optional[datetime]:
        """
        Latest end among the gating tasks, or None while one is still unscheduled.

        Returns ``UNCONSTRAINED`` when nothing gates the task.
        """
        latest = UNCONSTRAINED
        for task_id in self.limit_task_ids(task):
            end = state.task_end_times.get(task_id)
            if end is None:
                if self.scope == "project":
                    return None
                continue
            latest = max(latest, end)
        return latest
