"""Base scheduler interface."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Sequence

from production_scheduler.domain.models import ScheduleResult, ScheduleTask, ValidationReport


class BaseScheduler(ABC):
    """
    Abstract base class for task schedulers.

    A scheduler instance owns the state of exactly one run: construct it,
    call ``schedule()`` once, then optionally ``validate()``.
    """

    name: str | None = None

    @abstractmethod
    def schedule(self, tasks: Sequence[ScheduleTask]) -> ScheduleResult:
        """
        Place tasks on the calendar.

        Args:
            tasks: Candidate tasks; ineligible ones are filtered out

        Returns:
            ScheduleResult with committed slots and unassigned tasks
        """

    @abstractmethod
    def validate(self) -> ValidationReport:
        """Audit the committed schedule without modifying it."""

    def get_name(self) -> str:
        return self.name or type(self).__name__
