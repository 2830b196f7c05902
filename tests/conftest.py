"""Pytest configuration and shared fixtures."""

from datetime import date, datetime

import pytest

from production_scheduler.config import SchedulerConfig, default_working_hours
from production_scheduler.domain.models import Employee, Project, ScheduleTask, Workstation

# Monday
START = datetime(2025, 9, 1)


def pytest_configure(config):
    """Configure pytest."""
    config.addinivalue_line(
        "markers", "integration: marks tests as integration tests (deselect with '-m \"not integration\"')"
    )


@pytest.fixture
def make_config():
    """Factory for a one-week config starting Monday 2025-09-01 (08:00-16:30, lunch 12:00-12:30)."""

    def _make(**overrides) -> SchedulerConfig:
        defaults = {
            "start_date": START,
            "days_to_schedule": 5,
            "working_hours": default_working_hours(),
            "holidays": set(),
            "limit_tasks": {},
            "today": date(2025, 9, 1),
        }
        defaults.update(overrides)
        return SchedulerConfig(**defaults)

    return _make


@pytest.fixture
def project():
    return Project(
        id="P1",
        name="Kitchen Janssens",
        start_date=date(2025, 8, 1),
        installation_date=date(2025, 9, 30),
        status="in_progress",
        client="Janssens",
    )


@pytest.fixture
def make_task(project):
    """Factory for TODO tasks of project P1 at workstation WS1."""

    def _make(task_id: str, duration: int = 60, **overrides) -> ScheduleTask:
        defaults = {
            "title": f"Task {task_id}",
            "duration": duration,
            "status": "TODO",
            "due_date": date(2025, 9, 15),
            "standard_task_id": "CUT",
            "priority": "medium",
            "project": project,
            "workstations": (Workstation("WS1", "Saw"),),
        }
        defaults.update(overrides)
        return ScheduleTask(id=task_id, **defaults)

    return _make


@pytest.fixture
def make_employee():
    def _make(emp_id: str, tasks=("CUT",), workstations=("WS1",)) -> Employee:
        return Employee(
            id=emp_id,
            name=f"Employee {emp_id}",
            standard_tasks=frozenset(tasks),
            workstations=tuple(workstations),
        )

    return _make
