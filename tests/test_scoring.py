"""Tests for task priority and employee selection scoring."""

from datetime import date, datetime

import pytest

from production_scheduler.domain.models import Employee, Project, ScheduleTask, Workstation
from production_scheduler.services.scoring import (
    FUTURE_PROJECT_SCORE,
    NO_PROJECT_SCORE,
    PriorityWeights,
    WeightedPriorityScorer,
    employee_assignment_score,
    rank_tasks,
    task_priority_score,
)

NOW = datetime(2025, 9, 1)


def test_task_without_project_scores_lowest(make_task):
    task = make_task("T1", project=None)
    assert task_priority_score(task, NOW) == NO_PROJECT_SCORE


def test_future_project_is_deprioritized(make_task):
    future = Project(id="P2", start_date=date(2025, 9, 10), installation_date=date(2025, 9, 20))
    assert task_priority_score(make_task("T1", project=future), NOW) == FUTURE_PROJECT_SCORE


def test_weighted_score():
    project = Project(
        id="P1",
        start_date=date(2025, 8, 1),
        installation_date=date(2025, 9, 11),  # 10 days away
        status="in_progress",
    )
    task = ScheduleTask(
        id="T1", title="Cut", duration=60, status="TODO",
        due_date=date(2025, 9, 6),  # 5 days away
        standard_task_id="CUT", priority="high", project=project,
    )
    # 0.4 * 90 + 0.25 * 50 + 0.2 * 30 + 0.15 * 45
    assert task_priority_score(task, NOW) == pytest.approx(61.25)


def test_project_status_and_priority_points(make_task):
    on_hold = Project(id="P3", start_date=date(2025, 8, 1), installation_date=None, status="on_hold")
    task = make_task("T1", project=on_hold, priority="low", due_date=None)
    assert task_priority_score(task, NOW) == pytest.approx(-20 * 0.25 + 5 * 0.2)


def test_custom_weights(make_task):
    scorer = WeightedPriorityScorer(PriorityWeights(installation=0, project_status=0, task_priority=1, due_date=0))
    assert scorer(make_task("T1", priority="high"), NOW) == pytest.approx(30)


def test_rank_tasks_orders_by_score_then_due_date(make_task):
    urgent = make_task("A", priority="high", due_date=date(2025, 9, 20))
    early = make_task("B", priority="low", due_date=date(2025, 9, 3))
    late = make_task("C", priority="low", due_date=date(2025, 9, 3))

    # equal score for B and C keeps input order
    flat = lambda task, now: 1.0  # noqa: E731
    assert [t.id for t in rank_tasks([late, early], flat, NOW)] == ["C", "B"]

    by_due = rank_tasks([urgent, make_task("D", due_date=date(2025, 9, 2))], flat, NOW)
    assert [t.id for t in by_due] == ["D", "A"]

    ranked = rank_tasks([early, urgent], WeightedPriorityScorer(), NOW)
    assert ranked[0].id == "A"


def test_employee_score_prefers_less_load_and_workstation_match(make_task):
    task = make_task("T1", workstations=(Workstation("WS2"),))
    matching = Employee("E1", "Ann", frozenset({"CUT"}), ("WS2",))
    other = Employee("E2", "Bob", frozenset({"CUT"}), ("WS9",))

    assert employee_assignment_score(matching, 0, task) == 10500
    assert employee_assignment_score(other, 0, task) == 10000
    assert employee_assignment_score(matching, 600, task) == 9900
