"""Tests for the multi-phase scheduling engine."""

from datetime import date, datetime

import pytest

from production_scheduler.domain.models import Project, ScheduledSlot, Workstation
from production_scheduler.engine import BaseScheduler, OptimalScheduler
from production_scheduler.errors import ConfigError


def _run(config, employees, tasks, capacity=None, **kwargs):
    scheduler = OptimalScheduler(config, employees, capacity, **kwargs)
    return scheduler, scheduler.schedule(tasks)


def _overlap(a: ScheduledSlot, b: ScheduledSlot) -> bool:
    return a.start < b.end and b.start < a.end


def test_scheduler_is_a_base_scheduler(make_config):
    scheduler = OptimalScheduler(make_config(), [])
    assert isinstance(scheduler, BaseScheduler)
    assert scheduler.get_name() == "optimal"


def test_back_to_back_packing(make_config, make_task, make_employee):
    first = make_task("A", 60, priority="high")
    second = make_task("B", 90, priority="low")
    _, result = _run(make_config(), [make_employee("E1")], [second, first])

    a, b = result.slot_for("A"), result.slot_for("B")
    assert a.start == datetime(2025, 9, 1, 8, 0)
    assert b.start == a.end
    assert b.end == datetime(2025, 9, 1, 10, 30)


def test_break_avoidance(make_config, make_task, make_employee):
    warmup = make_task("A", 30, priority="high")
    morning = make_task("B", 240, priority="low")
    _, result = _run(make_config(), [make_employee("E1")], [warmup, morning])

    slot = result.slot_for("B")
    assert slot.start == datetime(2025, 9, 1, 12, 30)
    assert slot.end == datetime(2025, 9, 1, 16, 30)


def test_capacity_exclusion_across_employees(make_config, make_task, make_employee):
    employees = [make_employee("E1"), make_employee("E2")]
    scheduler, result = _run(make_config(), employees, [make_task("A"), make_task("B")])

    a, b = result.slot_for("A"), result.slot_for("B")
    assert a.workstation_id == b.workstation_id == "WS1"
    assert a.employee_id != b.employee_id
    assert not _overlap(a, b)
    assert b.start == datetime(2025, 9, 1, 9, 0)
    assert scheduler.validate().valid


def test_shared_workstation_capacity_from_config(make_config, make_task, make_employee):
    employees = [make_employee("E1"), make_employee("E2")]
    _, result = _run(make_config(workstation_capacity={"WS1": 2}), employees, [make_task("A"), make_task("B")])
    assert result.slot_for("A").start == result.slot_for("B").start == datetime(2025, 9, 1, 8, 0)


def test_unschedulable_task_type(make_config, make_task, make_employee):
    task = make_task("PAINT-1", standard_task_id="PAINT")
    _, result = _run(make_config(), [make_employee("E1")], [task, make_task("A")])

    assert [t.id for t in result.unassigned_tasks] == ["PAINT-1"]
    assert result.slot_for("PAINT-1") is None
    assert result.slot_for("A") is not None


def test_holiday_never_hosts_slots(make_config, make_task, make_employee):
    tasks = [make_task(f"T{i}", 120) for i in range(6)]
    _, result = _run(make_config(holidays={"2025-09-01"}), [make_employee("E1")], tasks)

    assert len(result.slots) == 6
    assert all(slot.start.date() != date(2025, 9, 1) for slot in result.slots)
    assert min(slot.start for slot in result.slots) == datetime(2025, 9, 2, 8, 0)


def test_load_balancing_spreads_work(make_config, make_task, make_employee):
    employees = [make_employee("E1", workstations=("WS1",)), make_employee("E2", workstations=("WS2",))]
    ws = (Workstation("WS1"), Workstation("WS2"))
    _, result = _run(make_config(), employees, [make_task("A", workstations=ws), make_task("B", workstations=ws)])

    a, b = result.slot_for("A"), result.slot_for("B")
    assert (a.employee_id, a.workstation_id) == ("E1", "WS1")
    assert (b.employee_id, b.workstation_id) == ("E2", "WS2")
    assert a.start == b.start == datetime(2025, 9, 1, 8, 0)
    assert result.employee_workloads == {"E1": 60, "E2": 60}


def test_workstation_match_preferred(make_config, make_task, make_employee):
    employees = [make_employee("E1", workstations=("WS1",)), make_employee("E2", workstations=("WS2",))]
    _, result = _run(make_config(), employees, [make_task("A", workstations=(Workstation("WS2"),))])
    slot = result.slot_for("A")
    assert (slot.employee_id, slot.workstation_id) == ("E2", "WS2")


def test_falls_back_to_employee_workstations(make_config, make_task, make_employee):
    _, result = _run(make_config(), [make_employee("E1", workstations=("WS3",))],
                     [make_task("A", workstations=(Workstation("WS9"),))])
    assert result.slot_for("A").workstation_id == "WS3"


def test_filtering_excludes_ineligible_tasks(make_config, make_task, make_employee):
    future = Project(id="P9", start_date=date(2025, 9, 10), installation_date=date(2025, 10, 1))
    tasks = [
        make_task("A"),
        make_task("B", status="IN_PROGRESS"),
        make_task("C", status="COMPLETED"),
        make_task("D", standard_task_id=None),
        make_task("E", project=future),
    ]
    _, result = _run(make_config(), [make_employee("E1")], tasks)

    assert result.stats.total_tasks == 1
    assert [s.task_id for s in result.slots] == ["A"]
    assert result.unassigned_tasks == []


def test_completeness_and_stats(make_config, make_task, make_employee):
    tasks = [make_task(f"T{i:02d}", 240) for i in range(30)]
    _, result = _run(make_config(), [make_employee("E1"), make_employee("E2", tasks=("PAINT",))], tasks)

    scheduled = {s.task_id for s in result.slots}
    unassigned = {t.id for t in result.unassigned_tasks}
    assert scheduled.isdisjoint(unassigned)
    assert scheduled | unassigned == {t.id for t in tasks}
    assert len(scheduled) == 10  # two 240-minute blocks per day for five days

    stats = result.stats
    assert stats.total_tasks == 30
    assert stats.scheduled_tasks == 10
    assert stats.unassigned_tasks == 20
    assert stats.employees_used == 1
    assert stats.total_minutes_scheduled == 2400
    assert stats.average_utilization == pytest.approx(100.0)
    assert result.employee_workloads == {"E1": 2400, "E2": 0}


def test_utilization_over_window(make_config, make_task, make_employee):
    _, result = _run(make_config(days_to_schedule=1), [make_employee("E1")], [make_task("A", 240)])
    assert result.stats.average_utilization == pytest.approx(50.0)


def test_determinism(make_config, make_task, make_employee):
    tasks = [
        make_task(f"T{i}", 30 + 15 * (i % 5), priority=("low", "medium", "high")[i % 3],
                  due_date=date(2025, 9, 5 + i % 4))
        for i in range(15)
    ]
    employees = [make_employee("E1"), make_employee("E2", workstations=("WS1", "WS2"))]

    def signature():
        _, result = _run(make_config(workstation_capacity={"WS1": 1}), employees, tasks)
        return sorted((s.task_id, s.employee_id, s.workstation_id, s.start, s.end) for s in result.slots)

    assert signature() == signature()


def test_hold_task_waits_for_limit_task_of_same_project(make_config, make_task, make_employee):
    employees = [make_employee("E1", tasks=("CUT",)), make_employee("E2", tasks=("EDGE",), workstations=("WS2",))]
    cut = make_task("CUT-1", 240)
    edge = make_task("EDGE-1", 60, status="HOLD", standard_task_id="EDGE", workstations=(Workstation("WS2"),))
    _, result = _run(make_config(limit_tasks={"EDGE": ["CUT"]}), employees, [edge, cut])

    assert result.slot_for("CUT-1").end == datetime(2025, 9, 1, 12, 0)
    # earliest start is 12:00, which falls in the lunch break
    assert result.slot_for("EDGE-1").start == datetime(2025, 9, 1, 12, 30)


def test_limit_task_of_other_project_does_not_gate(make_config, make_task, make_employee):
    other = Project(id="P2", start_date=date(2025, 8, 1), installation_date=date(2025, 9, 20))
    employees = [make_employee("E1", tasks=("CUT",)), make_employee("E2", tasks=("EDGE",), workstations=("WS2",))]
    tasks = [
        make_task("CUT-2", 240, project=other),
        make_task("EDGE-1", 60, status="HOLD", standard_task_id="EDGE", workstations=(Workstation("WS2"),)),
    ]

    _, scoped = _run(make_config(limit_tasks={"EDGE": ["CUT"]}), employees, tasks)
    assert scoped.slot_for("EDGE-1").start == datetime(2025, 9, 1, 8, 0)

    _, global_ = _run(make_config(limit_tasks={"EDGE": ["CUT"]}, dependency_scope="global"), employees, tasks)
    assert global_.slot_for("EDGE-1").start == datetime(2025, 9, 1, 12, 30)


def test_hold_task_blocked_by_unplaceable_limit_task(make_config, make_task, make_employee):
    tasks = [
        make_task("CUT-1", 60),  # nobody can cut
        make_task("EDGE-1", 60, status="HOLD", standard_task_id="EDGE"),
    ]
    _, result = _run(make_config(limit_tasks={"EDGE": ["CUT"]}), [make_employee("E1", tasks=("EDGE",))], tasks)

    assert result.slots == []
    assert {t.id for t in result.unassigned_tasks} == {"CUT-1", "EDGE-1"}

    _, ungated = _run(
        make_config(limit_tasks={"EDGE": ["CUT"]}, dependency_scope="none"),
        [make_employee("E1", tasks=("EDGE",))],
        tasks,
    )
    assert ungated.slot_for("EDGE-1").start == datetime(2025, 9, 1, 8, 0)


def test_hold_chain_resolves_over_sweeps(make_config, make_task, make_employee):
    employee = make_employee("E1", tasks=("CUT", "EDGE", "DRILL"))
    tasks = [
        make_task("DRILL-1", status="HOLD", standard_task_id="DRILL", priority="high"),
        make_task("EDGE-1", status="HOLD", standard_task_id="EDGE", priority="medium"),
        make_task("CUT-1", status="HOLD", standard_task_id="CUT", priority="low"),
    ]
    cfg = make_config(limit_tasks={"EDGE": ["CUT"], "DRILL": ["EDGE"]})
    _, result = _run(cfg, [employee], tasks)

    cut, edge, drill = (result.slot_for(t) for t in ("CUT-1", "EDGE-1", "DRILL-1"))
    assert cut.end <= edge.start
    assert edge.end <= drill.start
    assert result.unassigned_tasks == []


def test_custom_scoring_strategies(make_config, make_task, make_employee):
    prefer_low = lambda task, now: {"low": 3, "medium": 2, "high": 1}[task.priority]  # noqa: E731
    prefer_e2 = lambda emp, workload, task: 1 if emp.id == "E2" else 0  # noqa: E731
    tasks = [make_task("HIGH", priority="high"), make_task("LOW", priority="low")]

    _, result = _run(make_config(), [make_employee("E1"), make_employee("E2")], tasks,
                     task_scorer=prefer_low, employee_scorer=prefer_e2)

    assert result.slot_for("LOW").start == datetime(2025, 9, 1, 8, 0)
    assert result.slot_for("HIGH").start == datetime(2025, 9, 1, 9, 0)
    assert {s.employee_id for s in result.slots} == {"E2"}


def test_validate_reports_injected_conflicts(make_config, make_task, make_employee):
    scheduler, _ = _run(make_config(), [make_employee("E1")], [make_task("A")])
    assert scheduler.validate().valid

    scheduler.state.commit(
        ScheduledSlot("X", "E1", "WS1", datetime(2025, 9, 1, 8, 30), datetime(2025, 9, 1, 9, 30))
    )
    report = scheduler.validate()
    assert not report.valid
    assert any("Employee E1" in e for e in report.errors)
    assert any("Workstation WS1" in e for e in report.errors)


@pytest.mark.parametrize("capacity", [0, -1])
def test_non_positive_capacity_rejected(make_config, make_employee, capacity):
    with pytest.raises(ConfigError, match="WS1"):
        OptimalScheduler(make_config(), [make_employee("E1")], {"WS1": capacity})
