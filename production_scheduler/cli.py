"""Command-line interface for the production scheduler."""

from __future__ import annotations

import argparse

from production_scheduler.engine.optimal import OptimalScheduler
from production_scheduler.io.config import load_config
from production_scheduler.io.export_csv import slots_to_frame, write_slots, write_unassigned
from production_scheduler.io.import_csv import (
    read_employees,
    read_projects,
    read_slots,
    read_tasks,
    read_workstation_capacity,
    read_workstations,
)
from production_scheduler.services.completion import capacity_warnings, project_completions
from production_scheduler.utils.logger import configure_logging
from production_scheduler.validator import summarize_schedule, validate_schedule_frame


def _cmd_generate(args: argparse.Namespace) -> None:
    cfg = load_config(args.config)
    projects = read_projects(args.projects) if args.projects else {}
    capacity = dict(cfg.workstation_capacity)
    workstations = {}
    if args.workstations:
        workstations = read_workstations(args.workstations)
        capacity.update(read_workstation_capacity(args.workstations))
    tasks = read_tasks(args.tasks, projects, workstations)
    employees = read_employees(args.employees)
    if not employees:
        raise SystemExit("No employees found in roster")

    scheduler = OptimalScheduler(cfg, employees, capacity)
    result = scheduler.schedule(tasks)
    report = scheduler.validate()

    count = write_slots(args.out, result.slots, cfg.timezone)
    print(f"[OK] Wrote {count} slots to {args.out}")
    if args.unassigned:
        write_unassigned(args.unassigned, result.unassigned_tasks)
        print(f"[INFO] Wrote {len(result.unassigned_tasks)} unassigned tasks to {args.unassigned}")

    stats = result.stats
    print(
        f"[INFO] Tasks: {stats.total_tasks} eligible, {stats.scheduled_tasks} scheduled, "
        f"{stats.unassigned_tasks} unassigned; {stats.employees_used} employees, "
        f"{stats.total_minutes_scheduled} min, utilization {stats.average_utilization:.1f}%"
    )
    for task in result.unassigned_tasks:
        print(f"[WARN] Unassigned: {task.id} {task.title} ({task.standard_task_id})")

    if cfg.last_production_step:
        for c in project_completions(tasks, result, cfg.last_production_step, cfg.reference_now()):
            print(f"[INFO] Project {c.project_id} {c.project_name}: {c.status} "
                  f"(installation {c.installation_date}, last step {c.last_production_step_end})")
        for w in capacity_warnings(tasks, scheduler.calendar, len(employees), cfg.last_production_step,
                                   cfg.reference_now(), cfg.standard_task_order):
            print(f"[WARN] Capacity {w.severity}: {w.message}")

    print(summarize_schedule(slots_to_frame(result.slots, cfg.timezone)))

    if not report.valid:
        for error in report.errors:
            print(f"[ERROR] {error}")
        raise SystemExit(1)


def _cmd_validate(args: argparse.Namespace) -> None:
    capacity = read_workstation_capacity(args.workstations) if args.workstations else {}
    if args.config:
        capacity = {**load_config(args.config).workstation_capacity, **capacity}
    try:
        validate_schedule_frame(read_slots(args.slots), capacity)
    except ValueError as e:
        print(f"[ERROR] {e}")
        raise SystemExit(1)
    print("[OK] Validation passed.")


def _cmd_summarize(args: argparse.Namespace) -> None:
    print(summarize_schedule(read_slots(args.slots)))


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(
        prog="production-scheduler",
        description="Schedule production tasks onto employees and workstations",
    )
    parser.add_argument("--log-level", default=None, help="Logging level (e.g. INFO, DEBUG)")
    sub = parser.add_subparsers(dest="command", required=True)

    g = sub.add_parser("generate", help="Generate a schedule")
    g.add_argument("--config", required=True, help="Path to config YAML/JSON")
    g.add_argument("--tasks", required=True)
    g.add_argument("--employees", required=True)
    g.add_argument("--projects")
    g.add_argument("--workstations", help="CSV with id, name, capacity")
    g.add_argument("--out", required=True, help="Slots CSV to write")
    g.add_argument("--unassigned", help="Optional: write unassigned tasks CSV")
    g.set_defaults(func=_cmd_generate)

    v = sub.add_parser("validate", help="Validate a slots CSV")
    v.add_argument("--slots", required=True)
    v.add_argument("--workstations")
    v.add_argument("--config")
    v.set_defaults(func=_cmd_validate)

    s = sub.add_parser("summarize", help="Summarize a slots CSV")
    s.add_argument("--slots", required=True)
    s.set_defaults(func=_cmd_summarize)

    args = parser.parse_args(argv)
    configure_logging(args.log_level)
    args.func(args)


if __name__ == "__main__":
    main()
