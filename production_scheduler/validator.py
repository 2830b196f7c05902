"""Post-hoc audits of generated schedules."""

from __future__ import annotations

from collections import defaultdict
from typing import Dict, List, Sequence, Tuple

import pandas as pd

from production_scheduler.domain.models import ScheduledSlot, ValidationReport
from production_scheduler.io.import_csv import parse_timestamp
from production_scheduler.services.capacity import capacity_of, peak_concurrency


def validate_slots(slots: Sequence[ScheduledSlot], capacities: Dict[str, int]) -> ValidationReport:
    """
    Check that no employee is double-booked and no workstation is over capacity.

    Args:
        slots: Committed slots of one schedule
        capacities: Workstation id -> concurrent capacity (unlisted = 1)

    Returns:
        ValidationReport; ``errors`` holds one description per violation
    """
    errors: List[str] = []

    by_employee: Dict[str, List[ScheduledSlot]] = defaultdict(list)
    by_workstation: Dict[Tuple[str, str], List[ScheduledSlot]] = defaultdict(list)
    for slot in slots:
        by_employee[slot.employee_id].append(slot)
        by_workstation[(slot.date_str, slot.workstation_id)].append(slot)

    for emp_id, emp_slots in by_employee.items():
        ordered = sorted(emp_slots, key=lambda s: (s.start, s.end))
        for current, following in zip(ordered, ordered[1:]):
            if current.end > following.start:
                errors.append(
                    f"Employee {emp_id} has overlapping tasks {current.task_id} "
                    f"({current.start:%Y-%m-%d %H:%M}-{current.end:%H:%M}) and {following.task_id} "
                    f"({following.start:%Y-%m-%d %H:%M}-{following.end:%H:%M})"
                )

    for (date_str, ws_id), ws_slots in sorted(by_workstation.items()):
        capacity = capacity_of(capacities, ws_id)
        peak, moment = peak_concurrency(ws_slots)
        if peak > capacity:
            errors.append(
                f"Workstation {ws_id} over capacity on {date_str} at {moment:%H:%M}: {peak} > {capacity}"
            )

    return ValidationReport(valid=not errors, errors=errors)


def validate_schedule_frame(slots_df: pd.DataFrame, capacities: Dict[str, int]) -> None:
    """
    Validate an exported slots table.

    Raises:
        ValueError: If required columns are missing or the schedule is unsound
    """
    required = {"task_id", "employee_id", "workstation_id", "start_time", "end_time"}
    missing = required - set(slots_df.columns)
    if missing:
        raise ValueError(f"Slots table is missing columns: {', '.join(sorted(missing))}")

    slots = [
        ScheduledSlot(
            task_id=str(row.task_id),
            employee_id=str(row.employee_id),
            workstation_id=str(row.workstation_id),
            start=parse_timestamp(row.start_time),
            end=parse_timestamp(row.end_time),
        )
        for row in slots_df.itertuples(index=False)
    ]
    bad = [s.task_id for s in slots if s.end <= s.start]
    if bad:
        raise ValueError(f"Slots end before they start for tasks: {', '.join(bad)}")
    if slots_df["task_id"].astype(str).duplicated().any():
        raise ValueError("A task appears in more than one slot")

    report = validate_slots(slots, capacities)
    if not report.valid:
        raise ValueError("Schedule validation failed:\n" + "\n".join(report.errors))


def summarize_schedule(slots_df: pd.DataFrame) -> str:
    if slots_df.empty:
        return "No slots scheduled."
    ts = slots_df.copy()
    ts["start_time"] = pd.to_datetime(ts["start_time"].map(parse_timestamp))
    ts["end_time"] = pd.to_datetime(ts["end_time"].map(parse_timestamp))
    ts["date"] = ts["start_time"].dt.strftime("%Y-%m-%d")
    ts["minutes"] = (ts["end_time"] - ts["start_time"]).dt.total_seconds() / 60.0

    per_day = ts.groupby(["date", "workstation_id"]).size().unstack(fill_value=0)
    minutes = ts.groupby("employee_id")["minutes"].sum().sort_values(ascending=False)

    lines = ["Slots per day per workstation:"]
    lines.append(per_day.to_string())
    lines.append("")
    lines.append("Minutes per employee:")
    lines.append(minutes.to_string())
    return "\n".join(lines)
