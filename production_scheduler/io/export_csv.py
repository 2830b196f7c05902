"""CSV export of scheduling results."""

from __future__ import annotations

from collections import defaultdict
from datetime import datetime
from pathlib import Path
from typing import Dict, List, Sequence, Tuple

import pandas as pd

from production_scheduler.domain.models import ScheduledSlot, ScheduleTask
from production_scheduler.services.capacity import assign_lanes

SLOT_COLUMNS = [
    "task_id",
    "employee_id",
    "workstation_id",
    "scheduled_date",
    "start_time",
    "end_time",
    "worker_index",
]


def to_iso_with_tz(dt: datetime, tz: str) -> str:
    # Represent as ISO8601 with local offset using pandas timezone handling
    return pd.Timestamp(dt).tz_localize(tz).isoformat()


def slots_to_frame(slots: Sequence[ScheduledSlot], tz: str = "UTC") -> pd.DataFrame:
    """
    Tabulate slots for persistence by the caller.

    Each row carries its ``scheduled_date`` and a ``worker_index``: the lowest
    concurrent lane at its workstation on that date.
    """
    groups: Dict[Tuple[str, str], List[int]] = defaultdict(list)
    for idx, slot in enumerate(slots):
        groups[(slot.date_str, slot.workstation_id)].append(idx)
    lanes = [0] * len(slots)
    for indices in groups.values():
        for idx, lane in zip(indices, assign_lanes([slots[i] for i in indices])):
            lanes[idx] = lane

    rows = [
        {
            "task_id": slot.task_id,
            "employee_id": slot.employee_id,
            "workstation_id": slot.workstation_id,
            "scheduled_date": slot.date_str,
            "start_time": to_iso_with_tz(slot.start, tz),
            "end_time": to_iso_with_tz(slot.end, tz),
            "worker_index": lanes[idx],
        }
        for idx, slot in enumerate(slots)
    ]
    df = pd.DataFrame(rows, columns=SLOT_COLUMNS)
    return df.sort_values(["scheduled_date", "start_time", "task_id"], kind="stable").reset_index(drop=True)


def write_slots(path: str | Path, slots: Sequence[ScheduledSlot], tz: str = "UTC") -> int:
    df = slots_to_frame(slots, tz)
    df.to_csv(path, index=False)
    return len(df)


def write_unassigned(path: str | Path, tasks: Sequence[ScheduleTask]) -> int:
    df = pd.DataFrame(
        [
            {
                "task_id": t.id,
                "title": t.title,
                "standard_task_id": t.standard_task_id,
                "project_id": t.project_id,
                "status": t.status,
                "duration": t.duration,
            }
            for t in tasks
        ],
        columns=["task_id", "title", "standard_task_id", "project_id", "status", "duration"],
    )
    df.to_csv(path, index=False)
    return len(df)
