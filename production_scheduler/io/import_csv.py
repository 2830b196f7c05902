"""CSV readers for tasks, projects, employees and workstations."""

from __future__ import annotations

from datetime import date, datetime
from pathlib import Path
from typing import Dict, Iterable, List, Optional

import pandas as pd

from production_scheduler.domain.models import (
    PRIORITIES,
    Employee,
    Project,
    ScheduleTask,
    TaskStatus,
    Workstation,
)
from production_scheduler.errors import DataImportError

LIST_SEPARATOR = ";"


def _read(csv_path: str | Path, required: Iterable[str]) -> pd.DataFrame:
    df = pd.read_csv(csv_path, dtype=str)
    # Normalize column names
    df.columns = df.columns.str.lower().str.strip()
    missing = set(required) - set(df.columns)
    if missing:
        raise DataImportError(f"{csv_path}: missing columns {', '.join(sorted(missing))}")
    return df


def _text(value) -> Optional[str]:
    if value is None or pd.isna(value):
        return None
    text = str(value).strip()
    return text or None


def _split(value) -> List[str]:
    text = _text(value)
    if text is None:
        return []
    return [part.strip() for part in text.split(LIST_SEPARATOR) if part.strip()]


def _date(value, column: str) -> Optional[date]:
    text = _text(value)
    if text is None:
        return None
    try:
        return pd.Timestamp(text).date()
    except ValueError as exc:
        raise DataImportError(f"Invalid {column} {text!r}") from exc


def parse_timestamp(value) -> datetime:
    """Parse an ISO timestamp into a naive local datetime (offset dropped)."""
    ts = pd.Timestamp(value)
    if ts.tzinfo is not None:
        ts = ts.tz_localize(None)
    return ts.to_pydatetime()


def read_projects(csv_path: str | Path) -> Dict[str, Project]:
    """
    Read projects keyed by id.

    Columns: id, name, start_date, installation_date, status, client
    """
    df = _read(csv_path, ["id"])
    projects: Dict[str, Project] = {}
    for _, row in df.iterrows():
        project = Project(
            id=str(row["id"]).strip(),
            name=_text(row.get("name")) or "",
            start_date=_date(row.get("start_date"), "start_date"),
            installation_date=_date(row.get("installation_date"), "installation_date"),
            status=(_text(row.get("status")) or "planned").lower(),
            client=_text(row.get("client")) or "",
        )
        projects[project.id] = project
    return projects


def read_workstations(csv_path: str | Path) -> Dict[str, Workstation]:
    df = _read(csv_path, ["id"])
    return {
        str(row["id"]).strip(): Workstation(id=str(row["id"]).strip(), name=_text(row.get("name")) or "")
        for _, row in df.iterrows()
    }


def read_workstation_capacity(csv_path: str | Path) -> Dict[str, int]:
    """
    Workstation id -> declared capacity.

    Rows with a blank (or no) capacity column are left out so that they do not
    override capacities from the config; unlisted workstations default to 1.
    """
    df = _read(csv_path, ["id"])
    capacity: Dict[str, int] = {}
    for _, row in df.iterrows():
        raw = _text(row.get("capacity"))
        if raw is None:
            continue
        try:
            value = int(raw)
        except ValueError as exc:
            raise DataImportError(f"Invalid capacity {raw!r} for workstation {row['id']}") from exc
        if value <= 0:
            raise DataImportError(f"Capacity for workstation {row['id']} must be > 0")
        capacity[str(row["id"]).strip()] = value
    return capacity


def read_tasks(
    csv_path: str | Path,
    projects: Optional[Dict[str, Project]] = None,
    workstations: Optional[Dict[str, Workstation]] = None,
) -> List[ScheduleTask]:
    """
    Read tasks to be scheduled.

    Args:
        csv_path: CSV with columns id, title, duration, status, due_date,
            standard_task_id, priority, project_id, workstation_ids
        projects: Projects keyed by id (from ``read_projects``)
        workstations: Workstations keyed by id, used for names

    Returns:
        Tasks in file order

    Raises:
        DataImportError: On unknown status/priority or non-positive duration
    """
    projects = projects or {}
    workstations = workstations or {}
    df = _read(csv_path, ["id", "duration", "status"])

    tasks: List[ScheduleTask] = []
    for _, row in df.iterrows():
        task_id = str(row["id"]).strip()
        status = (_text(row["status"]) or "").upper()
        if status not in TaskStatus.ALL:
            raise DataImportError(f"Task {task_id}: unknown status {row['status']!r}")
        try:
            duration = int(float(row["duration"]))
        except (TypeError, ValueError) as exc:
            raise DataImportError(f"Task {task_id}: invalid duration {row['duration']!r}") from exc
        if duration <= 0:
            raise DataImportError(f"Task {task_id}: duration must be > 0")
        priority = (_text(row.get("priority")) or "medium").lower()
        if priority not in PRIORITIES:
            raise DataImportError(f"Task {task_id}: unknown priority {priority!r}")

        project_id = _text(row.get("project_id"))
        if project_id is not None and project_id not in projects:
            raise DataImportError(f"Task {task_id}: unknown project {project_id}")

        tasks.append(
            ScheduleTask(
                id=task_id,
                title=_text(row.get("title")) or "",
                duration=duration,
                status=status,
                due_date=_date(row.get("due_date"), "due_date"),
                standard_task_id=_text(row.get("standard_task_id")),
                priority=priority,
                project=projects.get(project_id) if project_id else None,
                workstations=tuple(
                    workstations.get(ws_id, Workstation(ws_id)) for ws_id in _split(row.get("workstation_ids"))
                ),
            )
        )
    return tasks


def read_employees(csv_path: str | Path) -> List[Employee]:
    """
    Read the employee roster.

    Columns: id, name, standard_task_ids, workstation_ids (lists are ``;``-separated)
    """
    df = _read(csv_path, ["id"])
    return [
        Employee(
            id=str(row["id"]).strip(),
            name=_text(row.get("name")) or "",
            standard_tasks=frozenset(_split(row.get("standard_task_ids"))),
            workstations=tuple(_split(row.get("workstation_ids"))),
        )
        for _, row in df.iterrows()
    ]


def read_slots(csv_path: str | Path) -> pd.DataFrame:
    """Read an exported slots CSV (see ``write_slots``)."""
    return _read(csv_path, ["task_id", "employee_id", "workstation_id", "start_time", "end_time"])
