"""Scheduler configuration: dataclasses, loading (YAML or JSON) and validation."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from pathlib import Path
from typing import Any, Dict, List, Optional, Set

import yaml

from production_scheduler.domain.models import BreakWindow, DayHours
from production_scheduler.errors import ConfigError
from production_scheduler.services.timeplan import parse_time_string


WEEKDAY_NAMES = {
    "sunday": 0,
    "monday": 1,
    "tuesday": 2,
    "wednesday": 3,
    "thursday": 4,
    "friday": 5,
    "saturday": 6,
}

DEPENDENCY_SCOPES = ("project", "global", "none")


def default_working_hours() -> Dict[int, DayHours]:
    lunch = (BreakWindow("12:00", "12:30"),)
    return {day: DayHours("08:00", "16:30", lunch) for day in range(1, 6)}


@dataclass
class SchedulerConfig:
    """Run-level scheduling parameters."""

    start_date: datetime = field(
        default_factory=lambda: datetime.combine(date.today(), datetime.min.time())
    )
    days_to_schedule: int = 30
    working_hours: Dict[int, DayHours] = field(default_factory=default_working_hours)
    holidays: Set[str] = field(default_factory=set)
    # standard_task_id -> limit standard_task_ids that must finish first
    limit_tasks: Dict[str, List[str]] = field(default_factory=dict)
    workstation_capacity: Dict[str, int] = field(default_factory=dict)
    timezone: str = "UTC"
    today: Optional[date] = None
    last_production_step: Optional[str] = None
    # standard task ids in production order, used to cut capacity checks at the last step
    standard_task_order: List[str] = field(default_factory=list)
    dependency_scope: str = "project"
    max_workday_search: int = 365
    hold_sweep_factor: int = 3

    @property
    def horizon(self) -> datetime:
        start = datetime.combine(self.start_date.date(), datetime.min.time())
        return start + timedelta(days=self.days_to_schedule)

    def reference_now(self) -> datetime:
        """Moment used for priority and project-start filtering."""
        if self.today is not None:
            return datetime.combine(self.today, datetime.min.time())
        return datetime.now()


def _parse_date(value: Any, key: str) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return datetime.strptime(str(value), "%Y-%m-%d").date()
    except ValueError as exc:
        raise ConfigError(f"{key} must follow YYYY-MM-DD format, got {value!r}") from exc


def _parse_start(value: Any) -> datetime:
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime.combine(value, datetime.min.time())
    text = str(value)
    try:
        return datetime.fromisoformat(text)
    except ValueError as exc:
        raise ConfigError(f"start_date must be an ISO date or datetime, got {value!r}") from exc


def _weekday_key(key: Any) -> int:
    if isinstance(key, str) and key.strip().lower() in WEEKDAY_NAMES:
        return WEEKDAY_NAMES[key.strip().lower()]
    try:
        day = int(key)
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"Unknown weekday key {key!r}") from exc
    if not 0 <= day <= 6:
        raise ConfigError(f"Weekday must be between 0 (Sunday) and 6 (Saturday), got {day}")
    return day


def _parse_working_hours(raw: Dict[Any, Any]) -> Dict[int, DayHours]:
    hours: Dict[int, DayHours] = {}
    for key, spec in raw.items():
        if spec is None:
            continue
        breaks = tuple(
            BreakWindow(str(b["start_time"]), str(b["end_time"])) for b in spec.get("breaks") or []
        )
        hours[_weekday_key(key)] = DayHours(str(spec["start_time"]), str(spec["end_time"]), breaks)
    return hours


def config_from_dict(data: Dict[str, Any]) -> SchedulerConfig:
    """Build a SchedulerConfig from a plain mapping (as loaded from YAML/JSON)."""
    cfg = SchedulerConfig()
    if "start_date" in data:
        cfg.start_date = _parse_start(data["start_date"])
    if "days_to_schedule" in data:
        cfg.days_to_schedule = int(data["days_to_schedule"])
    if data.get("working_hours") is not None:
        cfg.working_hours = _parse_working_hours(data["working_hours"])
    cfg.holidays = {_parse_date(h, "holidays").isoformat() for h in data.get("holidays") or []}
    cfg.limit_tasks = {
        str(std): [str(x) for x in (limits or [])]
        for std, limits in (data.get("limit_tasks") or {}).items()
    }
    cfg.workstation_capacity = {
        str(ws): int(cap) for ws, cap in (data.get("workstation_capacity") or {}).items()
    }
    cfg.timezone = str(data.get("timezone", cfg.timezone))
    if data.get("today"):
        cfg.today = _parse_date(data["today"], "today")
    if data.get("last_production_step"):
        cfg.last_production_step = str(data["last_production_step"])
    cfg.standard_task_order = [str(step) for step in data.get("standard_task_order") or []]
    cfg.dependency_scope = str(data.get("dependency_scope", cfg.dependency_scope)).lower()
    cfg.max_workday_search = int(data.get("max_workday_search", cfg.max_workday_search))
    cfg.hold_sweep_factor = int(data.get("hold_sweep_factor", cfg.hold_sweep_factor))
    validate_config(cfg)
    return cfg


def load_config(path: str | Path) -> SchedulerConfig:
    """
    Load and validate a scheduler configuration file.

    Args:
        path: Path to a ``.yaml``/``.yml`` or ``.json`` file

    Returns:
        Validated SchedulerConfig

    Raises:
        ConfigError: If the file content is malformed
    """
    path = Path(path)
    text = path.read_text(encoding="utf-8")
    if path.suffix.lower() == ".json":
        data = json.loads(text)
    else:
        data = yaml.safe_load(text)
    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigError(f"Configuration root must be a mapping: {path}")
    return config_from_dict(data)


def validate_config(cfg: SchedulerConfig) -> None:
    if cfg.days_to_schedule <= 0:
        raise ConfigError("days_to_schedule must be > 0")
    if cfg.max_workday_search <= 0:
        raise ConfigError("max_workday_search must be > 0")
    if cfg.hold_sweep_factor <= 0:
        raise ConfigError("hold_sweep_factor must be > 0")
    if cfg.dependency_scope not in DEPENDENCY_SCOPES:
        raise ConfigError(
            f"dependency_scope must be one of {', '.join(DEPENDENCY_SCOPES)}, got {cfg.dependency_scope!r}"
        )
    for ws_id, capacity in cfg.workstation_capacity.items():
        if capacity <= 0:
            raise ConfigError(f"Capacity for workstation {ws_id} must be > 0")
    for day, hours in cfg.working_hours.items():
        if not 0 <= day <= 6:
            raise ConfigError(f"Weekday must be between 0 and 6, got {day}")
        start = parse_time_string(hours.start_time)
        end = parse_time_string(hours.end_time)
        if end <= start:
            raise ConfigError(f"Working hours for weekday {day} end before they start")
        for brk in hours.breaks:
            if parse_time_string(brk.end_time) <= parse_time_string(brk.start_time):
                raise ConfigError(f"Break {brk.start_time}-{brk.end_time} on weekday {day} is empty")
