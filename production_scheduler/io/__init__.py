"""I/O utilities for CSV import/export."""

from .export_csv import slots_to_frame, write_slots, write_unassigned
from .import_csv import (
    read_employees,
    read_projects,
    read_slots,
    read_tasks,
    read_workstation_capacity,
    read_workstations,
)

__all__ = [
    "read_employees",
    "read_projects",
    "read_slots",
    "read_tasks",
    "read_workstation_capacity",
    "read_workstations",
    "slots_to_frame",
    "write_slots",
    "write_unassigned",
]
