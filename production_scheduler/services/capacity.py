"""Concurrent-occupancy checks for workstations."""

from __future__ import annotations

from datetime import datetime
from typing import Dict, Iterable, List, Sequence, Tuple

from production_scheduler.domain.models import ScheduledSlot

DEFAULT_CAPACITY = 1


def capacity_of(capacities: Dict[str, int], workstation_id: str) -> int:
    """Declared capacity of a workstation (exclusive use when unspecified)."""
    return capacities.get(workstation_id, DEFAULT_CAPACITY)


def concurrent_at(moment: datetime, slots: Iterable[ScheduledSlot]) -> int:
    """Number of slots whose half-open interval covers ``moment``."""
    return sum(1 for slot in slots if slot.start <= moment < slot.end)


def fits_capacity(
    start: datetime,
    end: datetime,
    existing: Sequence[ScheduledSlot],
    capacity: int,
) -> bool:
    """
    Check that adding ``[start, end)`` keeps concurrency within ``capacity``.

    Concurrency only changes at interval endpoints, so sampling every
    endpoint inside the proposed interval is sufficient.
    """
    moments = {start, end}
    for slot in existing:
        moments.add(slot.start)
        moments.add(slot.end)
    for moment in sorted(moments):
        if moment < start or moment >= end:
            continue
        if 1 + concurrent_at(moment, existing) > capacity:
            return False
    return True


def peak_concurrency(slots: Sequence[ScheduledSlot]) -> Tuple[int, datetime | None]:
    """Highest number of simultaneously active slots and the first instant it occurs."""
    best, when = 0, None
    for moment in sorted({s.start for s in slots} | {s.end for s in slots}):
        count = concurrent_at(moment, slots)
        if count > best:
            best, when = count, moment
    return best, when


def assign_lanes(slots: Sequence[ScheduledSlot]) -> List[int]:
    """
    Lowest free lane index for each slot at one workstation/date.

    Lanes are assigned in start order; the returned list follows the input order.
    """
    order = sorted(range(len(slots)), key=lambda i: (slots[i].start, slots[i].end, i))
    lane_free_at: List[datetime] = []
    lanes = [0] * len(slots)
    for idx in order:
        slot = slots[idx]
        for lane, free_at in enumerate(lane_free_at):
            if free_at <= slot.start:
                lane_free_at[lane] = slot.end
                lanes[idx] = lane
                break
        else:
            lane_free_at.append(slot.end)
            lanes[idx] = len(lane_free_at) - 1
    return lanes
