"""Occupancy ledger: caller busy time plus time consumed during a run.

The caller's busy intervals are read-only ground truth. Everything the
allocator places (work blocks and rest breaks) goes into the run-local
``planned`` list and is checked the same way, so a run never double-books
its own output.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import datetime, timedelta

from weekly_planner.resolution import SLOT
from weekly_planner.types import BusyInterval


def overlaps(start: datetime, end: datetime, other: BusyInterval) -> bool:
    """Strict half-open overlap test."""
    return start < other.end and end > other.start


def overlaps_any(
    start: datetime, end: datetime, intervals: Iterable[BusyInterval]
) -> bool:
    return any(overlaps(start, end, iv) for iv in intervals)


@dataclass
class Occupancy:
    """Mutable busy state for one allocation run. Never shared across runs."""

    busy: tuple[BusyInterval, ...]
    planned: list[BusyInterval] = field(default_factory=list)

    def is_busy(self, start: datetime, end: datetime) -> bool:
        """Overlaps caller-supplied busy time."""
        return overlaps_any(start, end, self.busy)

    def is_planned(self, start: datetime, end: datetime) -> bool:
        """Overlaps a block or break already placed in this run."""
        return overlaps_any(start, end, self.planned)

    def reserve(self, start: datetime, end: datetime) -> BusyInterval:
        interval = BusyInterval(start=start, end=end)
        self.planned.append(interval)
        return interval


def can_fit_contiguous(
    occupancy: Occupancy,
    start: datetime,
    minutes: int,
    day_end: datetime,
    deadline: datetime,
    not_before: datetime | None = None,
) -> bool:
    """Read-only: whether minutes of uninterrupted work fit at start.

    The block must start no earlier than not_before, end by day_end and by
    deadline, and every slot it covers must be free of caller busy time and
    of anything already planned in this run.
    """
    if not_before is not None and start < not_before:
        return False
    block_end = start + timedelta(minutes=minutes)
    if block_end > day_end or block_end > deadline:
        return False

    cursor = start
    while cursor < block_end:
        slot_end = cursor + SLOT
        if occupancy.is_busy(cursor, slot_end) or occupancy.is_planned(cursor, slot_end):
            return False
        cursor = slot_end
    return True
