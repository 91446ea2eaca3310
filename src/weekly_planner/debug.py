"""ASCII visualisation of a schedule for development-time verification.

This module is dev-only and not imported by production code.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from datetime import date, datetime, time, timedelta

from weekly_planner.resolution import SLOT_MINUTES
from weekly_planner.types import BusyInterval, ScheduledBlock


def show_schedule(
    blocks: Sequence[ScheduledBlock],
    start: date,
    days: int = 7,
    breaks: Iterable[BusyInterval] = (),
    busy: Iterable[BusyInterval] = (),
) -> str:
    """Print ASCII week view of blocks.

    Legend: '.' = idle, '#' = busy, '~' = break, 'A'-'Z' = task blocks.
    Each row is one day, each char = one 30-minute slot.
    Returns the string and also prints to stdout.
    """
    lines: list[str] = []
    chars_per_day = 24 * 60 // SLOT_MINUTES

    # Task label map: task_id -> letter, in order of first appearance
    task_labels: dict[str, str] = {}
    label_chars = "ABCDEFGHIJKLMNOPQRSTUVWXYZ"
    for block in blocks:
        if block.task_id not in task_labels:
            idx = len(task_labels) % len(label_chars)
            task_labels[block.task_id] = label_chars[idx]

    marks: list[tuple[datetime, datetime, str]] = [(iv.start, iv.end, "#") for iv in busy]
    marks += [(iv.start, iv.end, "~") for iv in breaks]
    marks += [(b.start, b.end, task_labels[b.task_id]) for b in blocks]

    # Header
    header_hours = "".join(f"{h:02d}" if h % 3 == 0 else "  " for h in range(24))
    lines.append(f"{'':>16s}  {header_hours}")

    for offset in range(days):
        current = start + timedelta(days=offset)
        midnight = datetime.combine(current, time(0, 0))
        row = ["."] * chars_per_day

        for char_idx in range(chars_per_day):
            slot_start = midnight + timedelta(minutes=char_idx * SLOT_MINUTES)
            slot_end = slot_start + timedelta(minutes=SLOT_MINUTES)
            # Later marks win: blocks over breaks over busy
            for mark_start, mark_end, char in marks:
                if mark_start < slot_end and mark_end > slot_start:
                    row[char_idx] = char

        label = current.strftime("%a %d %b")
        lines.append(f"{label:>16s}  {''.join(row)}")

    if task_labels:
        legend_parts = [f"{v}={k}" for k, v in task_labels.items()]
        lines.append(f"\nLegend: . = idle, # = busy, ~ = break, {', '.join(legend_parts)}")

    result = "\n".join(lines)
    print(result)
    return result
