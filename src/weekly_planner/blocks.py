"""Block post-processing: descriptions, merging and the final overlap check."""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable, Sequence
from dataclasses import replace

from weekly_planner.occupancy import overlaps_any
from weekly_planner.types import BusyInterval, ScheduledBlock, TaskAnalysis

logger = logging.getLogger(__name__)

TASK_ID_MARKER = "Work.ai Task ID"

_TASK_ID_RE = re.compile(rf"^{re.escape(TASK_ID_MARKER)}: (?P<task_id>.+)$", re.MULTILINE)


def _format_number(value: float) -> str:
    """Shortest round-trip form; whole floats drop the trailing .0."""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return repr(value)


def describe_task(task: TaskAnalysis) -> str:
    """Event description for a block of task.

    The last line carries the task id so calendar events can be matched back
    to tasks later (see extract_task_id).
    """
    return "\n".join([
        task.details,
        f"Priority: {task.priority_label} ({_format_number(task.priority_score)}/100)",
        f"Estimated effort: {_format_number(task.estimated_hours)}h",
        f"Deadline: {task.deadline}",
        f"{TASK_ID_MARKER}: {task.id}",
    ])


def extract_task_id(description: str | None) -> str | None:
    """Task id embedded by describe_task, or None."""
    if not description:
        return None
    matches = _TASK_ID_RE.findall(description)
    if not matches:
        return None
    return matches[-1].strip()


def merge_sequential(blocks: Sequence[ScheduledBlock]) -> list[ScheduledBlock]:
    """Collapse back-to-back blocks of the same task into one.

    A block is folded into the previous output block only when both share the
    task id and the description, and the previous block ends exactly where
    this one starts. Single pass, so applying it twice changes nothing.
    """
    merged: list[ScheduledBlock] = []
    for block in blocks:
        if merged:
            last = merged[-1]
            if (
                last.task_id == block.task_id
                and last.end == block.start
                and last.calendar_description == block.calendar_description
            ):
                merged[-1] = replace(
                    last, end=block.end, minutes=last.minutes + block.minutes
                )
                continue
        merged.append(block)
    return merged


def final_overlap_filter(
    blocks: Iterable[ScheduledBlock], busy: Sequence[BusyInterval]
) -> list[ScheduledBlock]:
    """Drop any block overlapping caller busy time.

    A no-op for a correct allocation; it guards against busy intervals that
    went stale between capture and block generation.
    """
    kept: list[ScheduledBlock] = []
    for block in blocks:
        if overlaps_any(block.start, block.end, busy):
            logger.warning(
                "Dropping block %s-%s for task %r: overlaps busy time",
                block.start_iso, block.end_iso, block.task_id,
            )
            continue
        kept.append(block)
    return kept
