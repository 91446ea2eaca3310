"""Shared types: tasks, busy intervals, scheduled blocks and results."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import TYPE_CHECKING, Any

from weekly_planner.resolution import format_local, parse_local

if TYPE_CHECKING:
    from weekly_planner.preferences import SchedulePreferences


@dataclass(frozen=True)
class TaskAnalysis:
    """A task plus the scores returned by the inference service.

    ``deadline`` and ``not_before`` keep the raw strings received; parsing is
    permissive and happens when the task enters an allocation run.
    ``is_splittable`` is ``None`` when the service did not say; only an
    explicit ``False`` makes a task non-splittable.
    """

    id: str
    title: str
    details: str
    deadline: str
    estimated_hours: float
    urgency_score: float
    priority_score: float
    priority_label: str = "Medium"
    is_splittable: bool | None = None
    not_before: str | None = None
    analysis_reason: str | None = None

    @property
    def splittable(self) -> bool:
        return self.is_splittable is not False

    def deadline_at(self, now: datetime) -> datetime:
        """Parsed deadline; unparseable deadlines fall back to ``now``."""
        parsed = parse_local(self.deadline)
        return parsed if parsed is not None else now

    def not_before_at(self) -> datetime | None:
        return parse_local(self.not_before)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> TaskAnalysis:
        """Build from the camelCase payload used by the inference service."""
        splittable = data.get("isSplittable")
        not_before = data.get("notBeforeISO")
        reason = data.get("analysisReason")
        return cls(
            id=data["id"],
            title=data["title"],
            details=data["details"],
            deadline=data["deadline"],
            estimated_hours=data["estimatedHours"],
            urgency_score=data["urgencyScore"],
            priority_score=data["priorityScore"],
            priority_label=data.get("priorityLabel") or "Medium",
            is_splittable=splittable if isinstance(splittable, bool) else None,
            not_before=not_before if isinstance(not_before, str) else None,
            analysis_reason=reason if isinstance(reason, str) else None,
        )

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {
            "id": self.id,
            "title": self.title,
            "details": self.details,
            "deadline": self.deadline,
            "estimatedHours": self.estimated_hours,
            "urgencyScore": self.urgency_score,
            "priorityScore": self.priority_score,
            "priorityLabel": self.priority_label,
        }
        if self.is_splittable is not None:
            out["isSplittable"] = self.is_splittable
        if self.not_before is not None:
            out["notBeforeISO"] = self.not_before
        if self.analysis_reason is not None:
            out["analysisReason"] = self.analysis_reason
        return out


@dataclass(frozen=True)
class BusyInterval:
    """Half-open [start, end) of committed time, in local wall-clock time."""

    start: datetime
    end: datetime

    def overlaps(self, start: datetime, end: datetime) -> bool:
        return start < self.end and end > self.start

    def to_dict(self) -> dict[str, str]:
        return {"startISO": format_local(self.start), "endISO": format_local(self.end)}


@dataclass(frozen=True)
class ScheduledBlock:
    """One placed work block.

    Invariants:
        - end - start == minutes
        - calendar_description embeds the task id (see blocks.describe_task)
    """

    task_id: str
    task_title: str
    start: datetime
    end: datetime
    minutes: int
    calendar_description: str

    @property
    def start_iso(self) -> str:
        return format_local(self.start)

    @property
    def end_iso(self) -> str:
        return format_local(self.end)

    def to_dict(self) -> dict[str, Any]:
        return {
            "taskId": self.task_id,
            "taskTitle": self.task_title,
            "startISO": self.start_iso,
            "endISO": self.end_iso,
            "minutes": self.minutes,
            "calendarDescription": self.calendar_description,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ScheduledBlock:
        """Restore a stored block. Raises ValueError on unparseable times."""
        start = parse_local(data["startISO"])
        end = parse_local(data["endISO"])
        if start is None or end is None:
            raise ValueError(
                f"Block for task {data.get('taskId')!r} has unparseable times: "
                f"{data.get('startISO')!r} / {data.get('endISO')!r}"
            )
        return cls(
            task_id=data["taskId"],
            task_title=data["taskTitle"],
            start=start,
            end=end,
            minutes=int(data["minutes"]),
            calendar_description=data["calendarDescription"],
        )


@dataclass(frozen=True)
class ScheduleResult:
    """Outcome of one planning run.

    ``unplaced_task_ids`` lists input tasks (in input order) that received no
    block at all. ``shortfall_minutes`` maps every task whose rounded effort
    is not fully covered by ``blocks`` to the uncovered minutes.
    """

    blocks: tuple[ScheduledBlock, ...]
    unplaced_task_ids: tuple[str, ...]
    shortfall_minutes: dict[str, int]
    breaks: tuple[BusyInterval, ...]
    preferences: SchedulePreferences
    scheduling_start: datetime
    planning_days: int
    busy: tuple[BusyInterval, ...] = field(default=(), repr=False)

    @property
    def is_complete(self) -> bool:
        """Whether every task was scheduled in full."""
        return not self.shortfall_minutes

    def to_dict(self) -> dict[str, Any]:
        return {
            "schedule": [b.to_dict() for b in self.blocks],
            "unplacedTaskIds": list(self.unplaced_task_ids),
            "shortfallMinutes": dict(self.shortfall_minutes),
            "schedulePreferences": self.preferences.to_dict(),
            "schedulingStart": format_local(self.scheduling_start),
            "busyIntervalsCount": len(self.busy),
        }


class PayloadError(ValueError):
    """Raised when a plain-data payload fails validation."""

    def __init__(self, what: str, errors: list[str]) -> None:
        self.what = what
        self.errors = list(errors)
        super().__init__(
            f"Invalid {what} payload:\n" + "\n".join(f"  - {e}" for e in self.errors)
        )
