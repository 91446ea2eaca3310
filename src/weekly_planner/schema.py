"""Input validation for task analysis and stored block payloads."""

from __future__ import annotations

import math
from collections.abc import Mapping
from typing import Any

_TASK_STRING_FIELDS = ("id", "title", "details", "deadline")
_TASK_NUMBER_FIELDS = ("estimatedHours", "urgencyScore", "priorityScore")

_BLOCK_STRING_FIELDS = ("taskId", "taskTitle", "startISO", "endISO", "calendarDescription")


def _is_number(value: Any) -> bool:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return not isinstance(value, float) or math.isfinite(value)


def _check_fields(
    item: Mapping[str, Any],
    label: str,
    strings: tuple[str, ...],
    numbers: tuple[str, ...],
) -> list[str]:
    errors: list[str] = []
    for name in strings:
        if not isinstance(item.get(name), str):
            errors.append(f"{label}: '{name}' must be a string, got {item.get(name)!r}")
    for name in numbers:
        if not _is_number(item.get(name)):
            errors.append(f"{label}: '{name}' must be a number, got {item.get(name)!r}")
    return errors


def validate_analysis(items: Any) -> list[str]:
    """Validate a list of task analysis dicts. Returns error messages (empty = valid).

    Checks:
    - The payload is a list of objects
    - id, title, details, deadline are strings
    - estimatedHours, urgencyScore, priorityScore are finite numbers
    - isSplittable, when present, is a boolean or null
    - task ids are unique
    """
    if not isinstance(items, (list, tuple)):
        return [f"analysis must be a list, got {type(items).__name__}"]

    errors: list[str] = []
    seen: set[str] = set()
    for i, item in enumerate(items):
        if not isinstance(item, Mapping):
            errors.append(f"Task {i}: expected an object, got {type(item).__name__}")
            continue

        errors.extend(
            _check_fields(item, f"Task {i}", _TASK_STRING_FIELDS, _TASK_NUMBER_FIELDS)
        )

        splittable = item.get("isSplittable")
        if splittable is not None and not isinstance(splittable, bool):
            errors.append(f"Task {i}: 'isSplittable' must be a boolean, got {splittable!r}")

        task_id = item.get("id")
        if isinstance(task_id, str):
            if task_id in seen:
                errors.append(f"Task {i}: duplicate id {task_id!r}")
            seen.add(task_id)

    return errors


def validate_block(item: Any) -> list[str]:
    """Validate one stored scheduled block dict."""
    if not isinstance(item, Mapping):
        return [f"block must be an object, got {type(item).__name__}"]
    return _check_fields(item, "Block", _BLOCK_STRING_FIELDS, ("minutes",))
