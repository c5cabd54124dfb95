"""
Coerce provider output into well-formed Task values.

Every field coercion is total: malformed values fall back to a default
(medium scale, 30 minutes) instead of raising. The only rejection is dropping
candidates whose task text is empty after trimming.
"""
import math
from collections.abc import Iterable, Mapping
from typing import Any

from models import Task
from priority import SCALE_VALUES, DEFAULT_SCALE

MIN_MINUTES = 5
MAX_MINUTES = 240
DEFAULT_MINUTES = 30


def normalize_scale(value: Any) -> str:
    """Return "high", "medium" or "low"; anything unrecognised is "medium"."""
    if value is None:
        return DEFAULT_SCALE
    text = str(value).lower()
    if text in SCALE_VALUES:
        return text
    return DEFAULT_SCALE


def normalize_minutes(value: Any) -> int:
    """Round and clamp a duration into [5, 240]; non-finite input gives 30."""
    # JSON booleans are not durations
    if value is None or isinstance(value, bool):
        return DEFAULT_MINUTES
    try:
        number = float(value)
    except (TypeError, ValueError, OverflowError):
        return DEFAULT_MINUTES
    if not math.isfinite(number):
        return DEFAULT_MINUTES
    # Halves round up
    rounded = math.floor(number + 0.5)
    return min(MAX_MINUTES, max(MIN_MINUTES, rounded))


def normalize_text(value: Any) -> str:
    # Falsy scalars (null, false, 0) carry no task text
    if value is None or value is False:
        return ""
    if isinstance(value, (int, float)) and value == 0:
        return ""
    return str(value).strip()


def normalize_task(candidate: Any) -> Task | None:
    """Build a Task from one raw candidate, or None when its text is empty."""
    if not isinstance(candidate, Mapping):
        candidate = {}

    text = normalize_text(candidate.get("task"))
    if not text:
        return None

    return Task(
        task=text,
        urgency=normalize_scale(candidate.get("urgency")),
        importance=normalize_scale(candidate.get("importance")),
        estimated_time_minutes=normalize_minutes(candidate.get("estimated_time_minutes")),
    )


def sanitize_tasks(raw_candidates: Iterable[Any]) -> list[Task]:
    """Normalize and classify raw candidates, keeping input order."""
    tasks = []
    for candidate in raw_candidates:
        task = normalize_task(candidate)
        if task is not None:
            tasks.append(task)
    return tasks
