"""
"What's next" ordering over analyzed tasks.

The ranked order is a derived view: callers keep their task list in analysis
order and ask for a ranking whenever they need a recommendation.
"""
from collections.abc import Iterable
from typing import Optional

from models import Task
from priority import BUCKETS

BUCKET_RANK = {bucket: rank for rank, bucket in enumerate(BUCKETS)}
SCALE_RANK = {"high": 0, "medium": 1, "low": 2}

RESCUE_SIZE = 3


def rank_key(task: Task) -> tuple[int, int, int, int]:
    return (
        BUCKET_RANK[task.priority_bucket],
        SCALE_RANK[task.urgency],
        SCALE_RANK[task.importance],
        task.estimated_time_minutes,
    )


def rank_tasks(tasks: Iterable[Task]) -> list[Task]:
    """
    Return a new list ordered by bucket, urgency, importance, then quickest first.
    The input is never reordered; equal tasks keep their relative order.
    """
    return sorted(tasks, key=rank_key)


def top_tasks(tasks: Iterable[Task], limit: int = RESCUE_SIZE) -> list[Task]:
    return rank_tasks(tasks)[:limit]


def next_task(tasks: Iterable[Task]) -> Optional[Task]:
    """The single task to start with, or None for an empty list."""
    ranked = top_tasks(tasks, 1)
    return ranked[0] if ranked else None


def group_by_bucket(tasks: Iterable[Task]) -> dict[str, list[Task]]:
    """Matrix view: every quadrant present, tasks in their original order."""
    matrix = {bucket: [] for bucket in BUCKETS}
    for task in tasks:
        matrix[task.priority_bucket].append(task)
    return matrix
