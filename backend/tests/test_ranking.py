"""
Tests for ranking.py - "what's next" ordering and the matrix view.
"""
import pytest
import sys
import os

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from models import Task
from ranking import group_by_bucket, next_task, rank_tasks, top_tasks


def make_task(name, urgency="medium", importance="medium", minutes=30):
    return Task(task=name, urgency=urgency, importance=importance, estimated_time_minutes=minutes)


class TestRankTasks:
    """Bucket, then urgency, then importance, then quickest first."""

    def test_bucket_order(self, day_tasks):
        ranked = rank_tasks(day_tasks)

        assert [t.priority_bucket for t in ranked] == [
            "Do Now", "Do Now", "Schedule", "Quick Task", "Drop",
        ]

    def test_shorter_task_first_among_equals(self):
        slow = make_task("Slow", "high", "high", 20)
        fast = make_task("Fast", "high", "high", 10)

        assert [t.task for t in rank_tasks([slow, fast])] == ["Fast", "Slow"]

    def test_urgency_breaks_ties_within_bucket(self):
        # Both Schedule; medium urgency beats low
        low = make_task("Low urgency", "low", "high", 5)
        medium = make_task("Medium urgency", "medium", "high", 60)

        assert [t.task for t in rank_tasks([low, medium])] == ["Medium urgency", "Low urgency"]

    def test_importance_breaks_ties_after_urgency(self):
        # Both Drop with medium urgency; medium importance beats low
        low = make_task("Low importance", "medium", "low", 5)
        medium = make_task("Medium importance", "medium", "medium", 60)

        assert [t.task for t in rank_tasks([low, medium])] == ["Medium importance", "Low importance"]

    def test_bucket_outranks_duration(self):
        long_urgent = make_task("Long", "high", "high", 240)
        quick_drop = make_task("Quick", "low", "low", 5)

        assert rank_tasks([quick_drop, long_urgent])[0].task == "Long"

    def test_input_not_mutated(self, day_tasks):
        original = list(day_tasks)

        rank_tasks(day_tasks)

        assert day_tasks == original

    def test_returns_new_list(self, day_tasks):
        assert rank_tasks(day_tasks) is not day_tasks

    def test_idempotent(self, day_tasks):
        ranked = rank_tasks(day_tasks)
        assert rank_tasks(ranked) == ranked

    def test_stable_for_identical_keys(self):
        first = make_task("First")
        second = make_task("Second")

        assert [t.task for t in rank_tasks([first, second])] == ["First", "Second"]
        assert [t.task for t in rank_tasks([second, first])] == ["Second", "First"]

    def test_empty(self):
        assert rank_tasks([]) == []


class TestTopTasks:
    def test_next_task_is_quickest_do_now(self, day_tasks):
        assert next_task(day_tasks).task == "Book dentist"

    def test_next_task_empty(self):
        assert next_task([]) is None

    def test_top_three(self, day_tasks):
        assert [t.task for t in top_tasks(day_tasks)] == [
            "Book dentist", "Pay rent", "Plan quarterly goals",
        ]

    @pytest.mark.parametrize("limit", [1, 2, 5, 10])
    def test_limit(self, day_tasks, limit):
        assert len(top_tasks(day_tasks, limit)) == min(limit, len(day_tasks))


class TestGroupByBucket:
    """Matrix view keeps analysis order inside each quadrant."""

    def test_all_quadrants_present(self):
        matrix = group_by_bucket([])
        assert list(matrix) == ["Do Now", "Schedule", "Quick Task", "Drop"]
        assert all(tasks == [] for tasks in matrix.values())

    def test_grouping(self, day_tasks):
        matrix = group_by_bucket(day_tasks)

        assert [t.task for t in matrix["Do Now"]] == ["Pay rent", "Book dentist"]
        assert [t.task for t in matrix["Schedule"]] == ["Plan quarterly goals"]
        assert [t.task for t in matrix["Quick Task"]] == ["Reply to Sam"]
        assert [t.task for t in matrix["Drop"]] == ["Sort inbox"]
