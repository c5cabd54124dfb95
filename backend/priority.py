from typing import Literal

Scale = Literal["low", "medium", "high"]
PriorityBucket = Literal["Do Now", "Schedule", "Quick Task", "Drop"]

SCALE_VALUES = ("high", "medium", "low")
DEFAULT_SCALE = "medium"

DO_NOW = "Do Now"
SCHEDULE = "Schedule"
QUICK_TASK = "Quick Task"
DROP = "Drop"

# Matrix quadrants, in display and rank order
BUCKETS = (DO_NOW, SCHEDULE, QUICK_TASK, DROP)

# (urgencies, importances, bucket), checked top to bottom; first match wins
PRIORITY_RULES = (
    (("high",), ("high",), DO_NOW),
    (("medium", "low"), ("high",), SCHEDULE),
    (("high",), ("medium", "low"), QUICK_TASK),
    (("medium", "low"), ("medium", "low"), DROP),
)


def classify_priority(urgency: str, importance: str) -> str:
    """Map an (urgency, importance) pair onto its Eisenhower bucket."""
    for urgencies, importances, bucket in PRIORITY_RULES:
        if urgency in urgencies and importance in importances:
            return bucket
    return DROP
