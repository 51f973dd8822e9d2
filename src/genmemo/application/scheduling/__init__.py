# Review scheduling engine
from .decay import apply_decay
from .mastery import apply_correct_answer, apply_wrong_answer, interval_for_tier
from .selection import select_for_review

__all__ = [
    "apply_correct_answer",
    "apply_wrong_answer",
    "apply_decay",
    "interval_for_tier",
    "select_for_review",
]
