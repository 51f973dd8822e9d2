"""
Mastery model transitions.

Pure functions: each takes a LearnableItem and returns a new one. The input
is never modified, so callers can compute the full next state first and
persist it with a single write.
"""

from dataclasses import replace
from datetime import date, timedelta

from genmemo.domain.constants import (
    INTERVAL_STEPS,
    MAX_INTERVAL_DAYS,
    MAX_TIER,
    MIN_INTERVAL_DAYS,
    MIN_TIER,
)
from genmemo.domain.models import LearnableItem


def interval_for_tier(tier: int, previous_interval: float) -> float:
    """
    Interval (days) for an item that has just reached `tier`.

    Tiers in the step table map directly. Tiers past the table double the
    previous interval, capped at MAX_INTERVAL_DAYS.
    """
    if tier in INTERVAL_STEPS:
        return INTERVAL_STEPS[tier]
    doubled = max(MIN_INTERVAL_DAYS, previous_interval) * 2
    return min(MAX_INTERVAL_DAYS, doubled)


def apply_correct_answer(
    item: LearnableItem, today: date, max_tier: int = MAX_TIER
) -> LearnableItem:
    new_tier = min(max_tier, item.mastery + 1)
    is_new_day = item.last_correct_date != today
    interval = interval_for_tier(new_tier, item.interval_days)

    return replace(
        item,
        mastery=new_tier,
        interval_days=interval,
        next_review_due=today + timedelta(days=round(interval)),
        streak=item.streak + 1,
        correct_days=item.correct_days + 1 if is_new_day else item.correct_days,
        last_correct_date=today,
    )


def apply_wrong_answer(item: LearnableItem, today: date) -> LearnableItem:
    # correct_days and last_correct_date are kept: past days are never revoked
    return replace(
        item,
        mastery=max(MIN_TIER, item.mastery - 1),
        interval_days=MIN_INTERVAL_DAYS,
        next_review_due=today + timedelta(days=1),
        streak=0,
    )
