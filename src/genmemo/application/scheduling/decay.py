"""
Decay of overdue items.

Models forgetting for items left unreviewed past their due date. Decay only
lowers the mastery tier; it never reschedules.
"""

from dataclasses import replace
from datetime import date

from genmemo.domain.constants import DECAY_DAYS_PER_STEP, DECAY_FLOOR_TIER
from genmemo.domain.models import LearnableItem


def decay_steps(days_overdue: int) -> int:
    """
    Cumulative tier penalty for an item `days_overdue` days past due.

    One step as soon as the item is overdue, one more for every further
    DECAY_DAYS_PER_STEP days.
    """
    if days_overdue <= 0:
        return 0
    return 1 + (days_overdue - 1) // DECAY_DAYS_PER_STEP


def apply_decay(item: LearnableItem, today: date) -> LearnableItem:
    """
    Penalize an overdue item.

    Only the part of the cumulative penalty not already charged on an earlier
    call (tracked through `last_decay_date`) is applied, so repeated calls on
    the same day are no-ops. Items that are not strictly overdue, or already
    at the floor, are returned unchanged.
    """
    if not item.is_overdue(today) or item.mastery <= DECAY_FLOOR_TIER:
        return item

    days_overdue = (today - item.next_review_due).days
    charged_days = 0
    if item.last_decay_date is not None and item.last_decay_date > item.next_review_due:
        charged_days = (item.last_decay_date - item.next_review_due).days

    steps = decay_steps(days_overdue) - decay_steps(charged_days)
    if steps <= 0:
        return item

    return replace(
        item,
        mastery=max(DECAY_FLOOR_TIER, item.mastery - steps),
        last_decay_date=today,
    )
