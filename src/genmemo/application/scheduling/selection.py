"""
Selection policy for review sessions.

Builds an ordered list of items to present by:
1. Sorting candidates by (mastery ascending, due date ascending)
2. Optionally splitting them into priority groups (due, weak, rest)
3. Drawing without replacement, weighted toward the front of each group

Read-only: the pool is never mutated.
"""

import logging
import random
from collections.abc import Sequence
from datetime import date

from genmemo.domain.constants import WEAK_TIER
from genmemo.domain.models import ProgressRecord

logger = logging.getLogger(__name__)


def review_order_key(record: ProgressRecord) -> tuple[int, date]:
    return (record.item.mastery, record.item.next_review_due)


def select_for_review(
    pool: Sequence[ProgressRecord],
    count: int,
    rng: random.Random | None = None,
    today: date | None = None,
) -> list[ProgressRecord]:
    """
    Choose up to `count` records from `pool` for a review session.

    Args:
        pool: Candidates, already filtered by the caller (collection, type).
        count: Number of records wanted. Zero or negative selects nothing.
        rng: Source of randomness; pass a seeded Random for reproducible order.
        today: When given, records due on or before this date are drawn first,
            then weak records (tier below WEAK_TIER), then the rest.

    Returns:
        min(count, len(pool)) distinct records from the pool, in presentation order.
    """
    if count <= 0 or not pool:
        return []

    rng = rng or random.Random()
    ordered = sorted(pool, key=review_order_key)

    if today is None:
        groups = [ordered]
    else:
        due = [r for r in ordered if r.item.is_due(today)]
        weak = [r for r in ordered if not r.item.is_due(today) and r.item.mastery < WEAK_TIER]
        rest = [r for r in ordered if not r.item.is_due(today) and r.item.mastery >= WEAK_TIER]
        groups = [due, weak, rest]

    selected: list[ProgressRecord] = []
    for group in groups:
        while len(selected) < count and group:
            selected.append(group.pop(_weighted_front_index(len(group), rng)))
        if len(selected) >= count:
            break

    logger.debug(f"[select] {len(selected)}/{len(pool)} records selected (requested {count})")
    return selected


def _weighted_front_index(size: int, rng: random.Random) -> int:
    """
    Pick an index in [0, size) with weight size - index.

    The first position is `size` times as likely as the last, so weak items
    lead most sessions without always appearing in the same order.
    """
    if size == 1:
        return 0

    total = size * (size + 1) // 2
    target = rng.random() * total
    for index in range(size):
        target -= size - index
        if target < 0:
            return index
    return size - 1
