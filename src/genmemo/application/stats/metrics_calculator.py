"""
Metrics calculator for per-item review statistics.

This is a pure computation module with no I/O.
"""

from dataclasses import dataclass
from datetime import date

from genmemo.domain.constants import DAYS_FOR_MASTERY, MAX_TIER
from genmemo.domain.models import ItemKey, ProgressRecord
from genmemo.domain.tiers import percent_from_tier


@dataclass
class ItemStats:
    """
    Display statistics for one item.
    """

    item_key: ItemKey
    mastery: int
    percent: int  # mastery on the 0-100 display scale
    streak: int
    correct_days: int

    # Computed metrics
    is_due: bool
    is_mastered: bool
    days_until_review: int  # 0 when due
    days_overdue: int  # 0 unless strictly overdue


@dataclass
class CollectionStats:
    total: int
    due: int
    mastered: int
    average_mastery: float | None


class MetricsCalculator:
    """
    Computes derived metrics from ledger records.

    Stateless and side-effect free.
    """

    def __init__(self, max_tier: int = MAX_TIER, days_for_mastery: int = DAYS_FOR_MASTERY):
        self.max_tier = max_tier
        self.days_for_mastery = days_for_mastery

    def enrich(self, record: ProgressRecord, today: date) -> ItemStats:
        item = record.item
        delta = (item.next_review_due - today).days

        return ItemStats(
            item_key=record.item_key,
            mastery=item.mastery,
            percent=percent_from_tier(item.mastery),
            streak=item.streak,
            correct_days=item.correct_days,
            is_due=item.is_due(today),
            is_mastered=self.is_mastered(record),
            days_until_review=max(0, delta),
            days_overdue=max(0, -delta),
        )

    def is_mastered(self, record: ProgressRecord) -> bool:
        """Top tier reached on at least `days_for_mastery` distinct days."""
        item = record.item
        return item.mastery >= self.max_tier and item.correct_days >= self.days_for_mastery

    def summarize(self, records: list[ProgressRecord], today: date) -> CollectionStats:
        if not records:
            return CollectionStats(total=0, due=0, mastered=0, average_mastery=None)

        return CollectionStats(
            total=len(records),
            due=sum(1 for r in records if r.item.is_due(today)),
            mastered=sum(1 for r in records if self.is_mastered(r)),
            average_mastery=sum(r.item.mastery for r in records) / len(records),
        )
