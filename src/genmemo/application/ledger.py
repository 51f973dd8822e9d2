"""
Progress ledger: per-item state keyed by (collection_id, item_key) plus the
per-collection pending-change set, backed by a RecordStore.
"""

import logging
from collections.abc import Callable, Iterable, Mapping
from datetime import date
from typing import Any

from genmemo.domain.constants import MIN_INTERVAL_DAYS, PENDING_NAMESPACE, PROGRESS_NAMESPACE
from genmemo.domain.errors import LedgerDecodeError
from genmemo.domain.interfaces import RecordStore
from genmemo.domain.models import ItemKey, LearnableItem
from genmemo.domain.tiers import clamp_tier, tier_from_percent

logger = logging.getLogger(__name__)


def encode_item(item: LearnableItem) -> dict[str, Any]:
    return {
        "mastery": item.mastery,
        "interval_days": item.interval_days,
        "next_review_due": item.next_review_due.isoformat(),
        "streak": item.streak,
        "correct_days": item.correct_days,
        "last_correct_date": _iso_or_none(item.last_correct_date),
        "last_decay_date": _iso_or_none(item.last_decay_date),
    }


def decode_item(record: Any, today: date) -> LearnableItem:
    """
    Decode a stored record.

    Malformed dates fall back to safe values (an unparseable due date means
    "due today"), negative counters are clamped to zero. Records written on the
    legacy percent scale (``"scale": "percent"``) are mapped to tiers.

    Raises:
        LedgerDecodeError: The record is not a mapping or a numeric field is unusable.
    """
    if not isinstance(record, Mapping):
        raise LedgerDecodeError(f"expected a mapping, got {type(record).__name__}")

    try:
        if record.get("scale") == "percent":
            mastery = tier_from_percent(int(record.get("score", 0)))
        else:
            mastery = clamp_tier(int(record.get("mastery", 0)))
        interval = max(MIN_INTERVAL_DAYS, float(record.get("interval_days", MIN_INTERVAL_DAYS)))
        streak = max(0, int(record.get("streak", 0)))
        correct_days = max(0, int(record.get("correct_days", 0)))
    except (TypeError, ValueError) as e:
        raise LedgerDecodeError(str(e)) from e

    return LearnableItem(
        mastery=mastery,
        interval_days=interval,
        next_review_due=parse_date(record.get("next_review_due")) or today,
        streak=streak,
        correct_days=correct_days,
        last_correct_date=parse_date(record.get("last_correct_date")),
        last_decay_date=parse_date(record.get("last_decay_date")),
    )


def parse_date(value: Any) -> date | None:
    if isinstance(value, date):
        return value
    if not isinstance(value, str) or not value:
        return None
    try:
        return date.fromisoformat(value)
    except ValueError:
        return None


def _iso_or_none(value: date | None) -> str | None:
    return value.isoformat() if value else None


class ProgressLedger:
    """
    Durable progress state for syncable collections.

    Depends on the RecordStore abstraction; the store decides how records
    reach disk.
    """

    def __init__(self, store: RecordStore, clock: Callable[[], date] = date.today):
        """
        Args:
            store: Record store backing the ledger.
            clock: Returns "today"; injected so tests can pin the date.
        """
        self._store = store
        self._clock = clock

    @property
    def store(self) -> RecordStore:
        return self._store

    def get(self, collection_id: str, item_key: ItemKey) -> LearnableItem:
        """Stored state, or a never-reviewed default when absent or unreadable."""
        item = self.find(collection_id, item_key)
        if item is None:
            return LearnableItem.new(self._clock())
        return item

    def find(self, collection_id: str, item_key: ItemKey) -> LearnableItem | None:
        """Stored state, or None when the row is absent or unreadable."""
        record = self._store.get((PROGRESS_NAMESPACE, collection_id, item_key))
        if record is None:
            return None
        try:
            return decode_item(record, self._clock())
        except LedgerDecodeError as e:
            logger.warning(f"[ledger] Unreadable record {collection_id}#{item_key}: {e}")
            return None

    def put(self, collection_id: str, item_key: ItemKey, item: LearnableItem) -> None:
        self._store.put((PROGRESS_NAMESPACE, collection_id, item_key), encode_item(item))

    def put_many(self, collection_id: str, items: Mapping[ItemKey, LearnableItem]) -> None:
        if not items:
            return
        self._store.put_many(
            {
                (PROGRESS_NAMESPACE, collection_id, key): encode_item(item)
                for key, item in items.items()
            }
        )

    def items_for(self, collection_id: str) -> dict[ItemKey, LearnableItem]:
        return {
            key: self.get(collection_id, key)
            for key in self._store.keys(PROGRESS_NAMESPACE, collection_id)
        }

    def has(self, collection_id: str, item_key: ItemKey) -> bool:
        return self._store.get((PROGRESS_NAMESPACE, collection_id, item_key)) is not None

    def discard(self, collection_id: str, item_key: ItemKey) -> None:
        """Forget an item: its ledger row and its pending marker."""
        self._store.delete((PROGRESS_NAMESPACE, collection_id, item_key))
        self._store.set_remove(_pending_set(collection_id), [str(item_key)])

    def drop_collection(self, collection_id: str) -> int:
        keys = self._store.keys(PROGRESS_NAMESPACE, collection_id)
        for key in keys:
            self._store.delete((PROGRESS_NAMESPACE, collection_id, key))
        self._store.set_clear(_pending_set(collection_id))
        logger.info(f"[ledger] Dropped {len(keys)} rows for collection {collection_id}")
        return len(keys)

    # ---------- Pending change set ----------

    def all_pending_for(self, collection_id: str) -> frozenset[ItemKey]:
        keys = set()
        for member in self._store.set_members(_pending_set(collection_id)):
            try:
                keys.add(int(member))
            except ValueError:
                logger.warning(f"[ledger] Ignoring malformed pending key {member!r}")
        return frozenset(keys)

    def mark_dirty(self, collection_id: str, item_key: ItemKey) -> None:
        self._store.set_add(_pending_set(collection_id), [str(item_key)])

    def clear_dirty(self, collection_id: str, keys: Iterable[ItemKey]) -> None:
        """Remove exactly `keys`; markers added for other keys are preserved."""
        self._store.set_remove(_pending_set(collection_id), [str(k) for k in keys])


def _pending_set(collection_id: str) -> str:
    return f"{PENDING_NAMESPACE}:{collection_id}"
