"""
Review service: application layer orchestrator for study sessions.

Coordinates the scheduling functions with the progress ledger: every answer
is computed in full by the mastery model, marked pending for the next upload,
then persisted with one write.
"""

import logging
import random
from collections.abc import Callable, Iterable
from datetime import date

from genmemo.domain.constants import DEFAULT_SESSION_SIZE
from genmemo.domain.models import ItemKey, LearnableItem, ProgressRecord

from .ledger import ProgressLedger
from .scheduling import apply_correct_answer, apply_decay, apply_wrong_answer, select_for_review
from .stats.metrics_calculator import CollectionStats, ItemStats, MetricsCalculator
from .utils.text import check_answer

logger = logging.getLogger(__name__)


class ReviewService:
    def __init__(
        self,
        ledger: ProgressLedger,
        clock: Callable[[], date] = date.today,
        rng: random.Random | None = None,
        calculator: MetricsCalculator | None = None,
    ):
        """
        Args:
            ledger: Progress ledger for the collections being studied.
            clock: Returns "today".
            rng: Randomness for session selection; seed it for reproducible sessions.
            calculator: Optional custom calculator; uses default if not provided.
        """
        self._ledger = ledger
        self._clock = clock
        self._rng = rng or random.Random()
        self._calc = calculator or MetricsCalculator()

    def process_answer(self, collection_id: str, item_key: ItemKey, correct: bool) -> LearnableItem:
        today = self._clock()
        current = self._ledger.get(collection_id, item_key)
        if correct:
            updated = apply_correct_answer(current, today)
        else:
            updated = apply_wrong_answer(current, today)

        # Marker before row: every stored change is pending even if a write fails.
        self._ledger.mark_dirty(collection_id, item_key)
        self._ledger.put(collection_id, item_key, updated)
        logger.debug(
            f"[review] {collection_id}#{item_key} correct={correct} "
            f"tier {current.mastery}->{updated.mastery} due={updated.next_review_due}"
        )
        return updated

    def submit_answer(
        self, collection_id: str, item_key: ItemKey, given: str, expected: str
    ) -> tuple[bool, LearnableItem]:
        """Check a typed answer and record the outcome."""
        correct = check_answer(given, expected)
        return correct, self.process_answer(collection_id, item_key, correct)

    def apply_decay_to_overdue(self, collection_id: str) -> int:
        """
        Decay every strictly overdue item in a collection.

        Decay is local bookkeeping: decayed items are not marked pending.
        Returns the number of items whose tier dropped.
        """
        today = self._clock()
        decayed: dict[ItemKey, LearnableItem] = {}
        for key, item in self._ledger.items_for(collection_id).items():
            if not item.is_overdue(today):
                continue
            after = apply_decay(item, today)
            if after != item:
                decayed[key] = after

        self._ledger.put_many(collection_id, decayed)
        if decayed:
            logger.info(f"[review] Decayed {len(decayed)} overdue items in {collection_id}")
        return len(decayed)

    def records(
        self, collection_id: str, keys: Iterable[ItemKey] | None = None
    ) -> list[ProgressRecord]:
        if keys is None:
            items = self._ledger.items_for(collection_id)
        else:
            items = {k: self._ledger.get(collection_id, k) for k in keys}
        return [ProgressRecord(item_key=k, item=v) for k, v in items.items()]

    def due_keys(self, collection_id: str, total_items: int | None = None) -> list[ItemKey]:
        """
        Keys due today or earlier.

        With `total_items`, keys are the question indices 0..total_items-1 of a
        package; indices never reviewed count as due.
        """
        today = self._clock()
        if total_items is None:
            keys: Iterable[ItemKey] = self._ledger.items_for(collection_id).keys()
        else:
            keys = range(total_items)
        return [k for k in keys if self._ledger.get(collection_id, k).is_due(today)]

    def count_due(self, collection_id: str, total_items: int | None = None) -> int:
        return len(self.due_keys(collection_id, total_items))

    def select_session(
        self,
        collection_id: str,
        count: int = DEFAULT_SESSION_SIZE,
        keys: Iterable[ItemKey] | None = None,
    ) -> list[ProgressRecord]:
        pool = self.records(collection_id, keys)
        return select_for_review(pool, count, rng=self._rng, today=self._clock())

    def item_stats(self, collection_id: str, item_key: ItemKey) -> ItemStats:
        record = ProgressRecord(item_key=item_key, item=self._ledger.get(collection_id, item_key))
        return self._calc.enrich(record, self._clock())

    def collection_stats(self, collection_id: str) -> CollectionStats:
        return self._calc.summarize(self.records(collection_id), self._clock())
