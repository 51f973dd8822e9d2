"""Collection catalog: which items belong to which collection."""

import logging
from collections.abc import Callable
from datetime import date

from genmemo.domain.constants import COLLECTION_NAMESPACE, MEMBERSHIP_NAMESPACE, UNCATEGORIZED
from genmemo.domain.interfaces import RecordStore
from genmemo.domain.models import CollectionKind, ItemKey, LearnableItem, ReviewCollection

from .ledger import ProgressLedger

logger = logging.getLogger(__name__)

# Collection descriptors are stored under a fixed item key.
_DESCRIPTOR_KEY = 0


class CollectionCatalog:
    def __init__(
        self,
        store: RecordStore,
        ledger: ProgressLedger,
        clock: Callable[[], date] = date.today,
    ):
        self._store = store
        self._ledger = ledger
        self._clock = clock

    def register(self, collection: ReviewCollection) -> None:
        self._store.put(
            (COLLECTION_NAMESPACE, collection.collection_id, _DESCRIPTOR_KEY),
            {"name": collection.name, "kind": collection.kind.value},
        )

    def get(self, collection_id: str) -> ReviewCollection | None:
        record = self._store.get((COLLECTION_NAMESPACE, collection_id, _DESCRIPTOR_KEY))
        if record is None:
            return None
        return ReviewCollection(
            collection_id=collection_id,
            name=record.get("name", collection_id),
            kind=CollectionKind(record.get("kind", CollectionKind.LOCAL.value)),
        )

    def members(self, collection_id: str) -> list[ItemKey]:
        return self._store.keys(MEMBERSHIP_NAMESPACE, collection_id)

    def add_item(self, collection_id: str, item_key: ItemKey) -> LearnableItem:
        """
        Add an item to a collection.

        New items start never-reviewed and due today. Re-adding an existing
        item keeps its progress.
        """
        self._store.put((MEMBERSHIP_NAMESPACE, collection_id, item_key), {})
        if self._ledger.has(collection_id, item_key):
            return self._ledger.get(collection_id, item_key)

        item = LearnableItem.new(self._clock())
        self._ledger.put(collection_id, item_key, item)
        return item

    def delete_item(self, collection_id: str, item_key: ItemKey) -> None:
        self._store.delete((MEMBERSHIP_NAMESPACE, collection_id, item_key))
        self._ledger.discard(collection_id, item_key)

    def delete_collection(self, collection_id: str) -> int:
        """
        Delete a collection.

        Local collections detach their items to the uncategorized collection,
        keeping progress. Remote packages discard their progress and pending
        markers. Returns the number of items affected.
        """
        collection = self.get(collection_id)
        kind = collection.kind if collection else CollectionKind.LOCAL
        keys = self.members(collection_id)

        if kind == CollectionKind.LOCAL and collection_id != UNCATEGORIZED:
            for key in keys:
                self._move(collection_id, UNCATEGORIZED, key)
            logger.info(f"[catalog] Detached {len(keys)} items from {collection_id}")
        else:
            for key in keys:
                self._store.delete((MEMBERSHIP_NAMESPACE, collection_id, key))
            self._ledger.drop_collection(collection_id)
            logger.info(f"[catalog] Removed package {collection_id} ({len(keys)} items)")

        self._store.delete((COLLECTION_NAMESPACE, collection_id, _DESCRIPTOR_KEY))
        return len(keys)

    def _move(self, source: str, target: str, item_key: ItemKey) -> None:
        item = self._ledger.get(source, item_key)
        self._store.put((MEMBERSHIP_NAMESPACE, target, item_key), {})
        self._ledger.put(target, item_key, item)
        self._store.delete((MEMBERSHIP_NAMESPACE, source, item_key))
        self._ledger.discard(source, item_key)
