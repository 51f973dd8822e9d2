from datetime import timedelta

import pytest

from genmemo.application.catalog import CollectionCatalog
from genmemo.domain.constants import UNCATEGORIZED
from genmemo.domain.models import CollectionKind, LearnableItem, ReviewCollection


@pytest.fixture
def catalog(store, ledger, today):
    return CollectionCatalog(store, ledger, clock=lambda: today)


def test_register_and_get(catalog):
    catalog.register(ReviewCollection("pkg-1", "Biology", CollectionKind.REMOTE))
    collection = catalog.get("pkg-1")
    assert collection == ReviewCollection("pkg-1", "Biology", CollectionKind.REMOTE)
    assert catalog.get("missing") is None


def test_add_item_is_due_today(catalog, ledger, today):
    item = catalog.add_item("cat", 5)
    assert item == LearnableItem.new(today)
    assert ledger.get("cat", 5).is_due(today)
    assert catalog.members("cat") == [5]


def test_readd_keeps_progress(catalog, ledger, today):
    progressed = LearnableItem(mastery=4, next_review_due=today + timedelta(days=14))
    ledger.put("cat", 5, progressed)
    assert catalog.add_item("cat", 5) == progressed


def test_delete_item_discards_pending(catalog, ledger):
    catalog.add_item("cat", 1)
    ledger.mark_dirty("cat", 1)
    catalog.delete_item("cat", 1)
    assert catalog.members("cat") == []
    assert not ledger.has("cat", 1)
    assert ledger.all_pending_for("cat") == frozenset()


def test_delete_local_collection_detaches_items(catalog, ledger, today):
    catalog.register(ReviewCollection("cat", "Verbs"))
    catalog.add_item("cat", 1)
    progressed = LearnableItem(mastery=3, next_review_due=today + timedelta(days=7))
    ledger.put("cat", 1, progressed)

    assert catalog.delete_collection("cat") == 1

    assert catalog.get("cat") is None
    assert catalog.members("cat") == []
    assert catalog.members(UNCATEGORIZED) == [1]
    assert ledger.get(UNCATEGORIZED, 1) == progressed


def test_delete_remote_collection_drops_progress(catalog, ledger):
    catalog.register(ReviewCollection("pkg", "Chemistry", CollectionKind.REMOTE))
    for key in range(3):
        catalog.add_item("pkg", key)
        ledger.mark_dirty("pkg", key)

    assert catalog.delete_collection("pkg") == 3

    assert ledger.items_for("pkg") == {}
    assert ledger.all_pending_for("pkg") == frozenset()
    assert catalog.members(UNCATEGORIZED) == []
