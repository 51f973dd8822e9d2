from datetime import date, timedelta

import pytest

from genmemo.application.ledger import ProgressLedger, decode_item, encode_item
from genmemo.domain.constants import PROGRESS_NAMESPACE
from genmemo.domain.errors import LedgerDecodeError
from genmemo.domain.models import LearnableItem


def test_get_missing_returns_default(ledger, today):
    item = ledger.get("pkg", 3)
    assert item == LearnableItem.new(today)
    assert item.mastery == 0
    assert item.interval_days == 1.0
    assert item.next_review_due == today


def test_put_get_roundtrip(ledger, today):
    item = LearnableItem(
        mastery=3,
        interval_days=7.0,
        next_review_due=today + timedelta(days=7),
        streak=2,
        correct_days=5,
        last_correct_date=today,
    )
    ledger.put("pkg", 1, item)
    assert ledger.get("pkg", 1) == item
    assert ledger.has("pkg", 1)
    assert not ledger.has("other", 1)


def test_legacy_percent_record_maps_to_tier(today):
    item = decode_item({"scale": "percent", "score": 65, "next_review_due": "2024-01-20"}, today)
    assert item.mastery == 3
    assert item.next_review_due == date(2024, 1, 20)


def test_corrupt_due_date_means_due_today(today):
    item = decode_item({"mastery": 2, "next_review_due": "not-a-date"}, today)
    assert item.next_review_due == today
    assert item.mastery == 2


def test_out_of_range_values_are_clamped(today):
    item = decode_item(
        {"mastery": 12, "interval_days": 0, "streak": -3, "correct_days": -1}, today
    )
    assert item.mastery == 5
    assert item.interval_days == 1.0
    assert item.streak == 0
    assert item.correct_days == 0


def test_decode_rejects_garbage(today):
    with pytest.raises(LedgerDecodeError):
        decode_item(["not", "a", "mapping"], today)
    with pytest.raises(LedgerDecodeError):
        decode_item({"mastery": "lots"}, today)


def test_unreadable_row_falls_back_to_default(store, ledger, today):
    store.put((PROGRESS_NAMESPACE, "pkg", 9), {"mastery": "??"})
    assert ledger.get("pkg", 9) == LearnableItem.new(today)


def test_encode_is_plain_json_types(today):
    encoded = encode_item(LearnableItem.new(today))
    assert encoded["next_review_due"] == today.isoformat()
    assert encoded["last_correct_date"] is None


def test_put_many_and_items_for(ledger, today):
    items = {k: LearnableItem(mastery=k, next_review_due=today) for k in range(3)}
    ledger.put_many("pkg", items)
    ledger.put_many("pkg", {})
    assert ledger.items_for("pkg") == items


def test_pending_set_per_collection(ledger):
    ledger.mark_dirty("a", 1)
    ledger.mark_dirty("a", 2)
    ledger.mark_dirty("a", 2)
    ledger.mark_dirty("b", 1)

    assert ledger.all_pending_for("a") == frozenset({1, 2})
    assert ledger.all_pending_for("b") == frozenset({1})
    assert ledger.all_pending_for("c") == frozenset()


def test_clear_dirty_removes_exactly_given_keys(ledger):
    for key in (1, 2, 3):
        ledger.mark_dirty("pkg", key)

    ledger.clear_dirty("pkg", [1, 3, 99])

    assert ledger.all_pending_for("pkg") == frozenset({2})


def test_discard_and_drop_collection(ledger, today):
    ledger.put_many("pkg", {1: LearnableItem.new(today), 2: LearnableItem.new(today)})
    ledger.mark_dirty("pkg", 1)
    ledger.mark_dirty("pkg", 2)

    ledger.discard("pkg", 1)
    assert not ledger.has("pkg", 1)
    assert ledger.all_pending_for("pkg") == frozenset({2})

    assert ledger.drop_collection("pkg") == 1
    assert ledger.items_for("pkg") == {}
    assert ledger.all_pending_for("pkg") == frozenset()


def test_malformed_pending_member_is_ignored(store, ledger):
    store.set_add("pending_sync:pkg", ["4", "oops"])
    assert ledger.all_pending_for("pkg") == frozenset({4})


def test_clock_is_consulted_per_call(store):
    days = iter([date(2024, 1, 1), date(2024, 1, 2)])
    ledger = ProgressLedger(store, clock=lambda: next(days))
    assert ledger.get("pkg", 1).next_review_due == date(2024, 1, 1)
    assert ledger.get("pkg", 1).next_review_due == date(2024, 1, 2)


def test_find_is_strict(store, ledger, today):
    assert ledger.find("pkg", 1) is None

    store.put((PROGRESS_NAMESPACE, "pkg", 2), {"mastery": "??"})
    assert ledger.find("pkg", 2) is None

    item = LearnableItem(mastery=2, next_review_due=today)
    ledger.put("pkg", 3, item)
    assert ledger.find("pkg", 3) == item
