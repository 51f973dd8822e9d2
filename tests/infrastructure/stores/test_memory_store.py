import threading

import pytest

from genmemo.infrastructure.stores import InMemoryRecordStore


def test_get_put_delete():
    store = InMemoryRecordStore()
    key = ("progress", "pkg", 1)
    assert store.get(key) is None

    store.put(key, {"mastery": 2})
    assert store.get(key) == {"mastery": 2}

    store.delete(key)
    assert store.get(key) is None
    store.delete(key)  # deleting a missing key is fine


def test_returned_records_are_copies():
    store = InMemoryRecordStore()
    value = {"mastery": 2}
    store.put(("progress", "pkg", 1), value)
    value["mastery"] = 5
    store.get(("progress", "pkg", 1))["mastery"] = 4
    assert store.get(("progress", "pkg", 1)) == {"mastery": 2}


def test_keys_filters_namespace_and_collection():
    store = InMemoryRecordStore()
    store.put_many(
        {
            ("progress", "a", 3): {},
            ("progress", "a", 1): {},
            ("progress", "b", 2): {},
            ("members", "a", 9): {},
        }
    )
    assert store.keys("progress", "a") == [1, 3]
    assert store.keys("members", "a") == [9]
    assert store.keys("progress", "zzz") == []


def test_set_operations():
    store = InMemoryRecordStore()
    store.set_add("s", ["1", "2"])
    store.set_add("s", ["2", "3"])
    assert store.set_members("s") == frozenset({"1", "2", "3"})

    store.set_remove("s", ["1", "9"])
    assert store.set_members("s") == frozenset({"2", "3"})

    store.set_clear("s")
    assert store.set_members("s") == frozenset()
    store.set_remove("missing", ["1"])


def test_concurrent_add_and_remove_do_not_lose_members():
    store = InMemoryRecordStore()
    store.set_add("s", [str(i) for i in range(0, 1000, 2)])

    def add_odd():
        for i in range(1, 1000, 2):
            store.set_add("s", [str(i)])

    def remove_even():
        for i in range(0, 1000, 2):
            store.set_remove("s", [str(i)])

    threads = [threading.Thread(target=add_odd), threading.Thread(target=remove_even)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert store.set_members("s") == frozenset(str(i) for i in range(1, 1000, 2))


class FailingStore(InMemoryRecordStore):
    """Store whose persistence step fails on demand."""

    def __init__(self):
        super().__init__()
        self.fail = False

    def _changed(self):
        if self.fail:
            raise OSError("disk full")


def test_failed_persist_rolls_back_every_mutation():
    store = FailingStore()
    store.put(("progress", "pkg", 1), {"mastery": 1})
    store.set_add("s", ["1"])
    store.fail = True

    for mutate in (
        lambda: store.put(("progress", "pkg", 1), {"mastery": 5}),
        lambda: store.put_many({("progress", "pkg", 2): {"mastery": 2}}),
        lambda: store.delete(("progress", "pkg", 1)),
        lambda: store.set_add("s", ["2"]),
        lambda: store.set_remove("s", ["1"]),
        lambda: store.set_clear("s"),
    ):
        with pytest.raises(OSError):
            mutate()
        assert store.get(("progress", "pkg", 1)) == {"mastery": 1}
        assert store.keys("progress", "pkg") == [1]
        assert store.set_members("s") == frozenset({"1"})
