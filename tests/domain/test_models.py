from datetime import timedelta

from genmemo.domain.models import LearnableItem


def test_new_item_is_due_today(today):
    item = LearnableItem.new(today)
    assert item.mastery == 0
    assert item.interval_days == 1.0
    assert item.is_due(today)
    assert not item.is_overdue(today)


def test_overdue_is_strict(today):
    item = LearnableItem(next_review_due=today - timedelta(days=1))
    assert item.is_due(today)
    assert item.is_overdue(today)
    assert not item.is_due(today - timedelta(days=2))
