from datetime import timedelta

import pytest

from genmemo.application.stats.metrics_calculator import MetricsCalculator
from genmemo.domain.models import LearnableItem, ProgressRecord


@pytest.fixture
def calculator():
    return MetricsCalculator()


def _record(key, **kwargs):
    return ProgressRecord(item_key=key, item=LearnableItem(**kwargs))


def test_enrich_future_item(calculator, today):
    stats = calculator.enrich(
        _record(1, mastery=3, streak=2, next_review_due=today + timedelta(days=5)), today
    )
    assert stats.percent == 60
    assert stats.days_until_review == 5
    assert stats.days_overdue == 0
    assert not stats.is_due


def test_enrich_overdue_item(calculator, today):
    stats = calculator.enrich(_record(2, next_review_due=today - timedelta(days=3)), today)
    assert stats.is_due
    assert stats.days_until_review == 0
    assert stats.days_overdue == 3


def test_mastered_needs_top_tier_and_enough_days(calculator, today):
    assert calculator.is_mastered(_record(1, mastery=5, correct_days=10, next_review_due=today))
    assert not calculator.is_mastered(_record(1, mastery=5, correct_days=9, next_review_due=today))
    assert not calculator.is_mastered(_record(1, mastery=4, correct_days=30, next_review_due=today))


def test_custom_thresholds(today):
    calculator = MetricsCalculator(max_tier=3, days_for_mastery=2)
    assert calculator.is_mastered(_record(1, mastery=3, correct_days=2, next_review_due=today))


def test_summarize(calculator, today):
    records = [
        _record(1, mastery=5, correct_days=11, next_review_due=today + timedelta(days=30)),
        _record(2, mastery=0, next_review_due=today),
        _record(3, mastery=1, next_review_due=today - timedelta(days=1)),
    ]
    summary = calculator.summarize(records, today)
    assert summary.total == 3
    assert summary.due == 2
    assert summary.mastered == 1
    assert summary.average_mastery == pytest.approx(2.0)


def test_summarize_empty(calculator, today):
    summary = calculator.summarize([], today)
    assert summary.total == 0
    assert summary.average_mastery is None
