from datetime import date

import pytest
from pydantic import ValidationError

from genmemo.domain.errors import WireDecodeError
from genmemo.domain.models import LearnableItem, ProgressRecord
from genmemo.infrastructure.adapters.wire import (
    AnswerKey,
    BooleanAnswer,
    QuestionProgressData,
    QuestionProgressResponse,
    StringAnswer,
    decode_correct_answer,
    encode_correct_answer,
)


def test_progress_from_record():
    record = ProgressRecord(
        item_key=4,
        item=LearnableItem(
            mastery=3,
            interval_days=7.0,
            next_review_due=date(2024, 1, 19),
            streak=2,
            correct_days=5,
            last_correct_date=date(2024, 1, 12),
            last_decay_date=date(2024, 1, 10),
        ),
    )
    data = QuestionProgressData.from_record(record).model_dump()
    assert data == {
        "question_index": 4,
        "score": 3,
        "interval_days": 7.0,
        "next_review_date": "2024-01-19",
        "streak": 2,
        "correct_days": 5,
        "last_correct_date": "2024-01-12",
    }


def test_progress_to_record_sanitizes(today):
    data = QuestionProgressData(
        question_index=2,
        score=9,
        interval_days=0.0,
        next_review_date="garbage",
        streak=-1,
        correct_days=3,
    )
    record = data.to_record(today)
    assert record.item_key == 2
    assert record.item.mastery == 5
    assert record.item.interval_days == 1.0
    assert record.item.next_review_due == today
    assert record.item.streak == 0
    assert record.item.last_correct_date is None


def test_response_ignores_unknown_fields():
    response = QuestionProgressResponse.model_validate(
        {"package_uuid": "p", "progress": [], "extra": 1}
    )
    assert response.progress == []


@pytest.mark.parametrize(
    "raw,expected",
    [
        (True, BooleanAnswer(True)),
        (False, BooleanAnswer(False)),
        ("true", BooleanAnswer(True)),
        ("false", BooleanAnswer(False)),
        ("Paris", StringAnswer("Paris")),
        (42, StringAnswer("42")),
    ],
)
def test_decode_correct_answer(raw, expected):
    assert decode_correct_answer(raw) == expected


@pytest.mark.parametrize("raw", [None, {"a": 1}, [1, 2]])
def test_decode_correct_answer_rejects(raw):
    with pytest.raises(WireDecodeError):
        decode_correct_answer(raw)


def test_encode_correct_answer():
    assert encode_correct_answer(BooleanAnswer(True)) is True
    assert encode_correct_answer(StringAnswer("x")) == "x"


def test_answer_key_model():
    key = AnswerKey.model_validate(
        {"mode": "text", "correct_answer": "Rome", "accept_also": ["Roma"], "question": "?"}
    )
    assert key.correct_answer == StringAnswer("Rome")
    assert key.accepted_answers() == ["Rome", "Roma"]

    tf = AnswerKey.model_validate({"mode": "true_false", "correct_answer": True})
    assert tf.accepted_answers() == ["true"]

    assert AnswerKey.model_validate({"mode": "open"}).accepted_answers() == []


def test_answer_key_rejects_object():
    with pytest.raises(ValidationError):
        AnswerKey.model_validate({"mode": "text", "correct_answer": {"x": 1}})
