"""
Wire models for the GenMemo web API.

Pydantic DTOs matching the server's JSON, plus the conversions to and from
domain records. The remote progress scale is already the canonical 0-5 tier.
"""

from dataclasses import dataclass
from datetime import date
from typing import Annotated, Any

from pydantic import BaseModel, ConfigDict, PlainValidator

from genmemo.application.ledger import parse_date
from genmemo.domain.constants import MIN_INTERVAL_DAYS
from genmemo.domain.errors import WireDecodeError
from genmemo.domain.models import LearnableItem, ProgressRecord
from genmemo.domain.tiers import clamp_tier


class WireModel(BaseModel):
    model_config = ConfigDict(extra="ignore")


class QuestionProgressData(WireModel):
    question_index: int
    score: int
    interval_days: float
    next_review_date: str
    streak: int
    correct_days: int
    last_correct_date: str | None = None

    @classmethod
    def from_record(cls, record: ProgressRecord) -> "QuestionProgressData":
        item = record.item
        return cls(
            question_index=record.item_key,
            score=item.mastery,
            interval_days=item.interval_days,
            next_review_date=item.next_review_due.isoformat(),
            streak=item.streak,
            correct_days=item.correct_days,
            last_correct_date=item.last_correct_date.isoformat()
            if item.last_correct_date
            else None,
        )

    def to_record(self, today: date) -> ProgressRecord:
        item = LearnableItem(
            mastery=clamp_tier(self.score),
            interval_days=max(MIN_INTERVAL_DAYS, self.interval_days),
            next_review_due=parse_date(self.next_review_date) or today,
            streak=max(0, self.streak),
            correct_days=max(0, self.correct_days),
            last_correct_date=parse_date(self.last_correct_date),
        )
        return ProgressRecord(item_key=self.question_index, item=item)


class SyncResponse(WireModel):
    success: bool | None = None
    synced_count: int | None = None
    error: str | None = None


class QuestionProgressResponse(WireModel):
    package_uuid: str | None = None
    progress: list[QuestionProgressData] = []
    last_sync: str | None = None
    error: str | None = None


# ---------- correct_answer tagged variant ----------


@dataclass(frozen=True)
class BooleanAnswer:
    value: bool

    def as_string(self) -> str:
        return "true" if self.value else "false"


@dataclass(frozen=True)
class StringAnswer:
    value: str

    def as_string(self) -> str:
        return self.value


CorrectAnswer = BooleanAnswer | StringAnswer


def decode_correct_answer(value: Any) -> CorrectAnswer:
    """
    Decode a `correct_answer` field that is either a boolean or a string.

    Rule: attempt boolean (JSON true/false, or the strings "true"/"false"),
    otherwise take the primitive's text; anything else is rejected.

    Raises:
        WireDecodeError: value is null, an object or an array.
    """
    if isinstance(value, (BooleanAnswer, StringAnswer)):
        return value
    if isinstance(value, bool):
        return BooleanAnswer(value)
    if isinstance(value, str):
        if value in ("true", "false"):
            return BooleanAnswer(value == "true")
        return StringAnswer(value)
    if isinstance(value, (int, float)):
        return StringAnswer(str(value))
    raise WireDecodeError(f"Expected boolean or string for correct_answer, got {value!r}")


def encode_correct_answer(answer: CorrectAnswer) -> bool | str:
    return answer.value


def _validate_correct_answer(value: Any) -> CorrectAnswer | None:
    if value is None:
        return None
    try:
        return decode_correct_answer(value)
    except WireDecodeError as e:
        # pydantic turns ValueError into a ValidationError
        raise ValueError(str(e)) from e


class AnswerKey(WireModel):
    """The answer part of a package question; question payloads stay opaque."""

    mode: str
    correct_answer: Annotated[CorrectAnswer | None, PlainValidator(_validate_correct_answer)] = None
    accept_also: list[str] | None = None

    def accepted_answers(self) -> list[str]:
        answers = [self.correct_answer.as_string()] if self.correct_answer else []
        return answers + list(self.accept_also or [])
