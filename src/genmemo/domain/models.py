"""
Domain models for review scheduling and progress sync.

These are pure data structures with no I/O or external dependencies.
"""

from dataclasses import dataclass, field
from datetime import date
from enum import Enum

from genmemo.domain.constants import MIN_INTERVAL_DAYS, MIN_TIER

ItemKey = int


@dataclass(frozen=True)
class LearnableItem:
    """
    Memory strength of one learnable item.

    Attributes:
        mastery: Canonical mastery tier (0-5).
        interval_days: Days between reviews, always >= 1.
        next_review_due: Calendar date of the next scheduled review.
        streak: Consecutive correct answers.
        correct_days: Distinct calendar days with a correct answer.
        last_correct_date: Date of the most recent correct answer.
        last_decay_date: Date decay was last charged (local bookkeeping only).
    """

    next_review_due: date
    mastery: int = MIN_TIER
    interval_days: float = MIN_INTERVAL_DAYS
    streak: int = 0
    correct_days: int = 0
    last_correct_date: date | None = None
    last_decay_date: date | None = None

    @classmethod
    def new(cls, today: date) -> "LearnableItem":
        """A never-reviewed item, due today."""
        return cls(next_review_due=today)

    def is_due(self, today: date) -> bool:
        return self.next_review_due <= today

    def is_overdue(self, today: date) -> bool:
        return self.next_review_due < today


class CollectionKind(str, Enum):
    LOCAL = "local"  # user category, items live in a more durable local store
    REMOTE = "remote"  # installed package, progress syncs with the server


@dataclass(frozen=True)
class ReviewCollection:
    """A named group of items sharing a scheduling and sync scope."""

    collection_id: str
    name: str
    kind: CollectionKind = CollectionKind.LOCAL


@dataclass(frozen=True)
class ProgressRecord:
    """A ledger entry paired with its key, as exchanged with the remote authority."""

    item_key: ItemKey
    item: LearnableItem


# ---------- Sync results ----------


@dataclass(frozen=True)
class SyncResult:
    """Base class for the outcome of an upload or download."""


@dataclass(frozen=True)
class Success(SyncResult):
    count: int


@dataclass(frozen=True)
class Error(SyncResult):
    message: str


@dataclass(frozen=True)
class NotAuthenticated(SyncResult):
    pass


@dataclass(frozen=True)
class NothingToSync(SyncResult):
    pass


# ---------- Remote channel results ----------


class FailureKind(str, Enum):
    AUTH = "auth"
    TRANSPORT = "transport"
    SERVER = "server"


@dataclass(frozen=True)
class RemoteSuccess:
    """
    Successful remote call.

    For uploads `records` is empty and `count` is the server's synced count.
    For downloads `records` holds the authoritative progress.
    """

    count: int = 0
    records: list[ProgressRecord] = field(default_factory=list)


@dataclass(frozen=True)
class RemoteFailure:
    message: str
    kind: FailureKind = FailureKind.SERVER


RemoteResult = RemoteSuccess | RemoteFailure


# ---------- Sync state machine ----------


class SyncState(str, Enum):
    IDLE = "idle"
    UPLOADING = "uploading"
    DOWNLOADING = "downloading"
    ERROR = "error"


@dataclass(frozen=True)
class SyncStatus:
    state: SyncState = SyncState.IDLE
    error: str | None = None
