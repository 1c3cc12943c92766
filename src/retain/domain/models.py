"""
Domain models for spaced-repetition scheduling.

These are pure data structures with no I/O or external dependencies.
Every scheduler call takes one of these values and returns a new one;
nothing here is mutated in place.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum, IntEnum

from .constants import (
    DEFAULT_EASE,
    DEFAULT_INTERVAL_MODIFIER,
    DEFAULT_MAX_INTERVAL,
    DEFAULT_NEW_CARDS_PER_DAY,
    DEFAULT_REVIEW_CARDS_PER_DAY,
    MAX_EASE,
    MIN_EASE,
)


class Quality(IntEnum):
    """Four-point recall grade shared by the SM-2, Leitner and enhanced schedulers."""

    AGAIN = 0
    HARD = 1
    GOOD = 2
    EASY = 3

    @property
    def is_correct(self) -> bool:
        return self >= Quality.GOOD

    @property
    def performance(self) -> float:
        """
        Normalized recall performance in [0, 1], as consumed by Leitner.

        GOOD maps onto the Leitner pass threshold so that "correct" means
        the same thing on both scales.
        """
        return _PERFORMANCE[self]

    @classmethod
    def from_performance(cls, performance: float) -> "Quality":
        """Highest grade whose normalized performance does not exceed `performance`."""
        best = cls.AGAIN
        for grade in cls:
            if _PERFORMANCE[grade] <= performance:
                best = grade
        return best


_PERFORMANCE = {
    Quality.AGAIN: 0.0,
    Quality.HARD: 0.5,
    Quality.GOOD: 0.8,
    Quality.EASY: 1.0,
}


class FivePointGrade(IntEnum):
    """
    Classic SuperMemo 0-5 grade.

    Only the five-point SM-2 strategy accepts it. It is not numerically
    comparable to `Quality` and is never converted to or from it.
    """

    BLACKOUT = 0
    INCORRECT = 1
    INCORRECT_EASY_RECALL = 2
    CORRECT_DIFFICULT = 3
    CORRECT_HESITANT = 4
    PERFECT = 5


def _as_utc(moment: datetime | None) -> datetime | None:
    if moment is not None and moment.tzinfo is None:
        return moment.replace(tzinfo=timezone.utc)
    return moment

class Algorithm(str, Enum):
    """Scheduling strategy selector stored on a deck."""

    SUPER_MEMO_2 = "superMemo2"
    SUPER_MEMO_2_FIVE_POINT = "superMemo2FivePoint"
    LEITNER = "leitner"


@dataclass(frozen=True)
class ReviewRecord:
    """
    A single entry in a card's review history.

    Attributes:
        date: When the review happened.
        quality: Grade given, on the scale of the scheduler that recorded it.
        response_time: Average seconds per card in the session (enhanced only).
        fatigue_factor: Session fatigue applied to this review (enhanced only).
        stability_factor: History stability applied to this review (enhanced only).
    """

    date: datetime
    quality: int
    response_time: float | None = None
    fatigue_factor: float | None = None
    stability_factor: float | None = None

    def __post_init__(self):
        object.__setattr__(self, "date", _as_utc(self.date))


@dataclass(frozen=True)
class Card:
    """
    The unit of learning material and scheduling state.

    `interval` is days under SM-2 strategies. Leitner also writes the box
    number into it; `box` carries that number separately so the two
    readings can be told apart.
    """

    id: str
    front: str = ""
    back: str = ""
    interval: int = 0
    ease: float = DEFAULT_EASE
    repetitions: int = 0
    next_review: datetime | None = None
    last_reviewed: datetime | None = None
    review_history: tuple[ReviewRecord, ...] = ()
    difficulty: float = 0.0
    box: int | None = None

    def __post_init__(self):
        # Naive timestamps are read as UTC
        object.__setattr__(self, "next_review", _as_utc(self.next_review))
        object.__setattr__(self, "last_reviewed", _as_utc(self.last_reviewed))

    @property
    def is_new(self) -> bool:
        return self.next_review is None

    def recent_reviews(self, count: int) -> tuple[ReviewRecord, ...]:
        return self.review_history[-count:] if count > 0 else ()


@dataclass(frozen=True)
class SessionStats:
    """
    Snapshot of the current study session, supplied to the enhanced scheduler.

    Scoped to one session and never persisted.
    """

    cards_reviewed: int = 0
    time_spent_seconds: float = 0.0
    consecutive_correct: int = 0

    def __post_init__(self):
        if self.cards_reviewed < 0:
            raise ValueError(f"cards_reviewed must be >= 0, got {self.cards_reviewed}")
        if self.time_spent_seconds < 0:
            raise ValueError(
                f"time_spent_seconds must be >= 0, got {self.time_spent_seconds}"
            )
        if self.consecutive_correct < 0:
            raise ValueError(
                f"consecutive_correct must be >= 0, got {self.consecutive_correct}"
            )


@dataclass(frozen=True)
class DeckSettings:
    """
    Deck-level bounds on scheduler output.

    Attributes:
        min_ease: Lower ease clamp. The SM-2 upper clamp stays at 2.5.
        max_interval: Upper interval clamp in days, or None for no clamp.
        interval_modifier: Multiplier on grown SM-2 intervals.
        new_cards_per_day: Cap on never-reviewed cards in a study queue.
        review_cards_per_day: Cap on due reviews in a study queue.
    """

    min_ease: float = MIN_EASE
    max_interval: int | None = DEFAULT_MAX_INTERVAL
    interval_modifier: float = DEFAULT_INTERVAL_MODIFIER
    new_cards_per_day: int = DEFAULT_NEW_CARDS_PER_DAY
    review_cards_per_day: int = DEFAULT_REVIEW_CARDS_PER_DAY

    def __post_init__(self):
        if not 0 < self.min_ease <= MAX_EASE:
            raise ValueError(f"min_ease must be in (0, {MAX_EASE}], got {self.min_ease}")
        if self.max_interval is not None and self.max_interval < 1:
            raise ValueError(f"max_interval must be >= 1, got {self.max_interval}")
        if self.interval_modifier <= 0:
            raise ValueError(
                f"interval_modifier must be > 0, got {self.interval_modifier}"
            )
        if self.new_cards_per_day < 0 or self.review_cards_per_day < 0:
            raise ValueError("daily card limits must be >= 0")


@dataclass(frozen=True)
class Deck:
    """The deck fields the scheduler reads. Everything else belongs to the host."""

    algorithm: Algorithm = Algorithm.SUPER_MEMO_2
    settings: DeckSettings = field(default_factory=DeckSettings)
    name: str = "Default"


@dataclass(frozen=True)
class StudyStats:
    """Aggregate snapshot of a card collection."""

    total_cards: int = 0
    due_count: int = 0
    mean_ease: float = 0.0
    mean_interval: float = 0.0
    mean_difficulty: float = 0.0
    completion_rate: float = 0.0
