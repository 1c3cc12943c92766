"""
SuperMemo-2 scheduling strategies.

Two SM-2 recurrences are provided as separate strategies because their
grade scales are not numerically equivalent:

- SuperMemo2Scheduler: four-point `Quality` (0-3), ease clamped to [min_ease, 2.5].
- SuperMemo2FivePointScheduler: classic 0-5 grade, ease floored at min_ease only.

Neither variant resets on a failed grade: repetitions always advance and
the interval keeps growing from the (lower) new ease.
"""

import logging
from dataclasses import replace
from datetime import datetime

from retain.application.metrics import MetricsCalculator
from retain.application.utils.common import clamp, days_after, ensure_aware, round_half_up, utcnow
from retain.domain.constants import FIRST_INTERVAL, MAX_EASE, SECOND_INTERVAL
from retain.domain.models import Card, DeckSettings, Quality, ReviewRecord, SessionStats
from retain.domain.ports import Scheduler

from .validation import clamp_interval, parse_five_point, parse_quality, validate_card

logger = logging.getLogger(__name__)


def sm2_ease_delta(grade: int, top: int) -> float:
    """SM-2 ease adjustment for `grade` on a scale whose best grade is `top`."""
    miss = top - grade
    return 0.1 - miss * (0.08 + miss * 0.02)


def sm2_interval(card: Card, ease: float, modifier: float = 1.0) -> int:
    """
    Next interval in days, branching on repetitions before the increment.
    """
    if card.repetitions == 0:
        return FIRST_INTERVAL
    if card.repetitions == 1:
        return SECOND_INTERVAL
    return max(FIRST_INTERVAL, round_half_up(card.interval * ease * modifier))


class SuperMemo2Scheduler(Scheduler):
    """
    Four-point SM-2.

    Ease update: ease + (0.1 - (3-q)(0.08 + (3-q)0.02)), clamped to
    [settings.min_ease, 2.5]. The upper bound does not follow any
    configured maximum.
    """

    name = "SM2"

    def __init__(
        self,
        settings: DeckSettings | None = None,
        calculator: MetricsCalculator | None = None,
    ):
        self.settings = settings or DeckSettings()
        self._calc = calculator or MetricsCalculator()

    def is_correct(self, quality: object) -> bool:
        return parse_quality(quality).is_correct

    def next_ease(self, ease: float, quality: Quality) -> float:
        raw = ease + sm2_ease_delta(int(quality), Quality.EASY)
        return clamp(raw, self.settings.min_ease, MAX_EASE)

    def calculate_next_review(
        self,
        card: Card,
        quality: object,
        session_stats: SessionStats | None = None,
        *,
        now: datetime | None = None,
    ) -> Card:
        grade = parse_quality(quality)
        validate_card(card)
        moment = ensure_aware(now) if now else utcnow()

        ease = self.next_ease(card.ease, grade)
        interval = clamp_interval(
            sm2_interval(card, ease, self.settings.interval_modifier), self.settings
        )

        updated = replace(
            card,
            interval=interval,
            ease=ease,
            repetitions=card.repetitions + 1,
            next_review=days_after(moment, interval),
            last_reviewed=moment,
            review_history=card.review_history + (ReviewRecord(date=moment, quality=int(grade)),),
        )
        updated = replace(updated, difficulty=self._calc.base_difficulty(updated))

        logger.debug(
            f"[{self.name}] {card.id}: q={grade.name} interval {card.interval} -> {interval}, "
            f"ease {card.ease:.2f} -> {ease:.2f}"
        )
        return updated


class SuperMemo2FivePointScheduler(Scheduler):
    """
    Classic 0-5 SM-2 ("SM2-5point").

    Ease update: ease + (0.1 - (5-p)(0.08 + (5-p)0.02)), floored at
    settings.min_ease with no upper clamp. `difficulty` stores the grade
    itself (0-5).
    """

    name = "SM2-5point"

    def __init__(self, settings: DeckSettings | None = None):
        self.settings = settings or DeckSettings()

    def is_correct(self, quality: object) -> bool:
        return parse_five_point(quality) >= 3

    def next_ease(self, ease: float, grade: int) -> float:
        return max(self.settings.min_ease, ease + sm2_ease_delta(grade, 5))

    def calculate_next_review(
        self,
        card: Card,
        quality: object,
        session_stats: SessionStats | None = None,
        *,
        now: datetime | None = None,
    ) -> Card:
        grade = parse_five_point(quality)
        validate_card(card)
        moment = ensure_aware(now) if now else utcnow()

        ease = self.next_ease(card.ease, int(grade))
        interval = clamp_interval(
            sm2_interval(card, ease, self.settings.interval_modifier), self.settings
        )

        logger.debug(
            f"[{self.name}] {card.id}: p={int(grade)} interval {card.interval} -> {interval}, "
            f"ease {card.ease:.2f} -> {ease:.2f}"
        )
        return replace(
            card,
            interval=interval,
            ease=ease,
            repetitions=card.repetitions + 1,
            next_review=days_after(moment, interval),
            last_reviewed=moment,
            review_history=card.review_history + (ReviewRecord(date=moment, quality=int(grade)),),
            difficulty=float(grade),
        )
