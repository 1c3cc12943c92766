"""
Enhanced SM-2 scheduling with session fatigue and memory stability.

The four-point SM-2 recurrence is modulated by two multipliers:

- fatigue f, from the current session: longer sessions and more time
  spent raise it, a run of correct answers lowers it, floored at 0.
- stability s, from the card's last five grades: 0.8 + (mean/5) * 0.2,
  or 1.0 for a card with no history.

Ease becomes clamp((ease + delta) * (1 - f), min_ease, 2.5) and grown
intervals become round(interval * ease * s * (1 - f)).
"""

import logging
from dataclasses import replace
from datetime import datetime

from retain.application.utils.common import (
    clamp,
    days_after,
    ensure_aware,
    round_half_up,
    utcnow,
    variance,
)
from retain.domain.constants import (
    BASE_SESSION_MINUTES,
    DEFAULT_FORECAST_REVIEWS,
    DIFFICULTY_QUALITY_WEIGHT,
    DIFFICULTY_VARIANCE_SCALE,
    DIFFICULTY_VARIANCE_WEIGHT,
    FIRST_INTERVAL,
    MAX_EASE,
    NEW_CARD_DIFFICULTY,
    RECENT_REVIEW_WINDOW,
    REVIEW_FATIGUE_CAP,
    REVIEW_FATIGUE_RATE,
    SECOND_INTERVAL,
    STABILITY_BASE,
    STABILITY_QUALITY_SCALE,
    STREAK_RELIEF_CAP,
    STREAK_RELIEF_RATE,
    TIME_FATIGUE_CAP,
    TIME_FATIGUE_RATE,
)
from retain.domain.models import Card, DeckSettings, Quality, ReviewRecord, SessionStats
from retain.domain.ports import Scheduler

from .sm2 import sm2_ease_delta
from .validation import clamp_interval, parse_quality, validate_card

logger = logging.getLogger(__name__)


def fatigue_factor(stats: SessionStats) -> float:
    review_fatigue = min(REVIEW_FATIGUE_CAP, stats.cards_reviewed * REVIEW_FATIGUE_RATE)
    time_fatigue = min(TIME_FATIGUE_CAP, stats.time_spent_seconds / 3600 * TIME_FATIGUE_RATE)
    relief = min(STREAK_RELIEF_CAP, stats.consecutive_correct * STREAK_RELIEF_RATE)
    return max(0.0, review_fatigue + time_fatigue - relief)


def stability_factor(card: Card, window: int = RECENT_REVIEW_WINDOW) -> float:
    recent = card.recent_reviews(window)
    if not recent:
        return 1.0

    # Grades are on the 0-3 scale but divided by 5, so s stays below 0.92.
    average = sum(r.quality for r in recent) / len(recent)
    return STABILITY_BASE + (average / STABILITY_QUALITY_SCALE) * (1 - STABILITY_BASE)


class EnhancedScheduler(Scheduler):
    """
    SM-2 modulated by session fatigue and history stability.

    Used when the caller tracks session statistics. A missing snapshot is
    treated as a fresh session (no fatigue).
    """

    name = "SM2-enhanced"

    def __init__(self, settings: DeckSettings | None = None, window: int = RECENT_REVIEW_WINDOW):
        self.settings = settings or DeckSettings()
        self.window = window

    def is_correct(self, quality: object) -> bool:
        return parse_quality(quality).is_correct

    def next_ease(self, ease: float, quality: Quality, fatigue: float) -> float:
        raw = ease + sm2_ease_delta(int(quality), Quality.EASY)
        return clamp(raw * (1 - fatigue), self.settings.min_ease, MAX_EASE)

    def next_interval(self, card: Card, ease: float, stability: float, fatigue: float) -> int:
        if card.repetitions == 0:
            return FIRST_INTERVAL
        if card.repetitions == 1:
            return SECOND_INTERVAL

        grown = card.interval * ease * stability * (1 - fatigue) * self.settings.interval_modifier
        # A heavily fatigued, unstable card can round down to 0. Still move
        # it at least one day ahead rather than making it due immediately.
        return max(FIRST_INTERVAL, round_half_up(grown))

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
        stats = session_stats or SessionStats()
        moment = ensure_aware(now) if now else utcnow()

        fatigue = fatigue_factor(stats)
        stability = stability_factor(card, self.window)
        ease = self.next_ease(card.ease, grade, fatigue)
        interval = clamp_interval(self.next_interval(card, ease, stability, fatigue), self.settings)

        response_time = None
        if stats.cards_reviewed > 0:
            response_time = stats.time_spent_seconds / stats.cards_reviewed

        record = ReviewRecord(
            date=moment,
            quality=int(grade),
            response_time=response_time,
            fatigue_factor=fatigue,
            stability_factor=stability,
        )
        updated = replace(
            card,
            interval=interval,
            ease=ease,
            repetitions=card.repetitions + 1,
            next_review=days_after(moment, interval),
            last_reviewed=moment,
            review_history=card.review_history + (record,),
        )

        logger.debug(
            f"[{self.name}] {card.id}: q={grade.name} f={fatigue:.2f} s={stability:.2f} "
            f"interval {card.interval} -> {interval}, ease {card.ease:.2f} -> {ease:.2f}"
        )
        return replace(updated, difficulty=self.difficulty_of(updated))

    def difficulty_of(self, card: Card) -> float:
        """
        Blend of recent grade quality and response-time variance, in [0, 1].
        """
        recent = card.recent_reviews(self.window)
        if not recent:
            return NEW_CARD_DIFFICULTY

        average = sum(r.quality for r in recent) / len(recent)
        times = [r.response_time for r in recent if r.response_time is not None]
        spread = variance(times) if len(times) >= 2 else 0.0

        score = (1 - average / STABILITY_QUALITY_SCALE) * DIFFICULTY_QUALITY_WEIGHT + (
            spread / DIFFICULTY_VARIANCE_SCALE
        ) * DIFFICULTY_VARIANCE_WEIGHT
        return clamp(score, 0.0, 1.0)

    def projected_schedule(
        self,
        card: Card,
        count: int = DEFAULT_FORECAST_REVIEWS,
        now: datetime | None = None,
    ) -> list[datetime]:
        """
        Forecast the next `count` review dates assuming the ease never changes.

        Read-only: the card is not advanced.
        """
        moment = ensure_aware(now) if now else utcnow()
        interval = card.interval
        schedule = []
        for _ in range(count):
            moment = days_after(moment, interval)
            schedule.append(moment)
            interval = round_half_up(interval * card.ease)
        return schedule

    def recommended_session_minutes(self, cards: list[Card]) -> int:
        """Base session of 20 minutes, stretched by mean difficulty."""
        if not cards:
            return BASE_SESSION_MINUTES

        mean = sum(self.difficulty_of(c) for c in cards) / len(cards)
        return round_half_up(BASE_SESSION_MINUTES * (1 + mean))
