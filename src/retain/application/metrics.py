"""
Metrics calculator for deriving insights from a card's review history.

This is a pure computation module with no I/O.
"""

import math
from dataclasses import dataclass
from datetime import datetime

from retain.application.utils.common import ensure_aware, utcnow, variance
from retain.domain.constants import (
    CONSISTENCY_VARIANCE_SCALE,
    NEW_CARD_DIFFICULTY,
    RECENT_REVIEW_WINDOW,
    SECONDS_PER_DAY,
    STRENGTH_SCALE,
)
from retain.domain.models import Card, Quality


@dataclass
class CardMetrics:
    """
    Card state enriched with computed metrics.
    """

    card_id: str
    interval: int
    ease: float
    repetitions: int

    # Computed metrics
    difficulty: float  # 0 (easy) to 1 (hard), from recent grades
    consistency: float  # 1 when recent grades agree
    strength: float  # 0 to 1
    days_overdue: int | None  # Negative if not yet due, None if never scheduled


class MetricsCalculator:
    """
    Computes derived metrics from four-point Card review histories.

    Stateless and side-effect free.
    """

    def __init__(self, window: int = RECENT_REVIEW_WINDOW):
        self.window = window

    def enrich(self, card: Card, now: datetime | None = None) -> CardMetrics:
        """
        Enrich a card with computed metrics.
        """
        return CardMetrics(
            card_id=card.id,
            interval=card.interval,
            ease=card.ease,
            repetitions=card.repetitions,
            difficulty=self.base_difficulty(card),
            consistency=self.review_consistency(card),
            strength=self.card_strength(card),
            days_overdue=self._compute_days_overdue(card, now),
        )

    def base_difficulty(self, card: Card) -> float:
        """
        Difficulty from the mean of recent grades, normalized to [0, 1].

        New cards sit in the middle of the range.
        """
        recent = card.recent_reviews(self.window)
        if not recent:
            return NEW_CARD_DIFFICULTY

        average = sum(r.quality for r in recent) / len(recent)
        return 1 - average / Quality.EASY

    def review_consistency(self, card: Card) -> float:
        """
        How steady recent grades are: 1 for identical grades, falling with variance.
        """
        recent = card.recent_reviews(self.window)
        if len(recent) < 2:
            return 1.0

        spread = variance([float(r.quality) for r in recent])
        return max(0.0, 1 - spread / CONSISTENCY_VARIANCE_SCALE)

    def card_strength(self, card: Card) -> float:
        """
        Memory strength from interval and ease, discounted by inconsistency.
        """
        if not card.review_history or card.interval <= 0:
            return 0.0

        base = math.log(card.interval) * card.ease
        return min(1.0, (base / STRENGTH_SCALE) * self.review_consistency(card))

    def _compute_days_overdue(self, card: Card, now: datetime | None) -> int | None:
        """
        Whole days past the scheduled review (negative if not yet due).
        """
        if card.next_review is None:
            return None

        moment = ensure_aware(now) if now else utcnow()
        delta = moment - ensure_aware(card.next_review)
        return int(delta.total_seconds() / SECONDS_PER_DAY)
