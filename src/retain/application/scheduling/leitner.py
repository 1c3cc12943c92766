"""
Leitner box scheduling.

Cards move up one box on a correct answer and down one box otherwise,
bounded to boxes 1-5. Box n is reviewed again after 2^(n-1) days.
A deck max_interval caps both the box and the wait. Ease is passed
through untouched.
"""

import logging
import math
from dataclasses import replace
from datetime import datetime

from retain.application.utils.common import days_after, ensure_aware, utcnow
from retain.domain.constants import LEITNER_MAX_BOX, LEITNER_MIN_BOX, LEITNER_PASS_THRESHOLD
from retain.domain.models import Card, DeckSettings, Quality, ReviewRecord, SessionStats
from retain.domain.ports import Scheduler

from .validation import clamp_interval, parse_performance, validate_card

logger = logging.getLogger(__name__)


def current_box(card: Card) -> int:
    """The card's box, preferring the dedicated field over the legacy interval reading."""
    if card.box is not None:
        return card.box
    return math.floor(card.interval)


def days_for_box(box: int) -> int:
    """Box 1 -> 1 day, 2 -> 2, 3 -> 4, 4 -> 8, 5 -> 16."""
    return 2 ** (box - 1)


class LeitnerScheduler(Scheduler):
    """
    Five-box Leitner system.

    Accepts a `Quality` (normalized through `Quality.performance`) or a
    raw performance in [0, 1]. Performance >= 0.8 counts as correct.
    """

    name = "Leitner"

    def __init__(self, settings: DeckSettings | None = None, max_box: int = LEITNER_MAX_BOX):
        self.settings = settings or DeckSettings()
        self.max_box = max_box

    def is_correct(self, quality: object) -> bool:
        return parse_performance(quality) >= LEITNER_PASS_THRESHOLD

    def next_box(self, box: int, correct: bool) -> int:
        if correct:
            return min(box + 1, self.max_box)
        return max(box - 1, LEITNER_MIN_BOX)

    def calculate_next_review(
        self,
        card: Card,
        quality: object,
        session_stats: SessionStats | None = None,
        *,
        now: datetime | None = None,
    ) -> Card:
        performance = parse_performance(quality)
        validate_card(card)
        moment = ensure_aware(now) if now else utcnow()

        box = current_box(card)
        new_box = clamp_interval(
            self.next_box(box, performance >= LEITNER_PASS_THRESHOLD), self.settings
        )
        wait_days = clamp_interval(days_for_box(new_box), self.settings)

        if isinstance(quality, Quality):
            recorded = int(quality)
        else:
            recorded = int(Quality.from_performance(performance))

        logger.debug(
            f"[{self.name}] {card.id}: performance={performance:.2f} box {box} -> {new_box} "
            f"(+{wait_days}d)"
        )
        return replace(
            card,
            interval=new_box,
            box=new_box,
            repetitions=card.repetitions + 1,
            next_review=days_after(moment, wait_days),
            last_reviewed=moment,
            review_history=card.review_history + (ReviewRecord(date=moment, quality=recorded),),
            difficulty=performance * 5,
        )
