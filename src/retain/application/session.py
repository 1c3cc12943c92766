"""
Study session orchestration.

Drives show card -> collect grade -> schedule -> hand back for persistence.
The session owns its SessionStats snapshot; nothing here is shared across
sessions, and persisting the updated cards is left to the caller.
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime

from retain.application.due_selector import build_study_queue, select_due
from retain.application.utils.common import utcnow
from retain.domain.models import Card, DeckSettings, SessionStats
from retain.domain.ports import Scheduler

logger = logging.getLogger(__name__)


@dataclass
class SessionSummary:
    cards_reviewed: int
    correct: int
    incorrect: int
    skipped: int
    time_spent_seconds: float

    @property
    def accuracy(self) -> float:
        """Percentage of answered cards graded correct; 0 before any answer."""
        if self.cards_reviewed == 0:
            return 0.0
        return self.correct / self.cards_reviewed * 100


class StudySession:
    """
    One pass over a deck's due cards.

    Args:
        cards: The deck's cards. The due queue is built once, at start.
        scheduler: Strategy used for every answer in this session.
        settings: Deck settings for daily limits.
        clock: Time source, injectable for tests.
        apply_limits: Cap the queue at the deck's daily limits.
    """

    def __init__(
        self,
        cards: list[Card],
        scheduler: Scheduler,
        settings: DeckSettings | None = None,
        clock: Callable[[], datetime] = utcnow,
        apply_limits: bool = True,
    ):
        self.scheduler = scheduler
        self._clock = clock
        self.started_at = clock()

        if apply_limits:
            self._queue = build_study_queue(cards, self.started_at, settings).ordered
        else:
            self._queue = select_due(cards, self.started_at)

        self._index = 0
        self._stats = SessionStats()
        self._correct = 0
        self._skipped = 0
        self.updated: list[Card] = []

        logger.info(f"Session started with {len(self._queue)} cards ({scheduler.name})")

    @property
    def current(self) -> Card | None:
        if self._index < len(self._queue):
            return self._queue[self._index]
        return None

    @property
    def remaining(self) -> int:
        return len(self._queue) - self._index

    @property
    def is_finished(self) -> bool:
        return self.current is None

    @property
    def stats(self) -> SessionStats:
        return self._stats

    def answer(self, quality: object, response_seconds: float = 0.0) -> Card:
        """
        Grade the current card and advance.

        Raises:
            InvalidQuality: The grade is rejected; the session does not advance.
            RuntimeError: No card is left to answer.
        """
        card = self.current
        if card is None:
            raise RuntimeError("No cards left in this session")

        correct = self.scheduler.is_correct(quality)
        snapshot = SessionStats(
            cards_reviewed=self._stats.cards_reviewed + 1,
            time_spent_seconds=self._stats.time_spent_seconds + response_seconds,
            consecutive_correct=self._stats.consecutive_correct + 1 if correct else 0,
        )
        updated = self.scheduler.calculate_next_review(
            card, quality, snapshot, now=self._clock()
        )

        self._stats = snapshot
        if correct:
            self._correct += 1
        self.updated.append(updated)
        self._index += 1
        return updated

    def skip(self) -> None:
        """Move past the current card without scheduling it."""
        if self.current is None:
            raise RuntimeError("No cards left in this session")
        self._skipped += 1
        self._index += 1

    def summary(self) -> SessionSummary:
        reviewed = self._stats.cards_reviewed
        return SessionSummary(
            cards_reviewed=reviewed,
            correct=self._correct,
            incorrect=reviewed - self._correct,
            skipped=self._skipped,
            time_spent_seconds=self._stats.time_spent_seconds,
        )
