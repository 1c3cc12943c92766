"""
Ports (interfaces) for scheduling strategies.

These define the contract that every scheduling algorithm implements.
Session orchestration depends on this abstraction, not on a concrete
algorithm.
"""

from abc import ABC, abstractmethod
from datetime import datetime

from .models import Card, SessionStats


class Scheduler(ABC):
    """
    Port for computing a card's next review.

    Implementations:
        - SuperMemo2Scheduler: four-point SM-2 recurrence.
        - SuperMemo2FivePointScheduler: classic 0-5 SM-2 recurrence.
        - LeitnerScheduler: five-box Leitner system.
        - EnhancedScheduler: SM-2 modulated by session fatigue and history stability.
    """

    name: str = ""

    @abstractmethod
    def calculate_next_review(
        self,
        card: Card,
        quality: object,
        session_stats: SessionStats | None = None,
        *,
        now: datetime | None = None,
    ) -> Card:
        """
        Compute the card's state after one review.

        Args:
            card: Current card state. Never mutated.
            quality: Grade on this scheduler's scale.
            session_stats: Session snapshot; only the enhanced scheduler reads it.
            now: Review time. Defaults to the current UTC time.

        Returns:
            A new Card with repetitions + 1 and one more history entry.

        Raises:
            InvalidQuality: If the grade is outside this scheduler's scale.
            InvalidCardState: If the card is malformed.
        """
        pass

    @abstractmethod
    def is_correct(self, quality: object) -> bool:
        """Whether a grade counts as a correct answer on this scheduler's scale."""
        pass
