"""
Due-set selection for study sessions.

Builds ordered study queues by:
1. Filtering cards whose next review has arrived (or was never set)
2. Ordering new cards first, then reviews by earliest due time
3. Optionally capping each group at the deck's daily limits
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timezone

from retain.application.utils.common import ensure_aware, utcnow
from retain.domain.models import Card, DeckSettings, StudyStats

logger = logging.getLogger(__name__)

_NEVER = datetime.min.replace(tzinfo=timezone.utc)


@dataclass
class StudyQueue:
    """Result of applying daily limits to the due set."""

    new_cards: list[Card]  # Never-reviewed cards, in input order
    review_cards: list[Card]  # Due reviews, earliest due first
    deferred_new: int  # New cards held back by new_cards_per_day
    deferred_reviews: int  # Reviews held back by review_cards_per_day

    @property
    def ordered(self) -> list[Card]:
        return self.new_cards + self.review_cards


def is_due(card: Card, now: datetime) -> bool:
    """A card is due when it was never scheduled or its review time has arrived."""
    if card.next_review is None:
        return True
    return ensure_aware(card.next_review) <= ensure_aware(now)


def _priority(card: Card) -> tuple[bool, datetime]:
    if card.next_review is None:
        return (False, _NEVER)
    return (True, ensure_aware(card.next_review))


def sort_by_priority(cards: list[Card]) -> list[Card]:
    """
    New cards first, then ascending by next review.

    Ties keep their input order (the sort is stable).
    """
    return sorted(cards, key=_priority)


def select_due(cards: list[Card], now: datetime | None = None) -> list[Card]:
    """
    Return the cards due for review at `now`, in priority order.

    Args:
        cards: The card collection. Not modified.
        now: Reference time. Defaults to the current UTC time.

    Returns:
        Due cards, new cards first, then earliest due first.
    """
    moment = ensure_aware(now) if now else utcnow()
    due = [card for card in cards if is_due(card, moment)]
    logger.debug(f"{len(due)}/{len(cards)} cards due at {moment.isoformat()}")
    return sort_by_priority(due)


def compute_stats(cards: list[Card], now: datetime | None = None) -> StudyStats:
    """
    Aggregate snapshot of a collection. An empty collection yields all zeros.
    """
    total = len(cards)
    if total == 0:
        return StudyStats()

    due_count = len(select_due(cards, now))
    return StudyStats(
        total_cards=total,
        due_count=due_count,
        mean_ease=sum(c.ease for c in cards) / total,
        mean_interval=sum(c.interval for c in cards) / total,
        mean_difficulty=sum(c.difficulty for c in cards) / total,
        completion_rate=(total - due_count) / total * 100,
    )


def build_study_queue(
    cards: list[Card],
    now: datetime | None = None,
    settings: DeckSettings | None = None,
) -> StudyQueue:
    """
    Build today's study queue from the due set, honoring daily limits.

    Args:
        cards: The card collection.
        now: Reference time. Defaults to the current UTC time.
        settings: Deck settings supplying new_cards_per_day and
            review_cards_per_day. Defaults apply if not provided.

    Returns:
        StudyQueue with new cards and reviews capped separately.
    """
    settings = settings or DeckSettings()
    due = select_due(cards, now)

    new_cards = [c for c in due if c.is_new]
    review_cards = [c for c in due if not c.is_new]

    kept_new = new_cards[: settings.new_cards_per_day]
    kept_reviews = review_cards[: settings.review_cards_per_day]

    result = StudyQueue(
        new_cards=kept_new,
        review_cards=kept_reviews,
        deferred_new=len(new_cards) - len(kept_new),
        deferred_reviews=len(review_cards) - len(kept_reviews),
    )
    if result.deferred_new or result.deferred_reviews:
        logger.info(
            f"Daily limits deferred {result.deferred_new} new and "
            f"{result.deferred_reviews} review cards"
        )
    return result
