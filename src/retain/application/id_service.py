"""Service for creating cards with stable identifiers."""

import logging

from ulid import ULID

from retain.domain.models import Card

logger = logging.getLogger(__name__)


def generate_card_id() -> str:
    """Generate a stable card ID using ULID."""
    return f"card_{ULID()}"


def new_card(front: str, back: str, card_id: str | None = None) -> Card:
    """
    Create a never-reviewed card: interval 0, ease 2.5, no history.
    """
    card = Card(id=card_id or generate_card_id(), front=front, back=back)
    logger.debug(f"Created card {card.id}")
    return card
