"""
Input checks shared by every scheduling strategy.

All checks run before any computation so that a rejected review never
produces a partially updated card.
"""

import logging
import math

from retain.domain.errors import InvalidCardState, InvalidQuality
from retain.domain.models import Card, DeckSettings, FivePointGrade, Quality

logger = logging.getLogger(__name__)


def _is_integral(value: object) -> bool:
    # bool is an int subclass; a True/False grade is always a caller bug.
    return isinstance(value, int) and not isinstance(value, bool)


def parse_quality(value: object) -> Quality:
    """Coerce a four-point grade, rejecting anything outside 0-3."""
    if isinstance(value, Quality):
        return value
    if _is_integral(value) and Quality.AGAIN <= value <= Quality.EASY:
        return Quality(value)
    logger.warning(f"Rejected four-point quality {value!r}")
    raise InvalidQuality(value, "four-point")


def parse_five_point(value: object) -> FivePointGrade:
    """Coerce a classic SM-2 grade, rejecting anything outside 0-5."""
    if isinstance(value, Quality):
        # Shared labels are not numerically equivalent across scales.
        logger.warning(f"Rejected four-point {value!r} on five-point scale")
        raise InvalidQuality(value, "five-point")
    if isinstance(value, FivePointGrade):
        return value
    if _is_integral(value) and FivePointGrade.BLACKOUT <= value <= FivePointGrade.PERFECT:
        return FivePointGrade(value)
    logger.warning(f"Rejected five-point quality {value!r}")
    raise InvalidQuality(value, "five-point")


def parse_performance(value: object) -> float:
    """
    Normalize a Leitner grade to a performance in [0, 1].

    Accepts a `Quality` (mapped through `Quality.performance`) or a raw
    float/int already on the [0, 1] scale.
    """
    if isinstance(value, Quality):
        return value.performance
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        logger.warning(f"Rejected performance {value!r}")
        raise InvalidQuality(value, "performance")
    performance = float(value)
    if math.isnan(performance) or not 0.0 <= performance <= 1.0:
        logger.warning(f"Rejected performance {value!r}")
        raise InvalidQuality(value, "performance")
    return performance


def validate_card(card: Card) -> None:
    """Raise InvalidCardState for a card no scheduler can safely advance."""
    reason = None
    if card.interval < 0:
        reason = f"negative interval {card.interval}"
    elif math.isnan(card.ease) or card.ease < 0:
        reason = f"negative ease {card.ease}"
    elif card.repetitions < 0:
        reason = f"negative repetitions {card.repetitions}"
    elif len(card.review_history) != card.repetitions:
        reason = (
            f"history length {len(card.review_history)} "
            f"does not match repetitions {card.repetitions}"
        )
    elif card.box is not None and card.box < 0:
        reason = f"negative box {card.box}"

    if reason:
        logger.warning(f"Rejected card {card.id}: {reason}")
        raise InvalidCardState(card.id, reason)


def clamp_interval(interval: int, settings: DeckSettings) -> int:
    if settings.max_interval is not None:
        return min(interval, settings.max_interval)
    return interval
