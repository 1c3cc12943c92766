"""
Scheduler Factory
Centralizes the logic for selecting the scheduling strategy for a deck.
"""

import logging

from retain.application.scheduling import (
    EnhancedScheduler,
    LeitnerScheduler,
    SuperMemo2FivePointScheduler,
    SuperMemo2Scheduler,
)
from retain.domain.models import Algorithm, Deck, DeckSettings
from retain.domain.ports import Scheduler

logger = logging.getLogger(__name__)


def get_scheduler(
    algorithm: Algorithm | str,
    settings: DeckSettings | None = None,
    adaptive: bool = False,
) -> Scheduler:
    """
    Returns a new Scheduler for the given algorithm selector.

    `adaptive` upgrades four-point SM-2 to the enhanced scheduler; other
    algorithms have no enhanced variant and ignore it.
    """
    try:
        algorithm = Algorithm(algorithm)
    except ValueError:
        raise ValueError(f"Unknown scheduling algorithm: {algorithm!r}") from None

    settings = settings or DeckSettings()

    if algorithm is Algorithm.SUPER_MEMO_2:
        if adaptive:
            return EnhancedScheduler(settings)
        return SuperMemo2Scheduler(settings)

    if algorithm is Algorithm.SUPER_MEMO_2_FIVE_POINT:
        return SuperMemo2FivePointScheduler(settings)

    if adaptive:
        logger.info(f"Adaptive scheduling is not available for {algorithm.value}; ignoring")
    return LeitnerScheduler(settings)


def get_deck_scheduler(deck: Deck, adaptive: bool = False) -> Scheduler:
    """Returns the scheduler selected by a deck's algorithm and settings."""
    return get_scheduler(deck.algorithm, deck.settings, adaptive=adaptive)
