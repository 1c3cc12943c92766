# Domain Package
from .errors import InvalidCardState, InvalidQuality, SchedulingError
from .models import (
    Algorithm,
    Card,
    Deck,
    DeckSettings,
    FivePointGrade,
    Quality,
    ReviewRecord,
    SessionStats,
    StudyStats,
)
from .ports import Scheduler

__all__ = [
    "Algorithm",
    "Card",
    "Deck",
    "DeckSettings",
    "FivePointGrade",
    "InvalidCardState",
    "InvalidQuality",
    "Quality",
    "ReviewRecord",
    "Scheduler",
    "SchedulingError",
    "SessionStats",
    "StudyStats",
]
