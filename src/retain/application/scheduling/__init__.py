# Scheduling Strategies Package
from .enhanced import EnhancedScheduler, fatigue_factor, stability_factor
from .leitner import LeitnerScheduler
from .sm2 import SuperMemo2FivePointScheduler, SuperMemo2Scheduler

__all__ = [
    "EnhancedScheduler",
    "LeitnerScheduler",
    "SuperMemo2FivePointScheduler",
    "SuperMemo2Scheduler",
    "fatigue_factor",
    "stability_factor",
]
