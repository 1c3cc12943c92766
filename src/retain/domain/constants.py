"""Centralized constants for the retain scheduling engine.

All magic numbers and scheduling defaults live here so every layer
imports from a single source of truth.
"""

# ---------- Ease ----------
DEFAULT_EASE = 2.5
MIN_EASE = 1.3
MAX_EASE = 2.5  # Fixed upper clamp for the four-point SM-2 family

# ---------- Intervals ----------
FIRST_INTERVAL = 1
SECOND_INTERVAL = 6
DEFAULT_MAX_INTERVAL = 36500  # 100 years
DEFAULT_INTERVAL_MODIFIER = 1.0
SECONDS_PER_DAY = 86400

# ---------- Daily limits ----------
DEFAULT_NEW_CARDS_PER_DAY = 20
DEFAULT_REVIEW_CARDS_PER_DAY = 200

# ---------- Leitner ----------
LEITNER_MIN_BOX = 1
LEITNER_MAX_BOX = 5
LEITNER_PASS_THRESHOLD = 0.8

# ---------- Enhanced scheduler ----------
REVIEW_FATIGUE_RATE = 0.01
REVIEW_FATIGUE_CAP = 0.5
TIME_FATIGUE_RATE = 0.1  # per hour
TIME_FATIGUE_CAP = 0.3
STREAK_RELIEF_RATE = 0.05
STREAK_RELIEF_CAP = 0.4
STABILITY_BASE = 0.8
STABILITY_QUALITY_SCALE = 5.0
DIFFICULTY_QUALITY_WEIGHT = 0.7
DIFFICULTY_VARIANCE_WEIGHT = 0.3
DIFFICULTY_VARIANCE_SCALE = 10.0
DEFAULT_FORECAST_REVIEWS = 5
BASE_SESSION_MINUTES = 20

# ---------- Card metrics ----------
RECENT_REVIEW_WINDOW = 5
NEW_CARD_DIFFICULTY = 0.5
CONSISTENCY_VARIANCE_SCALE = 4.0
STRENGTH_SCALE = 100.0
