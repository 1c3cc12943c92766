"""Error taxonomy for the scheduling core.

Every error here aborts a single review and is recoverable by the caller.
"""


class SchedulingError(Exception):
    """Base class for all scheduler input errors."""


class InvalidQuality(SchedulingError, ValueError):
    """A grade outside the closed scale of the selected scheduler."""

    def __init__(self, value: object, scale: str):
        self.value = value
        self.scale = scale
        super().__init__(f"Invalid quality {value!r} for {scale} scale")


class InvalidCardState(SchedulingError, ValueError):
    """A malformed input card. The scheduler never repairs it."""

    def __init__(self, card_id: str | None, reason: str):
        self.card_id = card_id
        self.reason = reason
        label = card_id if card_id is not None else "<unknown>"
        super().__init__(f"Invalid state for card {label}: {reason}")
