"""retain: a spaced-repetition scheduling engine."""

from retain.consts import VERSION

__version__ = VERSION
