"""
JSON serialization boundary for cards and decks.

Maps the camelCase JSON shape persisted by the host application onto
domain values. All shape validation happens here, once; schedulers only
re-check the numeric invariants they depend on.
"""

import json
import logging
from datetime import datetime
from pathlib import Path
from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, ValidationError, field_validator
from pydantic.alias_generators import to_camel

from retain.application.scheduling.validation import validate_card
from retain.application.utils.common import ensure_aware
from retain.domain.constants import (
    DEFAULT_EASE,
    DEFAULT_INTERVAL_MODIFIER,
    DEFAULT_MAX_INTERVAL,
    DEFAULT_NEW_CARDS_PER_DAY,
    DEFAULT_REVIEW_CARDS_PER_DAY,
    MIN_EASE,
)
from retain.domain.errors import InvalidCardState
from retain.domain.models import Algorithm, Card, Deck, DeckSettings, ReviewRecord

logger = logging.getLogger(__name__)


class DeckFormatError(ValueError):
    """A deck file that cannot be read as a deck."""


class _Document(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )


class ReviewRecordDocument(_Document):
    date: datetime
    quality: int = Field(ge=0)
    response_time: float | None = Field(
        default=None,
        validation_alias=AliasChoices("responseTime", "responseTimeSeconds", "response_time"),
        serialization_alias="responseTime",
    )
    fatigue_factor: float | None = None
    stability_factor: float | None = Field(
        default=None,
        validation_alias=AliasChoices("stabilityFactor", "stability", "stability_factor"),
        serialization_alias="stabilityFactor",
    )

    @field_validator("date")
    @classmethod
    def assume_utc(cls, v: datetime) -> datetime:
        return ensure_aware(v)

    def to_domain(self) -> ReviewRecord:
        return ReviewRecord(
            date=self.date,
            quality=self.quality,
            response_time=self.response_time,
            fatigue_factor=self.fatigue_factor,
            stability_factor=self.stability_factor,
        )

    @classmethod
    def from_domain(cls, record: ReviewRecord) -> "ReviewRecordDocument":
        return cls(
            date=record.date,
            quality=record.quality,
            response_time=record.response_time,
            fatigue_factor=record.fatigue_factor,
            stability_factor=record.stability_factor,
        )


class CardDocument(_Document):
    id: str
    front: str = ""
    back: str = ""
    interval: int = 0
    ease: float = DEFAULT_EASE
    # Older cards carry no counter; their history length stands in for it.
    repetitions: int | None = None
    next_review: datetime | None = None
    last_reviewed: datetime | None = None
    review_history: list[ReviewRecordDocument] = Field(default_factory=list)
    difficulty: float = 0.0
    box: int | None = None

    @field_validator("next_review", "last_reviewed")
    @classmethod
    def assume_utc(cls, v: datetime | None) -> datetime | None:
        return ensure_aware(v) if v is not None else None

    @field_validator("difficulty", mode="before")
    @classmethod
    def drop_label_difficulty(cls, v: Any) -> Any:
        # Derived cache: free-text labels ("easy", "hard") are discarded.
        if v is None or isinstance(v, str):
            return 0.0
        return v

    def to_domain(self) -> Card:
        history = tuple(r.to_domain() for r in self.review_history)
        return Card(
            id=self.id,
            front=self.front,
            back=self.back,
            interval=self.interval,
            ease=self.ease,
            repetitions=self.repetitions if self.repetitions is not None else len(history),
            next_review=self.next_review,
            last_reviewed=self.last_reviewed,
            review_history=history,
            difficulty=self.difficulty,
            box=self.box,
        )

    @classmethod
    def from_domain(cls, card: Card) -> "CardDocument":
        return cls(
            id=card.id,
            front=card.front,
            back=card.back,
            interval=card.interval,
            ease=card.ease,
            repetitions=card.repetitions,
            next_review=card.next_review,
            last_reviewed=card.last_reviewed,
            review_history=[ReviewRecordDocument.from_domain(r) for r in card.review_history],
            difficulty=card.difficulty,
            box=card.box,
        )


class DeckSettingsDocument(_Document):
    min_ease: float = MIN_EASE
    max_interval: int | None = DEFAULT_MAX_INTERVAL
    interval_modifier: float = DEFAULT_INTERVAL_MODIFIER
    new_cards_per_day: int = DEFAULT_NEW_CARDS_PER_DAY
    review_cards_per_day: int = DEFAULT_REVIEW_CARDS_PER_DAY


class DeckDocument(_Document):
    name: str = "Default"
    algorithm: Algorithm = Algorithm.SUPER_MEMO_2
    settings: DeckSettingsDocument = Field(default_factory=DeckSettingsDocument)
    cards: list[dict[str, Any]] = Field(default_factory=list)


def _describe(error: ValidationError) -> str:
    first = error.errors()[0]
    location = ".".join(str(part) for part in first["loc"]) or "<root>"
    return f"{location}: {first['msg']}"


def card_to_dict(card: Card) -> dict[str, Any]:
    """Serialize a card to its JSON shape. Optional history fields appear only when set."""
    doc = CardDocument.from_domain(card)
    data = doc.model_dump(mode="json", by_alias=True, exclude={"review_history", "box"})
    data["reviewHistory"] = [
        r.model_dump(mode="json", by_alias=True, exclude_none=True) for r in doc.review_history
    ]
    if card.box is not None:
        data["box"] = card.box
    return data


def card_from_dict(data: dict[str, Any]) -> Card:
    """
    Deserialize and validate a card.

    Raises:
        InvalidCardState: The data does not describe a valid card.
    """
    card_id = data.get("id") if isinstance(data, dict) else None
    try:
        card = CardDocument.model_validate(data).to_domain()
    except ValidationError as e:
        reason = _describe(e)
        logger.warning(f"Rejected card {card_id}: {reason}")
        raise InvalidCardState(card_id, reason) from e

    validate_card(card)
    return card


def deck_from_dict(
    data: dict[str, Any], defaults: Deck | None = None
) -> tuple[Deck, list[Card]]:
    """
    Deserialize a deck document into the deck and its cards.

    `defaults` fills in the algorithm and settings when the document omits them.

    Raises:
        DeckFormatError: The deck-level fields are malformed.
        InvalidCardState: Any card is malformed.
    """
    try:
        doc = DeckDocument.model_validate(data)
        settings = DeckSettings(**doc.settings.model_dump())
        algorithm = doc.algorithm
    except ValidationError as e:
        raise DeckFormatError(f"Invalid deck: {_describe(e)}") from e
    except ValueError as e:
        raise DeckFormatError(f"Invalid deck settings: {e}") from e

    if defaults is not None:
        if "algorithm" not in data:
            algorithm = defaults.algorithm
        if "settings" not in data:
            settings = defaults.settings

    deck = Deck(algorithm=algorithm, settings=settings, name=doc.name)
    return deck, [card_from_dict(c) for c in doc.cards]


def deck_to_dict(deck: Deck, cards: list[Card]) -> dict[str, Any]:
    settings = DeckSettingsDocument(**vars(deck.settings))
    return {
        "name": deck.name,
        "algorithm": deck.algorithm.value,
        "settings": settings.model_dump(mode="json", by_alias=True),
        "cards": [card_to_dict(c) for c in cards],
    }


def load_deck(path: Path, defaults: Deck | None = None) -> tuple[Deck, list[Card]]:
    """Read a UTF-8 JSON deck file."""
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise DeckFormatError(f"{path}: not valid JSON ({e.msg} at line {e.lineno})") from e

    if not isinstance(data, dict):
        raise DeckFormatError(f"{path}: expected a JSON object at the top level")

    deck, cards = deck_from_dict(data, defaults)
    logger.debug(f"Loaded {len(cards)} cards from {path}")
    return deck, cards


def dump_deck(path: Path, deck: Deck, cards: list[Card]) -> None:
    """Write a deck file, replacing any existing content."""
    path.write_text(
        json.dumps(deck_to_dict(deck, cards), indent=2, ensure_ascii=False) + "\n",
        encoding="utf-8",
    )
    logger.debug(f"Wrote {len(cards)} cards to {path}")
