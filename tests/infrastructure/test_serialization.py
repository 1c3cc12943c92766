"""Tests for the JSON card/deck boundary."""

import json
from datetime import datetime, timedelta, timezone

import pytest

from retain.application.scheduling import EnhancedScheduler, SuperMemo2Scheduler
from retain.domain.errors import InvalidCardState
from retain.domain.models import (
    Algorithm,
    Card,
    Deck,
    DeckSettings,
    Quality,
    ReviewRecord,
    SessionStats,
)
from retain.infrastructure.serialization import (
    DeckFormatError,
    card_from_dict,
    card_to_dict,
    deck_from_dict,
    deck_to_dict,
    dump_deck,
    load_deck,
)


@pytest.fixture
def reviewed_card(make_card, now):
    card = make_card()
    card = SuperMemo2Scheduler().calculate_next_review(card, Quality.GOOD, now=now)
    stats = SessionStats(cards_reviewed=4, time_spent_seconds=20, consecutive_correct=1)
    return EnhancedScheduler().calculate_next_review(
        card, Quality.HARD, stats, now=now + timedelta(days=1)
    )


class TestCardShape:
    def test_camel_case_keys(self, reviewed_card):
        data = card_to_dict(reviewed_card)
        assert set(data) == {
            "id",
            "front",
            "back",
            "interval",
            "ease",
            "repetitions",
            "nextReview",
            "lastReviewed",
            "reviewHistory",
            "difficulty",
        }

    def test_optional_history_fields_only_when_present(self, reviewed_card):
        plain, enhanced = card_to_dict(reviewed_card)["reviewHistory"]
        assert set(plain) == {"date", "quality"}
        assert set(enhanced) == {
            "date",
            "quality",
            "responseTime",
            "fatigueFactor",
            "stabilityFactor",
        }
        assert enhanced["responseTime"] == 5.0

    def test_new_card_has_null_timestamps(self, make_card):
        data = card_to_dict(make_card())
        assert data["nextReview"] is None
        assert data["lastReviewed"] is None
        assert data["reviewHistory"] == []

    def test_box_emitted_only_when_set(self, make_card):
        assert card_to_dict(make_card(box=3))["box"] == 3


class TestRoundTrip:
    def test_reviewed_card(self, reviewed_card):
        assert card_from_dict(card_to_dict(reviewed_card)) == reviewed_card

    def test_through_json_text(self, reviewed_card):
        text = json.dumps(card_to_dict(reviewed_card))
        restored = card_from_dict(json.loads(text))

        assert restored == reviewed_card
        assert [r.quality for r in restored.review_history] == [2, 1]


    def test_naive_card(self):
        naive = datetime(2024, 1, 1, 8)
        card = Card(
            id="x",
            interval=1,
            repetitions=1,
            next_review=naive,
            last_reviewed=naive,
            review_history=(ReviewRecord(date=naive, quality=2),),
        )

        assert card_from_dict(card_to_dict(card)) == card


class TestCardFromDict:
    def test_legacy_aliases(self):
        card = card_from_dict(
            {
                "id": "x",
                "interval": 1,
                "ease": 2.5,
                "repetitions": 1,
                "reviewHistory": [
                    {
                        "date": "2024-01-01T00:00:00Z",
                        "quality": 2,
                        "responseTimeSeconds": 3.5,
                        "stability": 0.9,
                    }
                ],
            }
        )
        assert card.review_history[0].response_time == 3.5
        assert card.review_history[0].stability_factor == 0.9

    def test_naive_timestamps_are_utc(self):
        card = card_from_dict({"id": "x", "nextReview": "2024-01-01T08:00:00"})
        assert card.next_review == datetime(2024, 1, 1, 8, tzinfo=timezone.utc)

    def test_missing_repetitions_taken_from_history(self):
        card = card_from_dict(
            {
                "id": "x",
                "interval": 1,
                "reviewHistory": [{"date": "2024-01-01T00:00:00Z", "quality": 3}],
            }
        )
        assert card.repetitions == 1

    def test_host_fields_ignored(self):
        card = card_from_dict(
            {"id": "x", "created": "2024-01-01", "tags": ["a"], "difficulty": "hard"}
        )
        assert card.id == "x"
        assert card.difficulty == 0.0

    @pytest.mark.parametrize(
        "data",
        [
            {"front": "no id"},
            {"id": "x", "interval": "soon"},
            {"id": "x", "reviewHistory": [{"quality": 2}]},
            {"id": "x", "reviewHistory": [{"date": "2024-01-01T00:00:00Z", "quality": -1}]},
        ],
    )
    def test_malformed_shape(self, data):
        with pytest.raises(InvalidCardState):
            card_from_dict(data)

    def test_malformed_state(self):
        with pytest.raises(InvalidCardState, match="negative interval"):
            card_from_dict({"id": "x", "interval": -3})

        with pytest.raises(InvalidCardState, match="history length"):
            card_from_dict({"id": "x", "repetitions": 2})


class TestDeckFiles:
    def test_deck_round_trip(self, tmp_path, reviewed_card, make_card):
        deck = Deck(
            algorithm=Algorithm.LEITNER,
            settings=DeckSettings(min_ease=1.4, new_cards_per_day=5),
            name="German",
        )
        cards = [reviewed_card, make_card("c2")]
        path = tmp_path / "deck.json"

        dump_deck(path, deck, cards)
        loaded_deck, loaded_cards = load_deck(path)

        assert loaded_deck == deck
        assert loaded_cards == cards

    def test_settings_use_camel_case(self):
        data = deck_to_dict(Deck(), [])
        assert data["settings"]["minEase"] == 1.3
        assert data["settings"]["maxInterval"] == 36500
        assert data["algorithm"] == "superMemo2"

    def test_defaults_fill_missing_deck_fields(self):
        defaults = Deck(algorithm=Algorithm.LEITNER, settings=DeckSettings(max_interval=90))
        deck, cards = deck_from_dict({"cards": [{"id": "x"}]}, defaults)

        assert deck.algorithm is Algorithm.LEITNER
        assert deck.settings.max_interval == 90
        assert cards[0].id == "x"

    def test_explicit_fields_beat_defaults(self):
        defaults = Deck(algorithm=Algorithm.LEITNER)
        deck, _ = deck_from_dict({"algorithm": "superMemo2"}, defaults)
        assert deck.algorithm is Algorithm.SUPER_MEMO_2

    def test_unknown_algorithm(self):
        with pytest.raises(DeckFormatError):
            deck_from_dict({"algorithm": "fsrs"})

    def test_invalid_settings(self):
        with pytest.raises(DeckFormatError, match="settings"):
            deck_from_dict({"settings": {"minEase": 9}})

    def test_bad_json(self, tmp_path):
        path = tmp_path / "deck.json"
        path.write_text("{not json", encoding="utf-8")
        with pytest.raises(DeckFormatError, match="not valid JSON"):
            load_deck(path)

    def test_top_level_must_be_object(self, tmp_path):
        path = tmp_path / "deck.json"
        path.write_text("[]", encoding="utf-8")
        with pytest.raises(DeckFormatError):
            load_deck(path)
