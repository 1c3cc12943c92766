"""Tests for the Leitner box strategy."""

import math
from datetime import timedelta

import pytest

from retain.application.factory import get_scheduler
from retain.application.scheduling.leitner import LeitnerScheduler, current_box, days_for_box
from retain.domain.errors import InvalidQuality
from retain.domain.models import Algorithm, DeckSettings, Quality


@pytest.fixture
def leitner():
    return LeitnerScheduler()


def test_days_for_box():
    assert [days_for_box(b) for b in range(1, 6)] == [1, 2, 4, 8, 16]


def test_incorrect_answer_moves_down_one_box(leitner, make_card, now):
    card = make_card(interval=3)
    result = leitner.calculate_next_review(card, 0.5, now=now)

    assert result.interval == 2
    assert result.box == 2
    assert result.next_review == now + timedelta(days=2)
    assert result.difficulty == pytest.approx(2.5)
    assert result.repetitions == 1


def test_hard_grade_is_incorrect(leitner, make_card, now):
    result = leitner.calculate_next_review(make_card(interval=3), Quality.HARD, now=now)
    assert result.interval == 2
    assert result.review_history[-1].quality == Quality.HARD


def test_good_grade_is_correct(leitner, make_card, now):
    result = leitner.calculate_next_review(make_card(interval=3), Quality.GOOD, now=now)
    assert result.interval == 4
    assert result.next_review == now + timedelta(days=8)


def test_just_below_threshold_is_incorrect(leitner, make_card, now):
    result = leitner.calculate_next_review(make_card(interval=3), 0.79, now=now)
    assert result.interval == 2


def test_box_ceiling(leitner, make_card, now):
    card = make_card()
    for _ in range(10):
        card = leitner.calculate_next_review(card, 1.0, now=now)
        assert card.interval <= 5
        assert card.next_review - now <= timedelta(days=16)

    assert card.interval == 5
    assert card.next_review == now + timedelta(days=16)
    assert card.repetitions == 10


def test_max_interval_caps_box_and_wait(make_card, now):
    leitner = get_scheduler(Algorithm.LEITNER, DeckSettings(max_interval=3))
    card = make_card()
    waits = []
    for _ in range(6):
        card = leitner.calculate_next_review(card, Quality.EASY, now=now)
        waits.append(card.next_review - now)
        assert card.interval <= 3

    assert card.box == 3
    assert waits == [timedelta(days=d) for d in (1, 2, 3, 3, 3, 3)]


def test_box_floor(leitner, make_card, now):
    card = make_card(interval=3)
    for _ in range(5):
        card = leitner.calculate_next_review(card, Quality.AGAIN, now=now)
        assert card.interval >= 1

    assert card.interval == 1
    assert card.next_review == now + timedelta(days=1)


def test_new_card_lands_in_first_box(leitner, make_card, now):
    assert leitner.calculate_next_review(make_card(), 1.0, now=now).interval == 1
    assert leitner.calculate_next_review(make_card(), 0.0, now=now).interval == 1


def test_ease_passes_through(leitner, make_card, now):
    result = leitner.calculate_next_review(make_card(ease=1.9), Quality.AGAIN, now=now)
    assert result.ease == 1.9


def test_box_field_preferred_over_interval(leitner, make_card, now):
    card = make_card(interval=16, box=2)
    assert current_box(card) == 2
    assert leitner.calculate_next_review(card, 1.0, now=now).box == 3


def test_fractional_interval_is_floored(make_card):
    assert current_box(make_card(interval=3)) == 3
    assert current_box(make_card(interval=0)) == 0


def test_raw_performance_recorded_as_nearest_lower_grade(leitner, make_card, now):
    result = leitner.calculate_next_review(make_card(), 0.9, now=now)
    assert result.review_history[-1].quality == Quality.GOOD


@pytest.mark.parametrize("bad", [1.5, -0.1, math.nan, "0.5", True, None])
def test_rejects_invalid_performance(leitner, make_card, now, bad):
    with pytest.raises(InvalidQuality):
        leitner.calculate_next_review(make_card(), bad, now=now)


def test_is_correct(leitner):
    assert leitner.is_correct(Quality.GOOD)
    assert leitner.is_correct(0.8)
    assert not leitner.is_correct(Quality.HARD)
