"""Tests for the study session orchestrator."""

from datetime import timedelta

import pytest

from retain.application.scheduling import EnhancedScheduler, LeitnerScheduler, SuperMemo2Scheduler
from retain.application.session import StudySession
from retain.domain.errors import InvalidQuality
from retain.domain.models import DeckSettings, Quality


@pytest.fixture
def clock(now):
    return lambda: now


@pytest.fixture
def deck_cards(make_card, now):
    return [
        make_card("due", interval=6, grades=[2, 2], next_review=now - timedelta(days=1)),
        make_card("new"),
        make_card("later", interval=6, grades=[2, 2], next_review=now + timedelta(days=2)),
    ]


def test_queue_is_built_from_due_cards(deck_cards, clock):
    session = StudySession(deck_cards, SuperMemo2Scheduler(), clock=clock)

    assert session.remaining == 2
    assert session.current.id == "new"


def test_answer_advances_and_tracks_stats(deck_cards, clock, now):
    session = StudySession(deck_cards, SuperMemo2Scheduler(), clock=clock)

    first = session.answer(Quality.GOOD, response_seconds=4.0)
    assert first.id == "new"
    assert first.interval == 1
    assert first.last_reviewed == now
    assert session.stats.cards_reviewed == 1
    assert session.stats.consecutive_correct == 1

    session.answer(Quality.AGAIN, response_seconds=6.0)
    assert session.stats.cards_reviewed == 2
    assert session.stats.time_spent_seconds == 10.0
    assert session.stats.consecutive_correct == 0

    assert session.is_finished
    assert [c.id for c in session.updated] == ["new", "due"]


def test_enhanced_scheduler_receives_snapshot(make_card, clock):
    cards = [make_card(f"n{i}") for i in range(3)]
    session = StudySession(cards, EnhancedScheduler(), clock=clock)

    session.answer(Quality.GOOD, response_seconds=10.0)
    second = session.answer(Quality.GOOD, response_seconds=20.0)

    entry = second.review_history[-1]
    assert entry.response_time == pytest.approx(15.0)
    # 2 reviewed (0.02) minus a 2-answer streak (0.1) floors at 0
    assert entry.fatigue_factor == 0.0


def test_rejected_grade_does_not_advance(deck_cards, clock):
    session = StudySession(deck_cards, SuperMemo2Scheduler(), clock=clock)

    with pytest.raises(InvalidQuality):
        session.answer(9)

    assert session.current.id == "new"
    assert session.stats.cards_reviewed == 0
    assert session.updated == []


def test_skip(deck_cards, clock):
    session = StudySession(deck_cards, SuperMemo2Scheduler(), clock=clock)
    session.skip()

    assert session.current.id == "due"
    assert session.summary().skipped == 1


def test_summary(make_card, clock):
    cards = [make_card(f"n{i}") for i in range(4)]
    session = StudySession(cards, LeitnerScheduler(), clock=clock)

    session.answer(1.0, 2.0)
    session.answer(Quality.HARD, 3.0)
    session.answer(Quality.EASY, 1.0)
    session.skip()

    summary = session.summary()
    assert summary.cards_reviewed == 3
    assert summary.correct == 2
    assert summary.incorrect == 1
    assert summary.skipped == 1
    assert summary.time_spent_seconds == 6.0
    assert summary.accuracy == pytest.approx(200 / 3)


def test_empty_session(clock):
    session = StudySession([], SuperMemo2Scheduler(), clock=clock)

    assert session.is_finished
    assert session.summary().accuracy == 0.0
    with pytest.raises(RuntimeError):
        session.answer(Quality.GOOD)
    with pytest.raises(RuntimeError):
        session.skip()


def test_daily_limits_applied(make_card, clock):
    cards = [make_card(f"n{i}") for i in range(5)]
    settings = DeckSettings(new_cards_per_day=2)

    assert StudySession(cards, SuperMemo2Scheduler(), settings, clock=clock).remaining == 2
    assert StudySession(cards, SuperMemo2Scheduler(), clock=clock, apply_limits=False).remaining == 5
