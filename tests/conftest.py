import os
from datetime import datetime, timedelta, timezone

import pytest

from retain.domain.models import Card, Quality, ReviewRecord

NOW = datetime(2024, 3, 1, 9, 30, tzinfo=timezone.utc)


@pytest.fixture
def now():
    return NOW


@pytest.fixture
def make_card():
    """Factory for cards whose history length matches their repetitions."""

    def _make(
        card_id="c1",
        interval=0,
        ease=2.5,
        grades=(),
        next_review=None,
        last_reviewed=None,
        **kwargs,
    ):
        history = tuple(
            ReviewRecord(date=NOW - timedelta(days=len(grades) - i), quality=int(g))
            for i, g in enumerate(grades)
        )
        return Card(
            id=card_id,
            front=f"front {card_id}",
            back=f"back {card_id}",
            interval=interval,
            ease=ease,
            repetitions=len(history),
            next_review=next_review,
            last_reviewed=last_reviewed,
            review_history=history,
            **kwargs,
        )

    return _make


@pytest.fixture
def good_history():
    return (Quality.GOOD,) * 5


@pytest.fixture
def mock_home(tmp_path, monkeypatch):
    """Mocks Path.home() to point to a temp dir."""
    home = tmp_path / "home"
    home.mkdir()

    # Isolate config lookups from the real user profile
    monkeypatch.setenv("HOME", str(home))
    for var in [k for k in os.environ if k.startswith("RETAIN_")]:
        monkeypatch.delenv(var)
    return home
