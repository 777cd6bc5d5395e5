from datetime import datetime, timedelta, timezone
from types import SimpleNamespace

from app.services.engagement import (
    calculate_engagement_score,
    rounded_seconds,
    seconds_from_payload,
)


NOW = datetime(2024, 5, 20, 12, 0, tzinfo=timezone.utc)


def _bookmark(**overrides):
    values = {
        "total_visits": 0,
        "last_visited": None,
        "time_spent": 0,
        "categories": [],
        "tags": [],
        "is_favorite": False,
        "notes": None,
    }
    values.update(overrides)
    return SimpleNamespace(**values)


def test_engagement_score_for_untouched_bookmark_is_zero():
    assert calculate_engagement_score(_bookmark(), NOW) == 0


def test_engagement_score_adds_every_component():
    bookmark = _bookmark(
        total_visits=10,
        last_visited=NOW - timedelta(days=3),
        time_spent=300,
        categories=[object()],
        tags=[object()],
        is_favorite=True,
        notes="read later",
    )

    # visits 17, recency 20, time 20, category 8, tag 7, favorite 5, notes 5
    assert calculate_engagement_score(bookmark, NOW) == 82


def test_engagement_score_recency_bands_and_naive_timestamps():
    same_day = _bookmark(total_visits=1, last_visited=NOW.replace(tzinfo=None))
    old = _bookmark(total_visits=1, last_visited=NOW - timedelta(days=200))

    assert calculate_engagement_score(same_day, NOW) == 6 + 25
    assert calculate_engagement_score(old, NOW) == 6 + 5


def test_engagement_score_is_capped():
    bookmark = _bookmark(
        total_visits=500,
        last_visited=NOW,
        time_spent=10_000,
        categories=[object()],
        tags=[object()],
        is_favorite=True,
        notes="x",
    )

    assert calculate_engagement_score(bookmark, NOW) == 100


def test_seconds_from_payload_accepts_seconds_and_legacy_minutes():
    assert seconds_from_payload({"timeSpentSeconds": 42}) == 42
    assert seconds_from_payload({"timeSpentMinutes": 2}) == 120
    assert seconds_from_payload({}) == 0


def test_seconds_from_payload_rejects_invalid_values():
    assert seconds_from_payload({"timeSpentSeconds": -1}) is None
    assert seconds_from_payload({"timeSpentSeconds": "10"}) is None
    assert seconds_from_payload({"timeSpentSeconds": True}) is None


def test_rounded_seconds_counts_fractions_as_one():
    assert rounded_seconds(0) == 0
    assert rounded_seconds(0.2) == 1
    assert rounded_seconds(2.6) == 3
