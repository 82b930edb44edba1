"""Tests for date classification."""
import pytest
from datetime import datetime, timedelta, timezone
from date_classifier import DateKind, DateRequest, classify_date


@pytest.fixture
def now():
    return datetime(2025, 3, 10, 12, 0, 0, tzinfo=timezone.utc)


def test_none_means_current(now):
    assert classify_date(now, None) == DateRequest(DateKind.CURRENT)


@pytest.mark.parametrize("delta", [timedelta(seconds=1), timedelta(days=400)])
def test_past_date_is_past(now, delta):
    past = now - delta
    assert classify_date(now, past) == DateRequest(DateKind.PAST, past)


def test_exact_now_is_future(now):
    assert classify_date(now, now) == DateRequest(DateKind.FUTURE, now)


def test_later_date_is_future(now):
    future = now + timedelta(hours=1)
    result = classify_date(now, future)

    assert result.kind is DateKind.FUTURE
    assert result.when == future


@pytest.mark.parametrize("obj", [DateKind, DateRequest, classify_date])
def test_public_names_are_documented(obj):
    assert obj.__doc__ and obj.__doc__.strip()
