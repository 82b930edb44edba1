"""Tests for shared normalization helpers."""
import pytest
from datetime import datetime, timezone
from weather_normalize import (
    condition_text,
    humidity,
    kph_to_mps,
    number,
    observation_time,
    optional_integer,
    require,
    select_nearest,
    text,
    unix_to_utc,
)
from weather_provider import DataError, DecodeError, truncate_body

NOW = datetime(2025, 3, 10, 12, 0, 0, tzinfo=timezone.utc)


def test_select_nearest_picks_minimum_distance():
    entries = [{"dt": 100}, {"dt": 300}, {"dt": 700}]
    assert select_nearest(entries, 250, key=lambda e: e["dt"]) == {"dt": 300}


def test_select_nearest_tie_goes_to_first_entry():
    entries = [{"dt": 100, "n": 1}, {"dt": 300, "n": 2}]
    assert select_nearest(entries, 200, key=lambda e: e["dt"])["n"] == 1


def test_select_nearest_empty_raises_data_error():
    with pytest.raises(DataError):
        select_nearest([], 250, key=lambda e: e["dt"])


def test_kph_to_mps():
    assert kph_to_mps(36.0) == 10.0
    assert kph_to_mps(0.0) == 0.0


def test_condition_text_fallback():
    assert condition_text("clear sky") == "clear sky"
    assert condition_text() == "Unknown"
    assert condition_text("") == "Unknown"
    assert condition_text(None, "mist") == "mist"


def test_unix_to_utc():
    assert unix_to_utc(1700000000) == datetime(2023, 11, 14, 22, 13, 20, tzinfo=timezone.utc)
    assert unix_to_utc(None) is None
    assert unix_to_utc(10 ** 20) is None


def test_observation_time_fallback_chain():
    assert observation_time(None, 1700000000, now=NOW) == unix_to_utc(1700000000)
    assert observation_time(1600000000, 1700000000, now=NOW) == unix_to_utc(1600000000)
    assert observation_time(None, None, now=NOW) == NOW


def test_truncate_body():
    assert truncate_body("short") == "short"
    long_body = "x" * 500
    truncated = truncate_body(long_body)
    assert truncated == "x" * 200 + "..."


def test_require_missing_field():
    with pytest.raises(DecodeError) as exc_info:
        require({"main": {}}, "temp", "main")
    assert "main.temp" in str(exc_info.value)


def test_require_non_object():
    with pytest.raises(DecodeError):
        require([1, 2], "temp", "main")


def test_number_rejects_strings_and_bools():
    with pytest.raises(DecodeError):
        number({"temp": "5"}, "temp", "main")
    with pytest.raises(DecodeError):
        number({"temp": True}, "temp", "main")
    assert number({"temp": 5}, "temp", "main") == 5.0


def test_humidity_validation():
    assert humidity({"humidity": 80}, "humidity", "main") == 80
    assert humidity({"humidity": 80.0}, "humidity", "main") == 80
    with pytest.raises(DecodeError):
        humidity({"humidity": 101}, "humidity", "main")
    with pytest.raises(DecodeError):
        humidity({"humidity": 55.5}, "humidity", "main")


def test_text_requires_string():
    assert text({"name": "Kyiv"}, "name", "") == "Kyiv"
    with pytest.raises(DecodeError) as exc_info:
        text({"name": 7}, "name", "")
    assert "'name'" in str(exc_info.value)


def test_optional_integer():
    assert optional_integer({}, "last_updated_epoch", "current") is None
    assert optional_integer({"last_updated_epoch": None}, "last_updated_epoch", "current") is None
    assert optional_integer({"last_updated_epoch": 5}, "last_updated_epoch", "current") == 5
    with pytest.raises(DecodeError):
        optional_integer({"last_updated_epoch": "5"}, "last_updated_epoch", "current")


@pytest.mark.parametrize("helper", [
    require, number, optional_integer, humidity, condition_text, kph_to_mps,
    observation_time, select_nearest, text,
])
def test_public_helpers_are_documented(helper):
    assert helper.__doc__ and helper.__doc__.strip()
