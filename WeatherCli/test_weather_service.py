"""Tests for weather service."""
import pytest
import json
from datetime import datetime, timezone
from unittest.mock import Mock, patch
import requests
from credential_store import CredentialStore
from weather_provider import MissingCredentialError, ProviderId, UpstreamError
from weather_service import WeatherService


def make_http_response(payload, status=200):
    response = Mock()
    response.status_code = status
    response.ok = 200 <= status < 300
    response.text = payload if isinstance(payload, str) else json.dumps(payload)
    response.json.return_value = payload
    return response


@pytest.fixture
def store():
    store = CredentialStore()
    store.upsert_provider_api_key(ProviderId.OPENWEATHER, "OPEN_KEY")
    store.upsert_provider_api_key(ProviderId.WEATHERAPI, "WEATHER_KEY")
    return store


@pytest.fixture
def session():
    return Mock(spec=requests.Session)


def test_weather_service_uses_default_provider(store, session):
    session.get.return_value = make_http_response({
        "name": "Kyiv",
        "dt": 1700000000,
        "main": {"temp": 5.0, "feels_like": 2.0, "humidity": 80},
        "weather": [{"description": "clear sky"}],
        "wind": {"speed": 3.0},
    })
    service = WeatherService(store, session=session)

    result = service.get_weather("Kyiv")

    assert result.provider == "openweather"
    assert result.location_name == "Kyiv"
    assert result.observation_time == datetime(2023, 11, 14, 22, 13, 20, tzinfo=timezone.utc)
    assert session.get.call_count == 1


def test_weather_service_explicit_provider(store, session):
    session.get.return_value = make_http_response({
        "location": {"name": "Kyiv", "country": "Ukraine"},
        "current": {
            "temp_c": 5.0,
            "feelslike_c": 2.0,
            "humidity": 80,
            "wind_kph": 36.0,
            "condition": {"text": "Clear"},
        },
    })
    service = WeatherService(store, session=session)

    result = service.get_weather("Kyiv", provider="weatherapi")

    assert result.provider == "weatherapi"
    assert result.wind_speed_mps == 10.0


def test_weather_service_does_not_retry(store, session):
    """Failures are reported once and not retried."""
    session.get.return_value = make_http_response("Internal Server Error", status=500)
    service = WeatherService(store, session=session)

    with pytest.raises(UpstreamError):
        service.get_weather("Kyiv")

    assert session.get.call_count == 1


def test_weather_service_missing_credential_before_network(session):
    store = CredentialStore()
    store.upsert_provider_api_key(ProviderId.OPENWEATHER, "OPEN_KEY")
    service = WeatherService(store, session=session)

    with pytest.raises(MissingCredentialError):
        service.get_weather("Kyiv", provider=ProviderId.WEATHERAPI)

    session.get.assert_not_called()


def test_weather_service_closes_own_session(store):
    with patch("weather_service.requests.Session") as session_cls:
        with WeatherService(store) as service:
            assert service.session is session_cls.return_value

    session_cls.return_value.close.assert_called_once()


def test_weather_service_leaves_injected_session_open(store, session):
    with WeatherService(store, session=session):
        pass

    session.close.assert_not_called()
