"""OpenWeather provider implementation (current conditions and 5-day forecast)."""
import logging
from datetime import datetime, timedelta
from typing import Any, Dict, Optional

from date_classifier import DateKind, classify_date
from weather_data import WeatherRequest, WeatherResponse
from weather_normalize import (
    condition_text,
    humidity,
    integer,
    number,
    observation_time,
    require,
    select_nearest,
    sequence,
    text,
)
from weather_provider import CapabilityError, DataError, WeatherProviderBase

FORECAST_HORIZON = timedelta(days=5)


class OpenWeatherProvider(WeatherProviderBase):
    """
    Weather provider using the free OpenWeather APIs.

    Current Weather API: https://openweathermap.org/current
    5 day / 3 hour forecast: https://openweathermap.org/forecast5

    The free tier has no historical data and forecasts reach at most
    five days ahead; requests outside that window fail without a network call.
    """

    name = "openweather"

    CURRENT_URL = "https://api.openweathermap.org/data/2.5/weather"
    FORECAST_URL = "https://api.openweathermap.org/data/2.5/forecast"

    def __init__(self, api_key: str, units: str = "metric", lang: Optional[str] = None, **kwargs):
        """
        Initialize OpenWeather provider.

        Args:
            api_key: OpenWeather API key
            units: Units passed to the API; "metric" yields Celsius and m/s
            lang: Language code for descriptions (e.g., "en", "de")
        """
        super().__init__(api_key, **kwargs)
        self.units = units
        self.lang = lang

    def get_weather(self, request: WeatherRequest) -> WeatherResponse:
        now = self.clock()
        date_request = classify_date(now, request.when)
        logging.debug(f"OpenWeather request classified as {date_request.kind.value}")

        if date_request.kind is DateKind.CURRENT:
            return self._fetch_current(request, now)

        if date_request.kind is DateKind.PAST:
            raise CapabilityError(
                f"OpenWeather: historical weather not supported "
                f"(requested {date_request.when.isoformat()})"
            )

        limit = now + FORECAST_HORIZON
        if date_request.when > limit:
            raise CapabilityError(
                f"OpenWeather: forecast only available for the next 5 days "
                f"[{now.isoformat()}, {limit.isoformat()}], "
                f"requested {date_request.when.isoformat()}"
            )
        return self._fetch_forecast(request, date_request.when, now)

    def _params(self, request: WeatherRequest) -> Dict[str, Any]:
        params = {
            "q": request.address,
            "appid": self.api_key,
            "units": self.units,
        }
        if self.lang:
            params["lang"] = self.lang
        return params

    def _fetch_current(self, request: WeatherRequest, now: datetime) -> WeatherResponse:
        data = self._get_json(self.CURRENT_URL, self._params(request), "current")

        with self._decoding("current"):
            main_data = require(data, "main", "")
            weather_array = sequence(data, "weather", "")
            descriptions = [text(entry, "description", "weather[]") for entry in weather_array]

            weather_data = WeatherResponse(
                provider=self.name,
                location_name=text(data, "name", ""),
                temperature_c=number(main_data, "temp", "main"),
                feels_like_c=number(main_data, "feels_like", "main"),
                condition=condition_text(*descriptions[:1]),
                humidity_pct=humidity(main_data, "humidity", "main"),
                wind_speed_mps=number(require(data, "wind", ""), "speed", "wind"),
                observation_time=observation_time(integer(data, "dt", ""), now=now),
            )

        logging.info(f"Successfully parsed weather data: {weather_data.temperature_c}°C, {weather_data.condition}")
        return weather_data

    def _fetch_forecast(self, request: WeatherRequest, when: datetime, now: datetime) -> WeatherResponse:
        data = self._get_json(self.FORECAST_URL, self._params(request), "forecast")

        with self._decoding("forecast"):
            city = require(data, "city", "")
            location_name = f"{text(city, 'name', 'city')}, {text(city, 'country', 'city')}"

            entries = []
            for raw in sequence(data, "list", ""):
                main_data = require(raw, "main", "list[]")
                descriptions = [text(entry, "description", "list[].weather[]")
                                for entry in sequence(raw, "weather", "list[]")]
                entries.append({
                    "dt": integer(raw, "dt", "list[]"),
                    "temp": number(main_data, "temp", "list[].main"),
                    "feels_like": number(main_data, "feels_like", "list[].main"),
                    "humidity": humidity(main_data, "humidity", "list[].main"),
                    "condition": condition_text(*descriptions[:1]),
                    "wind_speed": number(require(raw, "wind", "list[]"), "speed", "list[].wind"),
                })

        if not entries:
            raise DataError(f"OpenWeather forecast for '{request.address}' contained no entries")

        target_ts = int(when.timestamp())
        entry = select_nearest(entries, target_ts, key=lambda e: e["dt"])
        logging.debug(f"Selected forecast entry dt={entry['dt']} for target {target_ts}")

        weather_data = WeatherResponse(
            provider=self.name,
            location_name=location_name,
            temperature_c=entry["temp"],
            feels_like_c=entry["feels_like"],
            condition=entry["condition"],
            humidity_pct=entry["humidity"],
            wind_speed_mps=entry["wind_speed"],
            observation_time=observation_time(entry["dt"], now=now),
        )

        logging.info(f"Successfully parsed forecast data: {weather_data.temperature_c}°C, {weather_data.condition}")
        return weather_data
