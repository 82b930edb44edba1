"""WeatherAPI.com provider implementation (current, forecast and history)."""
import logging
from datetime import datetime
from typing import Any, Dict

from date_classifier import DateKind, classify_date
from weather_data import WeatherRequest, WeatherResponse
from weather_normalize import (
    condition_text,
    humidity,
    integer,
    kph_to_mps,
    number,
    observation_time,
    optional_integer,
    require,
    select_nearest,
    sequence,
    text,
)
from weather_provider import DataError, WeatherProviderBase


class WeatherApiProvider(WeatherProviderBase):
    """
    Weather provider using WeatherAPI.com: https://www.weatherapi.com/docs/

    Serves current conditions, forecasts and history alike. Wind speed is
    reported in km/h and converted to m/s.
    """

    name = "weatherapi"

    CURRENT_URL = "https://api.weatherapi.com/v1/current.json"
    FORECAST_URL = "https://api.weatherapi.com/v1/forecast.json"
    HISTORY_URL = "https://api.weatherapi.com/v1/history.json"

    def get_weather(self, request: WeatherRequest) -> WeatherResponse:
        now = self.clock()
        date_request = classify_date(now, request.when)
        logging.debug(f"WeatherAPI request classified as {date_request.kind.value}")

        if date_request.kind is DateKind.CURRENT:
            return self._fetch_current(request, now)
        if date_request.kind is DateKind.FUTURE:
            return self._fetch_at(request, date_request.when, now, is_forecast=True)
        return self._fetch_at(request, date_request.when, now, is_forecast=False)

    def _location_name(self, data: Any) -> str:
        location = require(data, "location", "")
        return f"{text(location, 'name', 'location')}, {text(location, 'country', 'location')}"

    def _fetch_current(self, request: WeatherRequest, now: datetime) -> WeatherResponse:
        params = {"key": self.api_key, "q": request.address}
        data = self._get_json(self.CURRENT_URL, params, "current")

        with self._decoding("current"):
            location_name = self._location_name(data)
            location = data["location"]
            current = require(data, "current", "")
            condition = require(current, "condition", "current")

            weather_data = WeatherResponse(
                provider=self.name,
                location_name=location_name,
                temperature_c=number(current, "temp_c", "current"),
                feels_like_c=number(current, "feelslike_c", "current"),
                condition=condition_text(text(condition, "text", "current.condition")),
                humidity_pct=humidity(current, "humidity", "current"),
                wind_speed_mps=kph_to_mps(number(current, "wind_kph", "current")),
                observation_time=observation_time(
                    optional_integer(current, "last_updated_epoch", "current"),
                    optional_integer(location, "localtime_epoch", "location"),
                    now=now,
                ),
            )

        logging.info(f"Successfully parsed weather data: {weather_data.temperature_c}°C, {weather_data.condition}")
        return weather_data

    def _fetch_at(self, request: WeatherRequest, when: datetime, now: datetime, is_forecast: bool) -> WeatherResponse:
        operation = "forecast" if is_forecast else "history"
        url = self.FORECAST_URL if is_forecast else self.HISTORY_URL

        target_ts = int(when.timestamp())
        params: Dict[str, Any] = {
            "key": self.api_key,
            "q": request.address,
            "unixdt": target_ts,
            "hour": when.hour,
        }
        data = self._get_json(url, params, operation)

        with self._decoding(operation):
            location_name = self._location_name(data)
            forecast = require(data, "forecast", "")
            days = sequence(forecast, "forecastday", "forecast")
            if not days:
                raise DataError(f"WeatherAPI {operation} response contained no forecastday data "
                                f"(requested {when.isoformat()})")

            hours = []
            for raw in sequence(days[0], "hour", "forecast.forecastday[0]"):
                path = "forecast.forecastday[0].hour[]"
                condition = require(raw, "condition", path)
                hours.append({
                    "time_epoch": integer(raw, "time_epoch", path),
                    "temp_c": number(raw, "temp_c", path),
                    "feelslike_c": number(raw, "feelslike_c", path),
                    "humidity": humidity(raw, "humidity", path),
                    "wind_kph": number(raw, "wind_kph", path),
                    "condition": condition_text(text(condition, "text", f"{path}.condition")),
                })

        if not hours:
            raise DataError(f"WeatherAPI {operation} response contained no hourly data "
                            f"(requested {when.isoformat()})")

        hour_entry = select_nearest(hours, target_ts, key=lambda h: h["time_epoch"])
        logging.debug(f"Selected hour entry time_epoch={hour_entry['time_epoch']} for target {target_ts}")

        weather_data = WeatherResponse(
            provider=self.name,
            location_name=location_name,
            temperature_c=hour_entry["temp_c"],
            feels_like_c=hour_entry["feelslike_c"],
            condition=hour_entry["condition"],
            humidity_pct=hour_entry["humidity"],
            wind_speed_mps=kph_to_mps(hour_entry["wind_kph"]),
            observation_time=observation_time(hour_entry["time_epoch"], now=now),
        )

        logging.info(f"Successfully parsed {operation} data: {weather_data.temperature_c}°C, {weather_data.condition}")
        return weather_data
