"""Weather provider abstraction - allows swapping different weather APIs."""
import logging
from abc import ABC, abstractmethod
from contextlib import contextmanager
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Callable, Dict, List, Optional
from urllib.parse import quote, quote_plus

import requests

from weather_data import WeatherRequest, WeatherResponse


class WeatherProviderError(Exception):
    """Exception raised when a weather provider fails."""
    pass


class ConfigurationError(WeatherProviderError):
    """A provider could not be resolved from the stored configuration."""
    pass


class NoDefaultProviderError(ConfigurationError):
    pass


class UnknownProviderError(ConfigurationError):
    pass


class MissingCredentialError(ConfigurationError):
    """Provider is known but no API key is stored for it."""

    def __init__(self, provider_id: "ProviderId"):
        self.provider_id = provider_id
        super().__init__(
            f"No API key configured for provider '{provider_id}'. "
            f"Hint: run `weather configure {provider_id}` and enter your API key."
        )


class TransportError(WeatherProviderError):
    """Network-level failure before an HTTP status was obtained."""
    pass


class UpstreamError(WeatherProviderError):
    """Upstream service answered with a non-2xx status."""

    def __init__(self, provider: str, status: int, body_excerpt: str, operation: str = ""):
        self.provider = provider
        self.status = status
        self.body_excerpt = body_excerpt
        what = f"{provider} {operation}".strip()
        super().__init__(f"{what} request failed with status {status}: {body_excerpt}")


class DecodeError(WeatherProviderError):
    """Payload did not match the expected schema."""
    pass


class CapabilityError(WeatherProviderError):
    """Request falls outside what the provider can serve."""
    pass


class DataError(WeatherProviderError):
    """Well-formed response without any usable entries."""
    pass


class ProviderId(Enum):
    """Closed set of supported providers."""
    OPENWEATHER = "openweather"
    WEATHERAPI = "weatherapi"

    def __str__(self) -> str:
        return self.value

    @classmethod
    def all(cls) -> List["ProviderId"]:
        return list(cls)

    @classmethod
    def parse(cls, text: str) -> "ProviderId":
        """Case-insensitive lookup by canonical name."""
        wanted = text.strip().lower()
        for provider_id in cls:
            if provider_id.value == wanted:
                return provider_id
        supported = ", ".join(p.value for p in cls)
        raise UnknownProviderError(f"Unknown provider '{text}'. Supported providers: {supported}.")


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def truncate_body(body: str, limit: int = 200) -> str:
    """Shorten a response body for error messages and logs."""
    if len(body) > limit:
        return f"{body[:limit]}..."
    return body


class WeatherProviderBase(ABC):
    """Abstract base class for weather data providers."""

    name = ""

    def __init__(
        self,
        api_key: str,
        session: Optional[requests.Session] = None,
        clock: Callable[[], datetime] = utc_now,
        timeout: int = 10
    ):
        """
        Initialize provider.

        Args:
            api_key: Provider API key (never logged)
            session: HTTP session to reuse; a new one is created if omitted
            clock: Returns the current UTC time, used to classify requests
            timeout: HTTP request timeout in seconds
        """
        self.api_key = api_key
        self._owns_session = session is None
        self.session = session or requests.Session()
        self.clock = clock
        self.timeout = timeout

    def close(self) -> None:
        """Close the HTTP session if this provider created it."""
        if self._owns_session:
            self.session.close()

    @abstractmethod
    def get_weather(self, request: WeatherRequest) -> WeatherResponse:
        """
        Fetch weather for the requested location and time.

        Returns:
            WeatherResponse: Normalized observation

        Raises:
            WeatherProviderError: If the provider fails to fetch data
        """
        pass

    def _redact(self, message: str) -> str:
        """Mask the API key, raw or URL-encoded, in text bound for logs or errors."""
        if not self.api_key:
            return message
        for form in {self.api_key, quote(self.api_key, safe=""), quote_plus(self.api_key)}:
            message = message.replace(form, "***")
        return message

    @contextmanager
    def _decoding(self, operation: str):
        """Prefix schema errors raised inside the block with provider and operation."""
        try:
            yield
        except DecodeError as e:
            logging.error(f"Failed to parse {self.name} {operation} response: {e}")
            raise DecodeError(f"{self.name} {operation} response: {e}") from e

    def _get_json(self, url: str, params: Dict[str, Any], operation: str) -> Any:
        """Issue a single GET and return the decoded JSON body."""
        safe_params = {k: ("***" if v == self.api_key else v) for k, v in params.items()}
        logging.info(f"Making {self.name} {operation} request: {url}")
        logging.debug(f"Request parameters: {safe_params}")

        try:
            response = self.session.get(url, params=params, timeout=self.timeout)
        except requests.exceptions.RequestException as e:
            # requests messages carry the full URL, API key included
            reason = self._redact(f"{type(e).__name__}: {e}")
            logging.error(f"Network error during {self.name} {operation} request: {reason}")
            raise TransportError(f"Failed to send request to {self.name} ({operation}): {reason}") from None

        logging.info(f"API response status: {response.status_code}")
        body = response.text

        if not 200 <= response.status_code < 300:
            excerpt = truncate_body(self._redact(body))
            logging.error(f"{self.name} {operation} request failed with status {response.status_code}")
            raise UpstreamError(self.name, response.status_code, excerpt, operation)

        try:
            data = response.json()
        except ValueError as e:
            logging.error(f"Non-JSON {self.name} response: {truncate_body(self._redact(body))}")
            raise DecodeError(f"Failed to parse {self.name} {operation} JSON: {e}") from e

        logging.debug(f"API response (truncated): {truncate_body(self._redact(body), 500)}")
        return data
