"""Weather service: one request, one provider, one upstream call."""
import logging
from datetime import datetime
from typing import Optional, Union

import requests

from credential_store import CredentialStore
from provider_registry import resolve_provider
from weather_data import WeatherRequest, WeatherResponse
from weather_provider import ProviderId, WeatherProviderError


class WeatherService:
    """
    Entry point used by the CLI.

    Resolves a provider from the credential store for every call and fetches
    exactly once. Nothing is cached and failures are not retried; provider
    errors propagate to the caller unchanged.
    """

    def __init__(self, store: CredentialStore, session: Optional[requests.Session] = None):
        """
        Initialize weather service.

        Args:
            store: Credentials and default provider
            session: HTTP session shared by the providers created here
        """
        self.store = store
        self._owns_session = session is None
        self.session = session or requests.Session()

    def close(self) -> None:
        """Close the HTTP session if the service created it."""
        if self._owns_session:
            self.session.close()

    def __enter__(self) -> "WeatherService":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def get_weather(
        self,
        address: str,
        when: Optional[datetime] = None,
        provider: Union[ProviderId, str, None] = None
    ) -> WeatherResponse:
        """
        Fetch weather for address at when (None means now).

        Raises:
            WeatherProviderError: On configuration, network, upstream or parsing failure
        """
        weather_provider = resolve_provider(self.store, provider, session=self.session)
        request = WeatherRequest(address=address, when=when)

        logging.info("Fetching weather from %s for '%s' (when=%s)",
                     weather_provider.name, address, request.when.isoformat() if request.when else "now")
        try:
            response = weather_provider.get_weather(request)
        except WeatherProviderError as e:
            logging.error("Weather fetch failed: %s", e)
            raise

        logging.info("Weather fetch successful: %s°C, %s", response.temperature_c, response.condition)
        return response
