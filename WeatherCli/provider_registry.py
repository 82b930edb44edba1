"""Resolve a provider identifier and stored credentials into a provider instance."""
import logging
from typing import Dict, Optional, Type, Union

import requests

from credential_store import CredentialStore
from openweather_provider import OpenWeatherProvider
from weather_provider import MissingCredentialError, ProviderId, WeatherProviderBase
from weatherapi_provider import WeatherApiProvider

PROVIDERS: Dict[ProviderId, Type[WeatherProviderBase]] = {
    ProviderId.OPENWEATHER: OpenWeatherProvider,
    ProviderId.WEATHERAPI: WeatherApiProvider,
}


def provider_from_config(
    provider_id: ProviderId,
    store: CredentialStore,
    session: Optional[requests.Session] = None,
    **kwargs
) -> WeatherProviderBase:
    """
    Build the provider for provider_id. No network I/O happens here.

    Raises:
        MissingCredentialError: If no API key is stored for the provider
    """
    api_key = store.provider_api_key(provider_id)
    if not api_key:
        raise MissingCredentialError(provider_id)

    logging.debug("Using weather provider %s", provider_id)
    return PROVIDERS[provider_id](api_key, session=session, **kwargs)


def default_provider_from_config(
    store: CredentialStore,
    session: Optional[requests.Session] = None,
    **kwargs
) -> WeatherProviderBase:
    """
    Build the store's default provider.

    Raises:
        NoDefaultProviderError: If the store has no default provider
        MissingCredentialError: If the default provider has no API key
    """
    provider_id = store.default_provider_id()
    return provider_from_config(provider_id, store, session=session, **kwargs)


def resolve_provider(
    store: CredentialStore,
    provider: Union[ProviderId, str, None] = None,
    session: Optional[requests.Session] = None,
    **kwargs
) -> WeatherProviderBase:
    """Explicit provider (id or name) if given, otherwise the default one."""
    if provider is None:
        return default_provider_from_config(store, session=session, **kwargs)
    if not isinstance(provider, ProviderId):
        provider = ProviderId.parse(provider)
    return provider_from_config(provider, store, session=session, **kwargs)
