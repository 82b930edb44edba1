"""API keys and default provider, persisted in a dotenv file."""
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Optional, Union

from dotenv import dotenv_values, set_key

from weather_provider import NoDefaultProviderError, ProviderId

CONFIG_FILE_ENV = "WEATHER_CONFIG_FILE"
DEFAULT_PROVIDER_KEY = "WEATHER_DEFAULT_PROVIDER"

API_KEY_VARS = {
    ProviderId.OPENWEATHER: "OPENWEATHER_API_KEY",
    ProviderId.WEATHERAPI: "WEATHERAPI_API_KEY",
}


def default_config_path() -> Path:
    override = os.getenv(CONFIG_FILE_ENV)
    if override:
        return Path(override).expanduser()
    return Path.home() / ".config" / "weather-cli" / "weather.env"


@dataclass
class CredentialStore:
    """Lookup of API keys by provider plus the designated default provider."""
    api_keys: Dict[ProviderId, str] = field(default_factory=dict)
    default_provider: Optional[str] = None

    def provider_api_key(self, provider_id: ProviderId) -> Optional[str]:
        return self.api_keys.get(provider_id) or None

    def is_provider_configured(self, provider_id: ProviderId) -> bool:
        return self.provider_api_key(provider_id) is not None

    def default_provider_id(self) -> ProviderId:
        """
        Return the default provider.

        Raises:
            NoDefaultProviderError: If no default is set
            UnknownProviderError: If the stored value is not a known provider
        """
        if not self.default_provider:
            raise NoDefaultProviderError(
                "No default provider configured. Hint: run `weather configure <provider>` "
                "(e.g. `weather configure openweather`) first."
            )
        return ProviderId.parse(self.default_provider)

    def set_default_provider(self, provider_id: ProviderId) -> None:
        self.default_provider = str(provider_id)

    def upsert_provider_api_key(self, provider_id: ProviderId, api_key: str) -> None:
        """Store a key; the first configured provider becomes the default."""
        self.api_keys[provider_id] = api_key
        if not self.default_provider:
            self.set_default_provider(provider_id)

    @classmethod
    def load(cls, path: Union[str, Path, None] = None, include_env: bool = True) -> "CredentialStore":
        """
        Load the store from a dotenv file.

        Args:
            path: dotenv file; defaults to default_config_path()
            include_env: Let environment variables with the same names take
                precedence over the file. Pass False to get only what the file
                holds, e.g. before calling save().

        A missing file yields an empty store.
        """
        path = Path(path) if path else default_config_path()
        values: Dict[str, Optional[str]] = {}
        if path.exists():
            values.update(dotenv_values(path))
            logging.debug("Loaded weather config from %s", path)
        else:
            logging.debug("No weather config at %s", path)

        if include_env:
            for name in list(API_KEY_VARS.values()) + [DEFAULT_PROVIDER_KEY]:
                if os.getenv(name):
                    values[name] = os.getenv(name)

        api_keys = {
            provider_id: values[var]
            for provider_id, var in API_KEY_VARS.items()
            if values.get(var)
        }
        return cls(api_keys=api_keys, default_provider=values.get(DEFAULT_PROVIDER_KEY) or None)

    def save(self, path: Union[str, Path, None] = None) -> Path:
        """Write keys and default provider to the dotenv file, creating directories as needed."""
        path = Path(path) if path else default_config_path()
        path.parent.mkdir(parents=True, exist_ok=True)
        path.touch(exist_ok=True)

        for provider_id, api_key in self.api_keys.items():
            set_key(str(path), API_KEY_VARS[provider_id], api_key)
        if self.default_provider:
            set_key(str(path), DEFAULT_PROVIDER_KEY, self.default_provider)

        logging.info("Saved weather config to %s", path)
        return path
