"""Command-line interface: configure providers and show weather for an address."""
import argparse
import getpass
import json
import logging
import os
import sys
from datetime import datetime
from typing import List, Optional

from dotenv import load_dotenv

from credential_store import DEFAULT_PROVIDER_KEY, CredentialStore
from weather_data import WeatherResponse, to_utc
from weather_provider import ProviderId, WeatherProviderError
from weather_service import WeatherService

EPILOG = """\
examples:
  weather configure openweather
  weather provider list
  weather provider use weatherapi
  weather show "Kyiv"
  weather show "Kyiv" --date 2025-12-04T12:00:00Z
"""


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        "weather",
        description="Weather from OpenWeather or WeatherAPI.com for a given address.",
        epilog=EPILOG,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--verbose", "-v", action="store_true")
    parser.add_argument("--log-file", default=None)
    parser.add_argument("--config", default=None, help="Path to the credentials file")
    commands = parser.add_subparsers(dest="command", required=True)

    configure = commands.add_parser("configure", help="Store the API key for a provider")
    configure.add_argument("provider", metavar="PROVIDER")
    configure.add_argument("--api-key", default=None, help="Key to store (prompted if omitted)")

    show = commands.add_parser("show", help="Show weather for an address")
    show.add_argument("address", metavar="ADDRESS")
    show.add_argument("--date", default=None, metavar="RFC3339_DATETIME",
                      help="e.g. 2025-12-04T12:00:00Z; omit for current conditions")
    show.add_argument("--provider", default=None, help="Override the default provider")
    show.add_argument("--json", action="store_true", help="Print the observation as JSON")

    provider = commands.add_parser("provider", help="Provider management")
    provider_commands = provider.add_subparsers(dest="provider_command", required=True)
    provider_commands.add_parser("list", help="List providers and their status")
    use = provider_commands.add_parser("use", help="Set the default provider")
    use.add_argument("provider", metavar="PROVIDER")

    return parser.parse_args(argv)


def setup_logging(log_file: Optional[str], verbose: bool) -> None:
    log_level = logging.DEBUG if verbose else logging.WARNING
    handlers: List[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    if log_file:
        handlers.append(logging.FileHandler(log_file))
    logging.basicConfig(
        level=log_level,
        format="%(asctime)s - %(levelname)s - %(message)s",
        handlers=handlers,
    )


def parse_date(raw: Optional[str]) -> Optional[datetime]:
    """Parse an RFC 3339 timestamp into UTC; naive input is taken as UTC."""
    if raw is None:
        return None
    value = raw.strip()
    if value.endswith(("Z", "z")):
        value = value[:-1] + "+00:00"
    try:
        return to_utc(datetime.fromisoformat(value))
    except ValueError as exc:
        raise SystemExit(f"Failed to parse --date as RFC3339: {raw}") from exc


def format_weather(response: WeatherResponse) -> str:
    lines = [
        f"Provider:       {response.provider}",
        f"Location:       {response.location_name}",
        f"Observed at:    {response.observation_time.isoformat()}",
        f"Condition:      {response.condition}",
        f"Temperature:    {response.temperature_c:.1f} °C",
        f"Feels like:     {response.feels_like_c:.1f} °C",
        f"Humidity:       {response.humidity_pct} %",
        f"Wind speed:     {response.wind_speed_mps:.1f} m/s",
    ]
    return "\n".join(lines)


def run_configure(args: argparse.Namespace) -> None:
    provider_id = ProviderId.parse(args.provider)
    api_key = args.api_key or getpass.getpass(f"Enter API key for provider '{provider_id}': ")
    if not api_key.strip():
        raise SystemExit("API key must not be empty")

    store = CredentialStore.load(args.config, include_env=False)
    store.upsert_provider_api_key(provider_id, api_key.strip())
    store.save(args.config)

    print("Configuration updated.")
    print(f"Current default provider: {CredentialStore.load(args.config).default_provider_id()}")


def run_show(args: argparse.Namespace) -> None:
    when = parse_date(args.date)
    with WeatherService(CredentialStore.load(args.config)) as service:
        response = service.get_weather(args.address, when=when, provider=args.provider)

    if args.json:
        print(json.dumps(response.to_dict(), indent=2, ensure_ascii=False))
    else:
        print(format_weather(response))


def run_provider_list(args: argparse.Namespace) -> None:
    store = CredentialStore.load(args.config)
    try:
        default_id = store.default_provider_id()
    except WeatherProviderError:
        default_id = None

    print("Providers:")
    print()
    for provider_id in ProviderId.all():
        if store.is_provider_configured(provider_id):
            status = "configured, default" if provider_id == default_id else "configured"
        else:
            status = "not configured"
        print(f"  - {str(provider_id):<12}  {status}")
    print()
    print("Use `weather configure <provider>` to configure a provider.")
    print("Use `weather provider use <provider>` to switch the default provider.")


def run_provider_use(args: argparse.Namespace) -> None:
    provider_id = ProviderId.parse(args.provider)
    if not CredentialStore.load(args.config).is_provider_configured(provider_id):
        raise SystemExit(
            f"Provider '{provider_id}' is not configured. "
            f"Hint: run `weather configure {provider_id}` first to add an API key."
        )

    # Environment values are overrides only and never written to the file.
    store = CredentialStore.load(args.config, include_env=False)
    store.set_default_provider(provider_id)
    store.save(args.config)
    print(f"Default provider set to '{provider_id}'.")

    env_default = os.getenv(DEFAULT_PROVIDER_KEY)
    if env_default and env_default.strip().lower() != str(provider_id):
        print(f"Note: {DEFAULT_PROVIDER_KEY}={env_default} in the environment takes precedence.")


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    setup_logging(args.log_file, args.verbose)
    load_dotenv()

    try:
        if args.command == "configure":
            run_configure(args)
        elif args.command == "show":
            run_show(args)
        elif args.provider_command == "list":
            run_provider_list(args)
        else:
            run_provider_use(args)
    except WeatherProviderError as err:
        logging.debug("Command failed", exc_info=True)
        print(f"Error: {err}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
