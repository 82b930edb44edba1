"""Weather domain model - pure data structures independent of any API."""
from dataclasses import dataclass, asdict
from datetime import datetime, timezone
from typing import Optional


def to_utc(value: datetime) -> datetime:
    """Return an aware UTC datetime (naive values are taken as UTC)."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


@dataclass
class WeatherRequest:
    """A location and an optional point in time (None means "now")."""
    address: str
    when: Optional[datetime] = None

    def __post_init__(self):
        if self.when is not None:
            self.when = to_utc(self.when)


@dataclass
class WeatherResponse:
    """Normalized weather observation, independent of the provider that produced it."""
    provider: str
    location_name: str
    temperature_c: float
    feels_like_c: float
    condition: str  # e.g. "clear sky", "Partly cloudy"
    humidity_pct: int  # 0-100
    wind_speed_mps: float  # always meters/second
    observation_time: datetime  # UTC

    def __post_init__(self):
        if not 0 <= self.humidity_pct <= 100:
            raise ValueError(f"humidity_pct must be within 0-100, got {self.humidity_pct}")
        self.observation_time = to_utc(self.observation_time)

    def to_dict(self) -> dict:
        """JSON-friendly representation."""
        data = asdict(self)
        data["observation_time"] = self.observation_time.isoformat()
        return data
