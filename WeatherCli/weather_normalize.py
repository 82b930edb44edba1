"""Helpers shared by provider adapters to turn raw JSON into WeatherResponse fields."""
from datetime import datetime, timezone
from typing import Any, Callable, Mapping, Optional, Sequence, TypeVar

from weather_provider import DataError, DecodeError

T = TypeVar("T")

UNKNOWN_CONDITION = "Unknown"


def _field(path: str, key: str) -> str:
    return f"{path}.{key}" if path else key


def require(data: Any, key: str, path: str) -> Any:
    """Return ``data[key]``, raising DecodeError if data is not an object or the key is absent."""
    if not isinstance(data, Mapping):
        raise DecodeError(f"Expected object at '{path or 'response'}', got {type(data).__name__}")
    if key not in data:
        raise DecodeError(f"Missing field '{_field(path, key)}'")
    return data[key]


def number(data: Any, key: str, path: str) -> float:
    """
    Read a numeric field as float.

    Args:
        data: JSON object holding the field
        key: Field name
        path: Dotted location of data, used in error messages

    Returns:
        float: The value; booleans are rejected
    """
    value = require(data, key, path)
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise DecodeError(f"Field '{_field(path, key)}' must be a number, got {value!r}")
    return float(value)


def integer(data: Any, key: str, path: str) -> int:
    """Read an integer field such as a Unix timestamp; floats and booleans are rejected."""
    value = require(data, key, path)
    if isinstance(value, bool) or not isinstance(value, int):
        raise DecodeError(f"Field '{_field(path, key)}' must be an integer, got {value!r}")
    return value


def optional_integer(data: Any, key: str, path: str) -> Optional[int]:
    """Like integer(), but an absent or null field yields None."""
    if isinstance(data, Mapping) and data.get(key) is None:
        return None
    return integer(data, key, path)


def humidity(data: Any, key: str, path: str) -> int:
    """Humidity percentage; whole-valued floats are accepted."""
    value = number(data, key, path)
    if not value.is_integer() or not 0 <= value <= 100:
        raise DecodeError(f"Field '{_field(path, key)}' must be a percentage 0-100, got {value!r}")
    return int(value)


def text(data: Any, key: str, path: str) -> str:
    """Read a string field."""
    value = require(data, key, path)
    if not isinstance(value, str):
        raise DecodeError(f"Field '{_field(path, key)}' must be a string, got {value!r}")
    return value


def sequence(data: Any, key: str, path: str) -> Sequence[Any]:
    """Read a JSON array field; an empty list is returned as is."""
    value = require(data, key, path)
    if not isinstance(value, list):
        raise DecodeError(f"Field '{_field(path, key)}' must be a list, got {type(value).__name__}")
    return value


def condition_text(*candidates: Optional[str]) -> str:
    """First non-empty description, or "Unknown"."""
    for candidate in candidates:
        if candidate:
            return candidate
    return UNKNOWN_CONDITION


def kph_to_mps(kph: float) -> float:
    """
    Convert km/h to m/s.

    Args:
        kph: Speed in kilometres per hour

    Returns:
        float: Speed in metres per second
    """
    return kph / 3.6


def unix_to_utc(ts: Optional[int]) -> Optional[datetime]:
    """Convert a Unix timestamp to an aware UTC datetime, None if absent or out of range."""
    if ts is None:
        return None
    try:
        return datetime.fromtimestamp(ts, tz=timezone.utc)
    except (OverflowError, OSError, ValueError):
        return None


def observation_time(*timestamps: Optional[int], now: datetime) -> datetime:
    """First usable timestamp in the fallback chain, ending with ``now``."""
    for ts in timestamps:
        converted = unix_to_utc(ts)
        if converted is not None:
            return converted
    return now


def select_nearest(entries: Sequence[T], target_ts: int, key: Callable[[T], int]) -> T:
    """
    Pick the entry whose timestamp is closest to target_ts.

    Ties go to the earliest entry in the list.
    """
    if not entries:
        raise DataError("No timestamped entries to select from")
    return min(entries, key=lambda entry: abs(key(entry) - target_ts))
