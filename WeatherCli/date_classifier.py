"""Classify a requested instant relative to "now"."""
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional


class DateKind(Enum):
    """Where a requested instant falls relative to the current time."""
    CURRENT = "current"
    PAST = "past"
    FUTURE = "future"


@dataclass(frozen=True)
class DateRequest:
    """
    Classified request time.

    Attributes:
        kind: CURRENT when no time was given, otherwise PAST or FUTURE
        when: The requested UTC instant; None for CURRENT
    """
    kind: DateKind
    when: Optional[datetime] = None


def classify_date(now: datetime, when: Optional[datetime]) -> DateRequest:
    """
    Partition a requested time into current, past or future.

    A request for exactly ``now`` counts as future.
    """
    if when is None:
        return DateRequest(DateKind.CURRENT)
    if when < now:
        return DateRequest(DateKind.PAST, when)
    return DateRequest(DateKind.FUTURE, when)
