"""Retention cutoff arithmetic.

Both the cutoff and every modification timestamp are expressed as aware
datetimes in the same zone so comparisons never mix local and UTC values.
``zone=None`` uses the system-local zone, with the UTC offset in effect at
each instant rather than one offset for the whole run.
"""

from __future__ import annotations

from datetime import datetime, timedelta, tzinfo
from typing import Optional

from .types import InvalidConfiguration


def validate_retention_days(value: object) -> int:
    """Return ``value`` as retention days, or raise ``InvalidConfiguration``."""

    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidConfiguration(
            f"Retention days must be an integer, got {value!r}."
        )
    if value <= 1:
        raise InvalidConfiguration(
            f"Please provide a valid value for deleteOlderThan. It has to be > 1 (got {value})."
        )
    return value


def compute_cutoff(
    reference: datetime,
    retention_days: int,
    *,
    zone: Optional[tzinfo] = None,
) -> datetime:
    """Return ``reference`` minus ``retention_days`` days in ``zone``.

    Naive references are read as wall-clock time in ``zone``.
    """

    days = validate_retention_days(retention_days)
    if zone is None:
        anchored = reference.astimezone()
    elif reference.tzinfo is None:
        anchored = reference.replace(tzinfo=zone)
    else:
        anchored = reference.astimezone(zone)
    return anchored - timedelta(days=days)


def to_local_datetime(epoch_millis: int, *, zone: Optional[tzinfo] = None) -> datetime:
    """Convert a filesystem modification time (ms since epoch) to ``zone``."""

    if zone is None:
        return datetime.fromtimestamp(epoch_millis / 1000.0).astimezone()
    return datetime.fromtimestamp(epoch_millis / 1000.0, tz=zone)


__all__ = [
    "compute_cutoff",
    "to_local_datetime",
    "validate_retention_days",
]
