"""Conversions between the viewer's wall-clock text and absolute UTC instants."""

import os
from datetime import datetime, timezone, tzinfo
from typing import Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

LOCAL_INPUT_FORMAT = "%Y-%m-%dT%H:%M"


def _now_local() -> datetime:
    return datetime.now().astimezone()


def resolve_timezone(name: Optional[str] = None) -> tzinfo:
    """IANA zone by name, then MOOD_TIMEZONE, then the host's local zone."""
    name = name or os.getenv("MOOD_TIMEZONE")
    if name:
        try:
            return ZoneInfo(name)
        except (ZoneInfoNotFoundError, ValueError):
            raise ValueError(f"unknown timezone {name!r}") from None
    return _now_local().tzinfo


def parse_local(value: str, tz: tzinfo) -> datetime:
    """Parse `YYYY-MM-DDTHH:MM` (seconds tolerated) as wall-clock time in `tz`.

    Raises ValueError for blank or unparsable text, and for times that fall
    in a DST gap.
    """
    if not value or not value.strip():
        raise ValueError("time is required")
    naive = datetime.fromisoformat(value.strip())
    if naive.tzinfo is not None:
        return naive
    dt = naive.replace(tzinfo=tz)
    # wall-clock times skipped by a DST change do not survive the round trip
    if dt.astimezone(timezone.utc).astimezone(tz).replace(tzinfo=None) != naive:
        raise ValueError(f"{value!r} does not exist in this timezone")
    return dt


def local_to_utc(value: str, tz: tzinfo) -> datetime:
    return parse_local(value, tz).astimezone(timezone.utc)


def utc_to_local(dt: datetime, tz: tzinfo) -> datetime:
    if dt.tzinfo is None:
        # the driver hands back naive UTC when tz_aware is off
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(tz)


def to_datetime_local(dt: datetime, tz: tzinfo) -> str:
    """Render an instant as the value of an HTML datetime-local input."""
    return utc_to_local(dt, tz).strftime(LOCAL_INPUT_FORMAT)


def utc_iso(dt: datetime) -> str:
    return utc_to_local(dt, timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


def now_input_value(tz: tzinfo) -> str:
    return to_datetime_local(datetime.now(timezone.utc), tz)
