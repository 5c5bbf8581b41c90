"""Conversions between ISO-8601 strings and Unix seconds."""

import re
from typing import Tuple, Union

import pandas as pd

SECONDS_PER_DAY = 86400

# Calendar date, optional time and offset; rejects "now", "today" and friends
_ISO_8601_PATTERN = re.compile(
    r"^\d{4}-\d{2}-\d{2}"
    r"([T ]\d{2}:\d{2}(:\d{2}(\.\d+)?)?)?"
    r"(Z|[+-]\d{2}(:?\d{2})?)?$"
)

# Whole seconds representable by pd.Timestamp
_TIMESTAMP_MIN_SECONDS = -(-pd.Timestamp.min.value // 10**9)
_TIMESTAMP_MAX_SECONDS = pd.Timestamp.max.value // 10**9


def parse_instant(value: Union[str, int]) -> int:
    """
    Parse an instant into signed Unix seconds.

    Strings must be ISO-8601; naive values are taken as UTC.
    Integers are passed through as Unix seconds.

    Raises:
        ValueError: If the value is not a valid instant
    """
    if isinstance(value, bool):
        raise ValueError(f"Not an instant: {value!r}")
    if isinstance(value, int):
        return value
    if not isinstance(value, str) or not _ISO_8601_PATTERN.match(value.strip()):
        raise ValueError(f"Not an instant: {value!r}")

    ts = pd.to_datetime(value.strip(), format="ISO8601", utc=True)
    return int(ts.timestamp())


def _civil_from_days(days: int) -> Tuple[int, int, int]:
    # Proleptic Gregorian date for a day count since 1970-01-01
    z = days + 719468
    era = z // 146097
    doe = z - era * 146097
    yoe = (doe - doe // 1460 + doe // 36524 - doe // 146096) // 365
    doy = doe - (365 * yoe + yoe // 4 - yoe // 100)
    mp = (5 * doy + 2) // 153
    day = doy - (153 * mp + 2) // 5 + 1
    month = mp + 3 if mp < 10 else mp - 9
    year = yoe + era * 400 + (1 if month <= 2 else 0)
    return year, month, day


def to_iso(seconds: int) -> str:
    """
    Format Unix seconds as an ISO-8601 UTC string.

    Defined for every signed 64-bit value. Years outside 0000-9999 use the
    expanded form with an explicit sign, e.g. ``+10000-01-01T00:00:00Z``.
    """
    if _TIMESTAMP_MIN_SECONDS <= seconds <= _TIMESTAMP_MAX_SECONDS:
        ts = pd.Timestamp(seconds, unit="s", tz="UTC")
        return ts.strftime("%Y-%m-%dT%H:%M:%SZ")

    days, remainder = divmod(seconds, SECONDS_PER_DAY)
    year, month, day = _civil_from_days(days)
    hour, remainder = divmod(remainder, 3600)
    minute, second = divmod(remainder, 60)
    year_text = f"{year:04d}" if 0 <= year <= 9999 else f"{year:+05d}"
    return f"{year_text}-{month:02d}-{day:02d}T{hour:02d}:{minute:02d}:{second:02d}Z"
