"""Time helpers for AC Transit timestamps.

AC Transit sends naive local times like "2017-04-17T22:30:00". They are always
Pacific time, whatever zone this process runs in.
"""

import re
from datetime import datetime, timedelta
from zoneinfo import ZoneInfo

from actransit_mcp.data.errors import TransitTimeParseError

TRANSIT_TIMEZONE = ZoneInfo("America/Los_Angeles")
TRANSIT_TIME_FORMAT = "%Y-%m-%dT%H:%M:%S"

# strptime accepts single-digit fields, the API never sends them
_TRANSIT_TIME_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}$")

_ONE_SECOND_US = 1_000_000


def parse_transit_time(time_str: str) -> datetime:
    """Parse an AC Transit timestamp into an aware datetime.

    Args:
        time_str: Timestamp in YYYY-MM-DDTHH:MM:SS format.

    Returns:
        Datetime anchored to America/Los_Angeles.

    Raises:
        TransitTimeParseError: If the string does not match the layout.
    """
    if not isinstance(time_str, str) or not _TRANSIT_TIME_PATTERN.match(time_str):
        raise TransitTimeParseError(time_str)

    try:
        naive = datetime.strptime(time_str, TRANSIT_TIME_FORMAT)
    except ValueError as e:
        raise TransitTimeParseError(time_str) from e

    return naive.replace(tzinfo=TRANSIT_TIMEZONE)


def format_transit_time(dt: datetime) -> str:
    """Format a datetime in the AC Transit layout.

    Aware datetimes are converted to Pacific time first. Naive ones are taken
    to already be Pacific wall time.
    """
    if dt.tzinfo is not None:
        dt = dt.astimezone(TRANSIT_TIMEZONE)
    # strftime("%Y") does not zero-pad years below 1000 on every platform
    return (
        f"{dt.year:04d}-{dt.month:02d}-{dt.day:02d}"
        f"T{dt.hour:02d}:{dt.minute:02d}:{dt.second:02d}"
    )


def truncate_to_seconds(duration: timedelta) -> timedelta:
    """Drop the sub-second part of a duration, truncating toward zero.

    timedelta normalizes negative values as (-1 day + positive remainder), so
    this works on total microseconds instead of the seconds/microseconds fields.

    Examples:
        1.9s -> 1s, -1.9s -> -1s
    """
    total_us = duration // timedelta(microseconds=1)
    sign = -1 if total_us < 0 else 1
    whole_us = (abs(total_us) // _ONE_SECOND_US) * _ONE_SECOND_US
    return timedelta(microseconds=sign * whole_us)
