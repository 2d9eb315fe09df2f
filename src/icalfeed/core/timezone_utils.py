"""Timezone resolution and UTC conversion utilities."""

import logging
from datetime import datetime, tzinfo
from typing import Union

import pytz
import tzlocal
from dateutil import parser
from dateutil import tz as du_tz

from icalfeed.config.constants import ABBR_TO_TZ
from icalfeed.exceptions.errors import TimezoneResolutionError

logger = logging.getLogger(__name__)

TimezoneLike = Union[str, tzinfo]
DateValue = Union[str, datetime]


def local_timezone_name() -> str:
    """Return the IANA name of the host system zone."""
    local_tz_obj = tzlocal.get_localzone()
    return getattr(local_tz_obj, "zone", None) or str(local_tz_obj)


def resolve_timezone(tz_value: TimezoneLike) -> tzinfo:
    """Resolve a timezone name or object to a tzinfo.

    Accepts IANA names, common abbreviations ("EST", "CET"), "local" for the
    system zone, or an existing tzinfo which is returned unchanged.

    Args:
        tz_value: The timezone name or object.

    Returns:
        A tzinfo, pytz-backed where possible.

    Raises:
        TimezoneResolutionError: If the name is unknown.
    """
    if isinstance(tz_value, tzinfo):
        return tz_value

    tz_str_raw = (tz_value or "").strip()
    if not tz_str_raw:
        raise TimezoneResolutionError(str(tz_value))

    tz_upper = tz_str_raw.upper()
    if tz_upper == "LOCAL":
        tz_name = local_timezone_name()
    elif tz_upper in ("UTC", "Z"):
        return pytz.utc
    else:
        tz_name = ABBR_TO_TZ.get(tz_upper, tz_str_raw)

    try:
        return pytz.timezone(tz_name)
    except pytz.UnknownTimeZoneError:
        # Last-ditch attempt with dateutil (may return fixed offset)
        fallback = du_tz.gettz(tz_name)
        if fallback is None:
            logger.error("Couldn't resolve timezone '%s'", tz_str_raw)
            raise TimezoneResolutionError(tz_str_raw)
        logger.debug("Resolved timezone '%s' through dateutil", tz_str_raw)
        return fallback


def timezone_name(tzobj: tzinfo) -> str:
    """Best-effort display name for a tzinfo."""
    return getattr(tzobj, "zone", None) or getattr(tzobj, "key", None) or str(tzobj)


def as_utc(value: datetime) -> datetime:
    """Return ``value`` as an aware UTC datetime; naive values are taken as UTC."""
    if value.tzinfo is None or value.tzinfo.utcoffset(value) is None:
        return pytz.utc.localize(value)
    return value.astimezone(pytz.utc)


def parse_utc_value(value: Union[str, datetime]) -> datetime:
    """Parse a stored UTC wall-clock value.

    Values must be ISO 8601; missing date parts are never filled in from the
    current day. Strings without an offset are read as UTC; strings with one
    are converted.

    Args:
        value: ISO 8601 date string or datetime.

    Returns:
        An aware datetime in UTC.

    Raises:
        ValueError: If the value is not a recognizable date.
    """
    if isinstance(value, datetime):
        return as_utc(value)
    if not isinstance(value, str) or not value.strip():
        raise ValueError(f"Not a date value: {value!r}")
    try:
        parsed = parser.isoparse(value.strip())
    except (ValueError, OverflowError) as exc:
        raise ValueError(f"Not a date value: {value!r}") from exc
    return as_utc(parsed)


def convert_to_zone(value: datetime, tzobj: tzinfo) -> datetime:
    """Convert an instant to ``tzobj``; naive input is taken as UTC."""
    return as_utc(value).astimezone(tzobj)
