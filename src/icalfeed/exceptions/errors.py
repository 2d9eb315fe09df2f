"""Exception classes for icalfeed.

Every exception raised here is fatal for the render that triggered it: the
host gets one failure and no partial feed.
"""

from typing import Any, Optional


class FeedError(Exception):
    """Base class for all feed generation failures."""


class ConfigurationError(FeedError):
    """The field mapping or feed settings cannot be used."""

    def __init__(self, message: str, field_name: Optional[str] = None):
        self.field_name = field_name
        super().__init__(message)


class TimezoneResolutionError(ConfigurationError):
    """A configured timezone name does not resolve to a known zone."""

    def __init__(self, tz_name: str):
        self.tz_name = tz_name
        super().__init__(f"Unknown timezone '{tz_name}'")


class DateParseError(FeedError):
    """A stored date value cannot be read as an instant."""

    def __init__(self, field_name: str, value: Any, record_id: Any = None):
        self.field_name = field_name
        self.value = value
        self.record_id = record_id
        super().__init__(self._describe())

    def _describe(self) -> str:
        return (
            f"Cannot parse date {self.value!r} in field '{self.field_name}' "
            f"of record {self.record_id!r}"
        )


class InvalidRangeError(DateParseError):
    """A date range ends before it starts."""

    def __init__(self, field_name: str, start: Any, end: Any, record_id: Any = None):
        self.start = start
        self.end = end
        super().__init__(field_name, end, record_id)

    def _describe(self) -> str:
        return (
            f"Range in field '{self.field_name}' of record {self.record_id!r} "
            f"ends ({self.end}) before it starts ({self.start})"
        )


class CapabilityMismatchError(FeedError):
    """A record's field does not carry the data its descriptor promises."""

    def __init__(self, field_name: str, record_id: Any = None, expected: str = "recurrence"):
        self.field_name = field_name
        self.record_id = record_id
        self.expected = expected
        super().__init__(
            f"Field '{field_name}' of record {record_id!r} "
            f"does not provide {expected} data"
        )
