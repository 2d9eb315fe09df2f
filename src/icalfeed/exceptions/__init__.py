"""Custom exceptions for icalfeed."""

from icalfeed.exceptions.errors import (
    FeedError,
    ConfigurationError,
    TimezoneResolutionError,
    DateParseError,
    InvalidRangeError,
    CapabilityMismatchError,
)

__all__ = [
    "FeedError",
    "ConfigurationError",
    "TimezoneResolutionError",
    "DateParseError",
    "InvalidRangeError",
    "CapabilityMismatchError",
]
