"""Configuration module for icalfeed."""

from icalfeed.config.settings import FEED_SETTINGS, FeedSettings, FieldMapping
from icalfeed.config.constants import (
    ICS_PRODID,
    ICS_CONTENT_TYPE,
    DEFAULT_UID_DOMAIN,
    DEFAULT_MAX_OCCURRENCES,
    DEFAULT_TIMEZONE,
)

__all__ = [
    "FEED_SETTINGS",
    "FeedSettings",
    "FieldMapping",
    "ICS_PRODID",
    "ICS_CONTENT_TYPE",
    "DEFAULT_UID_DOMAIN",
    "DEFAULT_MAX_OCCURRENCES",
    "DEFAULT_TIMEZONE",
]
