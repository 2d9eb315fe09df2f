"""
icalfeed - iCalendar feeds from content records

Expands date, date range and recurring date fields of queried records into
timezone-adjusted occurrences and serializes them as an RFC 5545 feed.
"""

__version__ = "1.0.0"

# Public API - import commonly used components
from icalfeed.config.settings import FEED_SETTINGS, FeedSettings, FieldMapping
from icalfeed.exceptions.errors import (
    CapabilityMismatchError,
    ConfigurationError,
    DateParseError,
    FeedError,
    InvalidRangeError,
    TimezoneResolutionError,
)
from icalfeed.core.event_model import FeedMeta, Occurrence
from icalfeed.core.expander import OccurrenceExpander
from icalfeed.core.ics_builder import FeedDocument, build_feed
from icalfeed.core.records import DateFieldDescriptor, DictRecord, FieldKind, StaticFieldMetadata
from icalfeed.core.recurrence import RRuleRecurrenceHelper
from icalfeed.core.style import FeedStrategy, StructuredDateFeed

__all__ = [
    # Version
    "__version__",
    # Config
    "FEED_SETTINGS",
    "FeedSettings",
    "FieldMapping",
    # Exceptions
    "CapabilityMismatchError",
    "ConfigurationError",
    "DateParseError",
    "FeedError",
    "InvalidRangeError",
    "TimezoneResolutionError",
    # Core
    "FeedMeta",
    "Occurrence",
    "OccurrenceExpander",
    "FeedDocument",
    "build_feed",
    "DateFieldDescriptor",
    "DictRecord",
    "FieldKind",
    "StaticFieldMetadata",
    "RRuleRecurrenceHelper",
    "FeedStrategy",
    "StructuredDateFeed",
]
