"""Core feed logic for icalfeed."""

from icalfeed.core.event_model import FeedMeta, Occurrence
from icalfeed.core.expander import OccurrenceExpander
from icalfeed.core.ics_builder import FeedDocument, build_feed, event_uid
from icalfeed.core.records import (
    DateEntry,
    DateFieldDescriptor,
    DictRecord,
    FieldKind,
    FieldValue,
    StaticFieldMetadata,
)
from icalfeed.core.recurrence import RRuleRecurrenceHelper
from icalfeed.core.style import FeedStrategy, StructuredDateFeed

__all__ = [
    "FeedMeta",
    "Occurrence",
    "OccurrenceExpander",
    "FeedDocument",
    "build_feed",
    "event_uid",
    "DateEntry",
    "DateFieldDescriptor",
    "DictRecord",
    "FieldKind",
    "FieldValue",
    "StaticFieldMetadata",
    "RRuleRecurrenceHelper",
    "FeedStrategy",
    "StructuredDateFeed",
]
