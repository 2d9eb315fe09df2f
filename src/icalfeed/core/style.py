"""Feed rendering strategies."""

import abc
import logging
from typing import Iterable, Optional

from icalfeed.config.settings import FEED_SETTINGS, FeedSettings, FieldMapping
from icalfeed.core.event_model import FeedMeta
from icalfeed.core.expander import OccurrenceExpander, TimezoneSource
from icalfeed.core.ics_builder import FeedDocument, build_feed
from icalfeed.core.records import FieldMetadataProvider, SourceRecord
from icalfeed.core.timezone_utils import TimezoneLike

logger = logging.getLogger(__name__)


class FeedStrategy(abc.ABC):
    """Turns an ordered batch of records into a feed document."""

    @abc.abstractmethod
    def render(
        self,
        records: Iterable[SourceRecord],
        feed_meta: Optional[FeedMeta] = None,
        fallback_timezone: Optional[TimezoneLike] = None,
    ) -> FeedDocument:
        ...


class StructuredDateFeed(FeedStrategy):
    """Builds events from a mapped date, date range or recurrence field."""

    def __init__(
        self,
        mapping: FieldMapping,
        metadata_provider: FieldMetadataProvider,
        timezone_source: Optional[TimezoneSource] = None,
        settings: Optional[FeedSettings] = None,
    ):
        self.settings = settings or FEED_SETTINGS
        if timezone_source is None:
            default_timezone = self.settings.default_timezone
            timezone_source = lambda: default_timezone  # noqa: E731
        self.expander = OccurrenceExpander(mapping, metadata_provider, timezone_source)

    def render(
        self,
        records: Iterable[SourceRecord],
        feed_meta: Optional[FeedMeta] = None,
        fallback_timezone: Optional[TimezoneLike] = None,
    ) -> FeedDocument:
        """Expand all records and build the feed.

        Any FeedError aborts the render; no partial document is returned.
        """
        occurrences = self.expander.expand_all(records, fallback_timezone)
        return build_feed(occurrences, feed_meta, self.settings)
