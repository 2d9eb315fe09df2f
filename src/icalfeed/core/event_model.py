"""Data model for expanded calendar occurrences."""

from dataclasses import dataclass
from datetime import datetime
from typing import Hashable, Optional


@dataclass(frozen=True)
class Occurrence:
    """One concrete event instance ready for serialization.

    ``start`` and ``end`` are aware datetimes in the zone the feed should
    show. ``source_id`` and ``index`` identify where the instance came from
    and seed its UID.
    """

    start: datetime
    end: Optional[datetime] = None
    summary: Optional[str] = None
    location: Optional[str] = None
    description: Optional[str] = None
    source_id: Optional[Hashable] = None
    index: int = 0


@dataclass(frozen=True)
class FeedMeta:
    """Feed-level identity supplied by the view."""

    title: Optional[str] = None
    link: Optional[str] = None
    identifier: Optional[str] = None
    prodid: Optional[str] = None
