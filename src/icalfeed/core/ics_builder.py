"""ICS feed building from expanded occurrences."""

import logging
import uuid
from dataclasses import dataclass
from datetime import date, datetime
from typing import Iterable, List, Optional, Sequence, Set

import pytz
from icalendar import Calendar, Event, vText

from icalfeed.config.constants import (
    ICS_CALSCALE,
    ICS_CONTENT_TYPE,
    ICS_METHOD,
    ICS_VERSION,
)
from icalfeed.config.settings import FEED_SETTINGS, FeedSettings
from icalfeed.core.event_model import FeedMeta, Occurrence

logger = logging.getLogger(__name__)


@dataclass
class FeedDocument:
    """A built calendar plus what the host needs to serve it."""

    calendar: Calendar
    event_count: int
    content_type: str = ICS_CONTENT_TYPE

    def to_text(self) -> str:
        return _format_ics_output(self.calendar)

    def to_ical(self) -> bytes:
        return self.to_text().encode("utf-8")


def build_feed(
    occurrences: Iterable[Occurrence],
    feed_meta: Optional[FeedMeta] = None,
    settings: Optional[FeedSettings] = None,
) -> FeedDocument:
    """Build one calendar holding a VEVENT per occurrence.

    Events keep the order of ``occurrences``. An empty input yields a valid
    calendar without events.

    Args:
        occurrences: Expanded occurrences in feed order.
        feed_meta: Title, link and identity of the feed.
        settings: Feed settings; module defaults when omitted.

    Returns:
        FeedDocument wrapping the calendar.
    """
    feed_meta = feed_meta or FeedMeta()
    settings = settings or FEED_SETTINGS
    occurrences = list(occurrences)

    cal = _create_ics_calendar(feed_meta, settings)
    dtstamp = settings.dtstamp or datetime.now(pytz.utc)
    seen_uids: Set[str] = set()

    for position, occurrence in enumerate(occurrences):
        uid = _unique_uid(
            event_uid(occurrence, position, feed_meta.identifier, settings.uid_domain),
            seen_uids,
        )
        cal.add_component(_create_ics_event(occurrence, uid, dtstamp))

    if settings.include_timezones and occurrences:
        _add_timezones(cal, occurrences)

    logger.info(
        "Built feed '%s' with %d event(s)",
        feed_meta.title or feed_meta.identifier or "untitled",
        len(occurrences),
    )
    return FeedDocument(calendar=cal, event_count=len(occurrences))


def event_uid(
    occurrence: Occurrence,
    position: int,
    identifier: Optional[str] = None,
    uid_domain: str = FEED_SETTINGS.uid_domain,
) -> str:
    """Derive a UID that stays the same across renders of the same input.

    The UID is seeded from the feed identifier, the source record id and
    the occurrence index within that record. Occurrences without a source
    id fall back to their position in the feed.
    """
    source = occurrence.source_id if occurrence.source_id is not None else f"#{position}"
    seed = f"{identifier or ''}/{source}/{occurrence.index}"
    return f"{uuid.uuid5(uuid.NAMESPACE_URL, seed)}@{uid_domain}"


def _unique_uid(uid: str, seen_uids: Set[str]) -> str:
    candidate = uid
    suffix = 1
    while candidate in seen_uids:
        suffix += 1
        candidate = f"{suffix}-{uid}"
    if candidate != uid:
        logger.warning("Duplicate event UID %s renamed to %s", uid, candidate)
    seen_uids.add(candidate)
    return candidate


def _create_ics_calendar(feed_meta: FeedMeta, settings: FeedSettings) -> Calendar:
    """Create a new ICS calendar with standard headers.

    Args:
        feed_meta: Feed-level identity.
        settings: Feed settings providing the default PRODID.

    Returns:
        A new Calendar object with required headers.
    """
    cal = Calendar()
    cal.add("PRODID", feed_meta.prodid or settings.prodid)
    cal.add("VERSION", ICS_VERSION)
    cal.add("CALSCALE", ICS_CALSCALE)
    cal.add("METHOD", ICS_METHOD)
    if feed_meta.title:
        cal.add("NAME", feed_meta.title)
        cal.add("X-WR-CALNAME", feed_meta.title)
    if feed_meta.link:
        cal.add("URL", feed_meta.link)
    return cal


def _create_ics_event(occurrence: Occurrence, uid: str, dtstamp: datetime) -> Event:
    """Create an ICS event component.

    Args:
        occurrence: The occurrence to serialize.
        uid: Stable identifier for the event.
        dtstamp: Timestamp of this render.

    Returns:
        An Event component ready to add to a calendar.
    """
    ve = Event()
    ve.add("UID", uid)
    ve.add("DTSTAMP", dtstamp)

    # Zoned times serialize with TZID; no duration is invented for point events
    ve.add("DTSTART", occurrence.start)
    if occurrence.end is not None:
        ve.add("DTEND", occurrence.end)

    if occurrence.summary:
        ve.add("SUMMARY", vText(occurrence.summary))
    if occurrence.location:
        ve.add("LOCATION", vText(occurrence.location))
    if occurrence.description:
        ve.add("DESCRIPTION", vText(occurrence.description))

    return ve


def _add_timezones(cal: Calendar, occurrences: Sequence[Occurrence]) -> None:
    """Attach VTIMEZONE components covering the span of the feed."""
    instants: List[datetime] = [o.start for o in occurrences]
    instants.extend(o.end for o in occurrences if o.end is not None)
    # Whole years so DST zones always contribute both transitions
    first_date = date(min(instants).year, 1, 1)
    last_date = date(max(instants).year + 1, 1, 1)
    cal.add_missing_timezones(first_date=first_date, last_date=last_date)


def _format_ics_output(cal: Calendar) -> str:
    """Format calendar to ICS string with proper line endings.

    Args:
        cal: The Calendar object to format.

    Returns:
        ICS content string with CRLF line endings.
    """
    raw_ical = cal.to_ical()
    decoded_ical = raw_ical.decode("utf-8", errors="replace")
    # Ensure CRLF line endings per RFC5545
    crlf_ical = decoded_ical.replace("\r\n", "\n").replace("\n", "\r\n")
    return crlf_ical
