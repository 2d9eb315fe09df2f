import json
from datetime import datetime
from pathlib import Path
from typing import Any, Dict

import pytest
import pytz
from icalendar import Calendar

from icalfeed.__main__ import main
from icalfeed.config.settings import FeedSettings, FieldMapping
from icalfeed.core.event_model import FeedMeta
from icalfeed.core.json_source import records_from_json
from icalfeed.core.recurrence import RRuleRecurrenceHelper
from icalfeed.core.style import FeedStrategy, StructuredDateFeed
from icalfeed.exceptions import DateParseError

SETTINGS = FeedSettings(dtstamp=datetime(2024, 1, 1, tzinfo=pytz.utc), default_timezone="UTC")


def payload() -> Dict[str, Any]:
    return {
        "fields": {
            "field_date": {"type": "daterange"},
            "title": {"type": "string"},
            "body": {"type": "text_long"},
        },
        "records": [
            {
                "id": 10,
                "field_date": [{"value": "2024-06-01T10:00:00", "end_value": "2024-06-01T12:00:00"}],
                "title": "Standup",
                "body": "<p>Daily <em>sync</em></p>",
            },
            {
                "id": 11,
                "field_date": [{"value": "2024-06-02T10:00:00"}, {"value": "2024-06-03T10:00:00"}],
                "title": "Retro",
                "body": "",
            },
        ],
    }


def render(data: Dict[str, Any], **kwargs) -> Calendar:
    metadata, records = records_from_json(data, SETTINGS)
    feed = StructuredDateFeed(
        FieldMapping("field_date", summary_field="title", description_field="body"),
        metadata,
        settings=SETTINGS,
    )
    document = feed.render(records, FeedMeta(title="Events", identifier="events"), **kwargs)
    return Calendar.from_ical(document.to_ical())


def test_structured_feed_is_a_feed_strategy() -> None:
    assert issubclass(StructuredDateFeed, FeedStrategy)


def test_render_expands_every_record_in_order() -> None:
    calendar = render(payload(), fallback_timezone="America/New_York")
    events = list(calendar.walk("VEVENT"))

    assert [str(e.get("SUMMARY")) for e in events] == ["Standup", "Retro", "Retro"]
    assert str(events[0].get("DESCRIPTION")) == "Daily sync"
    assert events[1].get("DESCRIPTION") is None
    assert events[0].decoded("DTSTART").isoformat() == "2024-06-01T06:00:00-04:00"
    assert events[0]["DTSTART"].params["TZID"] == "America/New_York"


def test_render_falls_back_to_settings_timezone() -> None:
    calendar = render(payload())
    first = next(iter(calendar.walk("VEVENT")))

    assert first.decoded("DTSTART") == datetime(2024, 6, 1, 10, tzinfo=pytz.utc)


def test_repeated_renders_are_identical() -> None:
    first = render(payload()).to_ical()
    second = render(payload()).to_ical()

    assert first == second


def test_bad_date_aborts_the_render() -> None:
    data = payload()
    data["records"][1]["field_date"] = [{"value": "not-a-date"}]

    with pytest.raises(DateParseError) as excinfo:
        render(data)

    assert excinfo.value.record_id == 11


def test_recurring_values_become_rrule_helpers() -> None:
    data = {
        "fields": {"field_when": {"type": "date_recur", "timezone_override": "Europe/Paris"}},
        "records": [
            {
                "id": "r1",
                "field_when": [{
                    "rrule": "FREQ=WEEKLY;COUNT=4",
                    "value": "2024-06-03T07:00:00",
                    "end_value": "2024-06-03T08:00:00",
                    "timezone": "Europe/Paris",
                }],
            }
        ],
    }

    metadata, records = records_from_json(data, SETTINGS)
    assert isinstance(records[0].fields["field_when"][0], RRuleRecurrenceHelper)

    feed = StructuredDateFeed(FieldMapping("field_when"), metadata, settings=SETTINGS)
    document = feed.render(records)
    text = document.to_text()

    assert document.event_count == 4
    assert text.count("BEGIN:VEVENT") == 4
    assert "DTSTART;TZID=Europe/Paris:20240603T090000" in text
    assert "DTSTART;TZID=Europe/Paris:20240624T090000" in text


def test_cli_writes_feed(tmp_path: Path) -> None:
    source = tmp_path / "records.json"
    source.write_text(json.dumps(payload()))
    target = tmp_path / "feed.ics"

    code = main([
        str(source),
        "--date-field", "field_date",
        "--summary-field", "title",
        "--timezone", "Europe/Berlin",
        "--title", "Team",
        "-o", str(target),
    ])

    assert code == 0
    calendar = Calendar.from_ical(target.read_bytes())
    assert len(list(calendar.walk("VEVENT"))) == 3
    assert str(calendar.get("X-WR-CALNAME")) == "Team"


def test_cli_reports_failure(tmp_path: Path) -> None:
    data = payload()
    data["records"][0]["field_date"] = [{"value": "not-a-date"}]
    source = tmp_path / "records.json"
    source.write_text(json.dumps(data))
    target = tmp_path / "feed.ics"

    code = main([str(source), "--date-field", "field_date", "--timezone", "UTC", "-o", str(target)])

    assert code == 1
    assert not target.exists()


def test_cli_rejects_unknown_date_field(tmp_path: Path) -> None:
    source = tmp_path / "records.json"
    source.write_text(json.dumps(payload()))

    assert main([str(source), "--date-field", "title", "--timezone", "UTC"]) == 1
