from datetime import datetime
from pathlib import Path

import pytest
import pytz

from icalfeed.config.settings import FeedSettings, FieldMapping
from icalfeed.core import timezone_utils
from icalfeed.core.records import DictRecord, FieldKind, FieldValue, StaticFieldMetadata
from icalfeed.exceptions import ConfigurationError, TimezoneResolutionError
from icalfeed.utils.text import strip_tags


def test_field_mapping_requires_date_field() -> None:
    with pytest.raises(ConfigurationError) as excinfo:
        FieldMapping.from_options({"summary_field": "title"})

    assert excinfo.value.field_name == "date_field"


def test_field_mapping_normalizes_blank_optional_fields() -> None:
    mapping = FieldMapping.from_options({
        "date_field": "field_date",
        "summary_field": "title",
        "location_field": "",
        "description_field": None,
    })

    assert mapping.location_field is None
    assert mapping.text_fields() == {"summary": "title"}
    assert mapping.field_names() == ["field_date", "title"]


def test_settings_from_env_file_and_environment(tmp_path: Path) -> None:
    env_file = tmp_path / ".env"
    env_file.write_text(
        "ICALFEED_PRODID=-//From File//EN\n"
        "ICALFEED_MAX_OCCURRENCES=20\n"
        "ICALFEED_INCLUDE_TIMEZONES=yes\n"
    )

    settings = FeedSettings.from_env(env_file, environ={"ICALFEED_MAX_OCCURRENCES": "50"})

    assert settings.prodid == "-//From File//EN"
    assert settings.max_occurrences == 50
    assert settings.include_timezones is True
    assert settings.default_timezone == "local"


def test_settings_reject_bad_ceiling() -> None:
    with pytest.raises(ConfigurationError):
        FeedSettings.from_env(environ={"ICALFEED_MAX_OCCURRENCES": "lots"})


def test_resolve_timezone_handles_names_and_abbreviations() -> None:
    assert timezone_utils.resolve_timezone("EST").zone == "America/New_York"
    assert timezone_utils.resolve_timezone("utc") is pytz.utc
    assert timezone_utils.resolve_timezone("Europe/Oslo").zone == "Europe/Oslo"


def test_resolve_timezone_uses_system_zone_for_local(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(timezone_utils.tzlocal, "get_localzone", lambda: pytz.timezone("Europe/Paris"))

    assert timezone_utils.resolve_timezone("local").zone == "Europe/Paris"


def test_unknown_timezone_is_an_error() -> None:
    with pytest.raises(TimezoneResolutionError) as excinfo:
        timezone_utils.resolve_timezone("Mars/Olympus_Mons")

    assert excinfo.value.tz_name == "Mars/Olympus_Mons"


def test_parse_utc_value_reads_naive_text_as_utc() -> None:
    assert timezone_utils.parse_utc_value("2024-06-01T10:00:00") == datetime(2024, 6, 1, 10, tzinfo=pytz.utc)
    assert timezone_utils.parse_utc_value("2024-06-01T10:00:00+02:00") == datetime(2024, 6, 1, 8, tzinfo=pytz.utc)

    with pytest.raises(ValueError):
        timezone_utils.parse_utc_value("not-a-date")
    with pytest.raises(ValueError):
        timezone_utils.parse_utc_value("")
    with pytest.raises(ValueError):
        timezone_utils.parse_utc_value("10:00")


def test_field_kind_from_host_types() -> None:
    assert FieldKind.from_field_type("datetime") is FieldKind.INSTANT
    assert FieldKind.from_field_type("daterange") is FieldKind.INSTANT_RANGE
    assert FieldKind.from_field_type("date_recur") is FieldKind.RECURRING

    with pytest.raises(ConfigurationError):
        FieldKind.from_field_type("string")


def test_static_metadata_skips_non_date_fields() -> None:
    metadata = StaticFieldMetadata.from_field_types({
        "field_date": {"type": "daterange", "timezone_override": "Europe/Rome"},
        "title": {"type": "string"},
    })

    assert metadata.describe("field_date").timezone_override == "Europe/Rome"
    assert metadata.has_field("title")
    assert not metadata.has_field("body")
    with pytest.raises(ConfigurationError):
        metadata.describe("title")


def test_dict_record_tags_field_values() -> None:
    record = DictRecord(1, {
        "when": [{"value": "2024-06-01T10:00:00", "end_value": ""}],
        "title": "Hello",
        "empty": [],
    })

    assert record.get_field("when").tag == FieldValue.INSTANTS
    assert record.get_field("when").items[0].end_value is None
    assert record.get_field("title") == FieldValue.text(["Hello"])
    assert record.get_field("empty").is_missing
    assert not record.has_field("other")


def test_strip_tags_keeps_text_and_line_breaks() -> None:
    assert strip_tags("<b>Party</b>") == "Party"
    assert strip_tags("one<br/>two") == "one\ntwo"
    assert strip_tags("Fish &amp; chips") == "Fish & chips"
    assert strip_tags(None) == ""
