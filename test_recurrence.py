from datetime import datetime

import pytest
import pytz

from icalfeed.core.recurrence import RRuleRecurrenceHelper


def utc(*args) -> datetime:
    return datetime(*args, tzinfo=pytz.utc)


def test_rule_keeps_wall_clock_across_dst_change() -> None:
    # 10:00 in New York the day before DST starts
    helper = RRuleRecurrenceHelper(
        "FREQ=DAILY;COUNT=3",
        start="2024-03-09T15:00:00",
        end="2024-03-09T16:00:00",
        timezone="America/New_York",
    )

    ranges = helper.occurrences()

    assert [start for start, _ in ranges] == [
        utc(2024, 3, 9, 15),
        utc(2024, 3, 10, 14),
        utc(2024, 3, 11, 14),
    ]
    assert all(end > start for start, end in ranges)


def test_open_ended_rule_is_capped() -> None:
    helper = RRuleRecurrenceHelper("FREQ=WEEKLY", start="2024-01-01T09:00:00", max_occurrences=5)

    assert len(helper.occurrences()) == 5


def test_exdates_are_skipped() -> None:
    helper = RRuleRecurrenceHelper(
        "RRULE:FREQ=DAILY;COUNT=3",
        start="2024-01-01T09:00:00",
        exdates=["2024-01-02T09:00:00"],
    )

    starts = [start for start, _ in helper.occurrences()]

    assert starts == [utc(2024, 1, 1, 9), utc(2024, 1, 3, 9)]


def test_until_in_utc_is_honoured() -> None:
    helper = RRuleRecurrenceHelper("FREQ=DAILY;UNTIL=20240103T090000Z", start="2024-01-01T09:00:00")

    assert len(helper.occurrences()) == 3


def test_missing_end_gives_point_ranges() -> None:
    helper = RRuleRecurrenceHelper("FREQ=DAILY;COUNT=2", start="2024-01-01T09:00:00")

    assert all(start == end for start, end in helper.occurrences())


def test_window_limits_expansion() -> None:
    helper = RRuleRecurrenceHelper(
        "FREQ=DAILY",
        start="2024-01-01T09:00:00",
        window=("2024-01-10T00:00:00", "2024-01-12T23:59:59"),
    )

    starts = [start for start, _ in helper.occurrences()]

    assert starts == [utc(2024, 1, 10, 9), utc(2024, 1, 11, 9), utc(2024, 1, 12, 9)]


def test_invalid_rule_raises_value_error() -> None:
    helper = RRuleRecurrenceHelper("FREQ=SOMETIMES", start="2024-01-01T09:00:00")

    with pytest.raises(ValueError):
        helper.occurrences()


def test_ceiling_must_be_positive() -> None:
    with pytest.raises(ValueError):
        RRuleRecurrenceHelper("FREQ=DAILY", start="2024-01-01T09:00:00", max_occurrences=0)
