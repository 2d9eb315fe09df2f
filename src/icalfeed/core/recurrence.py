"""Recurrence rule expansion backed by dateutil.rrule."""

import logging
from datetime import datetime
from itertools import islice
from typing import Iterable, List, Optional, Tuple

from dateutil import tz as du_tz
from dateutil.rrule import rruleset, rrulestr

from icalfeed.config.constants import DEFAULT_MAX_OCCURRENCES
from icalfeed.core.timezone_utils import (
    DateValue,
    TimezoneLike,
    as_utc,
    parse_utc_value,
    resolve_timezone,
    timezone_name,
)

logger = logging.getLogger(__name__)


class RRuleRecurrenceHelper:
    """Expands one RRULE into concrete (start, end) ranges.

    The rule is evaluated in ``timezone`` so that wall-clock times stay put
    across DST changes; ``start``/``end`` are stored UTC values of the first
    instance. Expansion stops after ``max_occurrences`` instances, and only
    instances inside ``window`` are returned when one is given.
    """

    def __init__(
        self,
        rule: str,
        start: DateValue,
        end: Optional[DateValue] = None,
        exdates: Iterable[DateValue] = (),
        timezone: TimezoneLike = "UTC",
        max_occurrences: int = DEFAULT_MAX_OCCURRENCES,
        window: Optional[Tuple[DateValue, DateValue]] = None,
    ):
        if max_occurrences <= 0:
            raise ValueError("max_occurrences must be positive")
        self.rule = rule
        self.max_occurrences = max_occurrences
        # dateutil zones recompute the offset per instance; pytz ones would not
        resolved = resolve_timezone(timezone)
        self.rule_tz = du_tz.gettz(timezone_name(resolved)) or resolved

        start_utc = parse_utc_value(start)
        end_utc = parse_utc_value(end) if end else start_utc
        self.start = start_utc.astimezone(self.rule_tz)
        self.duration = end_utc - start_utc
        self.exdates = [parse_utc_value(ex) for ex in exdates]
        self.window = None
        if window is not None:
            self.window = (parse_utc_value(window[0]), parse_utc_value(window[1]))

    def _build_rule_set(self) -> rruleset:
        rule_set = rrulestr(self.rule, dtstart=self.start, forceset=True)
        for ex_dt in self.exdates:
            rule_set.exdate(ex_dt)
        return rule_set

    def occurrences(self) -> List[Tuple[datetime, datetime]]:
        """Return the expanded ranges, capped at ``max_occurrences``.

        Raises:
            ValueError: If the rule cannot be parsed.
        """
        rule_set = self._build_rule_set()
        if self.window is not None:
            starts = rule_set.between(self.window[0], self.window[1], inc=True)
        else:
            starts = rule_set

        instances = list(islice(starts, self.max_occurrences + 1))
        if len(instances) > self.max_occurrences:
            logger.warning(
                "Recurrence '%s' truncated at %d occurrences",
                self.rule,
                self.max_occurrences,
            )
            instances = instances[: self.max_occurrences]

        return [(as_utc(inst), as_utc(inst + self.duration)) for inst in instances]

    def __repr__(self):
        return f"RRuleRecurrenceHelper({self.rule!r}, start={self.start.isoformat()})"

