"""Records and field metadata read from a JSON export."""

import logging
from typing import Any, Dict, List, Mapping, Tuple

from icalfeed.config.settings import FEED_SETTINGS, FeedSettings
from icalfeed.core.records import DictRecord, StaticFieldMetadata
from icalfeed.core.recurrence import RRuleRecurrenceHelper
from icalfeed.exceptions.errors import ConfigurationError, DateParseError

logger = logging.getLogger(__name__)

RRULE_KEY = "rrule"


def _convert_item(item: Any, field_name: str, record_id: Any, settings: FeedSettings) -> Any:
    if not isinstance(item, Mapping) or RRULE_KEY not in item:
        return item
    try:
        return RRuleRecurrenceHelper(
            rule=item[RRULE_KEY],
            start=item.get("value"),
            end=item.get("end_value"),
            exdates=item.get("exdates") or (),
            timezone=item.get("timezone") or "UTC",
            max_occurrences=settings.max_occurrences,
        )
    except ValueError as exc:
        raise DateParseError(field_name, item.get("value"), record_id) from exc


def records_from_json(
    payload: Mapping[str, Any], settings: FeedSettings = FEED_SETTINGS
) -> Tuple[StaticFieldMetadata, List[DictRecord]]:
    """Read ``{"fields": {...}, "records": [...]}``.

    Each record needs an ``id``; its other keys are field values. Values
    carrying an ``rrule`` key become RRuleRecurrenceHelper instances.

    Args:
        payload: Decoded JSON document.
        settings: Supplies the recurrence ceiling.

    Returns:
        Tuple of (field metadata, records in document order).

    Raises:
        ConfigurationError: If the document is not shaped as expected.
    """
    fields = payload.get("fields")
    raw_records = payload.get("records")
    if not isinstance(fields, Mapping) or not isinstance(raw_records, list):
        raise ConfigurationError("JSON input needs a 'fields' object and a 'records' list")

    records = []
    for position, raw in enumerate(raw_records):
        if not isinstance(raw, Mapping):
            raise ConfigurationError(f"Record at position {position} is not an object")
        record_id = raw.get("id", position)
        values: Dict[str, Any] = {}
        for name, value in raw.items():
            if name == "id":
                continue
            if isinstance(value, list):
                values[name] = [_convert_item(v, name, record_id, settings) for v in value]
            else:
                values[name] = _convert_item(value, name, record_id, settings)
        records.append(DictRecord(id=record_id, fields=values))

    logger.debug("Loaded %d record(s) and %d field definition(s)", len(records), len(fields))
    return StaticFieldMetadata.from_field_types(fields), records
