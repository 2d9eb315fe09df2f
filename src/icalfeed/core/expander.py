"""Expansion of record date fields into timezone-adjusted occurrences."""

import logging
from datetime import datetime, tzinfo
from typing import Callable, Dict, Iterable, List, Optional

from icalfeed.config.settings import FieldMapping
from icalfeed.core.event_model import Occurrence
from icalfeed.core.records import (
    DateEntry,
    DateFieldDescriptor,
    FieldKind,
    FieldMetadataProvider,
    FieldValue,
    SourceRecord,
)
from icalfeed.core.timezone_utils import (
    TimezoneLike,
    as_utc,
    convert_to_zone,
    local_timezone_name,
    parse_utc_value,
    resolve_timezone,
    timezone_name,
)
from icalfeed.exceptions.errors import (
    CapabilityMismatchError,
    ConfigurationError,
    DateParseError,
    InvalidRangeError,
)
from icalfeed.utils.text import clean_text, strip_tags

logger = logging.getLogger(__name__)

TimezoneSource = Callable[[], TimezoneLike]


class OccurrenceExpander:
    """Turns source records into Occurrences for one field mapping.

    The expander holds only read-only configuration, so one instance can
    serve concurrent renders.

    Args:
        mapping: Which fields supply the date and descriptive text.
        metadata_provider: Reports which fields exist and classifies the
            date field.
        timezone_source: Callable returning the ambient timezone, used when
            a render does not pass one explicitly.
    """

    def __init__(
        self,
        mapping: FieldMapping,
        metadata_provider: FieldMetadataProvider,
        timezone_source: Optional[TimezoneSource] = None,
    ):
        self.mapping = mapping
        self.metadata_provider = metadata_provider
        self.timezone_source = timezone_source or local_timezone_name

    def describe_date_field(self) -> DateFieldDescriptor:
        """Ask the metadata provider how the date field is stored."""
        descriptor = self.metadata_provider.describe(self.mapping.date_field)
        if descriptor.field_name != self.mapping.date_field:
            raise ConfigurationError(
                f"Metadata for '{self.mapping.date_field}' describes "
                f"'{descriptor.field_name}' instead",
                self.mapping.date_field,
            )
        return descriptor

    def check_text_fields(self) -> None:
        """Fail unless every mapped text field exists, even with no records."""
        for role, name in self.mapping.text_fields().items():
            if not self.metadata_provider.has_field(name):
                logger.error("Mapped %s field '%s' does not exist", role, name)
                raise ConfigurationError(f"Unknown {role} field '{name}'", name)

    @staticmethod
    def effective_timezone(
        descriptor: DateFieldDescriptor, fallback_timezone: TimezoneLike
    ) -> tzinfo:
        """The field's timezone override if set, else the fallback."""
        if descriptor.timezone_override:
            return resolve_timezone(descriptor.timezone_override)
        return resolve_timezone(fallback_timezone)

    def expand_all(
        self,
        records: Iterable[SourceRecord],
        fallback_timezone: Optional[TimezoneLike] = None,
    ) -> List[Occurrence]:
        """Expand every record, keeping record order.

        Args:
            records: Records in query order.
            fallback_timezone: Zone to use when the field has no override;
                defaults to the ambient timezone source.

        Returns:
            All occurrences in encounter order.

        Raises:
            ConfigurationError: If a mapped field is unknown.
        """
        descriptor = self.describe_date_field()
        self.check_text_fields()
        if fallback_timezone is None:
            fallback_timezone = self.timezone_source()
        tzobj = self.effective_timezone(descriptor, fallback_timezone)

        occurrences: List[Occurrence] = []
        record_count = 0
        for record in records:
            occurrences.extend(self.expand(record, descriptor, tzobj))
            record_count += 1

        logger.info(
            "Expanded %d record(s) into %d occurrence(s) in %s",
            record_count,
            len(occurrences),
            timezone_name(tzobj),
        )
        return occurrences

    def expand(
        self,
        record: SourceRecord,
        descriptor: DateFieldDescriptor,
        fallback_timezone: TimezoneLike,
    ) -> List[Occurrence]:
        """Expand one record's date field into occurrences.

        Args:
            record: The source record.
            descriptor: Classification of the date field.
            fallback_timezone: Zone used when the descriptor has no override.

        Returns:
            Zero or more occurrences in entry order.

        Raises:
            ConfigurationError: If a mapped field is absent from the record.
            DateParseError: If a date value cannot be parsed.
            CapabilityMismatchError: If the field data does not match its kind.
        """
        self._check_fields(record)
        tzobj = self.effective_timezone(descriptor, fallback_timezone)
        texts = self._read_texts(record)

        value = record.get_field(descriptor.field_name)
        if descriptor.kind is FieldKind.RECURRING:
            ranges = self._recurrence_ranges(record, descriptor, value)
        else:
            ranges = self._entry_ranges(record, descriptor, value)

        occurrences = []
        for index, (start, end) in enumerate(ranges):
            start_local = convert_to_zone(start, tzobj)
            end_local = convert_to_zone(end, tzobj) if end is not None else None
            occurrences.append(
                Occurrence(
                    start=start_local,
                    end=end_local,
                    source_id=record.id,
                    index=index,
                    **texts,
                )
            )

        logger.debug(
            "Record %r produced %d occurrence(s) from '%s'",
            record.id,
            len(occurrences),
            descriptor.field_name,
        )
        return occurrences

    def _check_fields(self, record: SourceRecord) -> None:
        for name in self.mapping.field_names():
            if not record.has_field(name):
                logger.error("Record %r has no field '%s'", record.id, name)
                raise ConfigurationError(
                    f"Field '{name}' is not present on record {record.id!r}", name
                )

    def _read_texts(self, record: SourceRecord) -> Dict[str, Optional[str]]:
        texts = {}
        for role, name in self.mapping.text_fields().items():
            value = record.get_field(name)
            if value.is_missing:
                texts[role] = None
                continue
            if value.tag != FieldValue.TEXT:
                raise CapabilityMismatchError(name, record.id, expected="text")
            raw = value.items[0]
            if role == "description":
                texts[role] = clean_text(strip_tags(raw))
                if texts[role] is None and raw:
                    logger.warning(
                        "Description of record %r is empty once markup is removed",
                        record.id,
                    )
            else:
                texts[role] = clean_text(raw)
        return texts

    def _entry_ranges(self, record, descriptor, value: FieldValue):
        if value.is_missing:
            return []
        if value.tag == FieldValue.TEXT:
            entries = [DateEntry(item) for item in value.items]
        elif value.tag == FieldValue.INSTANTS:
            entries = list(value.items)
        else:
            raise CapabilityMismatchError(descriptor.field_name, record.id, expected="date")

        ranges = []
        for entry in entries:
            start = self._parse(record, descriptor, entry.value)
            end = None
            if entry.end_value:
                end = self._parse(record, descriptor, entry.end_value)
            self._check_order(record, descriptor, start, end)
            ranges.append((start, end))
        return ranges

    def _recurrence_ranges(self, record, descriptor, value: FieldValue):
        if value.is_missing:
            return []
        if value.tag != FieldValue.RECURRENCE:
            logger.error(
                "Field '%s' of record %r is recurring but has no recurrence helper",
                descriptor.field_name,
                record.id,
            )
            raise CapabilityMismatchError(descriptor.field_name, record.id)

        ranges = []
        for helper in value.items:
            try:
                helper_ranges = helper.occurrences()
            except ValueError as exc:
                raise DateParseError(descriptor.field_name, helper, record.id) from exc
            for pair in helper_ranges:
                try:
                    start, end = pair
                except (TypeError, ValueError):
                    logger.error(
                        "Recurrence helper for record %r returned %r, not a (start, end) pair",
                        record.id,
                        pair,
                    )
                    raise CapabilityMismatchError(descriptor.field_name, record.id) from None
                if not isinstance(start, datetime):
                    raise DateParseError(descriptor.field_name, start, record.id)
                if end is not None and not isinstance(end, datetime):
                    raise DateParseError(descriptor.field_name, end, record.id)
                start = as_utc(start)
                end = as_utc(end) if end is not None else None
                self._check_order(record, descriptor, start, end)
                ranges.append((start, end))
        return ranges

    @staticmethod
    def _parse(record, descriptor, raw) -> datetime:
        try:
            return parse_utc_value(raw)
        except ValueError as exc:
            logger.error(
                "Unparseable date %r in field '%s' of record %r",
                raw,
                descriptor.field_name,
                record.id,
            )
            raise DateParseError(descriptor.field_name, raw, record.id) from exc

    @staticmethod
    def _check_order(record, descriptor, start: datetime, end: Optional[datetime]) -> None:
        if end is not None and end < start:
            raise InvalidRangeError(descriptor.field_name, start, end, record.id)
