"""Record and field-metadata interfaces consumed by the expander."""

import enum
import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import (
    Any,
    Dict,
    Hashable,
    Iterable,
    List,
    Mapping,
    Optional,
    Protocol,
    Sequence,
    Tuple,
    runtime_checkable,
)

from icalfeed.config.constants import (
    ENTRY_END_KEY,
    ENTRY_START_KEY,
    FIELD_TYPE_INSTANT,
    FIELD_TYPE_INSTANT_RANGE,
    FIELD_TYPE_RECURRING,
)
from icalfeed.core.timezone_utils import DateValue
from icalfeed.exceptions.errors import ConfigurationError

logger = logging.getLogger(__name__)


class FieldKind(enum.Enum):
    """Shape of the date data a field carries."""

    INSTANT = "instant"
    INSTANT_RANGE = "instant_range"
    RECURRING = "recurring"

    @classmethod
    def from_field_type(cls, type_name: str) -> "FieldKind":
        """Classify a host storage field type.

        Raises:
            ConfigurationError: If the type carries no date data.
        """
        if type_name in FIELD_TYPE_RECURRING:
            return cls.RECURRING
        if type_name in FIELD_TYPE_INSTANT_RANGE:
            return cls.INSTANT_RANGE
        if type_name in FIELD_TYPE_INSTANT:
            return cls.INSTANT
        try:
            return cls(type_name)
        except ValueError:
            raise ConfigurationError(
                f"Field type '{type_name}' cannot be used as a date field"
            ) from None


@dataclass(frozen=True)
class DateFieldDescriptor:
    """Classification of the configured date field."""

    field_name: str
    kind: FieldKind
    timezone_override: Optional[str] = None


@dataclass(frozen=True)
class DateEntry:
    """One stored date value; strings are UTC wall-clock."""

    value: DateValue
    end_value: Optional[DateValue] = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "DateEntry":
        return cls(value=data.get(ENTRY_START_KEY), end_value=data.get(ENTRY_END_KEY) or None)


@runtime_checkable
class RecurrenceHelper(Protocol):
    """Expands a recurrence rule into concrete (start, end) ranges."""

    def occurrences(self) -> List[Tuple[datetime, Optional[datetime]]]:
        ...


class FieldValue:
    """Tagged value returned by ``SourceRecord.get_field``.

    ``tag`` is one of MISSING, INSTANTS, RECURRENCE or TEXT and ``items``
    holds the (possibly multi-valued) payload for that tag.
    """

    MISSING = "missing"
    INSTANTS = "instants"
    RECURRENCE = "recurrence"
    TEXT = "text"

    __slots__ = ("tag", "items")

    def __init__(self, tag: str, items: Sequence[Any] = ()):
        self.tag = tag
        self.items = tuple(items)

    @classmethod
    def missing(cls) -> "FieldValue":
        return cls(cls.MISSING)

    @classmethod
    def instants(cls, entries: Sequence[DateEntry]) -> "FieldValue":
        return cls(cls.INSTANTS, entries)

    @classmethod
    def recurrence(cls, helpers: Sequence[RecurrenceHelper]) -> "FieldValue":
        return cls(cls.RECURRENCE, helpers)

    @classmethod
    def text(cls, values: Sequence[str]) -> "FieldValue":
        return cls(cls.TEXT, values)

    @property
    def is_missing(self) -> bool:
        return self.tag == self.MISSING or not self.items

    def __eq__(self, other):
        if not isinstance(other, FieldValue):
            return NotImplemented
        return self.tag == other.tag and self.items == other.items

    def __repr__(self):
        return f"FieldValue({self.tag!r}, {list(self.items)!r})"


class SourceRecord(Protocol):
    """A content record exposing named fields."""

    id: Hashable

    def has_field(self, name: str) -> bool:
        ...

    def get_field(self, name: str) -> FieldValue:
        ...


def _classify_item(item: Any) -> Tuple[str, Any]:
    if isinstance(item, DateEntry):
        return FieldValue.INSTANTS, item
    if isinstance(item, Mapping):
        return FieldValue.INSTANTS, DateEntry.from_dict(item)
    if isinstance(item, datetime):
        return FieldValue.INSTANTS, DateEntry(item)
    if isinstance(item, RecurrenceHelper):
        return FieldValue.RECURRENCE, item
    return FieldValue.TEXT, str(item)


@dataclass
class DictRecord:
    """SourceRecord over a plain ``{field name: raw value}`` dict.

    Lists of ``{"value", "end_value"}`` dicts become instants, objects with
    an ``occurrences()`` method become recurrence helpers and anything else
    is read as text.
    """

    id: Hashable
    fields: Dict[str, Any] = field(default_factory=dict)

    def has_field(self, name: str) -> bool:
        return name in self.fields

    def get_field(self, name: str) -> FieldValue:
        raw = self.fields.get(name)
        if raw is None:
            return FieldValue.missing()

        raw_items = raw if isinstance(raw, (list, tuple)) else [raw]
        classified = [_classify_item(item) for item in raw_items if item is not None]
        if not classified:
            return FieldValue.missing()

        tags = {tag for tag, _ in classified}
        if len(tags) > 1:
            raise ConfigurationError(
                f"Field '{name}' of record {self.id!r} mixes {sorted(tags)} values",
                name,
            )
        return FieldValue(tags.pop(), [item for _, item in classified])


class FieldMetadataProvider(Protocol):
    """Reports which fields exist and how the date field is stored."""

    def has_field(self, field_name: str) -> bool:
        ...

    def describe(self, field_name: str) -> DateFieldDescriptor:
        ...


class StaticFieldMetadata:
    """FieldMetadataProvider backed by a fixed table of descriptors.

    ``field_names`` lists fields that exist but carry no date data, such as
    the text fields a mapping reads summaries from.
    """

    def __init__(
        self,
        descriptors: Optional[Mapping[str, DateFieldDescriptor]] = None,
        field_names: Iterable[str] = (),
    ):
        self._descriptors = dict(descriptors or {})
        self._field_names = set(self._descriptors) | set(field_names)

    @classmethod
    def from_field_types(cls, definitions: Mapping[str, Mapping[str, Any]]) -> "StaticFieldMetadata":
        """Build from ``{name: {"type": ..., "timezone_override": ...}}``.

        Every defined name counts as an existing field; only those whose type
        carries date data can be described.
        """
        descriptors = {}
        for name, definition in definitions.items():
            type_name = definition.get("type")
            if not type_name:
                continue
            try:
                kind = FieldKind.from_field_type(type_name)
            except ConfigurationError:
                logger.debug("Field '%s' of type '%s' is not a date field", name, type_name)
                continue
            descriptors[name] = DateFieldDescriptor(
                field_name=name,
                kind=kind,
                timezone_override=definition.get("timezone_override") or None,
            )
        return cls(descriptors, field_names=definitions.keys())

    def has_field(self, field_name: str) -> bool:
        return field_name in self._field_names

    def describe(self, field_name: str) -> DateFieldDescriptor:
        try:
            return self._descriptors[field_name]
        except KeyError:
            raise ConfigurationError(
                f"Field '{field_name}' is not a known date field", field_name
            ) from None
