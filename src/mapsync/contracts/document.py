"""Tagged values for loosely-typed remote documents.

Remote documents carry arbitrary fields whose presence and types vary between
writers. :class:`Value` wraps every field in an explicit variant so that the
alias and fallback rules live in typed accessors instead of ad hoc type
checks at each call site.
"""

from __future__ import annotations

import math
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import StrEnum
from typing import Any


class ValueKind(StrEnum):
    NULL = "null"
    STRING = "string"
    INTEGER = "integer"
    DOUBLE = "double"
    BOOLEAN = "boolean"
    TIMESTAMP = "timestamp"
    ARRAY = "array"
    MAP = "map"


def format_timestamp(moment: datetime) -> str:
    """Render *moment* as ISO-8601 UTC with millisecond precision and a ``Z`` suffix."""
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=UTC)
    moment = moment.astimezone(UTC)
    return moment.strftime("%Y-%m-%dT%H:%M:%S.") + f"{moment.microsecond // 1000:03d}Z"


def parse_timestamp(raw: str) -> datetime | None:
    try:
        moment = datetime.fromisoformat(raw.strip())
    except ValueError:
        return None
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=UTC)
    return moment


@dataclass(frozen=True)
class Value:
    """A single document field value.

    ``data`` holds the Python payload: ``str``, ``int``, ``float``, ``bool``,
    an aware ``datetime``, a tuple of :class:`Value` for arrays, or a dict of
    :class:`Value` for maps.
    """

    kind: ValueKind
    data: Any = None

    @classmethod
    def null(cls) -> Value:
        return cls(ValueKind.NULL)

    @classmethod
    def from_python(cls, obj: Any) -> Value:
        if isinstance(obj, Value):
            return obj
        if obj is None:
            return cls(ValueKind.NULL)
        # bool before int: bool is an int subclass.
        if isinstance(obj, bool):
            return cls(ValueKind.BOOLEAN, obj)
        if isinstance(obj, int):
            return cls(ValueKind.INTEGER, obj)
        if isinstance(obj, float):
            return cls(ValueKind.DOUBLE, obj)
        if isinstance(obj, str):
            return cls(ValueKind.STRING, obj)
        if isinstance(obj, datetime):
            return cls(ValueKind.TIMESTAMP, obj if obj.tzinfo is not None else obj.replace(tzinfo=UTC))
        if isinstance(obj, Mapping):
            return cls(ValueKind.MAP, {str(key): cls.from_python(item) for key, item in obj.items()})
        if isinstance(obj, (list, tuple)):
            return cls(ValueKind.ARRAY, tuple(cls.from_python(item) for item in obj))
        raise TypeError(f"unsupported document value type: {type(obj).__name__}")

    @property
    def is_null(self) -> bool:
        return self.kind is ValueKind.NULL

    def to_python(self) -> Any:
        if self.kind is ValueKind.ARRAY:
            return [item.to_python() for item in self.data]
        if self.kind is ValueKind.MAP:
            return {key: item.to_python() for key, item in self.data.items()}
        return self.data

    def as_str(self) -> str | None:
        """Render scalar values as text; ``None`` for null, arrays and maps."""
        if self.kind is ValueKind.STRING:
            return self.data
        if self.kind is ValueKind.BOOLEAN:
            return "true" if self.data else "false"
        if self.kind in (ValueKind.INTEGER, ValueKind.DOUBLE):
            return str(self.data)
        if self.kind is ValueKind.TIMESTAMP:
            return format_timestamp(self.data)
        return None

    def as_bool(self) -> bool | None:
        if self.kind is ValueKind.BOOLEAN:
            return bool(self.data)
        return None

    def as_epoch_seconds(self) -> int | None:
        """Interpret the value as seconds since the Unix epoch.

        Accepts native timestamps, integers, finite doubles, and strings that
        hold either an integer or an ISO-8601 datetime.
        """
        if self.kind is ValueKind.TIMESTAMP:
            return int(self.data.timestamp())
        if self.kind is ValueKind.INTEGER:
            return int(self.data)
        if self.kind is ValueKind.DOUBLE:
            return int(self.data) if math.isfinite(self.data) else None
        if self.kind is not ValueKind.STRING:
            return None
        text = self.data.strip()
        try:
            return int(text)
        except ValueError:
            pass
        moment = parse_timestamp(text)
        return int(moment.timestamp()) if moment is not None else None

    def as_list(self) -> list[Value] | None:
        if self.kind is ValueKind.ARRAY:
            return list(self.data)
        return None


@dataclass(frozen=True)
class Document:
    """A remote document: its identifier plus tagged field values."""

    id: str
    fields: Mapping[str, Value] = field(default_factory=dict)

    @classmethod
    def from_python(cls, id: str, data: Mapping[str, Any]) -> Document:
        return cls(id=id, fields={str(key): Value.from_python(item) for key, item in data.items()})

    def get(self, name: str) -> Value | None:
        """Return the field if present and non-null."""
        value = self.fields.get(name)
        if value is None or value.is_null:
            return None
        return value

    def first_str(self, *names: str, default: str | None = None) -> str | None:
        """Return the first of *names* that renders as a string, else *default*."""
        for name in names:
            value = self.get(name)
            if value is None:
                continue
            text = value.as_str()
            if text is not None:
                return text
        return default

    def first_epoch_seconds(self, *names: str) -> int | None:
        for name in names:
            value = self.get(name)
            if value is None:
                continue
            seconds = value.as_epoch_seconds()
            if seconds is not None:
                return seconds
        return None

    def flag(self, name: str) -> bool:
        value = self.get(name)
        if value is None:
            return False
        return value.as_bool() is True

    def to_dict(self, *, with_id: bool = True) -> dict[str, Any]:
        payload = {key: value.to_python() for key, value in self.fields.items()}
        if with_id:
            payload["id"] = self.id
        return payload
