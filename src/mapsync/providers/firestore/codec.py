"""Translation between Firestore REST typed values and :class:`Value`.

Firestore's REST API wraps every field in a single-key object naming its
type, e.g. ``{"integerValue": "42"}`` or ``{"mapValue": {"fields": {...}}}``.
Integers travel as strings and doubles may be the strings ``"NaN"`` or
``"Infinity"``.
"""

from __future__ import annotations

import math
import re
from collections.abc import Mapping
from datetime import UTC, datetime
from typing import Any

from mapsync.contracts.document import Document, Value, ValueKind, parse_timestamp

_SIMPLE_FIELD_PATH = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


def decode_value(raw: Mapping[str, Any]) -> Value:
    if "nullValue" in raw:
        return Value.null()
    if "booleanValue" in raw:
        return Value(ValueKind.BOOLEAN, bool(raw["booleanValue"]))
    if "integerValue" in raw:
        return Value(ValueKind.INTEGER, int(raw["integerValue"]))
    if "doubleValue" in raw:
        return Value(ValueKind.DOUBLE, float(raw["doubleValue"]))
    if "timestampValue" in raw:
        moment = parse_timestamp(str(raw["timestampValue"]))
        if moment is None:
            return Value(ValueKind.STRING, str(raw["timestampValue"]))
        return Value(ValueKind.TIMESTAMP, moment)
    for key in ("stringValue", "referenceValue", "bytesValue"):
        if key in raw:
            return Value(ValueKind.STRING, str(raw[key]))
    if "geoPointValue" in raw:
        point = raw["geoPointValue"] or {}
        return Value(
            ValueKind.MAP,
            {
                "latitude": Value(ValueKind.DOUBLE, float(point.get("latitude", 0.0))),
                "longitude": Value(ValueKind.DOUBLE, float(point.get("longitude", 0.0))),
            },
        )
    if "arrayValue" in raw:
        values = (raw["arrayValue"] or {}).get("values", [])
        return Value(ValueKind.ARRAY, tuple(decode_value(item) for item in values))
    if "mapValue" in raw:
        return Value(ValueKind.MAP, decode_fields((raw["mapValue"] or {}).get("fields", {})))
    raise ValueError(f"unrecognized Firestore value: {sorted(raw)}")


def decode_fields(raw: Mapping[str, Mapping[str, Any]]) -> dict[str, Value]:
    return {name: decode_value(item) for name, item in raw.items()}


def decode_document(raw: Mapping[str, Any]) -> Document:
    """Build a :class:`Document` from a REST document resource; the id is the last name segment."""
    name = str(raw.get("name", ""))
    return Document(id=name.rsplit("/", 1)[-1], fields=decode_fields(raw.get("fields", {})))


def encode_value(obj: Any) -> dict[str, Any]:
    value = Value.from_python(obj)
    kind = value.kind
    if kind is ValueKind.NULL:
        return {"nullValue": None}
    if kind is ValueKind.BOOLEAN:
        return {"booleanValue": value.data}
    if kind is ValueKind.INTEGER:
        return {"integerValue": str(value.data)}
    if kind is ValueKind.DOUBLE:
        return {"doubleValue": _double(value.data)}
    if kind is ValueKind.TIMESTAMP:
        return {"timestampValue": _rfc3339(value.data)}
    if kind is ValueKind.STRING:
        return {"stringValue": value.data}
    if kind is ValueKind.ARRAY:
        return {"arrayValue": {"values": [encode_value(item) for item in value.data]}}
    return {"mapValue": {"fields": encode_fields(value.data)}}


def encode_fields(fields: Mapping[str, Any]) -> dict[str, dict[str, Any]]:
    return {str(name): encode_value(item) for name, item in fields.items()}


def field_path(name: str) -> str:
    """Quote *name* for use in an update mask when it is not a plain identifier."""
    if _SIMPLE_FIELD_PATH.match(name):
        return name
    escaped = name.replace("\\", "\\\\").replace("`", "\\`")
    return f"`{escaped}`"


def _double(number: float) -> float | str:
    if math.isnan(number):
        return "NaN"
    if math.isinf(number):
        return "Infinity" if number > 0 else "-Infinity"
    return number


def _rfc3339(moment: datetime) -> str:
    return moment.astimezone(UTC).strftime("%Y-%m-%dT%H:%M:%S.%fZ")
