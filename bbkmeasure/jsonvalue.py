"""Immutable JSON values with typed accessors, ordering and serialization."""

from __future__ import annotations

import enum
import functools
import math
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from numbers import Real
from typing import Any


class JsonType(enum.IntEnum):
    """Kinds of JSON value, in the order used when comparing values of different kinds."""

    NUL = 0
    NUMBER = 1
    BOOL = 2
    STRING = 3
    ARRAY = 4
    OBJECT = 5


@dataclass(frozen=True)
class ShapeCheck:
    """Outcome of :meth:`Json.has_shape`; truthy when the shape matched."""

    ok: bool
    error: str = ""

    def __bool__(self) -> bool:
        return self.ok


_NAMED_ESCAPES = {
    "\\": "\\\\",
    '"': '\\"',
    "\b": "\\b",
    "\f": "\\f",
    "\n": "\\n",
    "\r": "\\r",
    "\t": "\\t",
    "\u2028": "\\u2028",
    "\u2029": "\\u2029",
}


def _dump_string(value: str) -> str:
    parts = ['"']
    for ch in value:
        escaped = _NAMED_ESCAPES.get(ch)
        if escaped is not None:
            parts.append(escaped)
        elif ord(ch) <= 0x1F:
            parts.append("\\u%04x" % ord(ch))
        else:
            parts.append(ch)
    parts.append('"')
    return "".join(parts)


@functools.total_ordering
class Json:
    """A JSON value: null, number (int or double), bool, string, array or object.

    Numbers keep whether they were integers so that serialization can print
    them without a fraction, but all numbers compare by their numeric value.
    Objects are kept ordered by key.
    """

    __slots__ = ("_type", "_value")

    def __init__(self, value: Any = None) -> None:
        if isinstance(value, Json):
            self._type, self._value = value._type, value._value
            return
        to_json = getattr(value, "to_json", None)
        if callable(to_json):
            converted = Json(to_json())
            self._type, self._value = converted._type, converted._value
            return
        if value is None:
            self._type, self._value = JsonType.NUL, None
        elif isinstance(value, bool):
            self._type, self._value = JsonType.BOOL, value
        elif isinstance(value, int):
            self._type, self._value = JsonType.NUMBER, value
        elif isinstance(value, Real):
            self._type, self._value = JsonType.NUMBER, float(value)
        elif isinstance(value, str):
            self._type, self._value = JsonType.STRING, value
        elif isinstance(value, Mapping):
            items = {}
            for key, item in value.items():
                if not isinstance(key, str):
                    raise TypeError(f"JSON object keys must be strings, got {key!r}")
                items[key] = Json(item)
            self._type = JsonType.OBJECT
            self._value = {key: items[key] for key in sorted(items)}
        elif isinstance(value, Iterable) and not isinstance(value, (bytes, bytearray)):
            self._type = JsonType.ARRAY
            self._value = tuple(Json(item) for item in value)
        else:
            raise TypeError(f"cannot represent {type(value).__name__} as JSON")

    # Type inspection

    def type(self) -> JsonType:
        return self._type

    def is_null(self) -> bool:
        return self._type is JsonType.NUL

    def is_number(self) -> bool:
        return self._type is JsonType.NUMBER

    def is_bool(self) -> bool:
        return self._type is JsonType.BOOL

    def is_string(self) -> bool:
        return self._type is JsonType.STRING

    def is_array(self) -> bool:
        return self._type is JsonType.ARRAY

    def is_object(self) -> bool:
        return self._type is JsonType.OBJECT

    # Accessors; each returns an empty default when the kind does not match.

    def number_value(self) -> float:
        if self._type is JsonType.NUMBER:
            return float(self._value)
        return 0.0

    def int_value(self) -> int:
        if self._type is not JsonType.NUMBER:
            return 0
        if isinstance(self._value, int):
            return self._value
        if not math.isfinite(self._value):
            return 0
        return int(self._value)

    def bool_value(self) -> bool:
        return bool(self._value) if self._type is JsonType.BOOL else False

    def string_value(self) -> str:
        return self._value if self._type is JsonType.STRING else ""

    def array_items(self) -> list[Json]:
        return list(self._value) if self._type is JsonType.ARRAY else []

    def object_items(self) -> dict[str, Json]:
        return dict(self._value) if self._type is JsonType.OBJECT else {}

    def __getitem__(self, key: int | str) -> Json:
        """Array element or object member; null when absent or of the wrong kind."""
        if isinstance(key, bool):
            return _NULL
        if isinstance(key, int):
            if self._type is JsonType.ARRAY and 0 <= key < len(self._value):
                return self._value[key]
            return _NULL
        if isinstance(key, str) and self._type is JsonType.OBJECT:
            return self._value.get(key, _NULL)
        return _NULL

    # Comparison

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Json):
            return NotImplemented
        if self._type is not other._type:
            return False
        if self._type is JsonType.NUMBER:
            return self.number_value() == other.number_value()
        if self._type is JsonType.OBJECT:
            return list(self._value.items()) == list(other._value.items())
        return self._value == other._value

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, Json):
            return NotImplemented
        if self._type is not other._type:
            return self._type < other._type
        if self._type is JsonType.NUL:
            return False
        if self._type is JsonType.NUMBER:
            return self.number_value() < other.number_value()
        if self._type is JsonType.OBJECT:
            return list(self._value.items()) < list(other._value.items())
        return self._value < other._value

    def __hash__(self) -> int:
        if self._type is JsonType.NUMBER:
            return hash((self._type, self.number_value()))
        return hash((self._type, self.dump()))

    # Serialization

    def dump(self) -> str:
        """Serialize to compact JSON text with ", " and ": " separators."""
        kind = self._type
        if kind is JsonType.NUL:
            return "null"
        if kind is JsonType.BOOL:
            return "true" if self._value else "false"
        if kind is JsonType.NUMBER:
            if isinstance(self._value, int):
                return "%d" % self._value
            if math.isfinite(self._value):
                return "%.17g" % self._value
            return "null"
        if kind is JsonType.STRING:
            return _dump_string(self._value)
        if kind is JsonType.ARRAY:
            return "[" + ", ".join(item.dump() for item in self._value) + "]"
        return "{" + ", ".join(
            f"{_dump_string(key)}: {item.dump()}" for key, item in self._value.items()
        ) + "}"

    def __str__(self) -> str:
        return self.dump()

    def __repr__(self) -> str:
        return f"Json({self.dump()})"

    def has_shape(self, types: Mapping[str, JsonType] | Iterable[tuple[str, JsonType]]) -> ShapeCheck:
        """Check that this is an object whose named fields have the given kinds."""
        if not self.is_object():
            return ShapeCheck(False, "expected JSON object, got " + self.dump())
        pairs = types.items() if isinstance(types, Mapping) else types
        for key, expected in pairs:
            if self[key].type() is not JsonType(expected):
                return ShapeCheck(False, f"bad type for {key} in {self.dump()}")
        return ShapeCheck(True)


_NULL = Json()