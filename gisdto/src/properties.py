"""String-keyed property bag with typed accessors."""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from datetime import date, datetime
import re
from typing import Any


INT_MIN, INT_MAX = -(2**31), 2**31 - 1
LONG_MIN, LONG_MAX = -(2**63), 2**63 - 1

_INTEGER_RE = re.compile(r"^[+-]?\d+$")
_DOUBLE_RE = re.compile(r"^[+-]?(?:NaN|Infinity|(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?[fFdD]?)$")


def format_date(value: date) -> str:
    if isinstance(value, datetime):
        return value.isoformat()
    return datetime(value.year, value.month, value.day).isoformat()


def parse_date(text: str | None) -> datetime | None:
    if text is None:
        return None
    try:
        return datetime.fromisoformat(text.strip())
    except ValueError:
        return None


def parse_double(text: str | None) -> float | None:
    if text is None:
        return None
    candidate = text.strip()
    if not _DOUBLE_RE.match(candidate):
        return None
    if candidate[-1] in "fFdD":
        candidate = candidate[:-1]
    return float(candidate)


def parse_integer(text: str | None, lower: int = INT_MIN, upper: int = INT_MAX) -> int | None:
    if text is None or not _INTEGER_RE.match(text):
        return None
    value = int(text)
    if value < lower or value > upper:
        return None
    return value


def to_property_text(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, date):
        return format_date(value)
    return str(value)


class PropertyBag:
    """Mutable string-to-string map; empty keys are ignored and None values delete.

    Typed getters never raise: an unparseable value yields False for booleans,
    0.0 for doubles and None for integers, longs and dates.
    """

    __slots__ = ("_values",)

    def __init__(self, values: Mapping[str, Any] | None = None) -> None:
        self._values: dict[str, str] = {}
        if values:
            self.update(values)

    def get(self, key: str, default: str | None = None) -> str | None:
        if key in self._values:
            return self._values[key]
        return default

    def set(self, key: str | None, value: Any) -> None:
        if not key:
            return
        if value is None:
            self._values.pop(key, None)
            return
        self._values[key] = to_property_text(value)

    def contains(self, key: str) -> bool:
        return key in self._values

    def remove(self, key: str) -> None:
        self._values.pop(key, None)

    def clear(self) -> None:
        self._values.clear()

    def update(self, values: Mapping[str, Any]) -> None:
        for key, value in values.items():
            self.set(key, value)

    def replace(self, values: Mapping[str, Any] | None) -> None:
        self.clear()
        if values:
            self.update(values)

    def get_bool(self, key: str) -> bool:
        value = self._values.get(key)
        return value is not None and value.lower() == "true"

    def get_double(self, key: str, default: float | None = None) -> float:
        if default is not None and key not in self._values:
            return default
        parsed = parse_double(self._values.get(key))
        return 0.0 if parsed is None else parsed

    def get_integer(self, key: str) -> int | None:
        return parse_integer(self._values.get(key))

    def get_long(self, key: str) -> int | None:
        return parse_integer(self._values.get(key), lower=LONG_MIN, upper=LONG_MAX)

    def get_date(self, key: str) -> datetime | None:
        return parse_date(self._values.get(key))

    def keys(self) -> list[str]:
        return list(self._values)

    def items(self) -> list[tuple[str, str]]:
        return list(self._values.items())

    def to_dict(self) -> dict[str, str]:
        return dict(self._values)

    def __contains__(self, key: object) -> bool:
        return key in self._values

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, PropertyBag):
            return NotImplemented
        return self._values == other._values

    def __repr__(self) -> str:
        return f"PropertyBag({self._values!r})"
