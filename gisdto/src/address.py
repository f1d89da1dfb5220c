"""Postal address with single-line formatting."""

from __future__ import annotations

from dataclasses import dataclass, field
import re


_PROPER_CASE_SPLIT_RE = re.compile(r"[\s/+()@_-]")


def proper_case(text: str) -> str:
    tokens = [token for token in _PROPER_CASE_SPLIT_RE.split(text.lower()) if token]
    return " ".join(token[0].upper() + token[1:] for token in tokens)


def _present(value: str | None) -> bool:
    return bool(value) and value.strip().lower() != "null"


def _compare_text(left: str, right: str) -> int:
    left_key, right_key = left.lower(), right.lower()
    if left_key == right_key:
        return 0
    return -1 if left_key < right_key else 1


@dataclass(slots=True)
class Address:
    street: str | None = None
    city: str | None = None
    state: str | None = None
    postal_code: str | None = None
    country: str | None = None
    county: str | None = field(default=None, compare=False)

    def format(self) -> str:
        """Render `Street, City, STATE postal` skipping blank or "null" parts."""
        line = ""
        if _present(self.street):
            line = proper_case(self.street)
        if _present(self.city):
            city = proper_case(self.city)
            line = f"{line}, {city}" if line else city
        if _present(self.state):
            state = self.state.upper()
            line = f"{line}, {state}" if line else state
        if _present(self.postal_code):
            line = f"{line} {self.postal_code}" if line else self.postal_code
        return line

    def is_complete(self) -> bool:
        return all(
            bool(value)
            for value in (self.street, self.city, self.state, self.postal_code, self.country)
        )

    def compare_to(self, other: Address | None) -> int:
        """Best-effort ordering by country, state, city then street.

        A missing field on `other` short-circuits to -1, and so does an address
        whose fields are all unset; this is not a total order.
        """
        if other is None:
            return 1
        for mine, theirs in (
            (self.country, other.country),
            (self.state, other.state),
            (self.city, other.city),
        ):
            if mine is None:
                continue
            if theirs is None:
                return -1
            result = _compare_text(mine, theirs)
            if result != 0:
                return result
        if self.street is not None:
            if other.street is None:
                return -1
            return _compare_text(self.street, other.street)
        return -1

    def __lt__(self, other: Address) -> bool:
        return self.compare_to(other) < 0

    def __str__(self) -> str:
        return self.format()
