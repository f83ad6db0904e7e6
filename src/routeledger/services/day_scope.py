"""Day token normalisation and owner scoping."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Iterable, Optional, TypeVar

from ..errors import InvalidDay

WILDCARD_DAY = "all"
WEEKDAYS: tuple[str, ...] = (
    "monday",
    "tuesday",
    "wednesday",
    "thursday",
    "friday",
    "saturday",
    "sunday",
)

_T = TypeVar("_T")
_NATURAL_CHUNK = re.compile(r"(\d+)")


def normalize_day(token: Optional[str]) -> str:
    """Return the canonical day token.

    Missing or blank tokens resolve to the wildcard. Anything that is not a
    weekday name or the wildcard raises ``InvalidDay``.
    """
    if token is None:
        return WILDCARD_DAY
    if not isinstance(token, str):
        raise InvalidDay(token)
    value = token.strip().lower()
    if not value:
        return WILDCARD_DAY
    if value == WILDCARD_DAY or value in WEEKDAYS:
        return value
    raise InvalidDay(token)


def is_wildcard(day: str) -> bool:
    return day == WILDCARD_DAY


@dataclass(frozen=True, slots=True)
class DayScope:
    """The owners visible from one day: that day's own plus the wildcard owners."""

    day: str

    @classmethod
    def for_day(cls, token: Optional[str]) -> "DayScope":
        return cls(day=normalize_day(token))

    @property
    def day_tokens(self) -> tuple[str, ...]:
        if is_wildcard(self.day):
            return (WILDCARD_DAY,)
        return (self.day, WILDCARD_DAY)

    @property
    def lock_keys(self) -> tuple[str, ...]:
        # Wildcard owners are shared by every weekday, so every scope locks them.
        return tuple(f"day:{token}" for token in self.day_tokens)

    def contains(self, owner_day: Optional[str]) -> bool:
        return (owner_day or WILDCARD_DAY) in self.day_tokens


def natural_key(value: str) -> tuple:
    """Sort key that orders "Driver 2" before "Driver 10" and "9" before "10"."""
    parts = _NATURAL_CHUNK.split(str(value))
    return tuple((0, int(part), "") if part.isdigit() else (1, 0, part.lower()) for part in parts if part != "")


def sort_naturally(items: Iterable[_T], key) -> list[_T]:
    return sorted(items, key=lambda item: natural_key(key(item)))
