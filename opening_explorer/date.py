"""Years, months and lax PGN dates."""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date
from typing import Optional

MIN_YEAR = 1952
MAX_YEAR = 3000

_UINT_RE = re.compile(r"\+?[0-9]+")


class InvalidDate(ValueError):
    """Raised for years or months outside the supported range or malformed."""


def _parse_uint(text: str, bits: int) -> Optional[int]:
    if not _UINT_RE.fullmatch(text):
        return None
    value = int(text)
    return value if value < (1 << bits) else None


@dataclass(frozen=True, order=True)
class Year:
    value: int

    def __post_init__(self) -> None:
        if not MIN_YEAR <= self.value <= MAX_YEAR:
            raise InvalidDate("invalid year")

    def __int__(self) -> int:
        return self.value

    @classmethod
    def parse(cls, text: str) -> Year:
        value = _parse_uint(text, 16)
        if value is None:
            raise InvalidDate("invalid year")
        return cls(value)

    @classmethod
    def min_value(cls) -> Year:
        return cls(MIN_YEAR)

    @classmethod
    def max_value(cls) -> Year:
        return cls(MAX_YEAR)

    @classmethod
    def max_masters(cls) -> Year:
        return cls(2022)

    def add_years_saturating(self, years: int) -> Year:
        return Year(min(self.value + years, MAX_YEAR))


@dataclass(frozen=True, order=True)
class Month:
    """A month, stored as ``year * 12 + month - 1``."""

    value: int

    def __post_init__(self) -> None:
        if not MIN_YEAR * 12 <= self.value <= MAX_YEAR * 12 + 11:
            raise InvalidDate("invalid month")

    def __int__(self) -> int:
        return self.value

    def __str__(self) -> str:
        year, month0 = divmod(self.value, 12)
        return f"{year:04}-{month0 + 1:02}"

    @classmethod
    def parse(cls, text: str) -> Month:
        parts = re.split(r"[-/]", text, maxsplit=1)
        if len(parts) != 2:
            raise InvalidDate("invalid month")
        year = _parse_uint(parts[0], 16)
        month_plus_one = _parse_uint(parts[1], 16)
        if (
            year is None
            or month_plus_one is None
            or not MIN_YEAR <= year <= MAX_YEAR
            or not 1 <= month_plus_one <= 12
        ):
            raise InvalidDate("invalid month")
        return cls(year * 12 + month_plus_one - 1)

    @classmethod
    def min_value(cls) -> Month:
        return cls(MIN_YEAR * 12)

    @classmethod
    def max_value(cls) -> Month:
        return cls(MAX_YEAR * 12 + 11)

    @classmethod
    def from_time_saturating(cls, time: date) -> Month:
        """Month of a date or datetime, with the year clamped to the supported range."""
        year = max(MIN_YEAR, min(time.year, MAX_YEAR))
        return cls(year * 12 + time.month - 1)

    def add_months_saturating(self, months: int) -> Month:
        return Month(min(self.value + months, MAX_YEAR * 12 + 11))

    def year(self) -> Year:
        return Year(self.value // 12)


@dataclass(frozen=True)
class LaxDate:
    """A PGN-style date where month and day may be unknown."""

    year: Year
    month: Optional[int] = None
    day: Optional[int] = None

    @classmethod
    def parse(cls, text: str) -> LaxDate:
        parts = text.split(".", 2)
        year = _parse_uint(parts[0], 16)
        if year is None:
            raise InvalidDate("invalid year")
        month = _parse_uint(parts[1], 8) if len(parts) > 1 else None
        if month is not None and not 1 <= month <= 12:
            month = None
        day = _parse_uint(parts[2], 8) if len(parts) > 2 else None
        return cls(Year(year), month, day)

    def to_month(self) -> Optional[Month]:
        if self.month is None:
            return None
        return Month(self.year.value * 12 + self.month - 1)

    def __str__(self) -> str:
        month = "??" if self.month is None else f"{self.month:02}"
        day = "??" if self.day is None else f"{self.day:02}"
        return f"{self.year.value:04}.{month}.{day}"