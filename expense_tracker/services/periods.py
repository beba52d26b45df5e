"""Calendar month value type used for budgets and monthly groupings."""

from __future__ import annotations

import calendar
from datetime import date
from typing import NamedTuple


class YearMonth(NamedTuple):
    year: int
    month: int

    @classmethod
    def from_date(cls, value: date) -> "YearMonth":
        return cls(value.year, value.month)

    @classmethod
    def parse(cls, value: str) -> "YearMonth":
        """Parse ``YYYY-MM``; raises ValueError on anything else."""
        try:
            year_s, month_s = value.strip().split("-")
            ym = cls(int(year_s), int(month_s))
        except (AttributeError, ValueError):
            raise ValueError(f"invalid month '{value}', expected YYYY-MM") from None
        if not 1 <= ym.month <= 12 or ym.year < 1:
            raise ValueError(f"invalid month '{value}', expected YYYY-MM")
        return ym

    @classmethod
    def current(cls, today: date | None = None) -> "YearMonth":
        return cls.from_date(today or date.today())

    @property
    def first_day(self) -> date:
        return date(self.year, self.month, 1)

    @property
    def last_day(self) -> date:
        return date(self.year, self.month, calendar.monthrange(self.year, self.month)[1])

    def previous(self) -> "YearMonth":
        if self.month == 1:
            return YearMonth(self.year - 1, 12)
        return YearMonth(self.year, self.month - 1)

    def contains(self, value: date) -> bool:
        return value.year == self.year and value.month == self.month

    def __str__(self) -> str:
        return f"{self.year:04d}-{self.month:02d}"
