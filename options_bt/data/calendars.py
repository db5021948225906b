"""
US equity market (NYSE/NASDAQ) holiday calendar.

Holidays are computed once per year for an explicit year range and held in an
immutable mapping. Build the calendar up front and pass it to whoever needs it.
"""

from __future__ import annotations

from datetime import date, timedelta
from types import MappingProxyType
from typing import Dict, FrozenSet, Iterable, List, Mapping

import pandas as pd

SATURDAY = 5
SUNDAY = 6


def observed(holiday: date) -> date:
    """Saturday holidays are observed on Friday, Sunday holidays on Monday."""
    weekday = holiday.weekday()
    if weekday == SATURDAY:
        return holiday - timedelta(days=1)
    if weekday == SUNDAY:
        return holiday + timedelta(days=1)
    return holiday


def nth_weekday(year: int, month: int, weekday: int, n: int) -> date:
    """n-th (1-based) given weekday of a month, Mon=0"""
    first = date(year, month, 1)
    offset = (weekday - first.weekday()) % 7
    return first + timedelta(days=offset + 7 * (n - 1))


def last_weekday(year: int, month: int, weekday: int) -> date:
    if month == 12:
        last = date(year, 12, 31)
    else:
        last = date(year, month + 1, 1) - timedelta(days=1)
    return last - timedelta(days=(last.weekday() - weekday) % 7)


def easter_sunday(year: int) -> date:
    """Western Easter (anonymous Gregorian algorithm)."""
    a = year % 19
    b, c = divmod(year, 100)
    d, e = divmod(b, 4)
    f = (b + 8) // 25
    g = (b - f + 1) // 3
    h = (19 * a + b - d - g + 15) % 30
    i, k = divmod(c, 4)
    l = (32 + 2 * e + 2 * i - h - k) % 7
    m = (a + 11 * h + 22 * l) // 451
    month, day = divmod(h + l - 7 * m + 114, 31)
    return date(year, month, day + 1)


def holidays_for_year(year: int) -> FrozenSet[date]:
    """Full-day market closures for a calendar year."""
    days = {
        observed(date(year, 1, 1)),                 # New Year's Day
        nth_weekday(year, 1, 0, 3),                 # Martin Luther King Jr. Day
        nth_weekday(year, 2, 0, 3),                 # Presidents' Day
        easter_sunday(year) - timedelta(days=2),    # Good Friday
        last_weekday(year, 5, 0),                   # Memorial Day
        observed(date(year, 7, 4)),                 # Independence Day
        nth_weekday(year, 9, 0, 1),                 # Labor Day
        nth_weekday(year, 11, 3, 4),                # Thanksgiving
        observed(date(year, 12, 25)),               # Christmas
    }
    if year >= 2021:
        days.add(observed(date(year, 6, 19)))       # Juneteenth
    return frozenset(days)


class HolidayCalendar:
    """
    Precomputed holiday sets for a fixed range of years.

    Example:
        >>> cal = HolidayCalendar.for_range(date(2024, 1, 1), date(2024, 12, 31))
        >>> cal.is_trading_day(date(2024, 3, 29))  # Good Friday
        False
    """

    def __init__(self, years: Iterable[int]):
        table: Dict[int, FrozenSet[date]] = {int(y): holidays_for_year(int(y)) for y in years}
        if not table:
            raise ValueError("HolidayCalendar needs at least one year")
        self._holidays: Mapping[int, FrozenSet[date]] = MappingProxyType(table)

    @classmethod
    def for_range(cls, start: date, end: date, pad_years: int = 1) -> "HolidayCalendar":
        """Calendar covering start..end, padded so next/previous trading day lookups can cross a year boundary."""
        if end < start:
            raise ValueError(f"end {end} is before start {start}")
        return cls(range(start.year - pad_years, end.year + pad_years + 1))

    @property
    def years(self) -> List[int]:
        return sorted(self._holidays)

    def holidays(self, year: int) -> FrozenSet[date]:
        try:
            return self._holidays[year]
        except KeyError:
            raise ValueError(
                f"Year {year} is outside the calendar range {self.years[0]}-{self.years[-1]}"
            ) from None

    def is_market_holiday(self, day: date) -> bool:
        """True for weekends and holidays (the market is closed)."""
        if day.weekday() >= SATURDAY:
            return True
        return day in self.holidays(day.year)

    def is_trading_day(self, day: date) -> bool:
        return not self.is_market_holiday(day)

    def next_trading_day(self, day: date) -> date:
        nxt = day + timedelta(days=1)
        while self.is_market_holiday(nxt):
            nxt += timedelta(days=1)
        return nxt

    def previous_trading_day(self, day: date) -> date:
        prev = day - timedelta(days=1)
        while self.is_market_holiday(prev):
            prev -= timedelta(days=1)
        return prev

    def trading_days(self, start: date, end: date) -> List[date]:
        """All trading days in [start, end]."""
        if end < start:
            return []
        weekdays = pd.bdate_range(start=start, end=end)
        return [d.date() for d in weekdays if d.date() not in self.holidays(d.year)]
