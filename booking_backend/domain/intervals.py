"""Date-interval helpers.

Every range is half-open, ``[start, end)``: a guest checking out on a day
frees the room for a guest checking in the same day.
"""

from __future__ import annotations

import calendar
from datetime import date, timedelta
from typing import Iterator


ONE_DAY = timedelta(days=1)


def overlaps(a_start: date, a_end: date, b_start: date, b_end: date) -> bool:
    """Return True when ``[a_start, a_end)`` and ``[b_start, b_end)`` intersect."""
    return a_start < b_end and b_start < a_end


def night_overlaps(night: date, start: date, end: date) -> bool:
    """Whether the night beginning on ``night`` falls inside ``[start, end)``."""
    return overlaps(night, night + ONE_DAY, start, end)


def iter_nights(check_in: date, check_out: date) -> Iterator[date]:
    current = check_in
    while current < check_out:
        yield current
        current += ONE_DAY


def month_bounds(year: int, month: int) -> tuple[date, date]:
    """First and last calendar day of ``(year, month)``."""
    if not 1 <= month <= 12:
        raise ValueError("month must be between 1 and 12")
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, 1), date(year, month, last_day)


def months_spanned(check_in: date, check_out: date) -> list[tuple[int, int]]:
    """Distinct ``(year, month)`` pairs holding at least one night of the stay.

    The first pair is always the check-in month.
    """
    months: list[tuple[int, int]] = []
    year, month = check_in.year, check_in.month
    last_night = max(check_in, check_out - ONE_DAY)
    while (year, month) <= (last_night.year, last_night.month):
        months.append((year, month))
        month += 1
        if month > 12:
            year, month = year + 1, 1
    return months
