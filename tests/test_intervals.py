"""Tests for half-open date interval helpers."""

from __future__ import annotations

from datetime import date, timedelta
from itertools import combinations

import pytest

from booking_backend.domain.intervals import (
    iter_nights,
    month_bounds,
    months_spanned,
    night_overlaps,
    overlaps,
)


def d(day: int, month: int = 1, year: int = 2025) -> date:
    return date(year, month, day)


# --- Boundaries ---

def test_back_to_back_stays_do_not_overlap() -> None:
    """Checkout on the 12th and check-in on the 12th share the room legally."""
    assert not overlaps(d(12), d(14), d(10), d(12))
    assert not overlaps(d(10), d(12), d(12), d(14))


def test_stay_containing_reservation_overlaps() -> None:
    assert overlaps(d(5), d(20), d(10), d(12))


def test_stay_inside_reservation_overlaps() -> None:
    assert overlaps(d(10), d(11), d(5), d(20))


def test_partial_overlap_on_left_edge() -> None:
    assert overlaps(d(8), d(11), d(10), d(12))


def test_partial_overlap_on_right_edge() -> None:
    assert overlaps(d(11), d(15), d(10), d(12))


def test_identical_ranges_overlap() -> None:
    assert overlaps(d(10), d(12), d(10), d(12))


# --- Properties over a small calendar ---

def _ranges(days: int = 6) -> list[tuple[date, date]]:
    points = [d(1) + timedelta(days=offset) for offset in range(days)]
    return list(combinations(points, 2))


def _brute_force(a: tuple[date, date], b: tuple[date, date]) -> bool:
    nights_a = set(iter_nights(*a))
    nights_b = set(iter_nights(*b))
    return bool(nights_a & nights_b)


def test_overlap_is_symmetric() -> None:
    for a in _ranges():
        for b in _ranges():
            assert overlaps(*a, *b) == overlaps(*b, *a)


def test_overlap_matches_day_by_day_intersection() -> None:
    for a in _ranges():
        for b in _ranges():
            assert overlaps(*a, *b) == _brute_force(a, b), (a, b)


# --- Single nights ---

def test_checkout_night_is_not_occupied() -> None:
    assert night_overlaps(d(10), d(10), d(12))
    assert night_overlaps(d(11), d(10), d(12))
    assert not night_overlaps(d(12), d(10), d(12))
    assert not night_overlaps(d(9), d(10), d(12))


def test_iter_nights_excludes_checkout_day() -> None:
    assert list(iter_nights(d(30, 1), d(2, 2))) == [d(30, 1), d(31, 1), d(1, 2)]


# --- Month helpers ---

def test_month_bounds_handles_leap_february() -> None:
    assert month_bounds(2024, 2) == (date(2024, 2, 1), date(2024, 2, 29))
    assert month_bounds(2025, 2) == (date(2025, 2, 1), date(2025, 2, 28))


def test_month_bounds_rejects_invalid_month() -> None:
    with pytest.raises(ValueError):
        month_bounds(2025, 13)


def test_months_spanned_within_one_month() -> None:
    assert months_spanned(d(10), d(14)) == [(2025, 1)]


def test_months_spanned_ignores_checkout_on_first_of_next_month() -> None:
    assert months_spanned(d(28), d(1, 2)) == [(2025, 1)]


def test_months_spanned_crosses_year_end() -> None:
    assert months_spanned(date(2024, 12, 30), date(2025, 1, 3)) == [(2024, 12), (2025, 1)]
