"""
Calendar arithmetic for vesting installments.

All conversions are UTC and use only the Gregorian leap-year rule plus a
twelve-month day table, so results do not depend on the host's locale or
timezone database.
"""

from __future__ import annotations

from tokenvest.core.vesting_exceptions import CorruptedDataError

SECONDS_PER_DAY = 24 * 60 * 60
MIN_YEAR = 2000
MAX_YEAR = 9999

_DAYS_IN_MONTH = (31, 28, 31, 30, 31, 30, 31, 31, 30, 31, 30, 31)

Date = tuple[int, int, int]


def is_leap_year(year: int) -> bool:
    return (year % 4 == 0 and year % 100 != 0) or year % 400 == 0


def days_in_month(year: int, month: int) -> int:
    if month == 2 and is_leap_year(year):
        return 29
    return _DAYS_IN_MONTH[month - 1]


def current_date(epoch_seconds: int) -> Date:
    """
    Convert a Unix timestamp (seconds) to a UTC (year, month, day).
    """
    days = int(epoch_seconds) // SECONDS_PER_DAY

    year = 1970
    while True:
        year_length = 366 if is_leap_year(year) else 365
        if days < year_length:
            break
        days -= year_length
        year += 1

    month = 1
    while days >= days_in_month(year, month):
        days -= days_in_month(year, month)
        month += 1

    return year, month, days + 1


def advance_by_cycle(year: int, month: int, day: int, cycle_months: int) -> Date:
    """
    Move a date forward by ``cycle_months`` months.

    The day of month is carried over unchanged, so 2023-01-31 plus one month
    yields (2023, 2, 31). Callers compare the result with ``date_key`` and
    never need it to be a real calendar day.
    """
    raw_month = month + cycle_months - 1
    return year + raw_month // 12, raw_month % 12 + 1, day


def is_valid_date(year: int, month: int, day: int) -> bool:
    if year < MIN_YEAR or year > MAX_YEAR:
        return False
    if month < 1 or month > 12:
        return False
    return 1 <= day <= days_in_month(year, month)


def is_valid_date_format(text: str) -> bool:
    """True when ``text`` is exactly YYYY-MM-DD and names a real calendar day."""
    if not isinstance(text, str) or len(text) != 10:
        return False

    parts = text.split("-")
    if len(parts) != 3 or [len(part) for part in parts] != [4, 2, 2]:
        return False
    if not all(part.isascii() and part.isdigit() for part in parts):
        return False

    year, month, day = (int(part) for part in parts)
    return is_valid_date(year, month, day)


def parse_date(text: str) -> Date:
    """
    Split a stored YYYY-MM-DD string into integers.

    Stored due dates may carry a day past the end of the month (see
    ``advance_by_cycle``), so only the shape is checked here.
    """
    parts = text.split("-") if isinstance(text, str) else []
    try:
        year, month, day = (int(part) for part in parts)
    except ValueError as exc:
        raise CorruptedDataError(
            f"Stored date {text!r} is not in YYYY-MM-DD form",
            details={"value": text},
        ) from exc
    return year, month, day


def format_date(year: int, month: int, day: int) -> str:
    return f"{year:04d}-{month:02d}-{day:02d}"


def date_key(year: int, month: int, day: int) -> int:
    """Sortable integer for a date; larger means later."""
    return year * 10000 + month * 100 + day
