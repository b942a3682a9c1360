"""Date parsing and month arithmetic utilities."""

from datetime import UTC, date, datetime, timedelta
from typing import Optional

from dateutil import parser as date_parser
from dateutil.relativedelta import relativedelta


def add_months(value: date, months: int, anchor_day: Optional[int] = None) -> date:
    """Move a date by whole months.

    When ``anchor_day`` is given the result is snapped to that day of the
    target month. Days past the end of the month clamp to its last day, so an
    anchor of 31 lands on the 30th in April and on the 28th/29th in February.
    Without an anchor the original day is kept (clamped the same way).

    Args:
        value: Starting date
        months: Number of months to move (may be negative)
        anchor_day: Optional day of month (1..31) to snap to

    Returns:
        The shifted date
    """
    return value + relativedelta(months=months, day=anchor_day)


def month_bounds(month: int, year: int) -> tuple[date, date]:
    """Return the first and last day of a calendar month (month is 1..12)."""
    if not 1 <= month <= 12:
        raise ValueError(f"Month must be between 1 and 12 (got {month})")
    start = date(year, month, 1)
    end = start + relativedelta(day=31)
    return start, end


def previous_month(month: int, year: int) -> tuple[int, int]:
    """Return (month, year) of the month before the given one."""
    prev = date(year, month, 1) - relativedelta(months=1)
    return prev.month, prev.year


def parse_date(date_str: str, today: Optional[date] = None) -> date:
    """Parse a date string into a date object.

    Supports absolute dates ("2024-01-15", "15/01/2024") and a few relative
    words: "today", "yesterday", "tomorrow", "this month", "last month",
    "next month".

    Args:
        date_str: Date string
        today: Reference date for relative words (defaults to date.today())

    Returns:
        Date object

    Raises:
        ValueError: If date string cannot be parsed
    """
    date_str = date_str.strip().lower()
    today = today or date.today()

    relative_dates = {
        "today": today,
        "yesterday": today - timedelta(days=1),
        "tomorrow": today + timedelta(days=1),
        "this month": today.replace(day=1),
        "last month": (today - relativedelta(months=1)).replace(day=1),
        "next month": (today + relativedelta(months=1)).replace(day=1),
    }

    if date_str in relative_dates:
        return relative_dates[date_str]

    # ISO dates are year-first; everything else is read day-first (15/01/2024)
    try:
        if len(date_str) >= 4 and date_str[:4].isdigit():
            return date_parser.isoparse(date_str).date()
        return date_parser.parse(date_str, dayfirst=True).date()
    except (ValueError, TypeError, OverflowError) as e:
        raise ValueError(f"Could not parse date '{date_str}': {e}")


def get_date_range(period: str, today: Optional[date] = None) -> tuple[date, date]:
    """Get start and end dates for a named period.

    Args:
        period: One of this-month, last-month, next-month, this-year, last-year
        today: Reference date (defaults to date.today())

    Returns:
        Tuple of (start_date, end_date), both inclusive

    Raises:
        ValueError: If period string is not recognized
    """
    period = period.strip().lower()
    today = today or date.today()

    if period == "this-month":
        return month_bounds(today.month, today.year)

    elif period == "last-month":
        month, year = previous_month(today.month, today.year)
        return month_bounds(month, year)

    elif period == "next-month":
        upcoming = today + relativedelta(months=1)
        return month_bounds(upcoming.month, upcoming.year)

    elif period == "this-year":
        return date(today.year, 1, 1), date(today.year, 12, 31)

    elif period == "last-year":
        return date(today.year - 1, 1, 1), date(today.year - 1, 12, 31)

    else:
        raise ValueError(
            f"Unknown period: '{period}'. Supported periods: "
            "this-month, last-month, next-month, this-year, last-year"
        )


def as_utc(value: datetime) -> datetime:
    """Return an aware UTC datetime. Naive values (as SQLite returns them) are taken as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)
