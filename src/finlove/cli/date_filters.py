"""Period selection for commands that read the ledger.

A command decorated with ``period_options`` accepts exactly one of:

- a named flag such as ``--this-month``
- a calendar month (``--month``/``--year``) or a whole ``--year``
- explicit ``--start-date``/``--end-date`` bounds

and receives them bundled as a ``PeriodSelection``.
"""

import functools
from dataclasses import dataclass
from datetime import date
from typing import Optional

import click

from finlove.utils.date_parser import get_date_range, month_bounds, parse_date

PERIOD_FLAGS = ("this-month", "last-month", "next-month", "this-year", "last-year")


@dataclass(frozen=True)
class PeriodSelection:
    """Period options as typed on the command line."""

    flags: tuple[str, ...] = ()
    start_date: Optional[str] = None
    end_date: Optional[str] = None
    month: Optional[int] = None
    year: Optional[int] = None

    def source_count(self) -> int:
        calendar = self.month is not None or self.year is not None
        return len(self.flags) + bool(self.start_date or self.end_date) + calendar


def period_options(func):
    """Add the period options to a command and pass them on as ``period``."""

    @functools.wraps(func)
    def wrapper(*args, start_date, end_date, month, year, **kwargs):
        flags = tuple(name for name in PERIOD_FLAGS if kwargs.pop(name.replace("-", "_")))
        selection = PeriodSelection(flags, start_date, end_date, month, year)
        return func(*args, period=selection, **kwargs)

    for name in reversed(PERIOD_FLAGS):
        wrapper = click.option(f"--{name}", is_flag=True, help=f"Only {name.replace('-', ' ')}")(wrapper)
    wrapper = click.option("--year", type=int, help="Calendar year, alone or with --month")(wrapper)
    wrapper = click.option("--month", type=int, help="Calendar month (1-12)")(wrapper)
    wrapper = click.option("--end-date", help="End date (YYYY-MM-DD or relative like 'today')")(wrapper)
    wrapper = click.option("--start-date", help="Start date (YYYY-MM-DD or relative like 'yesterday')")(wrapper)
    return wrapper


def _parse_bound(ctx, value: Optional[str], label: str) -> Optional[date]:
    if not value:
        return None
    try:
        return parse_date(value)
    except ValueError as e:
        click.echo(f"Error: Invalid {label} date: {e}", err=True)
        ctx.exit(1)


def resolve_period(
    ctx,
    period: PeriodSelection,
    default_range: tuple[date, date] | None = None,
) -> tuple[date | None, date | None]:
    """Turn a period selection into inclusive (start, end) dates.

    Either bound may be None when only one explicit date was given.
    """
    if period.source_count() > 1:
        click.echo(
            "Error: Pick the period with one option only "
            "(a period flag, --month/--year, or --start-date/--end-date).",
            err=True,
        )
        ctx.exit(1)

    if period.flags:
        return get_date_range(period.flags[0])

    if period.month is not None:
        return month_bounds(*resolve_month(ctx, period.month, period.year))
    if period.year is not None:
        return date(period.year, 1, 1), date(period.year, 12, 31)

    start = _parse_bound(ctx, period.start_date, "start")
    end = _parse_bound(ctx, period.end_date, "end")
    if start and end and start > end:
        click.echo(f"Error: Start date {start} is after end date {end}", err=True)
        ctx.exit(1)

    if start is None and end is None and default_range is not None:
        return default_range
    return start, end


def resolve_month(ctx, month: int | None, year: int | None) -> tuple[int, int]:
    """Fill in the current month/year for whichever is missing."""
    today = date.today()
    month = month if month is not None else today.month
    year = year if year is not None else today.year
    if not 1 <= month <= 12:
        click.echo(f"Error: Month must be between 1 and 12 (got {month})", err=True)
        ctx.exit(1)
    return month, year
