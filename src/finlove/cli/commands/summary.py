"""Summary commands."""

from datetime import date

import click

from finlove.cli.date_filters import resolve_month
from finlove.cli.error_handling import domain_errors
from finlove.cli.user_resolution import require_user
from finlove.domain.analytics import AnalyticsService
from finlove.utils.amount_parser import format_brl


@click.group()
def summary_group():
    """Balances, month comparisons and projections for the couple."""
    pass


@summary_group.command("balance")
@click.option("--month", type=int, help="Only count open credit up to the end of this month")
@click.option("--year", type=int, help="Year for --month, defaults to the current year")
@click.pass_context
def show_balance(ctx, month: int | None, year: int | None):
    """Accumulated balance and unpaid credit.

    Examples:
        finlove summary balance
        finlove summary balance --month 3 --year 2024
    """
    user_id = require_user(ctx)
    if month is not None:
        month, year = resolve_month(ctx, month, year)
    else:
        year = None

    with domain_errors(ctx):
        summary = AnalyticsService(ctx.obj["db"]).financial_summary(user_id, month=month, year=year)

    click.echo(f"{'Accumulated balance:':<30} {format_brl(summary.accumulated_balance):>16}")
    click.echo(f"{'Open credit:':<30} {format_brl(summary.total_credit_open):>16}")


@summary_group.command("compare")
@click.option("--month", type=int, help="Month (1-12), defaults to the current month")
@click.option("--year", type=int, help="Year, defaults to the current year")
@click.pass_context
def compare_months(ctx, month: int | None, year: int | None):
    """Compare a month's expenses with the month before."""
    user_id = require_user(ctx)
    month, year = resolve_month(ctx, month, year)

    with domain_errors(ctx):
        comparison = AnalyticsService(ctx.obj["db"]).monthly_comparison(user_id, month, year)

    trend = "up" if comparison.increased else "down"
    click.echo(f"{'This month:':<20} {format_brl(comparison.current_total):>16}")
    click.echo(f"{'Previous month:':<20} {format_brl(comparison.previous_total):>16}")
    click.echo(f"{'Change:':<20} {comparison.diff_percent:>15}% ({trend})")


@summary_group.command("projection")
@click.option("--months", type=int, default=12, show_default=True, help="Months ahead to include")
@click.pass_context
def show_projection(ctx, months: int):
    """Expenses already scheduled for the coming months."""
    user_id = require_user(ctx)
    with domain_errors(ctx):
        points = AnalyticsService(ctx.obj["db"]).projection(user_id, date.today(), months=months)

    if not points:
        click.echo("No scheduled expenses.")
        return

    click.echo(f"{'Month':<10} {'Amount':>16}")
    click.echo("-" * 27)
    for point in points:
        click.echo(f"{point.label:<10} {format_brl(point.amount):>16}")


@summary_group.command("categories")
@click.option("--month", type=int, help="Month (1-12), defaults to the current month")
@click.option("--year", type=int, help="Year, defaults to the current year")
@click.option("--limit", type=int, default=5, show_default=True, help="Number of categories to show")
@click.pass_context
def show_categories(ctx, month: int | None, year: int | None, limit: int):
    """Where the couple's money went in a month.

    Examples:
        finlove summary categories
        finlove summary categories --month 3 --year 2024 --limit 3
    """
    user_id = require_user(ctx)
    month, year = resolve_month(ctx, month, year)
    with domain_errors(ctx):
        totals = AnalyticsService(ctx.obj["db"]).category_breakdown(user_id, month, year, limit=limit)

    if not totals:
        click.echo(f"No expenses in {month:02d}/{year}.")
        return

    click.echo(f"{'Category':<25} {'Amount':>16}")
    click.echo("-" * 42)
    for row in totals:
        click.echo(f"{row.category:<25} {format_brl(row.amount):>16}")


def register_commands(cli):
    """Register summary commands with main CLI."""
    cli.add_command(summary_group, name="summary")
