"""CSV export command."""

from pathlib import Path

import click

from finlove.cli.date_filters import resolve_month
from finlove.cli.error_handling import domain_errors
from finlove.cli.user_resolution import require_user
from finlove.domain.analytics import AnalyticsService


@click.command("export")
@click.option("--month", type=int, help="Month (1-12), defaults to the current month")
@click.option("--year", type=int, help="Year, defaults to the current year")
@click.option("--output", "-o", type=click.Path(dir_okay=False), help="Write to a file instead of stdout")
@click.pass_context
def export_csv(ctx, month: int | None, year: int | None, output: str | None):
    """Export the couple's transactions of a month as CSV.

    Examples:
        finlove export --month 3 --year 2024 -o march.csv
    """
    user_id = require_user(ctx)
    month, year = resolve_month(ctx, month, year)

    with domain_errors(ctx):
        content = AnalyticsService(ctx.obj["db"]).export_csv(user_id, month, year)

    if output:
        Path(output).write_text(content, encoding="utf-8")
        click.echo(f"Exported {month:02d}/{year} to {output}")
    else:
        click.echo(content, nl=False)


def register_commands(cli):
    """Register export command with main CLI."""
    cli.add_command(export_csv)
