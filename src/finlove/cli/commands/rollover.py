"""Recurring bill rollover command."""

from datetime import date as date_type

import click

from finlove.utils.date_parser import parse_date


@click.command("rollover")
@click.option("--date", "run_date", help="Reference date (defaults to today)")
@click.option("--lookahead", type=int, help="Days ahead to materialise (defaults to settings)")
@click.pass_context
def run_rollover(ctx, run_date: str | None, lookahead: int | None):
    """Create the entries of every recurring bill due in the next days.

    Meant to be run daily (e.g., from cron). Each partner with new bills gets
    one reminder.

    Examples:
        finlove rollover
        finlove rollover --date 2024-03-01 --lookahead 10
    """
    app = ctx.obj["app"]
    settings = app.settings

    now = date_type.today()
    if run_date:
        try:
            now = parse_date(run_date)
        except ValueError as e:
            click.echo(f"Error: Invalid date format: {e}", err=True)
            ctx.exit(1)

    result = app.rollover_service().run(
        now,
        lookahead_days=lookahead if lookahead is not None else settings.rollover_lookahead_days,
        max_iterations=settings.rollover_max_iterations,
    )

    click.echo(f"Created {result.created} transaction(s) from {result.templates_updated} template(s)")
    click.echo(f"Sent {result.notifications - result.notifications_failed} reminder(s)")
    if result.notifications_failed:
        click.echo(f"Warning: {result.notifications_failed} reminder(s) failed", err=True)


def register_commands(cli):
    """Register rollover command with main CLI."""
    cli.add_command(run_rollover)
