"""AI advice commands."""

import click

from finlove.cli.date_filters import resolve_month
from finlove.cli.error_handling import domain_errors
from finlove.cli.user_resolution import require_user
from finlove.domain.advice import GENERAL_CONTEXT, TONE_INSTRUCTIONS, planning_context


@click.group()
def advice_group():
    """Ask for financial advice on your spending or plan."""
    pass


@advice_group.command("general")
@click.option(
    "--tone",
    type=click.Choice(sorted(TONE_INSTRUCTIONS), case_sensitive=False),
    default="FRIENDLY",
    show_default=True,
    help="Advisor personality",
)
@click.pass_context
def general_advice(ctx, tone: str):
    """Advice on the couple's last 30 days of spending."""
    user_id = require_user(ctx)
    with domain_errors(ctx):
        text = ctx.obj["app"].advice_service().generate_financial_advice(user_id, tone=tone.upper())
    click.echo(text)


@advice_group.command("planning")
@click.option("--month", type=int, help="Month (1-12), defaults to the current month")
@click.option("--year", type=int, help="Year, defaults to the current year")
@click.pass_context
def planning_advice(ctx, month: int | None, year: int | None):
    """Advice on a month's budget plan."""
    user_id = require_user(ctx)
    month, year = resolve_month(ctx, month, year)
    with domain_errors(ctx):
        text = ctx.obj["app"].advice_service().generate_planning_advice(user_id, month, year)
    click.echo(text)


def _context_option(func):
    func = click.option("--month", type=int, help="Planning month; omit for general advice")(func)
    func = click.option("--year", type=int, help="Planning year, defaults to the current year")(func)
    return func


def _chat_context(ctx, month: int | None, year: int | None) -> str:
    if month is None:
        return GENERAL_CONTEXT
    month, year = resolve_month(ctx, month, year)
    return planning_context(month, year)


@advice_group.command("history")
@_context_option
@click.pass_context
def show_history(ctx, month: int | None, year: int | None):
    """Show earlier answers, oldest first."""
    user_id = require_user(ctx)
    context = _chat_context(ctx, month, year)
    with domain_errors(ctx):
        messages = ctx.obj["app"].advice_service().get_history(user_id, context)

    if not messages:
        click.echo("No advice history.")
        return

    for message in messages:
        click.echo(f"--- {message.created_at:%Y-%m-%d %H:%M} ({message.role})")
        click.echo(message.message)


@advice_group.command("clear")
@_context_option
@click.pass_context
def clear_history(ctx, month: int | None, year: int | None):
    """Delete the advice history."""
    user_id = require_user(ctx)
    context = _chat_context(ctx, month, year)
    with domain_errors(ctx):
        count = ctx.obj["app"].advice_service().clear_history(user_id, context)
    click.echo(f"Deleted {count} message(s)")


def register_commands(cli):
    """Register advice commands with main CLI."""
    cli.add_command(advice_group, name="advice")
