"""Credit card commands."""

import click

from finlove.cli.date_filters import resolve_month
from finlove.cli.error_handling import domain_errors
from finlove.cli.user_resolution import require_user
from finlove.domain.credit_card import CreditCardService
from finlove.utils.amount_parser import format_brl, parse_amount


@click.group()
def card_group():
    """Manage credit cards and pay their bills."""
    pass


@card_group.command("add")
@click.option("--name", required=True, help="Card name")
@click.option("--closing-day", type=int, required=True, help="Day of month the bill closes (1-31)")
@click.option("--due-day", type=int, required=True, help="Day of month the bill is due (1-31)")
@click.option("--limit", "card_limit", default="0", help="Credit limit")
@click.pass_context
def add_card(ctx, name: str, closing_day: int, due_day: int, card_limit: str):
    """Register a credit card.

    Examples:
        finlove card add --name Nubank --closing-day 5 --due-day 12 --limit 5000
    """
    user_id = require_user(ctx)
    try:
        limit = parse_amount(card_limit)
    except ValueError as e:
        click.echo(f"Error: Invalid amount format: {e}", err=True)
        ctx.exit(1)

    with domain_errors(ctx):
        card_id = CreditCardService(ctx.obj["db"]).create_card(
            user_id, name, closing_day, due_day, limit
        )
    click.echo(f"Created card '{name}' with ID {card_id}")


@card_group.command("list")
@click.pass_context
def list_cards(ctx):
    """List your credit cards."""
    user_id = require_user(ctx)
    cards = CreditCardService(ctx.obj["db"]).list_cards(user_id)

    if not cards:
        click.echo("No credit cards found.")
        return

    click.echo(f"{'ID':<5} {'Name':<25} {'Closes':<8} {'Due':<6} {'Limit':>14}")
    click.echo("-" * 62)
    for card in cards:
        click.echo(
            f"{card.id:<5} {card.name:<25} {card.closing_day:<8} {card.due_day:<6} "
            f"{format_brl(card.limit):>14}"
        )


@card_group.command("delete")
@click.argument("card_id", type=int)
@click.option("--force", is_flag=True, help="Skip confirmation prompt")
@click.pass_context
def delete_card(ctx, card_id: int, force: bool):
    """Delete a credit card. Its transactions are kept."""
    user_id = require_user(ctx)
    card_service = CreditCardService(ctx.obj["db"])
    with domain_errors(ctx):
        card = card_service.get_card(user_id, card_id)

    if not force:
        click.confirm(f"Delete card '{card.name}'?", abort=True)

    with domain_errors(ctx):
        card_service.delete_card(user_id, card_id)
    click.echo(f"Deleted card {card_id}")


@card_group.command("bill")
@click.argument("card_id", type=int)
@click.option("--month", type=int, help="Bill month (1-12), defaults to the current month")
@click.option("--year", type=int, help="Bill year, defaults to the current year")
@click.pass_context
def show_bill(ctx, card_id: int, month: int | None, year: int | None):
    """Show a card's bill total for one month."""
    user_id = require_user(ctx)
    month, year = resolve_month(ctx, month, year)
    with domain_errors(ctx):
        total = CreditCardService(ctx.obj["db"]).invoice_total(user_id, card_id, month, year)
    click.echo(f"Bill {month:02d}/{year}: {format_brl(total)}")


@card_group.command("pay")
@click.argument("card_id", type=int)
@click.option("--month", type=int, help="Bill month (1-12), defaults to the current month")
@click.option("--year", type=int, help="Bill year, defaults to the current year")
@click.pass_context
def pay_bill(ctx, card_id: int, month: int | None, year: int | None):
    """Pay a card's bill: mark the month's purchases paid and record the payment.

    Examples:
        finlove card pay 1 --month 3 --year 2024
    """
    user_id = require_user(ctx)
    month, year = resolve_month(ctx, month, year)
    with domain_errors(ctx):
        total = CreditCardService(ctx.obj["db"]).pay_bill(user_id, card_id, month, year)

    if total > 0:
        click.echo(f"Paid bill {month:02d}/{year}: {format_brl(total)}")
    else:
        click.echo(f"Nothing to pay for {month:02d}/{year}")


def register_commands(cli):
    """Register credit card commands with main CLI."""
    cli.add_command(card_group, name="card")
