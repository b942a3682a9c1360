"""Investment portfolio commands."""

import click

from finlove.cli.error_handling import domain_errors
from finlove.cli.user_resolution import require_user
from finlove.utils.amount_parser import format_brl, parse_amount
from finlove.utils.date_parser import parse_date


@click.group()
def investment_group():
    """Track the couple's investments."""
    pass


def _parse_amount_option(ctx, value: str):
    try:
        return parse_amount(value)
    except ValueError as e:
        click.echo(f"Error: Invalid amount format: {e}", err=True)
        ctx.exit(1)


@investment_group.command("add")
@click.option("--name", required=True, help="Asset name, e.g. 'Tesouro Selic 2029'")
@click.option("--amount", required=True, help="Amount invested")
@click.option("--category", default="Other", show_default=True, help="Asset class")
@click.option("--current", help="Current value (defaults to the invested amount)")
@click.option("--date", "txn_date", help="Date of the ledger entries (defaults to today)")
@click.option(
    "--no-transaction",
    is_flag=True,
    help="Only track the asset, without taking the money from the balance",
)
@click.option("--auto-top-up", is_flag=True, help="Record an income for whatever the balance lacks")
@click.pass_context
def add_investment(
    ctx,
    name: str,
    amount: str,
    category: str,
    current: str | None,
    txn_date: str | None,
    no_transaction: bool,
    auto_top_up: bool,
):
    """Add an investment to your portfolio.

    Examples:
        finlove investment add --name "CDB Nubank" --amount 1000
        finlove investment add --name Bitcoin --amount 500 --category Crypto --auto-top-up
    """
    user_id = require_user(ctx)
    app = ctx.obj["app"]
    invested = _parse_amount_option(ctx, amount)
    current_amount = _parse_amount_option(ctx, current) if current else None
    when = None
    if txn_date:
        try:
            when = parse_date(txn_date)
        except ValueError as e:
            click.echo(f"Error: Invalid date: {e}", err=True)
            ctx.exit(1)

    with domain_errors(ctx):
        investment_id = app.investment_service().create_investment(
            user_id,
            name,
            invested,
            category=category,
            current_amount=current_amount,
            record_transaction=not no_transaction,
            auto_top_up=auto_top_up,
            txn_date=when,
        )
    new_badges = app.gamification_service().award_after_write(user_id)

    click.echo(f"Created investment '{name.strip()}' with ID {investment_id}")
    for badge in new_badges:
        click.echo(f"  New badge: {badge.name}")


@investment_group.command("list")
@click.pass_context
def list_investments(ctx):
    """List your portfolio and your partner's."""
    user_id = require_user(ctx)
    with domain_errors(ctx):
        portfolio = ctx.obj["app"].investment_service().list_portfolio(user_id)

    if not portfolio.mine and not portfolio.partner:
        click.echo("No investments found.")
        return

    click.echo(f"{'ID':<5} {'Name':<25} {'Category':<15} {'Invested':>14} {'Current':>14}  Owner")
    click.echo("-" * 85)
    for owner, rows in (("you", portfolio.mine), ("partner", portfolio.partner)):
        for inv in rows:
            click.echo(
                f"{inv.id:<5} {inv.name:<25} {inv.category:<15} "
                f"{format_brl(inv.invested_amount):>14} {format_brl(inv.current_amount):>14}  {owner}"
            )
    click.echo(f"\nTotal: {format_brl(portfolio.total_current)}")


@investment_group.command("redeem")
@click.argument("investment_id", type=int)
@click.argument("amount")
@click.pass_context
def redeem_investment(ctx, investment_id: int, amount: str):
    """Take money out of an investment as income."""
    user_id = require_user(ctx)
    value = _parse_amount_option(ctx, amount)
    with domain_errors(ctx):
        remaining = ctx.obj["app"].investment_service().redeem(user_id, investment_id, value)
    click.echo(f"Redeemed {format_brl(value)}, {format_brl(remaining)} left")


@investment_group.command("set-balance")
@click.argument("investment_id", type=int)
@click.argument("amount")
@click.pass_context
def set_balance(ctx, investment_id: int, amount: str):
    """Set the current value of an investment."""
    user_id = require_user(ctx)
    value = _parse_amount_option(ctx, amount)
    with domain_errors(ctx):
        ctx.obj["app"].investment_service().update_balance(user_id, investment_id, value)
    click.echo(f"Investment {investment_id} is now worth {format_brl(value)}")


@investment_group.command("delete")
@click.argument("investment_id", type=int)
@click.option("--force", is_flag=True, help="Skip confirmation prompt")
@click.pass_context
def delete_investment(ctx, investment_id: int, force: bool):
    """Delete an investment and the ledger entries it created."""
    user_id = require_user(ctx)
    service = ctx.obj["app"].investment_service()
    with domain_errors(ctx):
        investment = service.get_investment(user_id, investment_id)

    if not force:
        click.confirm(f"Delete investment '{investment.name}'?", abort=True)

    with domain_errors(ctx):
        removed = service.delete_investment(user_id, investment_id)
    click.echo(f"Deleted investment {investment_id} ({removed} ledger entries removed)")


def register_commands(cli):
    """Register investment commands with main CLI."""
    cli.add_command(investment_group, name="investment")
