"""Add transaction command."""

import click

from finlove.cli.error_handling import domain_errors
from finlove.cli.user_resolution import require_user
from finlove.domain.entities import PaymentMethod, TransactionType
from finlove.domain.gamification import GamificationService
from finlove.domain.transaction import TransactionInput, TransactionService
from finlove.utils.amount_parser import format_brl, parse_amount
from finlove.utils.date_parser import parse_date


@click.command("add")
@click.option(
    "--type",
    "txn_type",
    type=click.Choice([t.value for t in TransactionType], case_sensitive=False),
    default=TransactionType.EXPENSE.value,
    show_default=True,
    help="Transaction type",
)
@click.option("--amount", required=True, help="Total amount (e.g., 123.45 or 1.234,56)")
@click.option("--description", required=True, help="Transaction description")
@click.option("--category", required=True, help="Category name")
@click.option(
    "--date",
    help="Transaction date (YYYY-MM-DD or relative like 'today', 'yesterday'); defaults to today",
)
@click.option(
    "--method",
    type=click.Choice([m.value for m in PaymentMethod], case_sensitive=False),
    default=PaymentMethod.DEBIT.value,
    show_default=True,
    help="Payment method",
)
@click.option("--installments", type=int, default=1, show_default=True, help="Split a credit purchase into N monthly installments")
@click.option("--card", "card_id", type=int, help="Credit card ID (credit purchases)")
@click.option("--recurring", is_flag=True, help="Also repeat this entry every month")
@click.option("--recurring-day", type=int, help="Day of month for the recurring entry (1-31)")
@click.pass_context
def add_transaction(
    ctx,
    txn_type: str,
    amount: str,
    description: str,
    category: str,
    date: str | None,
    method: str,
    installments: int,
    card_id: int | None,
    recurring: bool,
    recurring_day: int | None,
):
    """Add a transaction manually.

    Examples:
        finlove add --amount 50.00 --description "Groceries" --category Food
        finlove add --amount 1200 --description "TV" --category Home --method CREDIT --installments 10 --card 1
        finlove add --amount 89.90 --description "Internet" --category Bills --recurring --recurring-day 10
    """
    user_id = require_user(ctx)
    db = ctx.obj["db"]
    transaction_service = TransactionService(db)

    # Parse date
    txn_date = None
    if date:
        try:
            txn_date = parse_date(date)
        except ValueError as e:
            click.echo(f"Error: Invalid date format: {e}", err=True)
            ctx.exit(1)

    # Parse amount
    try:
        txn_amount = parse_amount(amount)
    except ValueError as e:
        click.echo(f"Error: Invalid amount format: {e}", err=True)
        ctx.exit(1)

    data = TransactionInput(
        description=description,
        amount=txn_amount,
        type=TransactionType(txn_type.upper()),
        category=category,
        date=txn_date,
        payment_method=PaymentMethod(method.upper()),
        installments=installments,
        is_recurring=recurring,
        recurring_day=recurring_day,
        credit_card_id=card_id,
    )

    with domain_errors(ctx):
        result = transaction_service.create_transaction(user_id, data)
    new_badges = GamificationService(db).award_after_write(user_id)

    if result.installment_id:
        click.echo(
            f"Created {len(result.transaction_ids)} installments (group {result.installment_id})"
        )
    else:
        click.echo(f"Created transaction {result.transaction_ids[0]}")
    click.echo(f"  Description: {description}")
    click.echo(f"  Amount: {format_brl(txn_amount)}")
    click.echo(f"  Category: {category}")
    if result.recurring_id:
        click.echo(f"  Recurring: every month (template {result.recurring_id})")
    for badge in new_badges:
        click.echo(f"New badge: {badge.name} - {badge.description}")


def register_commands(cli):
    """Register add command with main CLI."""
    cli.add_command(add_transaction)
