"""Transaction management commands."""

import click

from finlove.cli.date_filters import PeriodSelection, period_options, resolve_period
from finlove.cli.error_handling import domain_errors
from finlove.cli.user_resolution import require_user
from finlove.domain.entities import PaymentMethod, TransactionType
from finlove.domain.transaction import TransactionService
from finlove.domain.user import UserService
from finlove.utils.amount_parser import format_brl, parse_amount
from finlove.utils.date_parser import parse_date


@click.group()
def transaction_group():
    """Manage transactions."""
    pass


@transaction_group.command("list")
@period_options
@click.option("--mine", is_flag=True, help="Leave out the partner's transactions")
@click.option("--limit", type=int, help="Maximum number of transactions to show")
@click.pass_context
def list_transactions(ctx, period: PeriodSelection, mine: bool, limit: int | None):
    """List the couple's transactions, newest first.

    Examples:
        finlove transaction list --this-month
        finlove transaction list --month 3 --year 2024 --mine
        finlove transaction list --start-date 2024-01-01 --end-date 2024-01-31
    """
    user_id = require_user(ctx)
    db = ctx.obj["db"]
    transaction_service = TransactionService(db)

    start, end = resolve_period(ctx, period)

    transactions = transaction_service.list_transactions(
        user_id, start_date=start, end_date=end, include_partner=not mine, limit=limit
    )

    if not transactions:
        click.echo("No transactions found.")
        return

    user_service = UserService(db)
    names = {uid: user_service.get_user(uid).first_name for uid in user_service.couple_ids(user_id)}

    click.echo(
        f"{'ID':<6} {'Date':<12} {'Who':<10} {'Description':<36} {'Category':<16} "
        f"{'Type':<11} {'Amount':>14} {'Status':<8}"
    )
    click.echo("-" * 120)

    for txn in transactions:
        desc = txn.description[:34] + ".." if len(txn.description) > 36 else txn.description
        category = txn.category[:14] + ".." if len(txn.category) > 16 else txn.category
        status = "Paid" if txn.is_paid else "Pending"
        who = names.get(txn.user_id, str(txn.user_id))
        click.echo(
            f"{txn.id:<6} {str(txn.date):<12} {who:<10} {desc:<36} {category:<16} "
            f"{txn.type.value:<11} {format_brl(txn.amount):>14} {status:<8}"
        )

    click.echo(f"\nTotal: {len(transactions)} transaction(s)")


@transaction_group.command("update")
@click.argument("transaction_id", type=int)
@click.option("--date", help="Transaction date (YYYY-MM-DD or relative like 'today', 'yesterday')")
@click.option("--amount", help="Transaction amount")
@click.option("--description", help="Transaction description")
@click.option("--category", help="Category name")
@click.option(
    "--type",
    "txn_type",
    type=click.Choice([t.value for t in TransactionType], case_sensitive=False),
    help="Transaction type",
)
@click.option(
    "--method",
    type=click.Choice([m.value for m in PaymentMethod], case_sensitive=False),
    help="Payment method",
)
@click.option("--paid/--unpaid", "is_paid", default=None, help="Mark as paid or pending")
@click.pass_context
def update_transaction(
    ctx,
    transaction_id: int,
    date: str | None,
    amount: str | None,
    description: str | None,
    category: str | None,
    txn_type: str | None,
    method: str | None,
    is_paid: bool | None,
) -> None:
    """Update a transaction.

    Updates only the fields that are provided.

    Examples:
        finlove transaction update 1 --amount 75.00
        finlove transaction update 1 --category Food --paid
    """
    user_id = require_user(ctx)
    transaction_service = TransactionService(ctx.obj["db"])

    # Parse date if provided
    txn_date = None
    if date is not None:
        try:
            txn_date = parse_date(date)
        except ValueError as e:
            click.echo(f"Error: Invalid date format: {e}", err=True)
            ctx.exit(1)

    # Parse amount if provided
    txn_amount = None
    if amount is not None:
        try:
            txn_amount = parse_amount(amount)
        except ValueError as e:
            click.echo(f"Error: Invalid amount format: {e}", err=True)
            ctx.exit(1)

    with domain_errors(ctx):
        transaction_service.update_transaction(
            user_id,
            transaction_id,
            description=description,
            amount=txn_amount,
            transaction_type=txn_type.upper() if txn_type else None,
            category=category,
            date=txn_date,
            payment_method=method.upper() if method else None,
            is_paid=is_paid,
        )
    click.echo(f"Updated transaction {transaction_id}")


@transaction_group.command("delete")
@click.argument("transaction_ids", type=int, nargs=-1, required=True)
@click.pass_context
def delete_transactions(ctx, transaction_ids: tuple[int, ...]) -> None:
    """Delete one or more of your transactions.

    IDs that belong to someone else are skipped.

    Examples:
        finlove transaction delete 12
        finlove transaction delete 12 13 14
    """
    user_id = require_user(ctx)
    transaction_service = TransactionService(ctx.obj["db"])

    if len(transaction_ids) == 1:
        with domain_errors(ctx):
            transaction_service.delete_transaction(user_id, transaction_ids[0])
        click.echo(f"Deleted transaction {transaction_ids[0]}")
        return

    count = transaction_service.delete_transactions(user_id, transaction_ids)
    click.echo(f"Deleted {count} transaction(s)")


@transaction_group.command("delete-group")
@click.argument("installment_id")
@click.pass_context
def delete_group(ctx, installment_id: str) -> None:
    """Delete every installment of a purchase."""
    user_id = require_user(ctx)
    with domain_errors(ctx):
        count = TransactionService(ctx.obj["db"]).delete_installment_group(user_id, installment_id)
    click.echo(f"Deleted {count} installment(s)")


@transaction_group.command("toggle-paid")
@click.argument("transaction_id", type=int)
@click.pass_context
def toggle_paid(ctx, transaction_id: int) -> None:
    """Flip the paid flag of a transaction."""
    user_id = require_user(ctx)
    with domain_errors(ctx):
        is_paid = TransactionService(ctx.obj["db"]).toggle_paid(user_id, transaction_id)
    click.echo(f"Transaction {transaction_id} is now {'paid' if is_paid else 'pending'}")


def register_commands(cli):
    """Register transaction commands with main CLI."""
    cli.add_command(transaction_group, name="transaction")
