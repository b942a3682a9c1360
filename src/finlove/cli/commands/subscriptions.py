"""Recurring template (subscription) commands."""

import click

from finlove.cli.error_handling import domain_errors
from finlove.cli.user_resolution import require_user
from finlove.domain.transaction import TransactionService
from finlove.utils.amount_parser import format_brl


@click.group()
def subscriptions_group():
    """List and cancel recurring bills."""
    pass


@subscriptions_group.command("list")
@click.pass_context
def list_subscriptions(ctx):
    """List active recurring templates, largest first."""
    user_id = require_user(ctx)
    templates = TransactionService(ctx.obj["db"]).list_subscriptions(user_id)

    if not templates:
        click.echo("No active subscriptions.")
        return

    click.echo(f"{'ID':<5} {'Description':<35} {'Category':<16} {'Day':<5} {'Next run':<12} {'Amount':>14}")
    click.echo("-" * 92)
    total = sum(template.amount for template in templates)
    for template in templates:
        day = str(template.day_of_month) if template.day_of_month else "-"
        click.echo(
            f"{template.id:<5} {template.description[:35]:<35} {template.category[:16]:<16} "
            f"{day:<5} {str(template.next_run):<12} {format_brl(template.amount):>14}"
        )
    click.echo("-" * 92)
    click.echo(f"{'Monthly total':<76} {format_brl(total):>14}")


@subscriptions_group.command("cancel")
@click.argument("recurring_id", type=int)
@click.pass_context
def cancel_subscription(ctx, recurring_id: int):
    """Stop a recurring template. Entries already created are kept."""
    user_id = require_user(ctx)
    with domain_errors(ctx):
        TransactionService(ctx.obj["db"]).deactivate_recurring(user_id, recurring_id)
    click.echo(f"Cancelled subscription {recurring_id}")


def register_commands(cli):
    """Register subscription commands with main CLI."""
    cli.add_command(subscriptions_group, name="subscriptions")
