"""User and partner management commands."""

import click

from finlove.cli.error_handling import domain_errors
from finlove.cli.user_resolution import require_user
from finlove.domain.entities import MessageCategory
from finlove.domain.user import UserService
from finlove.utils.amount_parser import format_brl, parse_amount


@click.group()
def user_group():
    """Manage users and the partner link."""
    pass


@user_group.command("register")
@click.option("--name", required=True, help="Full name")
@click.option("--email", required=True, help="Login email")
@click.password_option(help="Password (at least 6 characters)")
@click.pass_context
def register_user(ctx, name: str, email: str, password: str):
    """Create a user account.

    Examples:
        finlove user register --name "Ana Souza" --email ana@example.com
    """
    app = ctx.obj["app"]
    with domain_errors(ctx):
        _, user = app.auth_service().register(name, email, password)
    click.echo(f"Created user {user.id}")
    click.echo(f"  Name: {user.name}")
    click.echo(f"  Email: {user.email}")


@user_group.command("list")
@click.pass_context
def list_users(ctx):
    """List all users."""
    users = ctx.obj["db"].list_users()

    if not users:
        click.echo("No users found.")
        return

    click.echo(f"{'ID':<5} {'Name':<30} {'Email':<35} {'Partner':<8}")
    click.echo("-" * 80)
    for user in users:
        partner = str(user.partner_id) if user.partner_id else "-"
        click.echo(f"{user.id:<5} {user.name:<30} {user.email:<35} {partner:<8}")


@user_group.command("show")
@click.pass_context
def show_user(ctx):
    """Show the acting user's profile."""
    user_id = require_user(ctx)
    user_service = UserService(ctx.obj["db"])
    user = user_service.get_user(user_id)
    partner = user_service.get_partner(user_id)

    click.echo(f"User {user.id}: {user.name}")
    click.echo(f"  Email: {user.email}")
    click.echo(f"  Spending limit: {format_brl(user.spending_limit)}")
    click.echo(f"  Savings goal: {user.savings_goal or '-'}")
    click.echo(f"  Partner: {partner.name if partner else '-'}")


@user_group.command("set-limit")
@click.argument("amount")
@click.pass_context
def set_limit(ctx, amount: str):
    """Set the monthly spending limit."""
    user_id = require_user(ctx)
    try:
        limit = parse_amount(amount)
    except ValueError as e:
        click.echo(f"Error: Invalid amount format: {e}", err=True)
        ctx.exit(1)

    with domain_errors(ctx):
        UserService(ctx.obj["db"]).update_spending_limit(user_id, limit)
    click.echo(f"Spending limit set to {format_brl(limit)}")


@user_group.command("set-goal")
@click.argument("goal", required=False)
@click.pass_context
def set_goal(ctx, goal: str | None):
    """Set the couple's savings goal. Omit GOAL to clear it."""
    user_id = require_user(ctx)
    with domain_errors(ctx):
        UserService(ctx.obj["db"]).update_savings_goal(user_id, goal)
    click.echo(f"Savings goal set to {goal}" if goal else "Savings goal cleared")


@user_group.command("rename")
@click.argument("name")
@click.pass_context
def rename_user(ctx, name: str):
    """Change the acting user's display name."""
    user_id = require_user(ctx)
    with domain_errors(ctx):
        UserService(ctx.obj["db"]).update_name(user_id, name)
    click.echo(f"Renamed to {name.strip()}")


@user_group.command("link")
@click.argument("partner_email")
@click.pass_context
def link_partner(ctx, partner_email: str):
    """Link the acting user with a partner by email."""
    user_id = require_user(ctx)
    app = ctx.obj["app"]
    with domain_errors(ctx):
        partner = app.user_service().link_partner(user_id, partner_email)
    app.gamification_service().award_after_write(user_id)
    click.echo(f"Linked with {partner.name} ({partner.email})")


@user_group.command("unlink")
@click.pass_context
def unlink_partner(ctx):
    """Remove the partner link on both sides."""
    user_id = require_user(ctx)
    with domain_errors(ctx):
        UserService(ctx.obj["db"]).unlink_partner(user_id)
    click.echo("Partner unlinked")


@user_group.command("balance")
@click.pass_context
def show_balance(ctx):
    """Show the couple's balance of paid entries."""
    user_id = require_user(ctx)
    balance = UserService(ctx.obj["db"]).get_balance(user_id)
    click.echo(f"Balance: {format_brl(balance)}")


@user_group.command("password")
@click.option("--current", prompt=True, hide_input=True, help="Current password")
@click.option("--new", "new_password", prompt=True, hide_input=True, confirmation_prompt=True, help="New password")
@click.pass_context
def change_password(ctx, current: str, new_password: str):
    """Change the acting user's password."""
    user_id = require_user(ctx)
    with domain_errors(ctx):
        ctx.obj["app"].auth_service().change_password(user_id, current, new_password)
    click.echo("Password changed")


@user_group.command("delete")
@click.option("--force", is_flag=True, help="Skip confirmation prompt")
@click.pass_context
def delete_user(ctx, force: bool):
    """Delete the acting user and all of their data."""
    user_id = require_user(ctx)
    user_service = UserService(ctx.obj["db"])
    user = user_service.get_user(user_id)

    if not force:
        click.confirm(f"Delete user '{user.name}' and all of their data?", abort=True)

    with domain_errors(ctx):
        user_service.delete_user(user_id)
    click.echo(f"Deleted user {user_id}")


@click.group()
def message_group():
    """Send and read partner messages."""
    pass


@message_group.command("send")
@click.argument("text")
@click.option(
    "--category",
    type=click.Choice([c.value for c in MessageCategory], case_sensitive=False),
    default=MessageCategory.LOVE.value,
    show_default=True,
    help="Message category",
)
@click.pass_context
def send_message(ctx, text: str, category: str):
    """Send a short message to the partner."""
    user_id = require_user(ctx)
    with domain_errors(ctx):
        message_id = UserService(ctx.obj["db"]).send_partner_message(user_id, text, category.upper())
    click.echo(f"Sent message {message_id}")


@message_group.command("list")
@click.option("--limit", type=int, default=10, show_default=True, help="Number of messages")
@click.pass_context
def list_messages(ctx, limit: int):
    """Show the latest messages between the couple, oldest first."""
    user_id = require_user(ctx)
    user_service = UserService(ctx.obj["db"])
    messages = user_service.list_partner_messages(user_id, limit=limit)

    if not messages:
        click.echo("No messages yet.")
        return

    names = {uid: user_service.get_user(uid).first_name for uid in user_service.couple_ids(user_id)}
    for message in messages:
        sender = names.get(message.sender_id, str(message.sender_id))
        stamp = message.created_at.strftime("%Y-%m-%d %H:%M")
        click.echo(f"[{stamp}] {sender} ({message.category.value}): {message.message}")


def register_commands(cli):
    """Register user commands with main CLI."""
    cli.add_command(user_group, name="user")
    cli.add_command(message_group, name="message")
