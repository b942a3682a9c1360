"""Badge commands."""

import click

from finlove.cli.error_handling import domain_errors
from finlove.cli.user_resolution import require_user
from finlove.domain.gamification import GamificationService


@click.group()
def badges_group():
    """Show and award achievement badges."""
    pass


@badges_group.command("list")
@click.pass_context
def list_badges(ctx):
    """List the badges you have earned, newest first."""
    user_id = require_user(ctx)
    badges = GamificationService(ctx.obj["db"]).list_badges(user_id)

    if not badges:
        click.echo("No badges yet.")
        return

    for badge in badges:
        click.echo(f"{badge.earned_at:%Y-%m-%d}  {badge.name:<20} {badge.description}")


@badges_group.command("check")
@click.pass_context
def check_badges(ctx):
    """Award any badge you have earned but not yet received."""
    user_id = require_user(ctx)
    with domain_errors(ctx):
        awarded = GamificationService(ctx.obj["db"]).check_badges(user_id)

    if not awarded:
        click.echo("No new badges.")
        return
    for badge in awarded:
        click.echo(f"New badge: {badge.name} - {badge.description}")


def register_commands(cli):
    """Register badge commands with main CLI."""
    cli.add_command(badges_group, name="badges")
