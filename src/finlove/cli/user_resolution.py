"""CLI helper for resolving the acting user."""

from __future__ import annotations

import click

from finlove.domain.user import UserService
from finlove.utils.user_resolver import resolve_user


def require_user(ctx: click.Context) -> int:
    """Resolve the global --user option to a user ID, or exit with a CLI error."""
    user = ctx.obj.get("user")
    if not user:
        click.echo("Error: No user selected. Pass --user EMAIL or set FINLOVE_USER.", err=True)
        ctx.exit(1)

    try:
        return resolve_user(UserService(ctx.obj["db"]), user)
    except ValueError as exc:
        click.echo(f"Error: {exc}", err=True)
        ctx.exit(1)
