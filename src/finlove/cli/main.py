"""Main CLI entry point."""

import click

from finlove.config import get_settings
from finlove.context import AppContext
from finlove.database.factories import create_sqlite_database
from finlove.log import configure_logging

# Import and register all commands at module level
from finlove.cli.commands import (
    add,
    advice,
    badges,
    budget,
    card,
    category,
    export,
    import_cmd,
    investment,
    rollover,
    serve,
    subscriptions,
    summary,
    transaction,
    user,
)


@click.group()
@click.option(
    "--db-path",
    type=click.Path(),
    help="Path to database file (overrides FINLOVE_DB_PATH environment variable)",
    envvar="FINLOVE_DB_PATH",
)
@click.option(
    "--user",
    "user",
    help="Acting user email or ID (overrides FINLOVE_USER environment variable)",
    envvar="FINLOVE_USER",
)
@click.pass_context
def cli(ctx, db_path: str | None, user: str | None):
    """FinLove - personal finance for couples.

    Track shared expenses, split purchases into installments, roll recurring
    bills forward every month and plan the budget together.
    """
    ctx.ensure_object(dict)
    ctx.obj["user"] = user

    # Initialize database connection only when actually running a command
    # (not when showing help)
    if ctx.invoked_subcommand is not None:
        settings = get_settings()
        configure_logging(settings.log_level, json=settings.log_json)

        if db_path:
            db = create_sqlite_database(database_path=db_path)
            db.connect()
            db.initialize_schema()
            app = AppContext.from_settings(settings, db=db)
        else:
            app = AppContext.from_settings(settings)
        ctx.obj["app"] = app
        ctx.obj["db"] = app.db
        ctx.call_on_close(app.close)


# Register all commands
user.register_commands(cli)
add.register_commands(cli)
transaction.register_commands(cli)
card.register_commands(cli)
investment.register_commands(cli)
category.register_commands(cli)
subscriptions.register_commands(cli)
rollover.register_commands(cli)
budget.register_commands(cli)
badges.register_commands(cli)
advice.register_commands(cli)
summary.register_commands(cli)
export.register_commands(cli)
import_cmd.register_commands(cli)
serve.register_commands(cli)


def main():
    """Main entry point for CLI."""
    cli()


if __name__ == "__main__":
    main()
