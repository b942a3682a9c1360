"""CSV import command."""

import click

from finlove.cli.user_resolution import require_user
from finlove.domain.csv_import import CSVImportService


@click.command("import")
@click.argument("csv_file", type=click.Path(exists=True))
@click.pass_context
def import_csv(ctx, csv_file: str):
    """Import transactions from a CSV statement.

    The file needs date, description and amount columns; type, category,
    payment_method and owner are optional. Rows already recorded for the
    couple are skipped.
    """
    user_id = require_user(ctx)
    service = CSVImportService(ctx.obj["db"])

    try:
        report = service.import_csv(user_id, csv_file)
        click.echo(f"\nImport complete:")
        click.echo(f"  Imported: {report.result.imported} transactions")
        click.echo(f"  Skipped: {report.result.ignored} duplicates")
        if report.errors:
            click.echo(f"  Errors: {len(report.errors)}")
            for error in report.errors:
                click.echo(f"    {error}", err=True)
    except (ValueError, FileNotFoundError) as e:
        click.echo(f"Error: {e}", err=True)
        ctx.exit(1)


def register_commands(cli):
    """Register import command with main CLI."""
    cli.add_command(import_csv)
