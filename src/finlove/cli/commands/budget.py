"""Monthly budget plan commands."""

import json
from pathlib import Path

import click

from finlove.cli.date_filters import resolve_month
from finlove.cli.error_handling import domain_errors
from finlove.cli.user_resolution import require_user
from finlove.domain.budget import BudgetData, BudgetService
from finlove.domain.user import UserService
from finlove.utils.amount_parser import format_brl


def _print_section(title: str, items) -> None:
    click.echo(f"\n{title}")
    if not items:
        click.echo("  (none)")
        return
    for item in items:
        mark = "x" if item.is_paid else " "
        day = f"day {item.day:<2}" if item.day else "      "
        click.echo(f"  [{mark}] {item.name:<30} {day} {format_brl(item.amount):>14}")


def _print_budget(month: int, year: int, budget: BudgetData) -> None:
    click.echo(f"Budget {month:02d}/{year}")
    click.echo("=" * 60)
    _print_section("Incomes", budget.incomes)
    _print_section("Fixed expenses", budget.fixed_expenses)
    _print_section("Variable expenses", budget.variable_expenses)
    click.echo("-" * 60)
    click.echo(f"{'Total income:':<44} {format_brl(budget.total_income()):>14}")
    click.echo(f"{'Total expenses:':<44} {format_brl(budget.total_expenses()):>14}")
    click.echo(f"{'Remaining:':<44} {format_brl(budget.remaining()):>14}")


@click.group()
def budget_group():
    """Plan the month's incomes and expenses."""
    pass


@budget_group.command("show")
@click.option("--month", type=int, help="Month (1-12), defaults to the current month")
@click.option("--year", type=int, help="Year, defaults to the current year")
@click.option("--partner", is_flag=True, help="Show the partner's plan instead")
@click.pass_context
def show_budget(ctx, month: int | None, year: int | None, partner: bool):
    """Show a month's plan."""
    user_id = require_user(ctx)
    month, year = resolve_month(ctx, month, year)
    db = ctx.obj["db"]

    target = None
    if partner:
        partner_user = UserService(db).get_partner(user_id)
        if partner_user is None:
            click.echo("Error: No partner linked", err=True)
            ctx.exit(1)
        target = partner_user.id

    with domain_errors(ctx):
        budget = BudgetService(db).get_budget(user_id, month, year, target_user_id=target)

    if budget is None or budget.is_empty():
        click.echo(f"No budget for {month:02d}/{year}.")
        return
    _print_budget(month, year, budget)


@budget_group.command("save")
@click.argument("json_file", type=click.Path(exists=True, dir_okay=False))
@click.option("--month", type=int, help="Month (1-12), defaults to the current month")
@click.option("--year", type=int, help="Year, defaults to the current year")
@click.pass_context
def save_budget(ctx, json_file: str, month: int | None, year: int | None):
    """Replace a month's plan with the contents of a JSON file.

    The file holds "incomes", "fixed_expenses" and "variable_expenses" lists
    of items with "name", "amount" and optionally "day" and "is_paid".

    Examples:
        finlove budget save march.json --month 3 --year 2024
    """
    user_id = require_user(ctx)
    month, year = resolve_month(ctx, month, year)

    try:
        data = json.loads(Path(json_file).read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        click.echo(f"Error: Invalid JSON: {e}", err=True)
        ctx.exit(1)

    with domain_errors(ctx):
        budget = BudgetService(ctx.obj["db"]).save_budget(user_id, month, year, data)
    click.echo(f"Saved budget {month:02d}/{year}")
    click.echo(f"  Remaining: {format_brl(budget.remaining())}")


@budget_group.command("import-last")
@click.option("--month", type=int, help="Month (1-12), defaults to the current month")
@click.option("--year", type=int, help="Year, defaults to the current year")
@click.pass_context
def import_last_month(ctx, month: int | None, year: int | None):
    """Copy last month's plan into this month, with every item unpaid."""
    user_id = require_user(ctx)
    month, year = resolve_month(ctx, month, year)
    with domain_errors(ctx):
        budget = BudgetService(ctx.obj["db"]).import_last_month(user_id, month, year)
    count = len(budget.incomes) + len(budget.fixed_expenses) + len(budget.variable_expenses)
    click.echo(f"Copied {count} item(s) into {month:02d}/{year}")


def register_commands(cli):
    """Register budget commands with main CLI."""
    cli.add_command(budget_group, name="budget")
