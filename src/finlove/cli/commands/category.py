"""Category management commands."""

import click

from finlove.cli.error_handling import domain_errors
from finlove.cli.user_resolution import require_user
from finlove.domain.category import CategoryService
from finlove.domain.entities import CategoryType


@click.group()
def category_group():
    """Manage categories."""
    pass


@category_group.command("create")
@click.argument("name")
@click.option(
    "--type",
    "category_type",
    type=click.Choice([t.value for t in CategoryType], case_sensitive=False),
    default=CategoryType.EXPENSE.value,
    show_default=True,
    help="Category type",
)
@click.option("--color", help="Display color (e.g., #ff6b6b)")
@click.option("--icon", default="Tag", show_default=True, help="Icon name")
@click.pass_context
def create_category(ctx, name: str, category_type: str, color: str | None, icon: str):
    """Create a new category.

    Examples:
        finlove category create Pets --color "#f4a261" --icon PawPrint
        finlove category create Freelance --type INCOME
    """
    user_id = require_user(ctx)
    with domain_errors(ctx):
        category_id = CategoryService(ctx.obj["db"]).create_category(
            user_id, name, color=color, icon=icon, category_type=category_type.upper()
        )
    click.echo(f"Created category '{name}' with ID {category_id}")


@category_group.command("list")
@click.pass_context
def list_categories(ctx):
    """List your categories."""
    user_id = require_user(ctx)
    categories = CategoryService(ctx.obj["db"]).list_categories(user_id)

    if not categories:
        click.echo("No categories found.")
        return

    click.echo(f"{'ID':<5} {'Name':<30} {'Type':<8} {'Color':<10} {'Icon':<12}")
    click.echo("-" * 70)
    for category in categories:
        click.echo(
            f"{category.id:<5} {category.name:<30} {category.category_type.value:<8} "
            f"{category.color or '-':<10} {category.icon:<12}"
        )


@category_group.command("delete")
@click.argument("category_id", type=int)
@click.pass_context
def delete_category(ctx, category_id: int):
    """Delete a category. Transactions keep their category name."""
    user_id = require_user(ctx)
    with domain_errors(ctx):
        CategoryService(ctx.obj["db"]).delete_category(user_id, category_id)
    click.echo(f"Deleted category {category_id}")


def register_commands(cli):
    """Register category commands with main CLI."""
    cli.add_command(category_group, name="category")
