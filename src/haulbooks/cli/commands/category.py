"""Category management commands."""

import uuid
from dataclasses import replace

import click

from haulbooks.cli.error_handling import report_sync_result
from haulbooks.cli.session import run_session
from haulbooks.domain.entities import Category, Collection, TransactionType
from haulbooks.domain.errors import NotFoundError, entity_not_found
from haulbooks.domain.tax import is_deductible, schedule_line


def _find_category(categories, category: str) -> Category:
    for cat in categories:
        if cat.id == category:
            return cat
    wanted = category.strip().lower()
    for cat in categories:
        if cat.name.lower() == wanted:
            return cat
    raise NotFoundError(entity_not_found("categories", category))


@click.group()
def category_group():
    """Manage categories."""
    pass


@category_group.command("list")
@click.pass_context
def list_categories(ctx):
    """List categories with their Schedule C line and deductibility."""

    async def action(coordinator):
        return coordinator.categories

    categories = run_session(ctx, action)
    if not categories:
        click.echo("No categories found.")
        return

    for txn_type in (TransactionType.INCOME, TransactionType.EXPENSE):
        group = [c for c in categories if c.type == txn_type]
        if not group:
            continue
        click.echo(f"\n{txn_type.value}:")
        for cat in group:
            if txn_type == TransactionType.INCOME:
                click.echo(f"  {cat.name}")
                continue
            verdict = "deductible" if is_deductible(cat) else "not deductible"
            click.echo(f"  {cat.name:<45} {schedule_line(cat.name):<45} {verdict}")


@category_group.command("add")
@click.argument("name")
@click.option(
    "--type",
    "category_type",
    type=click.Choice(["expense", "income"], case_sensitive=False),
    default="expense",
    help="Category type (default: expense)",
)
@click.option(
    "--deductible/--not-deductible",
    default=None,
    help="Store an explicit tax-deductible flag",
)
@click.pass_context
def add_category(ctx, name: str, category_type: str, deductible: bool | None):
    """Add a category."""
    txn_type = (
        TransactionType.INCOME if category_type.lower() == "income" else TransactionType.EXPENSE
    )
    category = Category(
        id=str(uuid.uuid4()), name=name, type=txn_type, is_tax_deductible=deductible
    )

    async def action(coordinator):
        return await coordinator.add(Collection.CATEGORIES, category)

    result = run_session(ctx, action)
    click.echo(f"Created category '{name}' (ID: {category.id})")
    if txn_type == TransactionType.EXPENSE:
        click.echo(f"Schedule C: {schedule_line(name)}")
    report_sync_result(result)


@category_group.command("update")
@click.argument("category")
@click.option("--name", "new_name", help="New category name")
@click.option(
    "--deductible/--not-deductible",
    default=None,
    help="Set the explicit tax-deductible flag",
)
@click.option(
    "--clear-deductible",
    is_flag=True,
    help="Remove the explicit flag so deductibility follows the name",
)
@click.pass_context
def update_category(
    ctx,
    category: str,
    new_name: str | None,
    deductible: bool | None,
    clear_deductible: bool,
):
    """Rename a category or change its tax-deductible flag.

    CATEGORY is a category ID or name.

    Examples:
        haulbooks category update "Travel & Per Diem" --not-deductible
        haulbooks category update cat-exp-9 --name "Tolls"
    """
    if new_name is None and deductible is None and not clear_deductible:
        click.echo("Error: Nothing to update", err=True)
        ctx.exit(1)

    changes = {}
    if new_name is not None:
        changes["name"] = new_name
    if deductible is not None:
        changes["is_tax_deductible"] = deductible
    elif clear_deductible:
        changes["is_tax_deductible"] = None

    async def action(coordinator):
        target = _find_category(coordinator.categories, category)
        updated = replace(target, **changes)
        return updated, await coordinator.update(Collection.CATEGORIES, updated)

    updated, result = run_session(ctx, action)
    click.echo(f"Updated category '{updated.name}'")
    if updated.type == TransactionType.EXPENSE:
        verdict = "deductible" if is_deductible(updated) else "not deductible"
        click.echo(f"Tax treatment: {verdict}")
    report_sync_result(result)


def register_commands(cli):
    """Register category commands with main CLI."""
    cli.add_command(category_group, name="category")
