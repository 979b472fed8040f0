"""Business entity commands."""

import uuid

import click

from haulbooks.cli.error_handling import report_sync_result
from haulbooks.cli.session import run_session
from haulbooks.domain.entities import BusinessEntity, Collection, LegalStructure


@click.group()
def entity_group():
    """Manage business entities."""
    pass


@entity_group.command("list")
@click.pass_context
def list_entities(ctx):
    """List business entities with the tax form each files."""

    async def action(coordinator):
        return coordinator.entities, coordinator.accounts

    entities, accounts = run_session(ctx, action)
    if not entities:
        click.echo("No business entities found.")
        return

    click.echo("\nBusiness entities:")
    click.echo("-" * 78)
    for e in entities:
        owned = sum(1 for a in accounts if a.business_entity_id == e.id)
        click.echo(
            f"{e.id:<12} | {e.name:24s} | {e.structure.value:20s} | {e.tax_form:12s} | "
            f"{owned} account(s)"
        )
        if e.ein:
            click.echo(f"{'':12} | EIN {e.ein}")


@entity_group.command("add")
@click.argument("name")
@click.option(
    "--structure",
    type=click.Choice([s.value for s in LegalStructure], case_sensitive=False),
    default=LegalStructure.SOLE_PROPRIETORSHIP.value,
    help="Legal structure (default: Sole Proprietorship)",
)
@click.option("--ein", help="Employer identification number")
@click.option("--email", help="Contact email")
@click.option("--phone", help="Contact phone")
@click.pass_context
def add_entity(
    ctx, name: str, structure: str, ein: str | None, email: str | None, phone: str | None
):
    """Add a business entity.

    The tax form follows from the legal structure.

    Examples:
        haulbooks entity add "Road Runner Inc" --structure S-Corp --ein 12-3456789
    """
    structure_value = next(s for s in LegalStructure if s.value.lower() == structure.lower())
    entity = BusinessEntity(
        id=str(uuid.uuid4()),
        name=name,
        structure=structure_value,
        ein=ein,
        email=email,
        phone=phone,
    )

    async def action(coordinator):
        return await coordinator.add(Collection.ENTITIES, entity)

    result = run_session(ctx, action)
    click.echo(f"Created business entity '{name}' (ID: {entity.id})")
    click.echo(f"Files: {entity.tax_form}")
    report_sync_result(result)


def register_commands(cli):
    """Register business entity commands with main CLI."""
    cli.add_command(entity_group, name="entity")
