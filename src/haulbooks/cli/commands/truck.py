"""Truck management commands."""

import uuid

import click

from haulbooks.cli.error_handling import report_sync_result
from haulbooks.cli.session import run_session
from haulbooks.domain.entities import Collection, Truck
from haulbooks.domain.errors import NotFoundError, entity_not_found


def _find_truck(trucks, truck: str) -> Truck:
    for t in trucks:
        if t.id == truck:
            return t
    wanted = truck.strip().lower()
    for t in trucks:
        if t.unit_number.lower() == wanted:
            return t
    raise NotFoundError(entity_not_found("trucks", truck))


@click.group()
def truck_group():
    """Manage trucks."""
    pass


@truck_group.command("list")
@click.pass_context
def list_trucks(ctx):
    """List trucks."""

    async def action(coordinator):
        return coordinator.trucks

    trucks = run_session(ctx, action)
    if not trucks:
        click.echo("No trucks found.")
        return

    click.echo("\nTrucks:")
    click.echo("-" * 60)
    for t in trucks:
        year = t.year or ""
        click.echo(f"{t.id:<12} | {t.unit_number:10s} | {year!s:4} {t.make} {t.model}")


@truck_group.command("add")
@click.argument("unit_number")
@click.option("--make", default="", help="Manufacturer (e.g., Freightliner)")
@click.option("--model", default="", help="Model (e.g., Cascadia)")
@click.option("--year", type=int, default=0, help="Model year")
@click.pass_context
def add_truck(ctx, unit_number: str, make: str, model: str, year: int):
    """Add a truck.

    Examples:
        haulbooks truck add T-105 --make Mack --model Anthem --year 2024
    """
    truck = Truck(
        id=str(uuid.uuid4()), unit_number=unit_number, make=make, model=model, year=year
    )

    async def action(coordinator):
        return await coordinator.add(Collection.TRUCKS, truck)

    result = run_session(ctx, action)
    click.echo(f"Created truck '{unit_number}' (ID: {truck.id})")
    report_sync_result(result)


@truck_group.command("delete")
@click.argument("truck")
@click.pass_context
def delete_truck(ctx, truck: str):
    """Delete a truck by ID or unit number.

    Transactions and loads assigned to the truck are kept unchanged.
    """

    async def action(coordinator):
        target = _find_truck(coordinator.trucks, truck)
        return target, await coordinator.delete(Collection.TRUCKS, target.id)

    target, result = run_session(ctx, action)
    click.echo(f"Deleted truck '{target.unit_number}'")
    report_sync_result(result)


def register_commands(cli):
    """Register truck commands with main CLI."""
    cli.add_command(truck_group, name="truck")
