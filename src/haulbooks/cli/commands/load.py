"""Load planning commands."""

import uuid

import click

from haulbooks.cli.error_handling import report_sync_result
from haulbooks.cli.session import format_currency, run_session
from haulbooks.domain.entities import Collection, LoadRecord, LoadStatus, PaymentType
from haulbooks.utils.amount_parser import parse_amount
from haulbooks.utils.date_parser import parse_date


@click.group()
def load_group():
    """Manage freight loads."""
    pass


@load_group.command("list")
@click.pass_context
def list_loads(ctx):
    """List loads with mileage and revenue."""

    async def action(coordinator):
        return coordinator.loads

    loads = run_session(ctx, action)
    if not loads:
        click.echo("No loads found.")
        return

    for ld in loads:
        click.echo(
            f"{ld.id[:8]} | {ld.status.value:<11} | {ld.pickup_location} -> "
            f"{ld.delivery_location} | {ld.total_miles:,} mi | "
            f"{format_currency(ld.total_revenue)} ({format_currency(ld.rate_per_mile)}/mi)"
        )


@load_group.command("add")
@click.option("--from", "current_location", required=True, help="Current truck location")
@click.option("--pickup", required=True, help="Pickup location")
@click.option("--delivery", required=True, help="Delivery location")
@click.option("--miles-to-pickup", default="0", help="Deadhead miles to pickup")
@click.option("--miles-to-delivery", required=True, help="Loaded miles to delivery")
@click.option(
    "--payment-type",
    type=click.Choice([p.value for p in PaymentType], case_sensitive=False),
    default=PaymentType.FLAT_LOAD.value,
    help="Per Mile or Flat Load (default: Flat Load)",
)
@click.option("--rate", required=True, help="Rate per mile or flat amount")
@click.option("--pickup-date", help="Pickup date")
@click.option("--truck", "truck_id", help="Truck ID")
@click.pass_context
def add_load(
    ctx,
    current_location: str,
    pickup: str,
    delivery: str,
    miles_to_pickup: str,
    miles_to_delivery: str,
    payment_type: str,
    rate: str,
    pickup_date: str | None,
    truck_id: str | None,
):
    """Add a planned load."""
    try:
        deadhead = parse_amount(miles_to_pickup)
        loaded = parse_amount(miles_to_delivery)
        rate_value = parse_amount(rate)
        pickup_on = parse_date(pickup_date) if pickup_date else None
    except ValueError as e:
        click.echo(f"Error: {e}", err=True)
        ctx.exit(1)

    load = LoadRecord(
        id=str(uuid.uuid4()),
        current_location=current_location,
        pickup_location=pickup,
        delivery_location=delivery,
        miles_to_pickup=deadhead,
        miles_to_delivery=loaded,
        payment_type=next(p for p in PaymentType if p.value.lower() == payment_type.lower()),
        rate=rate_value,
        status=LoadStatus.PLANNED,
        pickup_date=pickup_on,
        truck_id=truck_id,
    )

    async def action(coordinator):
        return await coordinator.add(Collection.LOADS, load)

    result = run_session(ctx, action)
    click.echo(
        f"Created load {load.id}: {load.total_miles:,} mi, "
        f"{format_currency(load.total_revenue)}"
    )
    report_sync_result(result)


def register_commands(cli):
    """Register load commands with main CLI."""
    cli.add_command(load_group, name="load")
