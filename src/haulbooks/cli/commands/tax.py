"""Tax summary command."""

from datetime import date

import click

from haulbooks.cli.session import format_currency, run_session
from haulbooks.domain.errors import NotFoundError, entity_not_found
from haulbooks.domain.report import ReportService


@click.command("tax")
@click.option("--year", type=int, help="Tax year (default: current year)")
@click.option("--entity", "entity_ref", help="Business entity name or ID to restrict to")
@click.pass_context
def tax_command(ctx, year: int | None, entity_ref: str | None):
    """Show Schedule C figures for a tax year.

    Non-deductible expenses such as owner draws are listed separately as
    distributions.
    """
    year = year or date.today().year

    async def action(coordinator):
        entity = None
        account_ids = None
        if entity_ref is not None:
            wanted = entity_ref.strip().lower()
            entity = next(
                (
                    e
                    for e in coordinator.entities
                    if e.id == entity_ref or e.name.lower() == wanted
                ),
                None,
            )
            if entity is None:
                raise NotFoundError(entity_not_found("entities", entity_ref))
            account_ids = [
                a.id for a in coordinator.accounts if a.business_entity_id == entity.id
            ]
        summary = ReportService().schedule_c_summary(
            coordinator.transactions, year, account_ids=account_ids
        )
        return entity, summary

    entity, summary = run_session(ctx, action)

    title = f"Tax year {summary.year}"
    if entity is not None:
        title += f" - {entity.name} ({entity.tax_form})"
    click.echo(title)
    click.echo("=" * len(title))
    click.echo(f"{'Gross receipts':<50} {format_currency(summary.gross_receipts):>15}")
    click.echo("\nDeductions:")
    if not summary.lines:
        click.echo("  (none)")
    for line, amount in summary.lines.items():
        click.echo(f"  {line:<48} {format_currency(amount):>15}")
    click.echo(f"{'Total deductions':<50} {format_currency(summary.total_deductions):>15}")
    click.echo(f"{'Net profit':<50} {format_currency(summary.net_profit):>15}")
    click.echo(f"\n{'Owner distributions (not deductible)':<50} "
               f"{format_currency(summary.distributions):>15}")


def register_commands(cli):
    """Register tax command with main CLI."""
    cli.add_command(tax_command)
