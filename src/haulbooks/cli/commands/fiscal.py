"""Fiscal year commands."""

from dataclasses import replace

import click

from haulbooks.cli.error_handling import report_sync_result
from haulbooks.cli.session import format_currency, run_session
from haulbooks.domain.balance import BalanceService
from haulbooks.domain.entities import FiscalYearRecord, FiscalYearStatus
from haulbooks.utils.amount_parser import parse_amount


@click.group()
def fiscal_group():
    """Manage fiscal years."""
    pass


@fiscal_group.command("list")
@click.pass_context
def list_fiscal_years(ctx):
    """Show per-year totals and cumulative balances."""

    async def action(coordinator):
        service = BalanceService(coordinator.fiscal_records)
        return service.fiscal_year_summaries(coordinator.transactions)

    summaries = run_session(ctx, action)
    if not summaries:
        click.echo("No transactions recorded yet.")
        return

    click.echo(
        f"{'Year':<6} | {'Status':<6} | {'Income':>14} | {'Expense':>14} | "
        f"{'Net':>14} | {'Balance':>15}"
    )
    click.echo("-" * 84)
    for s in summaries:
        marker = " *" if s.is_manual else ""
        click.echo(
            f"{s.year:<6} | {s.status.value:<6} | {format_currency(s.income):>14} | "
            f"{format_currency(s.expense):>14} | {format_currency(s.net):>14} | "
            f"{format_currency(s.effective_balance):>15}{marker}"
        )
        if s.is_manual:
            click.echo(f"{'':<9}calculated {format_currency(s.system_calculated_balance)}")
        if s.notes:
            click.echo(f"{'':<9}{s.notes}")
    if any(s.is_manual for s in summaries):
        click.echo("\n* manual balance override")


@fiscal_group.command("set")
@click.argument("year", type=int)
@click.option(
    "--status",
    type=click.Choice([s.value for s in FiscalYearStatus], case_sensitive=False),
    help="Open or Closed",
)
@click.option("--balance", help="Manual year-end balance override")
@click.option("--clear-balance", is_flag=True, help="Remove the manual balance override")
@click.option("--notes", help="Free-form notes for the year")
@click.pass_context
def set_fiscal_year(
    ctx,
    year: int,
    status: str | None,
    balance: str | None,
    clear_balance: bool,
    notes: str | None,
):
    """Set status, manual balance or notes for a fiscal year.

    Fields not given keep their stored value.
    """
    manual = None
    if balance is not None:
        try:
            manual = parse_amount(balance)
        except ValueError as e:
            click.echo(f"Error: Invalid amount format: {e}", err=True)
            ctx.exit(1)

    async def action(coordinator):
        existing = next((r for r in coordinator.fiscal_records if r.year == year), None)
        record = existing or FiscalYearRecord(year=year)
        changes = {}
        if status is not None:
            changes["status"] = next(
                s for s in FiscalYearStatus if s.value.lower() == status.lower()
            )
        if clear_balance:
            changes["manual_balance"] = None
        elif manual is not None:
            changes["manual_balance"] = manual
        if notes is not None:
            changes["notes"] = notes
        return await coordinator.set_fiscal_year(replace(record, **changes))

    result = run_session(ctx, action)
    click.echo(f"Updated fiscal year {year}")
    report_sync_result(result)


def register_commands(cli):
    """Register fiscal commands with main CLI."""
    cli.add_command(fiscal_group, name="fiscal")
