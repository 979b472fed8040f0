"""Report command."""

import click

from haulbooks.cli.session import format_currency, run_session
from haulbooks.domain.entities import ReportGroupBy
from haulbooks.domain.report import ReportService
from haulbooks.utils.account_resolver import resolve_account


@click.command("report")
@click.option(
    "--group-by",
    type=click.Choice([g.value for g in ReportGroupBy], case_sensitive=False),
    default=ReportGroupBy.MONTH.value,
    help="Reporting period (default: month)",
)
@click.option("--year", type=int, help="Only report this year, listing every period of it")
@click.option("--account", help="Only include transactions from this account (name or ID)")
@click.pass_context
def report_command(ctx, group_by: str, year: int | None, account: str | None):
    """Show income, expenses and net per period.

    Expenses are split into tax deductions and owner distributions.
    Transfers between accounts are left out.

    Examples:
        haulbooks report --year 2024 --group-by quarter
        haulbooks report --group-by year
    """
    service = ReportService()

    async def action(coordinator):
        transactions = coordinator.transactions
        if account is not None:
            account_id = resolve_account(coordinator.accounts, account).id
            transactions = service.filter_transactions(transactions, account_ids=[account_id])
        return transactions

    transactions = run_session(ctx, action)
    buckets = service.aggregate(
        transactions, group_by=ReportGroupBy(group_by.lower()), filter_year=year
    )
    if not buckets:
        click.echo("No transactions to report.")
        return

    header = (
        f"{'Period':<8} | {'Income':>14} | {'Expense':>14} | {'Deductions':>14} | "
        f"{'Distributions':>14} | {'Net':>14}"
    )
    click.echo(header)
    click.echo("-" * len(header))
    for bucket in buckets + [service.totals(buckets, key="Total")]:
        if bucket.key == "Total":
            click.echo("-" * len(header))
        click.echo(
            f"{bucket.key:<8} | {format_currency(bucket.income):>14} | "
            f"{format_currency(bucket.expense):>14} | "
            f"{format_currency(bucket.deductions):>14} | "
            f"{format_currency(bucket.distributions):>14} | "
            f"{format_currency(bucket.net):>14}"
        )


def register_commands(cli):
    """Register report command with main CLI."""
    cli.add_command(report_command)
