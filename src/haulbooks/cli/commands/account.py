"""Account management commands."""

import uuid
from decimal import Decimal

import click

from haulbooks.cli.error_handling import report_sync_result
from haulbooks.cli.session import format_currency, run_session
from haulbooks.domain.balance import BalanceService
from haulbooks.domain.entities import AccountKind, BankAccount, Collection
from haulbooks.utils.account_resolver import resolve_account
from haulbooks.utils.amount_parser import parse_amount


@click.group()
def account_group():
    """Manage bank accounts."""
    pass


@account_group.command("list")
@click.pass_context
def list_accounts(ctx):
    """List accounts with their current balances."""

    async def action(coordinator):
        balances = BalanceService().account_balances(
            coordinator.accounts, coordinator.transactions
        )
        return coordinator.accounts, balances

    accounts, balances = run_session(ctx, action)
    if not accounts:
        click.echo("No accounts found.")
        return

    click.echo("\nAccounts:")
    click.echo("-" * 78)
    for acc in accounts:
        click.echo(
            f"{acc.id:<12} | {acc.name:28s} | {acc.kind.value:11s} | "
            f"{format_currency(balances[acc.id]):>15}"
        )


@account_group.command("add")
@click.argument("name")
@click.option(
    "--kind",
    type=click.Choice([k.value for k in AccountKind], case_sensitive=False),
    default=AccountKind.CHECKING.value,
    help="Account kind (default: Checking)",
)
@click.option("--initial-balance", default="0", help="Starting balance (e.g., 2500.00)")
@click.option("--entity", "entity_id", help="Owning business entity ID")
@click.pass_context
def add_account(ctx, name: str, kind: str, initial_balance: str, entity_id: str | None):
    """Add a bank account.

    Examples:
        haulbooks account add "Chase Checking" --initial-balance 2500
        haulbooks account add "Amex" --kind "Credit Card"
    """
    try:
        balance = parse_amount(initial_balance)
    except ValueError as e:
        click.echo(f"Error: Invalid amount format: {e}", err=True)
        ctx.exit(1)

    kind_value = next(k for k in AccountKind if k.value.lower() == kind.lower())
    account = BankAccount(
        id=str(uuid.uuid4()),
        name=name,
        kind=kind_value,
        initial_balance=Decimal(balance),
        business_entity_id=entity_id,
    )

    async def action(coordinator):
        return await coordinator.add(Collection.ACCOUNTS, account)

    result = run_session(ctx, action)
    click.echo(f"Created account '{name}' (ID: {account.id})")
    report_sync_result(result)


@account_group.command("delete")
@click.argument("account")
@click.pass_context
def delete_account(ctx, account: str):
    """Delete an account by ID or name.

    Transactions referencing the account are kept unchanged.
    """

    async def action(coordinator):
        target = resolve_account(coordinator.accounts, account)
        result = await coordinator.delete(Collection.ACCOUNTS, target.id)
        orphaned = sum(
            1
            for t in coordinator.transactions
            if target.id in (t.account_id, t.to_account_id)
        )
        return target, result, orphaned

    target, result, orphaned = run_session(ctx, action)
    click.echo(f"Deleted account '{target.name}'")
    if orphaned:
        click.echo(f"Note: {orphaned} transaction(s) still reference this account.")
    report_sync_result(result)


def register_commands(cli):
    """Register account commands with main CLI."""
    cli.add_command(account_group, name="account")
