"""Transaction management commands."""

import json
import uuid
from decimal import Decimal, InvalidOperation

import click

from haulbooks.cli.error_handling import report_sync_result
from haulbooks.cli.session import format_currency, run_session
from haulbooks.domain.entities import (
    CandidateRecord,
    Collection,
    Transaction,
    TransactionType,
)
from haulbooks.domain.errors import NotFoundError, entity_not_found
from haulbooks.utils.account_resolver import resolve_account
from haulbooks.utils.amount_parser import parse_amount
from haulbooks.utils.date_parser import parse_date, parse_iso_date


def _find_category(categories, name: str, txn_type: TransactionType):
    wanted = name.strip().lower()
    for cat in categories:
        if cat.id == name or (cat.type == txn_type and cat.name.lower() == wanted):
            return cat
    raise NotFoundError(entity_not_found("categories", name))


def _find_truck(trucks, ref: str):
    for truck in trucks:
        if ref in (truck.id, truck.unit_number):
            return truck
    raise NotFoundError(entity_not_found("trucks", ref))


@click.group()
def transaction_group():
    """Manage transactions."""
    pass


@transaction_group.command("list")
@click.option("--year", type=int, help="Only show transactions from this year")
@click.option("--account", help="Account name or ID")
@click.option(
    "--type",
    "txn_type",
    type=click.Choice([t.value for t in TransactionType], case_sensitive=False),
    help="Only show transactions of this type",
)
@click.pass_context
def list_transactions(ctx, year: int | None, account: str | None, txn_type: str | None):
    """List transactions, newest first."""

    async def action(coordinator):
        transactions = coordinator.transactions
        if account is not None:
            account_id = resolve_account(coordinator.accounts, account).id
            transactions = [
                t for t in transactions if account_id in (t.account_id, t.to_account_id)
            ]
        return transactions, {a.id: a.name for a in coordinator.accounts}

    transactions, account_names = run_session(ctx, action)
    if year is not None:
        transactions = [t for t in transactions if t.date.year == year]
    if txn_type is not None:
        transactions = [t for t in transactions if t.type.value.lower() == txn_type.lower()]

    if not transactions:
        click.echo("No transactions found.")
        return

    transactions = sorted(transactions, key=lambda t: (t.date, t.id), reverse=True)
    click.echo(
        f"{'Date':<10} | {'Type':<8} | {'Amount':>12} | {'Account':<18} | "
        f"{'Category':<28} | Description"
    )
    click.echo("-" * 110)
    for txn in transactions:
        account_name = account_names.get(txn.account_id, txn.account_id)
        if txn.type == TransactionType.TRANSFER:
            target = account_names.get(txn.to_account_id, txn.to_account_id)
            label = f"-> {target}"
        else:
            label = txn.category_name
        click.echo(
            f"{txn.date.isoformat():<10} | {txn.type.value:<8} | "
            f"{format_currency(txn.amount):>12} | {account_name[:18]:<18} | "
            f"{label[:28]:<28} | {txn.description}"
        )
    click.echo(f"\nTotal: {len(transactions)} transaction(s)")


@transaction_group.command("add")
@click.option("--account", required=True, help="Account name or ID")
@click.option("--date", "date_str", required=True, help="Transaction date (YYYY-MM-DD, 'today', 'yesterday')")
@click.option("--amount", required=True, help="Transaction amount (e.g., 123.45)")
@click.option("--description", required=True, help="Transaction description")
@click.option(
    "--type",
    "txn_type",
    type=click.Choice([t.value for t in TransactionType], case_sensitive=False),
    default=TransactionType.EXPENSE.value,
    help="Transaction type (default: Expense)",
)
@click.option("--category", help="Category name or ID")
@click.option("--to-account", help="Destination account for transfers")
@click.option("--truck", help="Truck unit number or ID")
@click.pass_context
def add_transaction(
    ctx,
    account: str,
    date_str: str,
    amount: str,
    description: str,
    txn_type: str,
    category: str | None,
    to_account: str | None,
    truck: str | None,
):
    """Add a transaction.

    Examples:
        haulbooks transaction add --account Chase --date today --amount 412.80 \\
            --description "Pilot fuel" --category "Fuel"
        haulbooks transaction add --account Chase --to-account Savings \\
            --type Transfer --date 2024-03-01 --amount 1000 --description "Reserve"
    """
    try:
        txn_date = parse_date(date_str)
    except ValueError as e:
        click.echo(f"Error: Invalid date format: {e}", err=True)
        ctx.exit(1)

    try:
        txn_amount = parse_amount(amount)
    except ValueError as e:
        click.echo(f"Error: Invalid amount format: {e}", err=True)
        ctx.exit(1)

    kind = next(t for t in TransactionType if t.value.lower() == txn_type.lower())

    async def action(coordinator):
        source = resolve_account(coordinator.accounts, account)
        target = resolve_account(coordinator.accounts, to_account) if to_account else None
        txn = Transaction(
            id=str(uuid.uuid4()),
            date=txn_date,
            description=description,
            amount=txn_amount,
            type=kind,
            account_id=source.id,
            to_account_id=target.id if target is not None else None,
            category=_find_category(coordinator.categories, category, kind) if category else None,
            truck=_find_truck(coordinator.trucks, truck) if truck else None,
        )
        return txn, await coordinator.add(Collection.TRANSACTIONS, txn)

    txn, result = run_session(ctx, action)
    click.echo(f"Created transaction {txn.id}")
    report_sync_result(result)


@transaction_group.command("delete")
@click.argument("transaction_ids", nargs=-1, required=True)
@click.pass_context
def delete_transactions(ctx, transaction_ids: tuple[str, ...]):
    """Delete one or more transactions.

    Several IDs are removed in a single batch.
    """

    async def action(coordinator):
        before = len(coordinator.transactions)
        if len(transaction_ids) == 1:
            result = await coordinator.delete(Collection.TRANSACTIONS, transaction_ids[0])
        else:
            result = await coordinator.delete_many(Collection.TRANSACTIONS, transaction_ids)
        return result, before - len(coordinator.transactions)

    result, removed = run_session(ctx, action)
    click.echo(f"Deleted {removed} transaction(s)")
    report_sync_result(result)


def _candidate_from_json(item: dict) -> CandidateRecord:
    try:
        return CandidateRecord(
            date=parse_iso_date(str(item["date"])),
            description=str(item.get("description", "")),
            amount=Decimal(str(item["amount"])),
            type_hint=item.get("type"),
            category_name=item.get("category"),
        )
    except (KeyError, InvalidOperation) as e:
        raise ValueError(f"Invalid candidate record {item!r}: {e}") from e


@transaction_group.command("import")
@click.argument("json_file", type=click.Path(exists=True, dir_okay=False))
@click.option("--account", required=True, help="Account name or ID")
@click.pass_context
def import_transactions(ctx, json_file: str, account: str):
    """Import extracted transaction candidates from a JSON file.

    The file holds a list of objects with date, description, signed amount
    and optional type and category keys.
    """
    try:
        with open(json_file, encoding="utf-8") as f:
            payload = json.load(f)
        if not isinstance(payload, list):
            raise ValueError("Expected a JSON list of candidate records")
        records = [_candidate_from_json(item) for item in payload]
    except (OSError, ValueError) as e:
        click.echo(f"Error: {e}", err=True)
        ctx.exit(1)

    async def action(coordinator):
        account_id = resolve_account(coordinator.accounts, account).id
        return await coordinator.import_candidates(records, account_id)

    transactions, results = run_session(ctx, action)
    click.echo(f"Imported {len(transactions)} of {len(records)} record(s)")
    skipped = len(records) - len(transactions)
    if skipped:
        click.echo(f"Skipped {skipped} record(s) with a zero amount")
    for result in results:
        report_sync_result(result)


def register_commands(cli):
    """Register transaction commands with main CLI."""
    cli.add_command(transaction_group, name="transaction")
