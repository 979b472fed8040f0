"""Main CLI entry point."""

import click
from haulbooks.config import configure_logging
from haulbooks.storage.factories import create_sqlite_store

# Import and register all commands at module level
from haulbooks.cli.commands import (
    account,
    category,
    entity,
    fiscal,
    load,
    report,
    sync,
    tax,
    transaction,
    truck,
)


@click.group()
@click.option(
    "--db-path",
    type=click.Path(),
    help="Path to local cache file (overrides HAULBOOKS_DB_PATH environment variable)",
    envvar="HAULBOOKS_DB_PATH",
)
@click.option(
    "--offline",
    is_flag=True,
    help="Work from the local cache only, even if a remote store is configured",
)
@click.pass_context
def cli(ctx, db_path: str | None, offline: bool):
    """Haulbooks - Bookkeeping for small trucking fleets.

    Records income, expenses and transfers against bank accounts, keeps a
    local cache in sync with an optional remote store and derives
    tax-ready reports.
    """
    ctx.ensure_object(dict)
    configure_logging()

    # Open the cache only when actually running a command (not when showing help)
    if ctx.invoked_subcommand is not None:
        store = create_sqlite_store(database_path=db_path)
        store.connect()
        store.initialize_schema()
        ctx.obj["store"] = store
        ctx.obj["offline"] = offline
        ctx.call_on_close(store.disconnect)


# Register all commands
account.register_commands(cli)
category.register_commands(cli)
entity.register_commands(cli)
fiscal.register_commands(cli)
load.register_commands(cli)
report.register_commands(cli)
sync.register_commands(cli)
tax.register_commands(cli)
transaction.register_commands(cli)
truck.register_commands(cli)


def main():
    """Main entry point for CLI."""
    cli()


if __name__ == "__main__":
    main()
