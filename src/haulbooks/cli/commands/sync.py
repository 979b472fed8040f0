"""Sync command."""

import click

from haulbooks.cli.session import run_session
from haulbooks.domain.entities import Collection


@click.command("sync")
@click.pass_context
def sync_command(ctx):
    """Load the local cache and refresh it from the remote store.

    Without a remote session the cache is used as is.
    """

    async def action(coordinator):
        return coordinator

    coordinator = run_session(ctx, action)

    click.echo(f"Connection: {coordinator.connection.value}")
    for collection in Collection:
        click.echo(f"  {collection.value:<14} {len(coordinator.items(collection)):6d}")

    failed = coordinator.failed_entities()
    if failed:
        click.echo(f"{len(failed)} change(s) failed to sync:")
        for collection, entity_id in failed:
            click.echo(f"  {collection.value}: {entity_id}")


def register_commands(cli):
    """Register sync command with main CLI."""
    cli.add_command(sync_command)
