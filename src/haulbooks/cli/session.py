"""CLI helpers running one command against a loaded coordinator."""

import asyncio
from typing import Any, Awaitable, Callable, TypeVar

import click

from haulbooks.cli.error_handling import handle_domain_error
from haulbooks.config import get_settings
from haulbooks.domain.errors import DomainError
from haulbooks.domain.sync import ConnectionState, SyncCoordinator
from haulbooks.remote.postgrest import PostgrestRemoteStore

T = TypeVar("T")


def build_coordinator(ctx: click.Context) -> SyncCoordinator:
    """Create the coordinator for this invocation from the CLI context."""
    store = ctx.obj["store"]
    remote = None
    if not ctx.obj.get("offline") and get_settings().remote_configured:
        remote = PostgrestRemoteStore()
    return SyncCoordinator(store, remote)


def run_session(
    ctx: click.Context, action: Callable[[SyncCoordinator], Awaitable[T]]
) -> T:
    """Load state, run an action and close the remote client in one event loop.

    Domain errors are rendered and end the command with exit status 1.
    """
    coordinator = build_coordinator(ctx)

    async def session() -> T:
        try:
            await coordinator.load()
            if coordinator.connection == ConnectionState.DISCONNECTED:
                click.echo("Warning: remote store unreachable, using local cache.", err=True)
            return await action(coordinator)
        finally:
            if coordinator.remote is not None:
                await coordinator.remote.close()

    try:
        return asyncio.run(session())
    except DomainError as e:
        handle_domain_error(ctx, e)


def format_currency(amount: Any) -> str:
    """Format an amount as US dollars."""
    if amount < 0:
        return f"-${-amount:,.2f}"
    return f"${amount:,.2f}"
