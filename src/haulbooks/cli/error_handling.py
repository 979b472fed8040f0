"""CLI error handling helpers."""

import click

from haulbooks.domain.errors import DomainError
from haulbooks.domain.sync import SyncResult


def handle_domain_error(ctx: click.Context, error: DomainError | ValueError) -> None:
    """Render a domain error and exit with failure."""
    click.echo(f"Error: {error}", err=True)
    ctx.exit(1)


def report_sync_result(result: SyncResult) -> None:
    """Render a failed remote write as a warning; the local change stands."""
    if not result.ok and result.error is not None:
        click.echo(f"Warning: {result.error}", err=True)
