"""CLI error handling helpers."""

import click

from ledgersync.domain.errors import DomainError


def handle_domain_error(ctx: click.Context, error: DomainError | ValueError) -> None:
    """Render a domain error and exit with failure."""
    click.echo(f"Error: {error}", err=True)
    ctx.exit(1)


def format_amount(amount: int) -> str:
    """Render a minor-unit amount with thousands separators."""
    return f"{amount:,d}"
