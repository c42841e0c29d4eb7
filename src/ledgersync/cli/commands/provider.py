"""Provider management commands."""

import click
from ledgersync.cli.error_handling import handle_domain_error
from ledgersync.domain.account import ProviderService
from ledgersync.domain.entities import PROVIDER_KINDS


@click.group()
def provider_group():
    """Manage data providers."""
    pass


@provider_group.command("create")
@click.argument("name")
@click.option("--kind", type=click.Choice(PROVIDER_KINDS), default="aggregator", help="Provider kind (default: aggregator)")
@click.option("--source", "scraper_script", help="Export file synced for this provider by 'sync'")
@click.pass_context
def create_provider(ctx, name: str, kind: str, scraper_script: str | None):
    """Register a new provider.

    Examples:
        ledgersync provider create "MoneyForward"
        ledgersync provider create "Exchange" --kind custom --source ~/exports/exchange.csv
    """
    service = ProviderService(ctx.obj["db"])
    try:
        provider_id = service.create_provider(name=name, kind=kind, scraper_script=scraper_script)
    except ValueError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Created provider '{name}' (ID: {provider_id})")


@provider_group.command("list")
@click.pass_context
def list_providers(ctx):
    """List all providers."""
    service = ProviderService(ctx.obj["db"])
    providers = service.list_providers()
    if not providers:
        click.echo("No providers found.")
        return

    click.echo("\nProviders:")
    click.echo("-" * 60)
    for p in providers:
        status = "active" if p.is_active else "inactive"
        source = f" | Source: {p.scraper_script}" if p.scraper_script else ""
        click.echo(f"ID: {p.id:3d} | {p.name:20s} | {p.kind:10s} | {status}{source}")


@provider_group.command("deactivate")
@click.argument("name")
@click.option("--activate", is_flag=True, help="Re-activate instead")
@click.pass_context
def deactivate_provider(ctx, name: str, activate: bool):
    """Exclude a provider from 'sync' (or re-include it with --activate)."""
    service = ProviderService(ctx.obj["db"])
    provider = service.get_provider_by_name(name)
    if provider is None:
        click.echo(f"Error: Provider '{name}' not found", err=True)
        ctx.exit(1)
    service.set_active(provider.id, activate)
    click.echo(f"Provider '{name}' {'activated' if activate else 'deactivated'}")


def register_commands(cli):
    """Register provider commands with main CLI."""
    cli.add_command(provider_group, name="provider")
