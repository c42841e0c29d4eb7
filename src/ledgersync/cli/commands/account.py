"""Account management commands."""

import click
from ledgersync.cli.error_handling import format_amount, handle_domain_error
from ledgersync.domain.account import AccountService, ProviderService
from ledgersync.domain.entities import ASSET_TYPES


@click.group()
def account_group():
    """Manage accounts and sub-accounts."""
    pass


@account_group.command("list")
@click.option("--provider", help="Only show accounts of this provider")
@click.pass_context
def list_accounts(ctx, provider: str | None):
    """List main accounts with their sub-accounts and balances."""
    db = ctx.obj["db"]
    service = AccountService(db)

    provider_id = None
    if provider is not None:
        found = ProviderService(db).get_provider_by_name(provider)
        if found is None:
            click.echo(f"Error: Provider '{provider}' not found", err=True)
            ctx.exit(1)
        provider_id = found.id

    main_accounts = service.list_main_accounts(provider_id=provider_id)
    if not main_accounts:
        click.echo("No accounts found.")
        return

    click.echo("\nAccounts:")
    click.echo("-" * 60)
    for main in main_accounts:
        click.echo(f"{main.label} (ID: {main.id})")
        for sub in service.list_sub_accounts(main_account_id=main.id):
            click.echo(
                f"  ID: {sub.id:3d} | {sub.current_name:20s} | {sub.asset_type:10s} | {format_amount(sub.balance):>14s}"
            )


@account_group.command("create-manual")
@click.argument("label")
@click.argument("sub_account_name")
@click.option("--provider", required=True, help="Provider name (typically a 'manual' provider)")
@click.option("--balance", type=int, default=0, help="Initial balance in minor units")
@click.option("--type", "asset_type", type=click.Choice(ASSET_TYPES), default="CASH", help="Asset type")
@click.pass_context
def create_manual_account(ctx, label: str, sub_account_name: str, provider: str, balance: int, asset_type: str):
    """Create a manually managed account.

    Examples:
        ledgersync account create-manual "Wallet" "Cash" --provider Manual --balance 12000
    """
    db = ctx.obj["db"]
    found = ProviderService(db).get_provider_by_name(provider)
    if found is None:
        click.echo(f"Error: Provider '{provider}' not found", err=True)
        ctx.exit(1)

    try:
        sub_account_id = AccountService(db).create_manual_account(
            provider_id=found.id,
            label=label,
            sub_account_name=sub_account_name,
            initial_balance=balance,
            asset_type=asset_type,
        )
    except ValueError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Created account '{label}' / '{sub_account_name}' (sub-account ID: {sub_account_id})")


@account_group.command("set-type")
@click.argument("sub_account_id", type=int)
@click.argument("asset_type", type=click.Choice(ASSET_TYPES))
@click.pass_context
def set_asset_type(ctx, sub_account_id: int, asset_type: str):
    """Change the asset type of a sub-account."""
    try:
        AccountService(ctx.obj["db"]).update_asset_type(sub_account_id, asset_type)
    except ValueError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Sub-account {sub_account_id} is now {asset_type}")


@account_group.command("set-balance")
@click.argument("sub_account_id", type=int)
@click.argument("balance", type=int)
@click.pass_context
def set_balance(ctx, sub_account_id: int, balance: int):
    """Overwrite the balance of a sub-account."""
    try:
        AccountService(ctx.obj["db"]).set_balance(sub_account_id, balance)
    except ValueError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Sub-account {sub_account_id} balance set to {format_amount(balance)}")


@account_group.command("history")
@click.argument("sub_account_id", type=int, required=False)
@click.pass_context
def balance_history(ctx, sub_account_id: int | None):
    """Show daily balance snapshots."""
    history = AccountService(ctx.obj["db"]).get_balance_history(sub_account_id=sub_account_id)
    if not history:
        click.echo("No balance history found.")
        return
    for snapshot in history:
        click.echo(
            f"{snapshot.date:%Y-%m-%d} | sub-account {snapshot.sub_account_id:3d} | {format_amount(snapshot.balance):>14s}"
        )


def register_commands(cli):
    """Register account commands with main CLI."""
    cli.add_command(account_group, name="account")
