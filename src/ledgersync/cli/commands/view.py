"""Transaction viewing commands."""

import click
from ledgersync.cli.error_handling import format_amount
from ledgersync.domain.account import AccountService
from ledgersync.domain.category import CategoryService
from ledgersync.utils.date_parser import parse_date


@click.command("view")
@click.option("--start-date", help="Start date (YYYY-MM-DD)")
@click.option("--end-date", help="End date (YYYY-MM-DD)")
@click.option("--account", type=int, help="Sub-account ID")
@click.option("--uncategorized", is_flag=True, help="Only show transactions without a category")
@click.option("--transfers/--no-transfers", default=True, help="Include internal transfers (default: yes)")
@click.option("--verbose", "-v", is_flag=True, help="Show all fields including transfer links")
@click.pass_context
def view_transactions(
    ctx,
    start_date: str | None,
    end_date: str | None,
    account: int | None,
    uncategorized: bool,
    transfers: bool,
    verbose: bool,
):
    """View transactions with optional filters, newest first."""
    db = ctx.obj["db"]
    category_service = CategoryService(db)

    start = None
    if start_date:
        try:
            start = parse_date(start_date)
        except ValueError as e:
            click.echo(f"Error: Invalid start date: {e}", err=True)
            ctx.exit(1)

    end = None
    if end_date:
        try:
            end = parse_date(end_date)
        except ValueError as e:
            click.echo(f"Error: Invalid end date: {e}", err=True)
            ctx.exit(1)

    transactions = db.list_transactions(
        start_date=start,
        end_date=end,
        sub_account_id=account,
        uncategorized=uncategorized,
        include_transfers=transfers,
    )
    if not transactions:
        click.echo("No transactions found.")
        return

    sub_accounts = {sub.id: sub.current_name for sub in AccountService(db).list_sub_accounts()}

    def category_name(txn) -> str:
        if txn.is_transfer:
            return "Transfer"
        if txn.sub_category_id is None:
            return "Uncategorized"
        return category_service.format_category_path(txn.sub_category_id)

    click.echo(f"\nFound {len(transactions)} transaction(s):")
    if verbose:
        click.echo("=" * 100)
        for txn in transactions:
            click.echo(f"\nTransaction ID: {txn.id}")
            click.echo(f"  Date: {txn.date}")
            click.echo(f"  Amount: {format_amount(txn.amount)}")
            click.echo(f"  Account: {sub_accounts.get(txn.sub_account_id, 'Unknown')} (ID: {txn.sub_account_id})")
            click.echo(f"  Category: {category_name(txn)}")
            click.echo(f"  Description: {txn.description}")
            if txn.transfer_id:
                click.echo(f"  Transfer: {txn.transfer_id} (linked to {txn.linked_transaction_id})")
            click.echo(f"  Imported: {txn.imported_at}")
            click.echo("-" * 100)
    else:
        click.echo("-" * 160)
        click.echo(f"{'ID':<65} {'Date':<12} {'Amount':>12}  {'Account':<18} {'Category':<28} {'Description'}")
        click.echo("-" * 160)
        for txn in transactions:
            click.echo(
                f"{txn.id:<65} {str(txn.date):<12} {format_amount(txn.amount):>12}  "
                f"{sub_accounts.get(txn.sub_account_id, 'Unknown')[:18]:<18} {category_name(txn)[:28]:<28} "
                f"{txn.description[:30]}"
            )


def register_commands(cli):
    """Register view command with main CLI."""
    cli.add_command(view_transactions)
