"""Ingest, sync and status commands."""

import click
from ledgersync.cli.error_handling import handle_domain_error
from ledgersync.domain.account import AccountService, ProviderService
from ledgersync.domain.errors import StoreUnavailableError
from ledgersync.domain.ingest import LedgerIngestService
from ledgersync.domain.sync import SyncService
from ledgersync.sources import open_source
from ledgersync.utils.date_parser import parse_date


def _echo_result(result: dict) -> None:
    click.echo(
        f"  {result['inserted']} transactions imported, {result['existing']} already present, "
        f"{result['skipped']} skipped"
    )
    click.echo(f"  {result['updated_balances']} balances updated, {result['categorized']} categorized")
    for detail in result["skipped_details"]:
        click.echo(f"    Skipped {detail}", err=True)
    for error in result.get("source_errors", []) + result["errors"]:
        click.echo(f"    {error}", err=True)


@click.command("ingest")
@click.argument("source_file", type=click.Path(exists=True))
@click.option("--provider", required=True, help="Provider name (registered on first ingest)")
@click.option("--balances", "balances_file", type=click.Path(exists=True), help="Separate balances CSV file")
@click.option("--as-of", help="Snapshot date (default: today)")
@click.pass_context
def ingest_file(ctx, source_file: str, provider: str, balances_file: str | None, as_of: str | None):
    """Ingest balances and transactions from an export file.

    Examples:
        ledgersync ingest export.json --provider MoneyForward
        ledgersync ingest transactions.csv --provider Bank --balances balances.csv
    """
    db = ctx.obj["db"]
    try:
        as_of_date = parse_date(as_of) if as_of else None
        batch = open_source(source_file, balances_path=balances_file).fetch()
        found = ProviderService(db).get_or_create_provider(provider)
        result = LedgerIngestService(db).ingest(found.id, batch.balances, batch.transactions, as_of=as_of_date)
    except (ValueError, FileNotFoundError) as e:
        handle_domain_error(ctx, e)
    except StoreUnavailableError as e:
        click.echo(f"Error: {e}", err=True)
        ctx.exit(1)

    result["source_errors"] = list(batch.errors)
    click.echo(f"\nIngest complete for '{provider}':")
    _echo_result(result)


@click.command("sync")
@click.option("--no-detect", is_flag=True, help="Skip transfer detection after syncing")
@click.option("--as-of", help="Snapshot date (default: today)")
@click.pass_context
def sync_all(ctx, no_detect: bool, as_of: str | None):
    """Ingest every active provider's configured source."""
    db = ctx.obj["db"]
    try:
        as_of_date = parse_date(as_of) if as_of else None
        summary = SyncService(db).sync_all(detect=not no_detect, as_of=as_of_date)
    except ValueError as e:
        handle_domain_error(ctx, e)
    except StoreUnavailableError as e:
        click.echo(f"Error: {e}", err=True)
        ctx.exit(1)

    if not summary["providers"]:
        click.echo("No active providers found.")
        return

    failed = 0
    for name, result in summary["providers"].items():
        click.echo(f"\n{name}:")
        if "error" in result:
            failed += 1
            click.echo(f"  Failed: {result['error']}", err=True)
        elif "skipped" in result:
            click.echo(f"  Skipped: {result['skipped']}")
        else:
            _echo_result(result)

    if not no_detect:
        click.echo(f"\nTransfers detected: {summary['matched_pairs']} pairs")
    if failed:
        click.echo(f"{failed} provider(s) failed", err=True)


@click.command("status")
@click.pass_context
def show_status(ctx):
    """Show when balances were last synced."""
    db = ctx.obj["db"]
    last_sync = AccountService(db).get_last_sync_time()
    if last_sync is None:
        click.echo("Never synced.")
    else:
        click.echo(f"Last sync: {last_sync:%Y-%m-%d %H:%M}")
    click.echo(f"Transactions: {db.count_transactions()}")
    click.echo(f"Uncategorized: {db.count_transactions(uncategorized=True)}")


def register_commands(cli):
    """Register ingest commands with main CLI."""
    cli.add_command(ingest_file)
    cli.add_command(sync_all)
    cli.add_command(show_status)
