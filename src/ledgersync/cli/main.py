"""Main CLI entry point."""

import logging

import click
from ledgersync.database.factories import create_sqlite_database
from ledgersync.utils.log_config import setup_logging

# Import and register all commands at module level
from ledgersync.cli.commands import (
    provider,
    account,
    ingest,
    transfers,
    categorize,
    category,
    view,
)


@click.group()
@click.option(
    "--db-path",
    type=click.Path(),
    help="Path to database file (overrides LEDGERSYNC_DB_PATH environment variable)",
    envvar="LEDGERSYNC_DB_PATH",
)
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    default="WARNING",
    envvar="LEDGERSYNC_LOG_LEVEL",
    help="Logging verbosity (default: WARNING)",
)
@click.pass_context
def cli(ctx, db_path: str | None, log_level: str):
    """Ledgersync - Consolidated personal ledger.

    Ingest balances and transactions from several providers into one
    deduplicated ledger, detect transfers between your own accounts and
    categorize transactions with learned keyword rules.
    """
    ctx.ensure_object(dict)
    handler = setup_logging(log_level)
    ctx.call_on_close(lambda: logging.getLogger().removeHandler(handler))

    # Initialize database connection only when actually running a command
    # (not when showing help)
    if ctx.invoked_subcommand is not None:
        db = create_sqlite_database(database_path=db_path)
        db.connect()
        db.initialize_schema()
        ctx.obj["db"] = db
        ctx.call_on_close(db.disconnect)


# Register all commands
provider.register_commands(cli)
account.register_commands(cli)
ingest.register_commands(cli)
transfers.register_commands(cli)
categorize.register_commands(cli)
category.register_commands(cli)
view.register_commands(cli)


def main():
    """Main entry point for CLI."""
    cli()


if __name__ == "__main__":
    main()
