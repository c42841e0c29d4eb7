"""Consolidated personal ledger.

Merges balances and transactions from several providers into one
deduplicated store, links internal transfers and categorizes transactions
with keyword rules learned from manual corrections.
"""

__version__ = "0.1.0"


def __getattr__(name):
    # Resolved lazily so importing the package does not pull in the CLI
    if name == "main":
        from ledgersync.cli.main import main

        return main
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
