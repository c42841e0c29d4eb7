"""Command line interface for ledgersync."""
