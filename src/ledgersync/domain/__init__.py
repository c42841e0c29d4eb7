"""Domain layer for ledgersync application.

Services are imported from their modules directly (e.g.
``ledgersync.domain.ingest``); this package stays import-free so the
database layer can depend on ``ledgersync.domain.entities`` without cycles.
"""
