"""Sync orchestration across active providers."""

import logging
from datetime import date
from typing import Any, Callable, Optional

from ledgersync.database.base import Database
from ledgersync.domain.entities import Provider
from ledgersync.domain.errors import DomainError, StoreUnavailableError
from ledgersync.domain.ingest import LedgerIngestService
from ledgersync.domain.transfers import TransferService
from ledgersync.sources import DataSource, open_source

logger = logging.getLogger(__name__)

SourceFactory = Callable[[Provider], Optional[DataSource]]


def source_for_provider(provider: Provider) -> Optional[DataSource]:
    """Open the export file referenced by a provider, if it has one."""
    if not provider.scraper_script:
        return None
    return open_source(provider.scraper_script)


class SyncService:
    """Runs one ingest per active provider, then optionally detects transfers."""

    def __init__(self, db: Database, source_factory: SourceFactory = source_for_provider):
        """Initialize sync service.

        Args:
            db: Database instance
            source_factory: Builds the data source of a provider, or None if it has none
        """
        self.db = db
        self.source_factory = source_factory
        self.ingest_service = LedgerIngestService(db)
        self.transfer_service = TransferService(db)

    def sync_all(self, detect: bool = True, as_of: Optional[date] = None) -> dict[str, Any]:
        """Sync every active provider in turn.

        A provider whose source fails to open or parse is reported and the
        remaining providers still run. Only an unreachable store aborts the run.

        Args:
            detect: Run transfer detection after all providers are ingested
            as_of: Snapshot day passed to each ingest

        Returns:
            Dict with ``providers`` (name -> ingest result, or ``{"error": msg}``
            / ``{"skipped": reason}``) and ``matched_pairs``
        """
        logger.info("Starting sync process...")
        providers = self.db.list_providers(active_only=True)
        if not providers:
            logger.warning("No active providers found.")

        results: dict[str, Any] = {}
        for provider in providers:
            logger.info("Syncing provider: [%s] %s", provider.kind, provider.name)
            try:
                source = self.source_factory(provider)
                if source is None:
                    logger.warning("Provider %s has no data source configured", provider.name)
                    results[provider.name] = {"skipped": "no data source configured"}
                    continue
                batch = source.fetch()
                result = self.ingest_service.ingest(
                    provider.id, batch.balances, batch.transactions, as_of=as_of
                )
            except StoreUnavailableError:
                raise
            except (DomainError, ValueError, OSError) as e:
                logger.error("Failed to sync provider %s: %s", provider.name, e)
                results[provider.name] = {"error": str(e)}
                continue

            result["source_errors"] = list(batch.errors)
            results[provider.name] = result

        matched_pairs = 0
        if detect and providers:
            matched_pairs = self.transfer_service.detect_transfers()["matched_pairs"]

        logger.info("All sync tasks completed.")
        return {"providers": results, "matched_pairs": matched_pairs}
