"""Data source boundary."""

from abc import ABC, abstractmethod

from ledgersync.domain.entities import SourceBatch


class DataSource(ABC):
    """Produces raw balances and transactions for one provider.

    How the data is obtained (scraping, exports, manual entry) is up to the
    implementation; the ledger only consumes the resulting batch.
    """

    @abstractmethod
    def fetch(self) -> SourceBatch:
        """Read the upstream data and return it as a batch.

        Records that cannot be parsed are reported in ``SourceBatch.errors``
        instead of aborting the fetch.
        """
        pass
