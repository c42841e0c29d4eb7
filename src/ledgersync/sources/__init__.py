"""Data sources producing raw batches for ingestion."""

from pathlib import Path
from typing import Optional

from ledgersync.sources.base import DataSource
from ledgersync.sources.csv_source import CSVExportSource
from ledgersync.sources.json_source import JSONBatchSource


def open_source(path: str | Path, balances_path: Optional[str | Path] = None) -> DataSource:
    """Pick a data source implementation from the file suffix.

    Raises:
        ValueError: If the suffix is not supported
    """
    suffix = Path(path).suffix.lower()
    if suffix == ".json":
        return JSONBatchSource(path)
    if suffix in (".csv", ".tsv", ".txt"):
        return CSVExportSource(path, balances_path=balances_path)
    raise ValueError(f"Unsupported source file type '{suffix}' for {path}")


__all__ = ["DataSource", "CSVExportSource", "JSONBatchSource", "open_source"]
