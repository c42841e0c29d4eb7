"""JSON batch file source."""

import json
from pathlib import Path
from typing import Any

from ledgersync.domain.entities import RawBalance, RawTransaction, SourceBatch
from ledgersync.sources.base import DataSource
from ledgersync.utils.date_parser import parse_date


class JSONBatchSource(DataSource):
    """Reads ``{"balances": [...], "transactions": [...]}`` files.

    Balance objects use the keys ``institution_label``, ``sub_account_name``,
    ``balance`` and optionally ``external_account_key``. Transaction objects use
    ``date``, ``description``, ``amount``, ``institution_label`` and
    ``sub_account_name``.
    """

    def __init__(self, path: str | Path):
        self.path = Path(path)

    def fetch(self) -> SourceBatch:
        """Parse the file.

        Raises:
            FileNotFoundError: If the file doesn't exist
            ValueError: If the file is not a JSON object
        """
        if not self.path.exists():
            raise FileNotFoundError(f"Batch file not found: {self.path}")

        with open(self.path, "r", encoding="utf-8") as f:
            try:
                payload = json.load(f)
            except json.JSONDecodeError as e:
                raise ValueError(f"Invalid JSON in {self.path}: {e}")

        if not isinstance(payload, dict):
            raise ValueError(f"Batch file {self.path} must contain a JSON object")

        batch = SourceBatch()
        for index, item in enumerate(payload.get("balances", []), start=1):
            try:
                batch.balances.append(self._parse_balance(item))
            except (KeyError, TypeError, ValueError) as e:
                batch.errors.append(f"Balance {index}: {_describe(e)}")

        for index, item in enumerate(payload.get("transactions", []), start=1):
            try:
                batch.transactions.append(self._parse_transaction(item))
            except (KeyError, TypeError, ValueError) as e:
                batch.errors.append(f"Transaction {index}: {_describe(e)}")

        return batch

    @staticmethod
    def _parse_balance(item: dict[str, Any]) -> RawBalance:
        return RawBalance(
            institution_label=str(item["institution_label"]),
            sub_account_name=str(item["sub_account_name"]),
            balance=item["balance"],
            external_account_key=item.get("external_account_key"),
        )

    @staticmethod
    def _parse_transaction(item: dict[str, Any]) -> RawTransaction:
        # Amount validation is left to the ingest step so the record is counted as skipped there
        return RawTransaction(
            date=parse_date(str(item["date"])),
            description=str(item.get("description") or ""),
            amount=item["amount"],
            institution_label=str(item["institution_label"]),
            sub_account_name=str(item["sub_account_name"]),
        )


def _describe(error: Exception) -> str:
    if isinstance(error, KeyError):
        return f"Missing field {error}"
    return str(error)
