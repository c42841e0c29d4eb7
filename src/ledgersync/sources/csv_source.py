"""CSV export source."""

import csv
from pathlib import Path
from typing import Callable, Optional, TypeVar

from ledgersync.domain.entities import RawBalance, RawTransaction, SourceBatch
from ledgersync.sources.base import DataSource
from ledgersync.utils.amount_parser import parse_amount
from ledgersync.utils.date_parser import parse_date

TRANSACTION_COLUMNS = ("date", "description", "amount", "institution", "sub_account")
BALANCE_COLUMNS = ("institution", "sub_account", "balance")

T = TypeVar("T")


class CSVExportSource(DataSource):
    """Reads transaction (and optionally balance) CSV exports.

    Transaction columns: date, description, amount, institution, sub_account.
    Balance columns: institution, sub_account, balance and optionally external_key.
    Header names are matched case-insensitively.
    """

    def __init__(self, transactions_path: str | Path, balances_path: Optional[str | Path] = None):
        self.transactions_path = Path(transactions_path)
        self.balances_path = Path(balances_path) if balances_path is not None else None

    def fetch(self) -> SourceBatch:
        """Parse the CSV files.

        Raises:
            FileNotFoundError: If a file doesn't exist
            ValueError: If a file lacks required columns
        """
        batch = SourceBatch()
        if self.balances_path is not None:
            self._read(self.balances_path, BALANCE_COLUMNS, self._parse_balance, batch.balances, batch.errors, "Balance row")
        self._read(
            self.transactions_path,
            TRANSACTION_COLUMNS,
            self._parse_transaction,
            batch.transactions,
            batch.errors,
            "Row",
        )
        return batch

    @staticmethod
    def _read(
        path: Path,
        required: tuple[str, ...],
        parse_row: Callable[[dict[str, str]], T],
        out: list[T],
        errors: list[str],
        label: str,
    ) -> None:
        if not path.exists():
            raise FileNotFoundError(f"CSV file not found: {path}")

        with open(path, "r", encoding="utf-8-sig", newline="") as f:
            # Try to detect delimiter
            sample = f.read(1024)
            f.seek(0)
            try:
                delimiter = csv.Sniffer().sniff(sample, delimiters=",;\t").delimiter
            except csv.Error:
                delimiter = ","

            reader = csv.DictReader(f, delimiter=delimiter)
            if reader.fieldnames is None:
                raise ValueError(f"CSV file {path} has no columns")

            columns = {name.strip().lower(): name for name in reader.fieldnames}
            missing = [col for col in required if col not in columns]
            if missing:
                raise ValueError(f"CSV file {path} missing required columns: {', '.join(missing)}")

            # Start at 2 (header is row 1)
            for row_num, row in enumerate(reader, start=2):
                values = {key: (row.get(original) or "").strip() for key, original in columns.items()}
                try:
                    out.append(parse_row(values))
                except ValueError as e:
                    errors.append(f"{label} {row_num}: {e}")

    @staticmethod
    def _parse_balance(values: dict[str, str]) -> RawBalance:
        if not values["institution"] or not values["sub_account"]:
            raise ValueError("Missing institution or sub_account")
        return RawBalance(
            institution_label=values["institution"],
            sub_account_name=values["sub_account"],
            balance=parse_amount(values["balance"]),
            external_account_key=values.get("external_key") or None,
        )

    @staticmethod
    def _parse_transaction(values: dict[str, str]) -> RawTransaction:
        if not values["date"]:
            raise ValueError("Missing date")
        if not values["amount"]:
            raise ValueError("Missing amount")
        if not values["institution"] or not values["sub_account"]:
            raise ValueError("Missing institution or sub_account")
        return RawTransaction(
            date=parse_date(values["date"]),
            description=values["description"],
            amount=parse_amount(values["amount"]),
            institution_label=values["institution"],
            sub_account_name=values["sub_account"],
        )
