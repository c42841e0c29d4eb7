"""Ledger upsert engine.

Merges one provider's raw balance and transaction batch into the store.
Every write is keyed (main account by external key, sub-account by name,
snapshot by day, transaction by content identity), so running the same batch
again converges instead of duplicating rows. Records are persisted one at a
time: a failing record is reported and the rest of the batch continues.
"""

import logging
import math
from datetime import date, datetime, time
from decimal import Decimal
from numbers import Number
from typing import Any, Iterable, Optional

from ledgersync.database.base import Database
from ledgersync.domain.categorization import CategorizationService
from ledgersync.domain.entities import RawBalance, RawTransaction, SubAccount
from ledgersync.domain.errors import (
    NotFoundError,
    RecordPersistenceError,
    ValidationError,
    provider_not_found,
    unresolved_sub_account,
)
from ledgersync.domain.identity import transaction_identity

logger = logging.getLogger(__name__)

# Snapshots are normalized to this hour so one calendar day maps to one key
SNAPSHOT_HOUR = 8


def snapshot_timestamp(as_of: date) -> datetime:
    """Return the fixed daily timestamp used as the BalanceHistory key."""
    return datetime.combine(as_of, time(hour=SNAPSHOT_HOUR))


def coerce_amount(value: Any, field_name: str = "amount") -> int:
    """Validate a monetary value in minor units and return it as int.

    Raises:
        ValidationError: If the value is not a finite integral number
    """
    if isinstance(value, bool) or not isinstance(value, (Number, Decimal)):
        raise ValidationError(f"Invalid {field_name} {value!r}: not a number")
    if isinstance(value, int):
        return value
    if isinstance(value, Decimal):
        if not value.is_finite() or value != value.to_integral_value():
            raise ValidationError(f"Invalid {field_name} {value!r}: must be a finite whole number")
        return int(value)
    if isinstance(value, float):
        if not math.isfinite(value) or not value.is_integer():
            raise ValidationError(f"Invalid {field_name} {value!r}: must be a finite whole number")
        return int(value)
    raise ValidationError(f"Invalid {field_name} {value!r}: unsupported number type")


def _coerce_date(value: Any) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    raise ValidationError(f"Invalid date {value!r}")


class LedgerIngestService:
    """Service for merging raw provider batches into the ledger."""

    def __init__(self, db: Database, categorization_service: Optional[CategorizationService] = None):
        """Initialize ingest service.

        Args:
            db: Database instance
            categorization_service: Rule engine run after each batch; defaults to
                a substring-matching engine on the same database
        """
        self.db = db
        self.categorization_service = categorization_service or CategorizationService(db)

    def ingest(
        self,
        provider_id: int,
        balances: Iterable[RawBalance],
        transactions: Iterable[RawTransaction],
        as_of: Optional[date] = None,
    ) -> dict[str, Any]:
        """Merge a batch of balances and transactions from one provider.

        Args:
            provider_id: Provider the batch belongs to
            balances: Raw balances; a sub-account repeated in the batch keeps the
                last reported balance
            transactions: Raw transactions
            as_of: Snapshot day (defaults to today)

        Returns:
            Dict with ingest statistics:
            - inserted: transactions newly inserted
            - existing: matched transactions that were already stored
            - skipped: transactions skipped (unknown sub-account or invalid)
            - skipped_details: reasons for skipped transactions, in input order
            - updated_balances: distinct sub-accounts whose balance was set
            - snapshots: balance history rows written
            - categorized: transactions categorized by the rule pass
            - errors: per-record persistence failures

        Raises:
            NotFoundError: If provider doesn't exist
            StoreUnavailableError: If the store cannot be reached; records
                processed before the failure stay committed
        """
        if self.db.get_provider(provider_id) is None:
            raise NotFoundError(provider_not_found(provider_id))

        logger.info("Saving batch for provider %d to database...", provider_id)
        errors: list[str] = []

        updated = self._apply_balances(provider_id, balances, errors)
        snapshots = self._snapshot_all(as_of or date.today(), errors)
        inserted, existing, skipped_details = self._upsert_transactions(transactions, errors)

        # Covers uncategorized rows from earlier batches too
        categorized = self.categorization_service.apply_all_rules()["applied"]

        result = {
            "inserted": inserted,
            "existing": existing,
            "skipped": len(skipped_details),
            "skipped_details": skipped_details,
            "updated_balances": updated,
            "snapshots": snapshots,
            "categorized": categorized,
            "errors": errors,
        }
        logger.info(
            "Ingest complete: %d inserted, %d already present, %d skipped, %d balances, %d errors",
            inserted,
            existing,
            len(skipped_details),
            updated,
            len(errors),
        )
        return result

    def _apply_balances(self, provider_id: int, balances: Iterable[RawBalance], errors: list[str]) -> int:
        touched: set[int] = set()
        for index, raw in enumerate(balances, start=1):
            try:
                balance = coerce_amount(raw.balance, "balance")
                # Key-less accounts correlate by label within the provider
                main_account = self.db.find_main_account(
                    provider_id, raw.external_account_key, raw.institution_label
                )
                if main_account is not None:
                    main_account_id = main_account.id
                else:
                    main_account_id = self.db.create_main_account(
                        label=raw.institution_label,
                        provider_id=provider_id,
                        external_key=raw.external_account_key,
                    )
                sub_account = self.db.upsert_sub_account_balance(main_account_id, raw.sub_account_name, balance)
            except (ValidationError, RecordPersistenceError) as e:
                message = f"Balance {index} ({raw.institution_label} / {raw.sub_account_name}): {e}"
                logger.warning(message)
                errors.append(message)
                continue
            touched.add(sub_account.id)
        return len(touched)

    def _snapshot_all(self, as_of: date, errors: list[str]) -> int:
        stamp = snapshot_timestamp(as_of)
        written = 0
        for sub_account in self.db.list_sub_accounts():
            try:
                self.db.upsert_balance_snapshot(sub_account.id, stamp, sub_account.balance)
            except RecordPersistenceError as e:
                message = f"Snapshot of sub-account {sub_account.id}: {e}"
                logger.warning(message)
                errors.append(message)
                continue
            written += 1
        return written

    def _upsert_transactions(
        self, transactions: Iterable[RawTransaction], errors: list[str]
    ) -> tuple[int, int, list[str]]:
        resolved: dict[tuple[str, str], Optional[SubAccount]] = {}
        inserted = 0
        existing = 0
        skipped_details: list[str] = []

        for index, raw in enumerate(transactions, start=1):
            try:
                amount = coerce_amount(raw.amount)
                txn_date = _coerce_date(raw.date)
            except ValidationError as e:
                skipped_details.append(f"Transaction {index}: {e}")
                continue

            key = (raw.institution_label, raw.sub_account_name)
            if key not in resolved:
                try:
                    resolved[key] = self.db.find_sub_account(*key)
                except RecordPersistenceError as e:
                    message = f"Transaction {index} ({key[0]} / {key[1]}): {e}"
                    logger.warning(message)
                    errors.append(message)
                    continue
            sub_account = resolved[key]
            if sub_account is None:
                reason = unresolved_sub_account(*key)
                logger.warning("Reconciliation gap, skipping transaction %d: %s", index, reason)
                skipped_details.append(f"Transaction {index}: {reason}")
                continue

            description = raw.description or ""
            txn_id = transaction_identity(sub_account.id, txn_date, amount, description)
            try:
                created = self.db.insert_transaction_if_absent(
                    txn_id, sub_account.id, txn_date, amount, description
                )
            except RecordPersistenceError as e:
                message = f"Transaction {index} ({txn_id[:8]}): {e}"
                logger.warning(message)
                errors.append(message)
                continue

            if created:
                inserted += 1
            else:
                existing += 1

        return inserted, existing, skipped_details
