"""Transfer detection between the user's own sub-accounts."""

import logging
from collections import defaultdict, deque
from datetime import date

from ledgersync.database.base import Database
from ledgersync.domain.entities import Transaction
from ledgersync.domain.errors import (
    NotFoundError,
    RecordPersistenceError,
    ValidationError,
    transaction_not_found,
)

logger = logging.getLogger(__name__)

TRANSFER_ID_PREFIX = "tf"


def transfer_group_id(first_id: str, second_id: str) -> str:
    """Derive the shared group ID of a transfer pair from both transaction IDs."""
    return f"{TRANSFER_ID_PREFIX}_{first_id[:8]}_{second_id[:8]}"


def pair_transfers(candidates: list[Transaction]) -> list[tuple[Transaction, Transaction]]:
    """Pair same-day, equal-and-opposite transactions.

    ``candidates`` must be in date-then-insertion order. Each transaction is
    paired with the first eligible later candidate, and is used at most once.
    Buckets keyed on (date, abs(amount)) give the same pairs as comparing every
    transaction against every later one: a transaction arriving in a bucket
    pairs with the earliest unmatched earlier transaction of opposite sign.

    Returns:
        Pairs as (earlier, later) tuples, ordered by the earlier member
    """
    waiting: dict[tuple[date, int, int], deque[Transaction]] = defaultdict(deque)
    pairs: list[tuple[Transaction, Transaction]] = []

    for txn in candidates:
        if txn.amount == 0:
            continue
        sign = 1 if txn.amount > 0 else -1
        opposite = waiting[(txn.date, abs(txn.amount), -sign)]
        if opposite:
            pairs.append((opposite.popleft(), txn))
        else:
            waiting[(txn.date, abs(txn.amount), sign)].append(txn)

    order = {txn.id: index for index, txn in enumerate(candidates)}
    pairs.sort(key=lambda pair: order[pair[0].id])
    return pairs


class TransferService:
    """Service for detecting and managing transfer pairs."""

    def __init__(self, db: Database):
        """Initialize transfer service.

        Args:
            db: Database instance
        """
        self.db = db

    def detect_transfers(self) -> dict[str, int]:
        """Link every same-day, equal-and-opposite pair of unlinked transactions.

        Pairs are persisted one at a time; a pair that fails to persist is
        logged and skipped. Existing links are never removed.

        Returns:
            Dict with ``matched_pairs``: number of pairs newly linked
        """
        logger.info("Detecting transfers between accounts...")
        candidates = self.db.list_transfer_candidates()

        matched = 0
        for first, second in pair_transfers(candidates):
            group_id = transfer_group_id(first.id, second.id)
            try:
                self.db.link_transfer(first.id, second.id, group_id)
            except (RecordPersistenceError, NotFoundError) as e:
                logger.warning("Skipping transfer pair %s: %s", group_id, e)
                continue
            matched += 1

        logger.info("Detected and linked %d transfer pairs.", matched)
        return {"matched_pairs": matched}

    def mark_transfer(self, first_id: str, second_id: str) -> str:
        """Manually link two transactions as a transfer pair.

        Args:
            first_id: Transaction ID
            second_id: Transaction ID of the other side

        Returns:
            Transfer group ID

        Raises:
            ValidationError: If both IDs are the same or either side is already linked
            NotFoundError: If either transaction doesn't exist
        """
        if first_id == second_id:
            raise ValidationError("A transaction cannot be a transfer of itself")

        transactions = []
        for txn_id in (first_id, second_id):
            txn = self.db.get_transaction(txn_id)
            if txn is None:
                raise NotFoundError(transaction_not_found(txn_id))
            if txn.is_transfer or txn.transfer_id is not None:
                raise ValidationError(f"Transaction {txn_id} is already part of a transfer")
            transactions.append(txn)

        group_id = transfer_group_id(transactions[0].id, transactions[1].id)
        self.db.link_transfer(first_id, second_id, group_id)
        logger.info("Marked transfer %s", group_id)
        return group_id

    def unlink_transfer(self, transaction_id: str) -> None:
        """Undo a transfer pairing on both sides.

        Raises:
            NotFoundError: If the transaction doesn't exist
            ValidationError: If the transaction is not a transfer
        """
        txn = self.db.get_transaction(transaction_id)
        if txn is None:
            raise NotFoundError(transaction_not_found(transaction_id))
        if not txn.is_transfer and txn.transfer_id is None:
            raise ValidationError(f"Transaction {transaction_id} is not a transfer")

        self.db.unlink_transfer(transaction_id)
        logger.info("Unlinked transfer %s", txn.transfer_id)
