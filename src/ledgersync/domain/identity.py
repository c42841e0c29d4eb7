"""Deterministic transaction identity."""

import hashlib
import logging
from datetime import date, datetime
from typing import Any

logger = logging.getLogger(__name__)

IDENTITY_DELIMITER = "|"


def _format_date(value: Any) -> str:
    if isinstance(value, datetime):
        return value.date().isoformat()
    if isinstance(value, date):
        return value.isoformat()
    return str(value)


def transaction_identity(sub_account_id: Any, txn_date: Any, amount: Any, description: Any) -> str:
    """Compute the content-addressed ID of a transaction.

    The ID is the SHA-256 hex digest of the sub-account ID, ISO date, amount
    and description joined by ``|``. The same four values always produce the
    same ID, which is what makes re-ingesting already-seen records a no-op.

    Args:
        sub_account_id: Owning sub-account ID
        txn_date: Transaction date (date, datetime or already formatted string)
        amount: Signed amount in minor units
        description: Free-text description; None is treated as empty

    Returns:
        64-character lowercase hex string
    """
    parts = [
        str(sub_account_id),
        _format_date(txn_date),
        str(amount),
        "" if description is None else str(description),
    ]
    digest = hashlib.sha256(IDENTITY_DELIMITER.join(parts).encode("utf-8")).hexdigest()
    logger.debug("Generated transaction ID %s...", digest[:8])
    return digest
