"""Categorization rule engine.

Rules map a keyword to a sub-category. The bulk pass walks rules from highest
to lowest priority and only ever fills in missing categories, so it is safe to
re-run after every ingest and safe to interleave with manual edits.
"""

import logging
import re
from typing import Callable, Collection, Optional

from ledgersync.database.base import Database
from ledgersync.domain.entities import CategoryRule, Transaction
from ledgersync.domain.errors import (
    ConflictError,
    NotFoundError,
    ValidationError,
    duplicate_rule,
    rule_not_found,
    sub_category_not_found,
    transaction_not_found,
)

logger = logging.getLogger(__name__)

Matcher = Callable[[str, str], bool]

LEARNED_RULE_PRIORITY = 0


def substring_match(keyword: str, description: str) -> bool:
    """Case-sensitive containment."""
    return keyword in description


def token_match(keyword: str, description: str) -> bool:
    """Match when every whitespace-separated token of the keyword is a token of the description."""
    tokens = set(description.split())
    keyword_tokens = keyword.split()
    return bool(keyword_tokens) and all(tok in tokens for tok in keyword_tokens)


def regex_match(keyword: str, description: str) -> bool:
    """Treat the keyword as a regular expression; invalid patterns never match."""
    try:
        return re.search(keyword, description) is not None
    except re.error:
        logger.warning("Ignoring invalid rule pattern %r", keyword)
        return False


MATCHERS: dict[str, Matcher] = {
    "substring": substring_match,
    "token": token_match,
    "regex": regex_match,
}


class CategorizationService:
    """Service for applying, learning and managing category rules."""

    def __init__(self, db: Database, matcher: Matcher = substring_match):
        """Initialize categorization service.

        Args:
            db: Database instance
            matcher: Predicate deciding whether a rule keyword matches a description
        """
        self.db = db
        self.matcher = matcher

    def apply_all_rules(self, transaction_ids: Optional[Collection[str]] = None) -> dict[str, int]:
        """Apply every rule to uncategorized transactions.

        Args:
            transaction_ids: Optional restriction to these transactions (e.g. one
                ingest batch). None means every uncategorized transaction.

        Returns:
            Dict with ``applied``: number of transactions categorized
        """
        rules = self.db.list_category_rules()
        if not rules:
            return {"applied": 0}
        if transaction_ids is not None and not transaction_ids:
            return {"applied": 0}

        pending = self.db.list_transactions(uncategorized=True, transaction_ids=transaction_ids)
        logger.info("Applying %d rules to %d uncategorized transactions", len(rules), len(pending))

        applied = 0
        for rule in rules:
            if not pending:
                break
            matched = [txn.id for txn in pending if self.matcher(rule.keyword, txn.description)]
            if not matched:
                continue
            applied += self.db.assign_category_if_uncategorized(matched, rule.sub_category_id)
            # Earlier rules win; matched rows are not reconsidered
            matched_ids = set(matched)
            pending = [txn for txn in pending if txn.id not in matched_ids]

        logger.info("Category rules applied to %d transactions", applied)
        return {"applied": applied}

    def categorize(
        self, transaction_id: str, sub_category_id: Optional[int], learn_rule: bool = False
    ) -> Transaction:
        """Set or clear a transaction's category, optionally learning a rule.

        When a category is set and ``learn_rule`` is True, a rule keyed on the
        transaction's exact description is created (if missing) with the lowest
        priority and immediately applied to every other uncategorized transaction
        with the identical description.

        Args:
            transaction_id: Transaction ID
            sub_category_id: Target sub-category ID, or None to uncategorize
            learn_rule: Whether to learn a rule from this assignment

        Returns:
            The updated transaction

        Raises:
            NotFoundError: If the transaction or sub-category doesn't exist
        """
        txn = self.db.get_transaction(transaction_id)
        if txn is None:
            raise NotFoundError(transaction_not_found(transaction_id))

        if sub_category_id is not None and self.db.get_sub_category(sub_category_id) is None:
            raise NotFoundError(sub_category_not_found(sub_category_id))

        logger.info("Updating category for transaction %s...", transaction_id[:8])
        self.db.update_transaction_category(transaction_id, sub_category_id)

        if learn_rule and sub_category_id is not None and txn.description:
            self._learn_from(txn.description, sub_category_id)

        updated = self.db.get_transaction(transaction_id)
        if updated is None:
            raise NotFoundError(transaction_not_found(transaction_id))
        return updated

    def _learn_from(self, description: str, sub_category_id: int) -> int:
        logger.info("Creating auto-category rule for: %s", description)
        self.db.upsert_category_rule(description, sub_category_id, priority=LEARNED_RULE_PRIORITY)

        same_description = self.db.list_transactions(uncategorized=True, description=description)
        count = self.db.assign_category_if_uncategorized([t.id for t in same_description], sub_category_id)
        logger.info("Rule applied to %d transactions.", count)
        return count

    def create_rule(self, keyword: str, sub_category_id: int, priority: int = 0) -> int:
        """Create a category rule.

        Args:
            keyword: Text to match in transaction descriptions
            sub_category_id: Target sub-category ID
            priority: Higher priorities are applied first

        Returns:
            Rule ID

        Raises:
            ValidationError: If keyword is empty
            NotFoundError: If sub-category doesn't exist
            ConflictError: If the (keyword, sub-category) rule already exists
        """
        if not keyword:
            raise ValidationError("Rule keyword is required")
        if self.db.get_sub_category(sub_category_id) is None:
            raise NotFoundError(sub_category_not_found(sub_category_id))
        if self.db.find_category_rule(keyword, sub_category_id) is not None:
            raise ConflictError(duplicate_rule(keyword, sub_category_id))

        logger.info("Creating category rule for keyword: %s", keyword)
        return self.db.create_category_rule(keyword, sub_category_id, priority)

    def get_rule(self, rule_id: int) -> Optional[CategoryRule]:
        """Get category rule by ID."""
        return self.db.get_category_rule(rule_id)

    def list_rules(self) -> list[CategoryRule]:
        """List rules in application order."""
        return self.db.list_category_rules()

    def update_rule(
        self,
        rule_id: int,
        keyword: Optional[str] = None,
        priority: Optional[int] = None,
        sub_category_id: Optional[int] = None,
    ) -> None:
        """Update a category rule.

        Raises:
            NotFoundError: If rule or sub-category doesn't exist
            ValidationError: If keyword is given but empty
            ConflictError: If the new (keyword, sub-category) pair is taken
        """
        rule = self.db.get_category_rule(rule_id)
        if rule is None:
            raise NotFoundError(rule_not_found(rule_id))
        if keyword is not None and not keyword:
            raise ValidationError("Rule keyword is required")
        if sub_category_id is not None and self.db.get_sub_category(sub_category_id) is None:
            raise NotFoundError(sub_category_not_found(sub_category_id))

        new_keyword = keyword if keyword is not None else rule.keyword
        new_sub_category_id = sub_category_id if sub_category_id is not None else rule.sub_category_id
        existing = self.db.find_category_rule(new_keyword, new_sub_category_id)
        if existing is not None and existing.id != rule_id:
            raise ConflictError(duplicate_rule(new_keyword, new_sub_category_id))

        logger.info("Updating category rule: %d", rule_id)
        self.db.update_category_rule(
            rule_id, keyword=keyword, priority=priority, sub_category_id=sub_category_id
        )

    def delete_rule(self, rule_id: int) -> None:
        """Delete a category rule.

        Raises:
            NotFoundError: If rule doesn't exist
        """
        if self.db.get_category_rule(rule_id) is None:
            raise NotFoundError(rule_not_found(rule_id))
        logger.info("Deleting category rule: %d", rule_id)
        self.db.delete_category_rule(rule_id)
