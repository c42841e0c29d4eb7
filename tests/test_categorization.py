"""Tests for the categorization rule engine."""

from datetime import date, timedelta

import pytest

from ledgersync.domain.categorization import (
    LEARNED_RULE_PRIORITY,
    CategorizationService,
    regex_match,
    substring_match,
    token_match,
)
from ledgersync.domain.errors import ConflictError, NotFoundError, ValidationError

AS_OF = date(2024, 5, 1)


def _ingest(ingest_service, provider, make_txn, descriptions):
    """Ingest one transaction per description on consecutive days."""
    ingest_service.ingest(
        provider.id,
        [],
        [make_txn(AS_OF + timedelta(days=i), desc, -(i + 1) * 100) for i, desc in enumerate(descriptions)],
        as_of=AS_OF,
    )


def _by_description(db, description):
    return [t for t in db.list_transactions() if t.description == description]


class TestMatchers:
    """Tests for keyword matchers."""

    def test_substring_match_is_case_sensitive(self):
        assert substring_match("STARBUCKS", "STARBUCKS #4521")
        assert not substring_match("starbucks", "STARBUCKS #4521")

    def test_token_match_requires_whole_tokens(self):
        assert token_match("NETFLIX SUB", "NETFLIX SUB 2024")
        assert not token_match("NET", "NETFLIX SUB")
        assert not token_match("", "anything")

    def test_regex_match(self):
        assert regex_match(r"^AMZN\s+MKTP", "AMZN  MKTP US")
        assert not regex_match(r"^AMZN", "PAYPAL *AMZN")

    def test_invalid_regex_never_matches(self):
        assert regex_match("([", "([") is False


def test_rule_applied_to_matching_transaction(
    temp_db, ingest_service, categorization_service, bank_accounts, make_txn, sample_categories
):
    _ingest(ingest_service, bank_accounts, make_txn, ["STARBUCKS #4521"])
    categorization_service.create_rule("STARBUCKS", sample_categories["Food > Cafe"], priority=10)

    result = categorization_service.apply_all_rules()

    assert result == {"applied": 1}
    assert temp_db.list_transactions()[0].sub_category_id == sample_categories["Food > Cafe"]


def test_higher_priority_rule_wins(
    temp_db, ingest_service, categorization_service, bank_accounts, make_txn, sample_categories
):
    """With rules at priority 5 and 1 matching, the priority-5 category is applied."""
    _ingest(ingest_service, bank_accounts, make_txn, ["AMAZON PRIME VIDEO"])
    categorization_service.create_rule("AMAZON", sample_categories["Food > Groceries"], priority=1)
    categorization_service.create_rule("PRIME VIDEO", sample_categories["Entertainment > Subscriptions"], priority=5)

    assert categorization_service.apply_all_rules() == {"applied": 1}
    assert temp_db.list_transactions()[0].sub_category_id == sample_categories["Entertainment > Subscriptions"]


def test_bulk_apply_never_reclassifies(
    temp_db, ingest_service, categorization_service, bank_accounts, make_txn, sample_categories
):
    _ingest(ingest_service, bank_accounts, make_txn, ["STARBUCKS #1"])
    txn = temp_db.list_transactions()[0]
    categorization_service.categorize(txn.id, sample_categories["Food > Groceries"])
    categorization_service.create_rule("STARBUCKS", sample_categories["Food > Cafe"], priority=10)

    assert categorization_service.apply_all_rules() == {"applied": 0}
    assert temp_db.get_transaction(txn.id).sub_category_id == sample_categories["Food > Groceries"]


def test_bulk_apply_is_idempotent(
    ingest_service, categorization_service, bank_accounts, make_txn, sample_categories
):
    _ingest(ingest_service, bank_accounts, make_txn, ["STARBUCKS #1", "STARBUCKS #2", "OTHER"])
    categorization_service.create_rule("STARBUCKS", sample_categories["Food > Cafe"])

    assert categorization_service.apply_all_rules() == {"applied": 2}
    assert categorization_service.apply_all_rules() == {"applied": 0}


def test_apply_restricted_to_transaction_ids(
    temp_db, ingest_service, categorization_service, bank_accounts, make_txn, sample_categories
):
    _ingest(ingest_service, bank_accounts, make_txn, ["STARBUCKS #1", "STARBUCKS #2"])
    categorization_service.create_rule("STARBUCKS", sample_categories["Food > Cafe"])
    target = _by_description(temp_db, "STARBUCKS #2")[0]

    assert categorization_service.apply_all_rules(transaction_ids=[target.id]) == {"applied": 1}
    assert categorization_service.apply_all_rules(transaction_ids=[]) == {"applied": 0}
    assert _by_description(temp_db, "STARBUCKS #1")[0].sub_category_id is None


def test_apply_with_regex_matcher(temp_db, ingest_service, bank_accounts, make_txn, sample_categories):
    _ingest(ingest_service, bank_accounts, make_txn, ["UBER EATS 123", "UBER TRIP 456"])
    service = CategorizationService(temp_db, matcher=regex_match)
    service.create_rule(r"^UBER EATS", sample_categories["Food > Cafe"])

    assert service.apply_all_rules() == {"applied": 1}
    assert _by_description(temp_db, "UBER TRIP 456")[0].sub_category_id is None


def test_learning_propagates_to_identical_descriptions(
    temp_db, ingest_service, categorization_service, bank_accounts, make_txn, sample_categories
):
    """One correction categorizes every uncategorized exact match, and nothing else."""
    _ingest(
        ingest_service,
        bank_accounts,
        make_txn,
        ["NETFLIX.COM", "NETFLIX.COM", "NETFLIX.COM", "NETFLIX.COM", "NETFLIX SUB"],
    )
    subscriptions = sample_categories["Entertainment > Subscriptions"]
    first = _by_description(temp_db, "NETFLIX.COM")[0]

    updated = categorization_service.categorize(first.id, subscriptions, learn_rule=True)

    assert updated.sub_category_id == subscriptions
    assert all(t.sub_category_id == subscriptions for t in _by_description(temp_db, "NETFLIX.COM"))
    assert len(_by_description(temp_db, "NETFLIX.COM")) == 4
    assert _by_description(temp_db, "NETFLIX SUB")[0].sub_category_id is None

    rules = categorization_service.list_rules()
    assert [(r.keyword, r.sub_category_id, r.priority) for r in rules] == [
        ("NETFLIX.COM", subscriptions, LEARNED_RULE_PRIORITY)
    ]


def test_learning_does_not_override_existing_categories(
    temp_db, ingest_service, categorization_service, bank_accounts, make_txn, sample_categories
):
    _ingest(ingest_service, bank_accounts, make_txn, ["Coffee Shop", "Coffee Shop"])
    first, second = _by_description(temp_db, "Coffee Shop")
    categorization_service.categorize(second.id, sample_categories["Food > Groceries"])

    categorization_service.categorize(first.id, sample_categories["Food > Cafe"], learn_rule=True)

    assert temp_db.get_transaction(second.id).sub_category_id == sample_categories["Food > Groceries"]


def test_learning_twice_keeps_one_rule(
    temp_db, ingest_service, categorization_service, bank_accounts, make_txn, sample_categories
):
    _ingest(ingest_service, bank_accounts, make_txn, ["Coffee Shop"])
    txn = temp_db.list_transactions()[0]

    categorization_service.categorize(txn.id, sample_categories["Food > Cafe"], learn_rule=True)
    categorization_service.categorize(txn.id, sample_categories["Food > Cafe"], learn_rule=True)

    assert len(categorization_service.list_rules()) == 1


def test_learned_rule_applies_to_future_ingests(
    temp_db, ingest_service, categorization_service, bank_accounts, make_txn, sample_categories
):
    _ingest(ingest_service, bank_accounts, make_txn, ["Coffee Shop"])
    categorization_service.categorize(
        temp_db.list_transactions()[0].id, sample_categories["Food > Cafe"], learn_rule=True
    )

    result = ingest_service.ingest(
        bank_accounts.id, [], [make_txn(date(2024, 6, 1), "Coffee Shop", -380)], as_of=AS_OF
    )

    assert result["categorized"] == 1


def test_categorize_clear_and_errors(
    temp_db, ingest_service, categorization_service, bank_accounts, make_txn, sample_categories
):
    _ingest(ingest_service, bank_accounts, make_txn, ["Coffee Shop"])
    txn = temp_db.list_transactions()[0]
    categorization_service.categorize(txn.id, sample_categories["Food > Cafe"])

    cleared = categorization_service.categorize(txn.id, None, learn_rule=True)

    assert cleared.sub_category_id is None
    assert categorization_service.list_rules() == []
    with pytest.raises(NotFoundError):
        categorization_service.categorize("0" * 64, sample_categories["Food > Cafe"])
    with pytest.raises(NotFoundError):
        categorization_service.categorize(txn.id, 99999)


class TestRuleManagement:
    """Tests for rule CRUD."""

    def test_create_and_list_by_priority(self, categorization_service, sample_categories):
        low = categorization_service.create_rule("A", sample_categories["Food > Cafe"], priority=1)
        high = categorization_service.create_rule("B", sample_categories["Food > Cafe"], priority=9)
        tie = categorization_service.create_rule("C", sample_categories["Food > Cafe"], priority=1)

        assert [r.id for r in categorization_service.list_rules()] == [high, low, tie]

    def test_create_rule_validation(self, categorization_service, sample_categories):
        with pytest.raises(ValidationError):
            categorization_service.create_rule("", sample_categories["Food > Cafe"])
        with pytest.raises(NotFoundError):
            categorization_service.create_rule("X", 99999)

        categorization_service.create_rule("X", sample_categories["Food > Cafe"])
        with pytest.raises(ConflictError):
            categorization_service.create_rule("X", sample_categories["Food > Cafe"])

    def test_same_keyword_may_target_several_categories(self, categorization_service, sample_categories):
        categorization_service.create_rule("X", sample_categories["Food > Cafe"])
        categorization_service.create_rule("X", sample_categories["Food > Groceries"])
        assert len(categorization_service.list_rules()) == 2

    def test_update_rule(self, categorization_service, sample_categories):
        rule_id = categorization_service.create_rule("X", sample_categories["Food > Cafe"])
        other_id = categorization_service.create_rule("Y", sample_categories["Food > Cafe"])

        categorization_service.update_rule(rule_id, priority=7, sub_category_id=sample_categories["Food > Groceries"])

        rule = categorization_service.get_rule(rule_id)
        assert rule.priority == 7
        assert rule.sub_category_id == sample_categories["Food > Groceries"]
        with pytest.raises(ConflictError):
            categorization_service.update_rule(other_id, keyword="X", sub_category_id=sample_categories["Food > Groceries"])

    def test_delete_rule(self, categorization_service, sample_categories):
        rule_id = categorization_service.create_rule("X", sample_categories["Food > Cafe"])

        categorization_service.delete_rule(rule_id)

        assert categorization_service.get_rule(rule_id) is None
        with pytest.raises(NotFoundError):
            categorization_service.delete_rule(rule_id)
