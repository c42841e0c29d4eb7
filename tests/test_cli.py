"""Tests for ingest, transfer, categorization and view commands."""

import json

import pytest

from ledgersync.cli.main import cli


@pytest.fixture
def batch_file(tmp_path):
    """JSON batch with two sub-accounts and a transfer between them."""
    path = tmp_path / "batch.json"
    path.write_text(
        json.dumps(
            {
                "balances": [
                    {"institution_label": "Bank A", "sub_account_name": "Checking", "balance": 100000},
                    {"institution_label": "Bank B", "sub_account_name": "Savings", "balance": 500000},
                ],
                "transactions": [
                    {
                        "date": "2024-05-01",
                        "description": "Transfer to Savings",
                        "amount": -5000,
                        "institution_label": "Bank A",
                        "sub_account_name": "Checking",
                    },
                    {
                        "date": "2024-05-01",
                        "description": "Transfer from Checking",
                        "amount": 5000,
                        "institution_label": "Bank B",
                        "sub_account_name": "Savings",
                    },
                    {
                        "date": "2024-05-02",
                        "description": "NETFLIX.COM",
                        "amount": -1490,
                        "institution_label": "Bank A",
                        "sub_account_name": "Checking",
                    },
                    {
                        "date": "2024-05-03",
                        "description": "Mystery",
                        "amount": -1,
                        "institution_label": "Bank Z",
                        "sub_account_name": "Unknown",
                    },
                ],
            }
        ),
        encoding="utf-8",
    )
    return path


def _run(cli_runner, db, *args):
    return cli_runner.invoke(cli, ["--db-path", db.database_path, *args])


def _ingest(cli_runner, db, path):
    return _run(cli_runner, db, "ingest", str(path), "--provider", "MoneyForward", "--as-of", "2024-05-01")


def test_help_lists_commands(cli_runner):
    result = cli_runner.invoke(cli, ["--help"])

    assert result.exit_code == 0
    for command in ("ingest", "sync", "detect-transfers", "categorize", "apply-rules", "view", "status"):
        assert command in result.output


def test_ingest_reports_counts(cli_runner, temp_db, batch_file):
    result = _ingest(cli_runner, temp_db, batch_file)

    assert result.exit_code == 0
    assert "3 transactions imported, 0 already present, 1 skipped" in result.output
    assert "2 balances updated" in result.output
    assert "Unknown" in result.output
    assert temp_db.get_provider_by_name("MoneyForward") is not None


def test_ingest_twice_imports_nothing_new(cli_runner, temp_db, batch_file):
    _ingest(cli_runner, temp_db, batch_file)
    result = _ingest(cli_runner, temp_db, batch_file)

    assert result.exit_code == 0
    assert "0 transactions imported, 3 already present" in result.output
    assert temp_db.count_transactions() == 3


def test_ingest_unsupported_file(cli_runner, temp_db, tmp_path):
    path = tmp_path / "export.xlsx"
    path.write_text("", encoding="utf-8")

    result = _run(cli_runner, temp_db, "ingest", str(path), "--provider", "MF")

    assert result.exit_code == 1
    assert "Unsupported" in result.output


def test_ingest_csv_with_balances(cli_runner, temp_db, tmp_path):
    transactions = tmp_path / "transactions.csv"
    transactions.write_text(
        "date,description,amount,institution,sub_account\n2024-05-01,Rent,-90000,Bank A,Checking\n",
        encoding="utf-8",
    )
    balances = tmp_path / "balances.csv"
    balances.write_text("institution,sub_account,balance\nBank A,Checking,10000\n", encoding="utf-8")

    result = _run(
        cli_runner, temp_db, "ingest", str(transactions), "--provider", "Bank", "--balances", str(balances)
    )

    assert result.exit_code == 0
    assert "1 transactions imported" in result.output


def test_status(cli_runner, temp_db, batch_file):
    result = _run(cli_runner, temp_db, "status")
    assert "Never synced." in result.output

    _ingest(cli_runner, temp_db, batch_file)
    result = _run(cli_runner, temp_db, "status")

    assert result.exit_code == 0
    assert "Last sync: 2024-05-01 08:00" in result.output
    assert "Transactions: 3" in result.output
    assert "Uncategorized: 3" in result.output


def test_sync_configured_provider(cli_runner, temp_db, batch_file):
    _run(cli_runner, temp_db, "provider", "create", "Feed", "--kind", "custom", "--source", str(batch_file))

    result = _run(cli_runner, temp_db, "sync", "--as-of", "2024-05-01")

    assert result.exit_code == 0
    assert "Feed:" in result.output
    assert "3 transactions imported" in result.output
    assert "Transfers detected: 1 pairs" in result.output


def test_sync_no_providers(cli_runner, temp_db):
    result = _run(cli_runner, temp_db, "sync")

    assert result.exit_code == 0
    assert "No active providers found." in result.output


def test_detect_transfers_and_view(cli_runner, temp_db, batch_file):
    _ingest(cli_runner, temp_db, batch_file)

    result = _run(cli_runner, temp_db, "detect-transfers")
    assert result.exit_code == 0
    assert "Detected 1 transfer pairs" in result.output

    result = _run(cli_runner, temp_db, "view", "--no-transfers")
    assert "Found 1 transaction(s)" in result.output
    assert "NETFLIX.COM" in result.output

    result = _run(cli_runner, temp_db, "view", "--verbose")
    assert "Transfer: tf_" in result.output


def test_transfer_mark_and_unlink(cli_runner, temp_db, batch_file):
    _ingest(cli_runner, temp_db, batch_file)
    out, back = sorted(
        (t for t in temp_db.list_transactions() if t.description.startswith("Transfer")), key=lambda t: t.amount
    )

    result = _run(cli_runner, temp_db, "transfer", "mark", out.id, back.id)
    assert result.exit_code == 0
    assert f"Linked transfer tf_{out.id[:8]}_{back.id[:8]}" in result.output

    result = _run(cli_runner, temp_db, "transfer", "mark", out.id, back.id)
    assert result.exit_code == 1
    assert "already part of a transfer" in result.output

    result = _run(cli_runner, temp_db, "transfer", "unlink", back.id)
    assert result.exit_code == 0


def test_categorize_with_learning(cli_runner, temp_db, batch_file):
    _run(cli_runner, temp_db, "category", "init")
    _ingest(cli_runner, temp_db, batch_file)
    netflix = temp_db.list_transactions(description="NETFLIX.COM")[0]

    result = _run(
        cli_runner, temp_db, "categorize", netflix.id, "Entertainment > Subscriptions", "--learn"
    )

    assert result.exit_code == 0
    assert "categorized as 'Entertainment > Subscriptions' (rule learned)" in result.output
    result = _run(cli_runner, temp_db, "rule", "list")
    assert "NETFLIX.COM" in result.output
    result = _run(cli_runner, temp_db, "view", "--uncategorized")
    assert "NETFLIX.COM" not in result.output


def test_categorize_errors(cli_runner, temp_db, batch_file):
    _run(cli_runner, temp_db, "category", "init")
    _ingest(cli_runner, temp_db, batch_file)
    txn_id = temp_db.list_transactions()[0].id

    result = _run(cli_runner, temp_db, "categorize", txn_id)
    assert result.exit_code == 1
    assert "either a category path or --clear" in result.output

    result = _run(cli_runner, temp_db, "categorize", txn_id, "Nope > Nothing")
    assert result.exit_code == 1
    assert "not found" in result.output

    result = _run(cli_runner, temp_db, "categorize", txn_id, "--clear")
    assert result.exit_code == 0
    assert "Cleared category" in result.output


def test_rules_and_apply(cli_runner, temp_db, batch_file):
    _run(cli_runner, temp_db, "category", "init")
    _ingest(cli_runner, temp_db, batch_file)

    result = _run(
        cli_runner, temp_db, "rule", "create", "NETFLIX", "Entertainment > Subscriptions", "--priority", "5"
    )
    assert result.exit_code == 0
    assert "Created rule 'NETFLIX'" in result.output

    result = _run(cli_runner, temp_db, "apply-rules")
    assert result.exit_code == 0
    assert "1 transactions categorized" in result.output

    result = _run(cli_runner, temp_db, "rule", "list")
    assert "Priority:   5" in result.output
    assert "Entertainment > Subscriptions" in result.output

    rule_id = temp_db.list_category_rules()[0].id
    result = _run(cli_runner, temp_db, "rule", "delete", str(rule_id))
    assert result.exit_code == 0
    result = _run(cli_runner, temp_db, "rule", "list")
    assert "No rules found." in result.output


def test_view_invalid_date(cli_runner, temp_db):
    result = _run(cli_runner, temp_db, "view", "--start-date", "not a date")

    assert result.exit_code == 1
    assert "Invalid start date" in result.output


def test_view_empty(cli_runner, temp_db):
    result = _run(cli_runner, temp_db, "view")

    assert result.exit_code == 0
    assert "No transactions found." in result.output
