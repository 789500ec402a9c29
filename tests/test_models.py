from dataclasses import replace
from datetime import datetime, timezone

from txnbatch.models import (
    Account,
    AccountSummary,
    Anomaly,
    DataFileError,
    Transaction,
)

STAMP = datetime(2025, 4, 15, 9, 30, tzinfo=timezone.utc)


def test_data_file_error_is_value_error_with_message():
    error = DataFileError("bad file")
    assert issubclass(DataFileError, ValueError)
    assert str(error) == "bad file"
    assert error.args == ("bad file",)


def test_account_defaults():
    account = Account("A1", 250.0)
    assert account.daily_debits == 0.0
    assert account.daily_credits == 0.0
    assert account.last_transaction_time is None
    assert account.overdraft_count == 0


def test_transaction_optional_fields_default_empty():
    txn = Transaction("T1", "A1", STAMP, 10.0, "credit", "pending")
    assert txn.destination_account_id == ""
    assert txn.description == ""
    assert txn.validation_message == ""
    assert txn.processing_message == ""


def test_transaction_replace_leaves_original_untouched():
    txn = Transaction("T1", "A1", STAMP, 10.0, "debit", "pending")
    updated = replace(txn, status="completed")
    assert txn.status == "pending"
    assert updated.status == "completed"
    assert updated.id == txn.id


def test_anomaly_equality():
    first = Anomaly("T1", "A1", STAMP, "large_transaction", "desc", "medium")
    second = Anomaly("T1", "A1", STAMP, "large_transaction", "desc", "medium")
    assert first == second
    assert first != replace(second, severity="high")


def test_account_summary_defaults_and_mutation():
    summary = AccountSummary("A1", "2025-04-15", 100.0, 100.0)
    assert summary.transaction_count == 0
    summary.transaction_count += 1
    summary.total_credits += 50.0
    assert summary.transaction_count == 1
    assert summary.total_credits == 50.0