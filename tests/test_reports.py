import csv
from datetime import datetime, timedelta, timezone

import pytest

from txnbatch.ingestion import load_transactions
from txnbatch.models import Account, Anomaly, Transaction
from txnbatch.processor import load_accounts
from txnbatch.reports import (
    generate_account_summary,
    write_account_summary,
    write_accounts,
    write_anomalies,
    write_invalid_transactions,
    write_processed_transactions,
)

STAMP = datetime(2025, 4, 15, 9, 30, tzinfo=timezone.utc)


def _rows(path):
    with open(path, newline="", encoding="utf-8") as handle:
        return list(csv.reader(handle))


def _txn(txn_id, account_id, amount, txn_type, status="completed", dest=""):
    return Transaction(
        id=txn_id,
        account_id=account_id,
        timestamp=STAMP,
        amount=amount,
        type=txn_type,
        status=status,
        destination_account_id=dest,
    )


def test_write_accounts_round_trips_through_load_accounts(tmp_path):
    accounts = {
        "A": Account(id="A", balance=12.5, overdraft_count=3, last_transaction_time=STAMP),
        "B": Account(id="B", balance=-40.25),
    }
    path = tmp_path / "accounts.csv"
    write_accounts(accounts, path)
    loaded = load_accounts(path)
    assert list(loaded) == ["A", "B"]
    assert loaded["A"].balance == accounts["A"].balance
    assert loaded["A"].overdraft_count == accounts["A"].overdraft_count
    assert loaded["B"].balance == accounts["B"].balance
    rows = _rows(path)
    assert rows[0] == ["account_id", "balance", "overdraft_count", "last_transaction_time"]
    assert rows[1][3] == "2025-04-15T09:30:00Z"
    assert rows[2][3] == ""


def test_timestamps_keep_offset_and_drop_fractions(tmp_path):
    zone = timezone(timedelta(hours=-5))
    moment = datetime(2025, 4, 15, 9, 30, 0, 123456, tzinfo=zone)
    account = Account(id="A", balance=1.0, last_transaction_time=moment)
    path = tmp_path / "accounts.csv"
    write_accounts({"A": account}, path)
    assert _rows(path)[1][3] == "2025-04-15T09:30:00-05:00"


def test_write_processed_transactions_round_trips(tmp_path):
    transactions = [
        _txn("T1", "A", 25.5, "credit"),
        _txn("T2", "A", 10.0, "transfer", dest="B"),
    ]
    transactions[1].processing_message = "Source account in overdraft"
    path = tmp_path / "processed.csv"
    write_processed_transactions(transactions, path)
    loaded = load_transactions(path)
    assert [t.id for t in loaded] == ["T1", "T2"]
    assert [t.amount for t in loaded] == [t.amount for t in transactions]
    assert [t.timestamp for t in loaded] == [t.timestamp for t in transactions]
    assert loaded[1].destination_account_id == "B"
    assert _rows(path)[2][8] == "Source account in overdraft"


def test_write_invalid_transactions(tmp_path):
    txn = _txn("T9", "Z", 5.0, "debit", status="pending")
    txn.validation_message = "Account Z does not exist"
    path = tmp_path / "invalid.csv"
    write_invalid_transactions([txn], path)
    rows = _rows(path)
    assert rows[0] == [
        "transaction_id", "account_id", "timestamp", "amount",
        "type", "status", "validation_message",
    ]
    assert rows[1][0] == "T9"
    assert rows[1][6] == "Account Z does not exist"
    assert float(rows[1][3]) == txn.amount


def test_write_anomalies(tmp_path):
    anomaly = Anomaly(
        transaction_id="T1",
        account_id="A",
        timestamp=STAMP,
        type="large_transaction",
        description="Large transaction: $12000.00",
        severity="medium",
    )
    path = tmp_path / "alerts.csv"
    write_anomalies([anomaly], path)
    rows = _rows(path)
    assert rows[0] == ["transaction_id", "account_id", "timestamp", "type", "description", "severity"]
    assert rows[1] == [
        "T1", "A", "2025-04-15T09:30:00Z", "large_transaction",
        "Large transaction: $12000.00", "medium",
    ]


def test_generate_account_summary_balances_reconcile():
    accounts = {"A": Account(id="A", balance=150.0, overdraft_count=2), "B": Account(id="B", balance=50.0)}
    credit = _txn("T1", "A", 50.0, "credit")
    debit = _txn("T2", "A", 20.0, "debit")
    transfer = _txn("T3", "A", 30.0, "transfer", dest="B")
    pending = _txn("T4", "B", 99.0, "credit", status="rejected")
    summaries = generate_account_summary(accounts, [credit, debit, transfer, pending], "2025-04-15")

    assert [s.account_id for s in summaries] == ["A", "B"]
    by_id = {s.account_id: s for s in summaries}
    a, b = by_id["A"], by_id["B"]
    assert a.transaction_count == 3
    assert b.transaction_count == 1
    assert a.total_credits == credit.amount
    assert a.total_debits == debit.amount + transfer.amount
    assert b.total_credits == transfer.amount
    assert a.overdraft_count == accounts["A"].overdraft_count
    for summary in summaries:
        assert summary.date == "2025-04-15"
        assert summary.closing_balance == accounts[summary.account_id].balance
        assert summary.opening_balance + summary.total_credits - summary.total_debits == pytest.approx(
            summary.closing_balance
        )


def test_write_account_summary_round_trips(tmp_path):
    accounts = {"A": Account(id="A", balance=80.0, overdraft_count=1)}
    summaries = generate_account_summary(accounts, [_txn("T1", "A", 20.0, "debit")], "2025-04-15")
    path = tmp_path / "summary.csv"
    write_account_summary(summaries, path)
    rows = _rows(path)
    assert rows[0] == [
        "account_id", "date", "opening_balance", "closing_balance",
        "total_debits", "total_credits", "transaction_count", "overdraft_count",
    ]
    row = dict(zip(rows[0], rows[1]))
    summary = summaries[0]
    assert row["account_id"] == "A"
    assert float(row["opening_balance"]) == pytest.approx(summary.opening_balance)
    assert float(row["closing_balance"]) == pytest.approx(summary.closing_balance)
    assert float(row["total_debits"]) == pytest.approx(summary.total_debits)
    assert int(row["transaction_count"]) == summary.transaction_count
    assert int(row["overdraft_count"]) == summary.overdraft_count