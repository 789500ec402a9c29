"""Writing batch results to CSV files and building account summaries."""

from __future__ import annotations

import csv
from collections.abc import Iterable, Iterator, Mapping, Sequence
from contextlib import contextmanager
from datetime import datetime
from os import PathLike

from txnbatch.models import Account, AccountSummary, Anomaly, Transaction

ACCOUNT_HEADER = ("account_id", "balance", "overdraft_count", "last_transaction_time")
PROCESSED_HEADER = (
    "transaction_id",
    "account_id",
    "timestamp",
    "amount",
    "type",
    "status",
    "description",
    "destination_account_id",
    "processing_message",
)
INVALID_HEADER = (
    "transaction_id",
    "account_id",
    "timestamp",
    "amount",
    "type",
    "status",
    "validation_message",
)
ANOMALY_HEADER = (
    "transaction_id",
    "account_id",
    "timestamp",
    "type",
    "description",
    "severity",
)
SUMMARY_HEADER = (
    "account_id",
    "date",
    "opening_balance",
    "closing_balance",
    "total_debits",
    "total_credits",
    "transaction_count",
    "overdraft_count",
)


def _format_timestamp(moment: datetime) -> str:
    """Format a time as RFC 3339 with whole seconds."""
    text = moment.strftime("%Y-%m-%dT%H:%M:%S")
    offset = moment.utcoffset()
    seconds = int(offset.total_seconds()) if offset is not None else 0
    if seconds == 0:
        return text + "Z"
    sign = "-" if seconds < 0 else "+"
    hours, rest = divmod(abs(seconds), 3600)
    return f"{text}{sign}{hours:02d}:{rest // 60:02d}"


def _money(value: float) -> str:
    return f"{value:.2f}"


@contextmanager
def _csv_writer(path: str | PathLike[str], header: Sequence[str]) -> Iterator:
    with open(path, "w", newline="", encoding="utf-8") as handle:
        writer = csv.writer(handle, lineterminator="\n")
        writer.writerow(header)
        yield writer


def write_accounts(accounts: Mapping[str, Account], path: str | PathLike[str]) -> None:
    """Write account balances to a CSV file."""
    with _csv_writer(path, ACCOUNT_HEADER) as writer:
        writer.writerows(
            (
                account.id,
                _money(account.balance),
                str(account.overdraft_count),
                _format_timestamp(account.last_transaction_time)
                if account.last_transaction_time is not None
                else "",
            )
            for account in accounts.values()
        )


def write_processed_transactions(
    transactions: Iterable[Transaction], path: str | PathLike[str]
) -> None:
    """Write processed transactions, with their outcome, to a CSV file."""
    with _csv_writer(path, PROCESSED_HEADER) as writer:
        writer.writerows(
            (
                txn.id,
                txn.account_id,
                _format_timestamp(txn.timestamp),
                _money(txn.amount),
                txn.type,
                txn.status,
                txn.description,
                txn.destination_account_id,
                txn.processing_message,
            )
            for txn in transactions
        )


def write_invalid_transactions(
    transactions: Iterable[Transaction], path: str | PathLike[str]
) -> None:
    """Write transactions that failed validation to a CSV file."""
    with _csv_writer(path, INVALID_HEADER) as writer:
        writer.writerows(
            (
                txn.id,
                txn.account_id,
                _format_timestamp(txn.timestamp),
                _money(txn.amount),
                txn.type,
                txn.status,
                txn.validation_message,
            )
            for txn in transactions
        )


def write_anomalies(anomalies: Iterable[Anomaly], path: str | PathLike[str]) -> None:
    """Write detected anomalies to a CSV file."""
    with _csv_writer(path, ANOMALY_HEADER) as writer:
        writer.writerows(
            (
                anomaly.transaction_id,
                anomaly.account_id,
                _format_timestamp(anomaly.timestamp),
                anomaly.type,
                anomaly.description,
                anomaly.severity,
            )
            for anomaly in anomalies
        )


def generate_account_summary(
    accounts: Mapping[str, Account],
    transactions: Iterable[Transaction],
    date_str: str,
) -> list[AccountSummary]:
    """Summarise each account's day from its closing balance and completed transactions.

    Opening balances are worked back from the closing balances.
    """
    summaries = {
        account_id: AccountSummary(
            account_id=account_id,
            date=date_str,
            opening_balance=account.balance,
            closing_balance=account.balance,
            overdraft_count=account.overdraft_count,
        )
        for account_id, account in accounts.items()
    }

    for txn in transactions:
        if txn.status != "completed":
            continue
        summary = summaries.get(txn.account_id)
        if summary is None:
            continue
        summary.transaction_count += 1

        if txn.type == "credit":
            summary.opening_balance -= txn.amount
            summary.total_credits += txn.amount
        elif txn.type in ("debit", "transfer"):
            summary.opening_balance += txn.amount
            summary.total_debits += txn.amount
            if txn.type == "transfer":
                destination = summaries.get(txn.destination_account_id)
                if destination is not None:
                    destination.transaction_count += 1
                    destination.opening_balance -= txn.amount
                    destination.total_credits += txn.amount

    return list(summaries.values())


def write_account_summary(
    summaries: Iterable[AccountSummary], path: str | PathLike[str]
) -> None:
    """Write account summaries to a CSV file."""
    with _csv_writer(path, SUMMARY_HEADER) as writer:
        writer.writerows(
            (
                summary.account_id,
                summary.date,
                _money(summary.opening_balance),
                _money(summary.closing_balance),
                _money(summary.total_debits),
                _money(summary.total_credits),
                str(summary.transaction_count),
                str(summary.overdraft_count),
            )
            for summary in summaries
        )