"""Loading and validating transactions from CSV input."""

from __future__ import annotations

import csv
import re
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import replace
from datetime import datetime
from os import PathLike

from txnbatch.models import Account, DataFileError, Transaction

TRANSACTION_TYPES = ("credit", "debit", "transfer")
TRANSACTION_STATUSES = ("pending", "completed", "rejected")

_RFC3339 = re.compile(
    r"(\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2})(?:\.(\d+))?(Z|[+-]\d{2}:\d{2})"
)


def _parse_rfc3339(text: str) -> datetime:
    match = _RFC3339.fullmatch(text)
    if match is None:
        raise ValueError(f"cannot parse {text!r} as an RFC 3339 timestamp")
    base, fraction, zone = match.groups()
    micros = (fraction or "")[:6].ljust(6, "0")
    if zone == "Z":
        zone = "+00:00"
    return datetime.fromisoformat(f"{base}.{micros}{zone}")


def _parse_float(text: str) -> float:
    if not text or text != text.strip():
        raise ValueError(f"cannot parse {text!r} as a number")
    return float(text)


def _read_records(path: str | PathLike[str]) -> list[list[str]]:
    try:
        handle = open(path, newline="", encoding="utf-8")
    except OSError as exc:
        raise DataFileError(f"error opening transactions file: {exc}") from exc
    with handle:
        try:
            records = [row for row in csv.reader(handle) if row]
        except (csv.Error, UnicodeDecodeError) as exc:
            raise DataFileError(f"error reading CSV: {exc}") from exc
    if records:
        width = len(records[0])
        for line, row in enumerate(records, start=1):
            if len(row) != width:
                raise DataFileError(
                    f"error reading CSV: record on line {line}: wrong number of fields"
                )
    return records


def load_transactions(path: str | PathLike[str]) -> list[Transaction]:
    """Read transactions from a CSV file with a header row."""
    records = _read_records(path)
    if len(records) < 2:
        raise DataFileError("transaction file is empty or missing data rows")

    transactions = []
    for line, record in enumerate(records[1:], start=2):
        if len(record) < 6:
            raise DataFileError(
                f"invalid record format at line {line}: insufficient fields"
            )
        transactions.append(parse_transaction(record, line))
    return transactions


def parse_transaction(record: Sequence[str], line_num: int) -> Transaction:
    """Build a transaction from one CSV record.

    Fields: id, account, timestamp, amount, type, status, then optionally
    description and (required for transfers) destination account.
    """
    try:
        timestamp = _parse_rfc3339(record[2])
    except ValueError as exc:
        raise DataFileError(f"invalid timestamp at line {line_num}: {exc}") from exc

    try:
        amount = _parse_float(record[3])
    except ValueError as exc:
        raise DataFileError(f"invalid amount at line {line_num}: {exc}") from exc

    txn_type = record[4]
    if txn_type not in TRANSACTION_TYPES:
        raise DataFileError(
            f"invalid transaction type at line {line_num}: "
            "must be 'credit', 'debit', or 'transfer'"
        )

    status = record[5]
    if status not in TRANSACTION_STATUSES:
        raise DataFileError(
            f"invalid status at line {line_num}: "
            "must be 'pending', 'completed', or 'rejected'"
        )

    description = record[6] if len(record) > 6 else ""

    destination = ""
    if txn_type == "transfer":
        if len(record) < 8:
            raise DataFileError(
                f"transfer transaction at line {line_num} is missing destination account"
            )
        destination = record[7]

    return Transaction(
        id=record[0],
        account_id=record[1],
        timestamp=timestamp,
        amount=amount,
        type=txn_type,
        status=status,
        destination_account_id=destination,
        description=description,
    )


def _rejection_reason(txn: Transaction, accounts: Mapping[str, Account]) -> str:
    reason = ""
    if txn.amount <= 0:
        reason = "Transaction amount must be positive"
    if txn.account_id not in accounts:
        reason = f"Account {txn.account_id} does not exist"
    if txn.type == "transfer":
        destination = txn.destination_account_id
        if not destination:
            reason = "Transfer is missing destination account"
        elif destination not in accounts:
            reason = f"Destination account {destination} does not exist"
        elif destination == txn.account_id:
            reason = "Source and destination accounts cannot be the same"
    return reason


def validate_transactions(
    transactions: Iterable[Transaction], accounts: Mapping[str, Account]
) -> tuple[list[Transaction], list[Transaction]]:
    """Split transactions into valid and invalid ones.

    Invalid transactions come back as copies carrying a validation message.
    """
    valid: list[Transaction] = []
    invalid: list[Transaction] = []
    for txn in transactions:
        if txn.status == "rejected":
            invalid.append(
                replace(txn, validation_message="Already rejected in input file")
            )
            continue
        if txn.status != "pending":
            invalid.append(
                replace(
                    txn,
                    validation_message="Only pending transactions can be processed",
                )
            )
            continue

        reason = _rejection_reason(txn, accounts)
        if reason:
            invalid.append(replace(txn, validation_message=reason))
        else:
            valid.append(txn)
    return valid, invalid