"""Loading accounts and applying transactions to their balances."""

from __future__ import annotations

import csv
import re
from collections.abc import Iterable, Mapping
from dataclasses import replace
from os import PathLike

from txnbatch.models import Account, DataFileError, Transaction

OVERDRAFT_LIMIT = -1000.0
MAX_DAILY_WITHDRAWAL_LIMIT = 5000.0

_INTEGER = re.compile(r"[+-]?\d+")
_FLOAT = re.compile(
    r"[+-]?(?:(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?|inf|infinity|nan)",
    re.IGNORECASE,
)


def _read_records(path: str | PathLike[str]) -> list[list[str]]:
    try:
        handle = open(path, newline="", encoding="utf-8")
    except OSError as exc:
        raise DataFileError(f"error opening accounts file: {exc}") from exc
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


def _parse_float(text: str) -> float:
    if _FLOAT.fullmatch(text) is None:
        raise ValueError(f"cannot parse {text!r} as a number")
    return float(text)


def load_accounts(path: str | PathLike[str]) -> dict[str, Account]:
    """Read accounts from a CSV file with a header row.

    Columns: account id, balance and, optionally, overdraft count.
    """
    records = _read_records(path)
    if len(records) < 2:
        raise DataFileError("accounts file is empty or missing data rows")

    accounts: dict[str, Account] = {}
    for line, record in enumerate(records[1:], start=2):
        if len(record) < 2:
            raise DataFileError(
                f"invalid record format at line {line}: insufficient fields"
            )
        account_id = record[0]
        try:
            balance = _parse_float(record[1])
        except ValueError as exc:
            raise DataFileError(f"invalid balance at line {line}: {exc}") from exc

        account = Account(id=account_id, balance=balance)
        if len(record) > 2 and _INTEGER.fullmatch(record[2]):
            account.overdraft_count = int(record[2])
        accounts[account_id] = account
    return accounts


def _lookup(ledger: Mapping[str, Account], account_id: str) -> Account:
    account = ledger.get(account_id)
    return replace(account) if account is not None else Account(id="", balance=0.0)


def _apply_credit(txn: Transaction, ledger: dict[str, Account]) -> None:
    account = _lookup(ledger, txn.account_id)
    account.balance += txn.amount
    account.daily_credits += txn.amount
    ledger[txn.account_id] = account
    txn.status = "completed"


def _reject_overdraft(txn: Transaction) -> None:
    txn.status = "rejected"
    txn.processing_message = (
        f"Would exceed overdraft limit of ${-OVERDRAFT_LIMIT:.2f}"
    )


def _apply_debit(txn: Transaction, ledger: dict[str, Account]) -> None:
    account = _lookup(ledger, txn.account_id)
    if account.daily_debits + txn.amount > MAX_DAILY_WITHDRAWAL_LIMIT:
        txn.status = "rejected"
        txn.processing_message = (
            f"Exceeds daily withdrawal limit of ${MAX_DAILY_WITHDRAWAL_LIMIT:.2f}"
        )
        return

    new_balance = account.balance - txn.amount
    if new_balance < OVERDRAFT_LIMIT:
        _reject_overdraft(txn)
        return

    account.balance = new_balance
    account.daily_debits += txn.amount
    if new_balance < 0:
        account.overdraft_count += 1
        txn.processing_message = "Account in overdraft"
    ledger[txn.account_id] = account
    txn.status = "completed"


def _apply_transfer(txn: Transaction, ledger: dict[str, Account]) -> None:
    source = _lookup(ledger, txn.account_id)
    destination = _lookup(ledger, txn.destination_account_id)

    new_balance = source.balance - txn.amount
    if new_balance < OVERDRAFT_LIMIT:
        _reject_overdraft(txn)
        return

    source.balance = new_balance
    source.daily_debits += txn.amount
    destination.balance += txn.amount
    destination.daily_credits += txn.amount
    if new_balance < 0:
        source.overdraft_count += 1
        txn.processing_message = "Source account in overdraft"

    ledger[txn.account_id] = source
    ledger[txn.destination_account_id] = destination
    txn.status = "completed"


_HANDLERS = {
    "credit": _apply_credit,
    "debit": _apply_debit,
    "transfer": _apply_transfer,
}


def process_transactions(
    transactions: Iterable[Transaction], accounts: Mapping[str, Account]
) -> tuple[dict[str, Account], list[Transaction]]:
    """Apply transactions in order to copies of the accounts.

    Returns the updated accounts and copies of the transactions carrying
    their final status. The inputs are left untouched.
    """
    ledger = {account_id: replace(account) for account_id, account in accounts.items()}
    processed: list[Transaction] = []

    for original in transactions:
        txn = replace(original)
        handler = _HANDLERS.get(txn.type)
        if handler is not None:
            handler(txn, ledger)

        if txn.status == "completed":
            account = _lookup(ledger, txn.account_id)
            account.last_transaction_time = txn.timestamp
            ledger[txn.account_id] = account
        processed.append(txn)

    return ledger, processed