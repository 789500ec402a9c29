"""Data records shared by the batch-processing stages."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime


class DataFileError(ValueError):
    """Raised when an input data file cannot be read or holds bad records."""


@dataclass
class Account:
    """A bank account and its running totals for the day."""

    id: str
    balance: float
    daily_debits: float = 0.0
    daily_credits: float = 0.0
    last_transaction_time: datetime | None = None
    overdraft_count: int = 0


@dataclass
class Transaction:
    """A single bank transaction: a credit, debit or transfer."""

    id: str
    account_id: str
    timestamp: datetime
    amount: float
    type: str
    status: str
    destination_account_id: str = ""
    description: str = ""
    validation_message: str = ""
    processing_message: str = ""


@dataclass
class Anomaly:
    """A suspicious pattern found among processed transactions."""

    transaction_id: str
    account_id: str
    timestamp: datetime
    type: str
    description: str
    severity: str


@dataclass
class AccountSummary:
    """The daily summary of one account."""

    account_id: str
    date: str
    opening_balance: float
    closing_balance: float
    total_debits: float = 0.0
    total_credits: float = 0.0
    transaction_count: int = 0
    overdraft_count: int = 0