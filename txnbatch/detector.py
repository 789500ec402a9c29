"""Detection of suspicious patterns among processed transactions."""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Iterable, Mapping, Sequence

from txnbatch.models import Account, Anomaly, Transaction

LARGE_TRANSACTION_THRESHOLD = 10000.0
RAPID_WITHDRAWAL_THRESHOLD = 3
RAPID_WITHDRAWAL_TIME_WINDOW_MINS = 60
OVERDRAFT_LIMIT = -1000.0
MAX_DAILY_WITHDRAWAL_LIMIT = 5000.0


def _overdraft_severity(balance: float) -> str:
    if balance < OVERDRAFT_LIMIT * 0.8:
        return "high"
    if balance < OVERDRAFT_LIMIT / 2:
        return "medium"
    return "low"


def _rapid_withdrawal(
    account_id: str, withdrawals: Sequence[Transaction]
) -> Anomaly | None:
    """Report the first run of withdrawals that falls inside the time window."""
    size = RAPID_WITHDRAWAL_THRESHOLD
    pairs = zip(withdrawals, withdrawals[size - 1:])
    for start, (first, last) in enumerate(pairs):
        minutes = (last.timestamp - first.timestamp).total_seconds() / 60
        if minutes <= RAPID_WITHDRAWAL_TIME_WINDOW_MINS:
            total = sum(t.amount for t in withdrawals[start:start + size])
            return Anomaly(
                transaction_id=last.id,
                account_id=account_id,
                timestamp=last.timestamp,
                type="rapid_withdrawals",
                description=(
                    f"{size} withdrawals totaling ${total:.2f} in {int(minutes)} minutes"
                ),
                severity="high",
            )
    return None


def detect_anomalies(
    transactions: Iterable[Transaction], accounts: Mapping[str, Account]
) -> list[Anomaly]:
    """Find large transactions, overdrafts and rapid withdrawals.

    Only completed transactions are considered. Withdrawals are taken to be
    in chronological order.
    """
    anomalies: list[Anomaly] = []
    withdrawals: defaultdict[str, list[Transaction]] = defaultdict(list)

    for txn in transactions:
        if txn.status != "completed":
            continue

        if txn.amount >= LARGE_TRANSACTION_THRESHOLD:
            anomalies.append(
                Anomaly(
                    transaction_id=txn.id,
                    account_id=txn.account_id,
                    timestamp=txn.timestamp,
                    type="large_transaction",
                    description=f"Large transaction: ${txn.amount:.2f}",
                    severity="medium",
                )
            )

        if txn.type == "debit":
            withdrawals[txn.account_id].append(txn)

        account = accounts.get(txn.account_id)
        balance = account.balance if account is not None else 0.0
        if balance < 0:
            anomalies.append(
                Anomaly(
                    transaction_id=txn.id,
                    account_id=txn.account_id,
                    timestamp=txn.timestamp,
                    type="account_overdraft",
                    description=f"Account in overdraft: ${balance:.2f}",
                    severity=_overdraft_severity(balance),
                )
            )

    for account_id, series in withdrawals.items():
        anomaly = _rapid_withdrawal(account_id, series)
        if anomaly is not None:
            anomalies.append(anomaly)

    return anomalies