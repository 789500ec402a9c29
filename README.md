# txnbatch

`txnbatch` runs the end-of-day batch for a set of bank accounts. It reads that
day's transactions from CSV, validates them, and posts them to the accounts. It
then flags suspicious activity and writes the updated balances and per-account
summaries.

## Installation

```
pip install .
```

For running the tests:

```
pip install ".[test]"
pytest
```

## Running the batch

```
txnbatch --date 2025-04-15 --input ./data --output ./output
```

| Option | Default | Meaning |
| --- | --- | --- |
| `--date` | yesterday | Processing date, `YYYY-MM-DD` |
| `--input` | `./data` | Directory holding the input CSV files |
| `--output` | `./output` | Directory for the result files (created if missing) |
| `--log` | standard error | Append log messages to this file |

The command exits with status 0 when the batch completes. It exits with
status 1 when the date is malformed, the log file cannot be opened, an input
file cannot be loaded, or the updated accounts or the account summary cannot
be written. Failing to write the invalid transactions, the fraud alerts or the
processed transactions only logs a warning, and the run goes on.

### Input files

Both files are CSV with a header row, and every row must have as many fields
as the header.

- `accounts_<date>.csv`, or `accounts.csv` if there is none for the date. The
  columns are `account_id`, `balance` and, optionally, `overdraft_count`. An
  overdraft count that is not a whole number is treated as 0.
- `transactions_<date>.csv`. The columns are `transaction_id`, `account_id`,
  `timestamp` (RFC 3339), `amount`, `type`, `status`, and then optionally
  `description` and `destination_account_id`.
  - `type` must be `credit`, `debit` or `transfer`.
  - `status` must be `pending`, `completed` or `rejected`.
  - A transfer must give a destination account.

### Validation

Only pending transactions go on to be posted. A transaction is set aside as
invalid when:

- it was already `rejected` or `completed` in the input;
- its amount is not positive;
- its account does not exist;
- it is a transfer whose destination is missing or does not exist, or is the
  same as its source account.

### Business rules

Transactions are posted in the order they appear in the file.

- A debit is rejected if it would take the day's withdrawals above $5000.00.
- A debit or transfer is rejected if it would take the balance below -$1000.00.
- A debit or transfer that leaves the balance below zero adds one to the
  account's overdraft count.

### Fraud alerts

Among completed transactions, these are flagged:

- `large_transaction` (severity `medium`): an amount of $10000.00 or more.
- `account_overdraft`: the account's balance after the batch is negative.
  The severity is `low`, `medium` below -$500.00, or `high` below -$800.00.
- `rapid_withdrawals` (severity `high`): three debits on one account within
  60 minutes. This is reported at most once per account.

### Output files

- `invalid_transactions_<date>.csv`: transactions that failed validation,
  with the reason for each. Written only if there are any.
- `processed_transactions_<date>.csv`: every valid transaction, marked
  completed or rejected, with a processing message where there is one.
- `fraud_alerts_<date>.csv`: the anomalies that were found. Written only if
  there are any.
- `accounts_<today>.csv`: the updated account balances, overdraft counts and
  last transaction times. It is named after the day the command runs, not
  the processing date.
- `account_summary_<date>.csv`: for each account, the opening and closing
  balances, the debit and credit totals, the number of transactions and the
  overdraft count. Opening balances are worked back from the closing balances.

Timestamps are written in RFC 3339 with whole seconds, and amounts with two
decimal places.

## Using it as a library

The steps of the batch are also available as functions:

```python
from txnbatch.processor import load_accounts, process_transactions
from txnbatch.ingestion import load_transactions, validate_transactions
from txnbatch.detector import detect_anomalies
from txnbatch.reports import generate_account_summary, write_account_summary

accounts = load_accounts("data/accounts.csv")
transactions = load_transactions("data/transactions_2025-04-15.csv")
valid, invalid = validate_transactions(transactions, accounts)
new_accounts, processed = process_transactions(valid, accounts)
alerts = detect_anomalies(processed, new_accounts)
summary = generate_account_summary(new_accounts, processed, "2025-04-15")
write_account_summary(summary, "output/account_summary_2025-04-15.csv")
```

The records are dataclasses in `txnbatch.models`: `Account`, `Transaction`,
`Anomaly` and `AccountSummary`. `process_transactions` leaves its inputs
untouched and returns updated copies. `txnbatch.reports` also provides
`write_accounts`, `write_processed_transactions`, `write_invalid_transactions`
and `write_anomalies`.

If an input file is missing, malformed or holds an invalid record, the loaders
raise `txnbatch.models.DataFileError`.