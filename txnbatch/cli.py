"""Command-line entry point that runs one day's batch."""

from __future__ import annotations

import argparse
import logging
import re
import sys
from collections.abc import Sequence
from datetime import date, timedelta
from pathlib import Path

from txnbatch.detector import detect_anomalies
from txnbatch.ingestion import load_transactions, validate_transactions
from txnbatch.models import DataFileError
from txnbatch.processor import load_accounts, process_transactions
from txnbatch.reports import (
    generate_account_summary,
    write_account_summary,
    write_accounts,
    write_anomalies,
    write_invalid_transactions,
    write_processed_transactions,
)

logger = logging.getLogger("txnbatch")

_DATE = re.compile(r"\d{4}-\d{2}-\d{2}")
_LOG_FORMAT = "%(asctime)s %(message)s"
_LOG_DATE_FORMAT = "%Y/%m/%d %H:%M:%S"


class _BatchFailure(Exception):
    """A step failed in a way that ends the run."""


def _parse_args(argv: Sequence[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="txnbatch", description="Process one day of bank transactions."
    )
    parser.add_argument(
        "--date",
        default="",
        help="Processing date in YYYY-MM-DD format (defaults to yesterday)",
    )
    parser.add_argument(
        "--input",
        default="./data",
        help="Directory containing transaction data files",
    )
    parser.add_argument(
        "--output", default="./output", help="Directory for output files"
    )
    parser.add_argument(
        "--log", default="", help="Log file path (defaults to standard error)"
    )
    return parser.parse_args(argv)


def _processing_date(text: str) -> date:
    if not text:
        return date.today() - timedelta(days=1)
    if _DATE.fullmatch(text) is None:
        raise _BatchFailure(f"Invalid date format: cannot parse {text!r} as YYYY-MM-DD")
    try:
        return date.fromisoformat(text)
    except ValueError as exc:
        raise _BatchFailure(f"Invalid date format: {exc}") from exc


def _make_handler(log_path: str) -> logging.Handler:
    if log_path:
        handler: logging.Handler = logging.FileHandler(
            log_path, mode="a", encoding="utf-8"
        )
    else:
        handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(_LOG_FORMAT, _LOG_DATE_FORMAT))
    return handler


def _run(args: argparse.Namespace) -> None:
    date_str = _processing_date(args.date).isoformat()
    logger.info("Starting batch processing for date: %s", date_str)

    input_dir = Path(args.input)
    output_dir = Path(args.output)
    try:
        output_dir.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise _BatchFailure(f"Failed to create output directory: {exc}") from exc

    accounts_path = input_dir / f"accounts_{date_str}.csv"
    if not accounts_path.exists():
        accounts_path = input_dir / "accounts.csv"
    try:
        accounts = load_accounts(accounts_path)
    except DataFileError as exc:
        raise _BatchFailure(f"Failed to load accounts: {exc}") from exc
    logger.info("Loaded %d accounts", len(accounts))

    try:
        transactions = load_transactions(input_dir / f"transactions_{date_str}.csv")
    except DataFileError as exc:
        raise _BatchFailure(f"Failed to load transactions: {exc}") from exc
    logger.info("Loaded %d transactions", len(transactions))

    valid, invalid = validate_transactions(transactions, accounts)
    logger.info(
        "Validated transactions: %d valid, %d invalid", len(valid), len(invalid)
    )

    if invalid:
        try:
            write_invalid_transactions(
                invalid, output_dir / f"invalid_transactions_{date_str}.csv"
            )
        except OSError as exc:
            logger.warning("Warning: Failed to write invalid transactions: %s", exc)

    processed_accounts, processed = process_transactions(valid, accounts)
    logger.info("Processed %d transactions", len(processed))

    anomalies = detect_anomalies(processed, processed_accounts)
    logger.info("Detected %d anomalies", len(anomalies))

    if anomalies:
        try:
            write_anomalies(anomalies, output_dir / f"fraud_alerts_{date_str}.csv")
        except OSError as exc:
            logger.warning("Warning: Failed to write anomalies: %s", exc)

    summary = generate_account_summary(processed_accounts, processed, date_str)

    today = date.today().isoformat()
    try:
        write_accounts(processed_accounts, output_dir / f"accounts_{today}.csv")
    except OSError as exc:
        raise _BatchFailure(f"Failed to write updated accounts: {exc}") from exc

    try:
        write_processed_transactions(
            processed, output_dir / f"processed_transactions_{date_str}.csv"
        )
    except OSError as exc:
        logger.warning("Warning: Failed to write processed transactions: %s", exc)

    try:
        write_account_summary(summary, output_dir / f"account_summary_{date_str}.csv")
    except OSError as exc:
        raise _BatchFailure(f"Failed to write account summary: {exc}") from exc

    logger.info("Batch processing completed successfully for date: %s", date_str)


def main(argv: Sequence[str] | None = None) -> int:
    """Run the daily batch; return 0 on success and 1 on a fatal error."""
    args = _parse_args(argv)
    try:
        handler = _make_handler(args.log)
    except OSError as exc:
        print(f"Failed to open log file: {exc}", file=sys.stderr)
        return 1

    previous_level = logger.level
    logger.addHandler(handler)
    logger.setLevel(logging.INFO)
    try:
        _run(args)
        return 0
    except _BatchFailure as exc:
        logger.error("%s", exc)
        return 1
    finally:
        logger.removeHandler(handler)
        logger.setLevel(previous_level)
        handler.close()


if __name__ == "__main__":
    sys.exit(main())