"""Daily batch processing of bank transactions: validation, posting, anomaly detection and reports."""

__version__ = "0.1.0"