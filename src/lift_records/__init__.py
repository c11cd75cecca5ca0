"""lift-records: strength-training log with automatic personal record detection."""

__version__ = "0.1.0"
