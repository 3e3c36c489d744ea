"""Event Store Browser: a read-only JSON:API over an append-only event log."""

__version__ = "1.0.0"
