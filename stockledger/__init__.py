"""Multi-tenant stock ledger and price rule engine."""

__version__ = "1.0.0"
