"""Database migrations module."""

from stockledger.infrastructure.storage.sqlite.migrations.migrator import (
    LedgerCheck,
    Migration,
    MigrationResult,
    discover_migrations,
    get_migration_status,
    initialize_database,
    run_migrations,
    verify_ledger,
)

__all__ = [
    "LedgerCheck",
    "Migration",
    "MigrationResult",
    "discover_migrations",
    "get_migration_status",
    "initialize_database",
    "run_migrations",
    "verify_ledger",
]
