"""Storage infrastructure implementations."""

from stockledger.infrastructure.storage.sqlite import (
    SQLitePriceRuleStore,
    SQLiteStockLedgerStore,
    close_pool,
    get_connection,
    get_pool,
    get_transaction,
)

__all__ = [
    # SQLite stores
    "SQLiteStockLedgerStore",
    "SQLitePriceRuleStore",
    # Connection pool
    "get_pool",
    "close_pool",
    "get_connection",
    "get_transaction",
]
