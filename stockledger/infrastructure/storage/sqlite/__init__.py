"""SQLite storage implementations."""

from stockledger.infrastructure.storage.sqlite.connection import (
    ConnectionPool,
    close_pool,
    get_connection,
    get_pool,
    get_transaction,
)
from stockledger.infrastructure.storage.sqlite.inventory_store import SQLiteStockLedgerStore
from stockledger.infrastructure.storage.sqlite.price_rule_store import SQLitePriceRuleStore

# Type aliases for convenience
StockLedgerStore = SQLiteStockLedgerStore
PriceRuleStore = SQLitePriceRuleStore

# Aliases for connection management
get_connection_pool = get_pool
close_connection_pool = close_pool

# Singleton instances
_stock_ledger_store: SQLiteStockLedgerStore | None = None
_price_rule_store: SQLitePriceRuleStore | None = None


async def get_stock_ledger_store() -> SQLiteStockLedgerStore:
    """Get singleton stock ledger store instance."""
    global _stock_ledger_store
    if _stock_ledger_store is None:
        _stock_ledger_store = SQLiteStockLedgerStore()
    return _stock_ledger_store


async def get_price_rule_store() -> SQLitePriceRuleStore:
    """Get singleton price rule store instance."""
    global _price_rule_store
    if _price_rule_store is None:
        _price_rule_store = SQLitePriceRuleStore()
    return _price_rule_store


__all__ = [
    # Connection
    "ConnectionPool",
    "get_pool",
    "close_pool",
    "get_connection",
    "get_transaction",
    "get_connection_pool",
    "close_connection_pool",
    # Store classes
    "SQLiteStockLedgerStore",
    "SQLitePriceRuleStore",
    "StockLedgerStore",
    "PriceRuleStore",
    # Factory functions
    "get_stock_ledger_store",
    "get_price_rule_store",
]
