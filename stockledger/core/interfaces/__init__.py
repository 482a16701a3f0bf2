"""Core interfaces (ports) for dependency injection."""

from stockledger.core.interfaces.inventory_store import IStockLedgerStore, MovementFilter
from stockledger.core.interfaces.price_rule_store import IPriceRuleStore

__all__ = [
    "IStockLedgerStore",
    "MovementFilter",
    "IPriceRuleStore",
]
