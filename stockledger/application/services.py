"""
Service factory functions for dependency injection.

This module provides factory functions that wire infrastructure
implementations to core services. Use cases should import from here.

Clean Architecture: Application layer orchestrates DI, not core layer.
"""

from typing import TYPE_CHECKING

from stockledger.config import get_settings
from stockledger.core.services import PriceRuleResolver, StockLedgerService

if TYPE_CHECKING:
    from stockledger.core.interfaces import IPriceRuleStore, IStockLedgerStore


# Singleton service instances
_stock_ledger_service: StockLedgerService | None = None
_price_rule_resolver: PriceRuleResolver | None = None


async def get_stock_ledger_service(
    store: "IStockLedgerStore | None" = None,
) -> StockLedgerService:
    """
    Get or create StockLedgerService instance.

    Retry, timeout and critical-level defaults come from LedgerSettings.

    Args:
        store: Optional ledger store override

    Returns:
        Configured StockLedgerService
    """
    global _stock_ledger_service

    if _stock_ledger_service is not None and store is None:
        return _stock_ledger_service

    # Lazy import infrastructure to avoid circular imports
    from stockledger.infrastructure.storage.sqlite import get_stock_ledger_store

    ledger = get_settings().ledger
    service = StockLedgerService(
        store=store or await get_stock_ledger_store(),
        max_retries=ledger.max_retries,
        retry_delay=ledger.retry_delay,
        apply_timeout=ledger.apply_timeout,
        default_critical_ratio=ledger.default_critical_ratio,
    )

    if store is None:
        _stock_ledger_service = service

    return service


def get_price_rule_resolver() -> PriceRuleResolver:
    """Get the shared (stateless) price rule resolver."""
    global _price_rule_resolver

    if _price_rule_resolver is None:
        _price_rule_resolver = PriceRuleResolver()
    return _price_rule_resolver


async def get_rule_store() -> "IPriceRuleStore":
    """Get the price rule store used by pricing use cases."""
    from stockledger.infrastructure.storage.sqlite import get_price_rule_store

    return await get_price_rule_store()


def reset_services() -> None:
    """
    Reset all singleton service instances.

    Useful for testing or when configuration changes.
    """
    global _stock_ledger_service
    global _price_rule_resolver

    _stock_ledger_service = None
    _price_rule_resolver = None


__all__ = [
    # Factory functions
    "get_stock_ledger_service",
    "get_price_rule_resolver",
    "get_rule_store",
    # Reset
    "reset_services",
]
