"""Application use cases."""

from stockledger.application.use_cases.apply_movement import ApplyMovementUseCase
from stockledger.application.use_cases.list_movements import ListMovementsUseCase
from stockledger.application.use_cases.normalize_line import NormalizeLineUseCase
from stockledger.application.use_cases.price_rules import ManagePriceRulesUseCase
from stockledger.application.use_cases.quote_line import QuoteLineResult, QuoteLineUseCase
from stockledger.application.use_cases.resolve_price import ResolvePriceUseCase
from stockledger.application.use_cases.stock_status import (
    ListStockStatusesUseCase,
    ReadStockStatusUseCase,
    RebuildStockStatusUseCase,
)

__all__ = [
    # Stock ledger
    "ApplyMovementUseCase",
    "ReadStockStatusUseCase",
    "ListStockStatusesUseCase",
    "RebuildStockStatusUseCase",
    "ListMovementsUseCase",
    # Pricing
    "ResolvePriceUseCase",
    "NormalizeLineUseCase",
    "QuoteLineUseCase",
    "QuoteLineResult",
    "ManagePriceRulesUseCase",
]
