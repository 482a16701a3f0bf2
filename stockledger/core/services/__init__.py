"""
Core business logic services.

Layer-pure services that depend only on:
- stockledger/core/entities/*
- stockledger/core/interfaces/*
- stockledger/core/exceptions.py

NO infrastructure imports. All dependencies injected via constructor.
"""

from stockledger.core.services.line_normalizer import (
    NormalizedLine,
    normalize_line,
    normalize_unit_price,
)
from stockledger.core.services.movement_validator import Rejection, validate_movement
from stockledger.core.services.price_resolver import (
    PriceResolution,
    PriceRuleResolver,
    ResolutionPass,
)
from stockledger.core.services.stock_ledger import StockLedgerService, fold_movement

__all__ = [
    # Movement validation
    "Rejection",
    "validate_movement",
    # Stock ledger
    "StockLedgerService",
    "fold_movement",
    # Price resolution
    "PriceRuleResolver",
    "PriceResolution",
    "ResolutionPass",
    # Line normalization
    "NormalizedLine",
    "normalize_line",
    "normalize_unit_price",
]
