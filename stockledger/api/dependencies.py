"""
Dependency injection container for FastAPI.

Provides use case instances to route handlers. Tests swap them via
``app.dependency_overrides``.
"""

from functools import lru_cache

from stockledger.application.use_cases import (
    ApplyMovementUseCase,
    ListMovementsUseCase,
    ListStockStatusesUseCase,
    ManagePriceRulesUseCase,
    NormalizeLineUseCase,
    QuoteLineUseCase,
    ReadStockStatusUseCase,
    RebuildStockStatusUseCase,
    ResolvePriceUseCase,
)
from stockledger.config import Settings, get_settings


@lru_cache
def get_app_settings() -> Settings:
    """Get cached application settings."""
    return get_settings()


# Stock ledger use cases
def get_apply_movement_use_case() -> ApplyMovementUseCase:
    """Get apply movement use case."""
    return ApplyMovementUseCase()


def get_read_status_use_case() -> ReadStockStatusUseCase:
    """Get read stock status use case."""
    return ReadStockStatusUseCase()


def get_list_statuses_use_case() -> ListStockStatusesUseCase:
    """Get list stock statuses use case."""
    return ListStockStatusesUseCase()


def get_rebuild_status_use_case() -> RebuildStockStatusUseCase:
    """Get rebuild stock status use case."""
    return RebuildStockStatusUseCase()


def get_list_movements_use_case() -> ListMovementsUseCase:
    """Get list movements use case."""
    return ListMovementsUseCase()


# Pricing use cases
def get_resolve_price_use_case() -> ResolvePriceUseCase:
    """Get resolve price use case."""
    return ResolvePriceUseCase()


def get_normalize_line_use_case() -> NormalizeLineUseCase:
    """Get normalize line use case."""
    return NormalizeLineUseCase()


def get_quote_line_use_case() -> QuoteLineUseCase:
    """Get quote line use case."""
    return QuoteLineUseCase()


def get_price_rules_use_case() -> ManagePriceRulesUseCase:
    """Get price rule management use case."""
    return ManagePriceRulesUseCase()
