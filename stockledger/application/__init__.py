"""
Application layer - Use cases, DTOs, and service factories.

This layer orchestrates business logic by:
1. Defining request/response DTOs for API contracts
2. Implementing use cases that coordinate core services
3. Providing factory functions for dependency injection

Use cases are the only entry point for API handlers.
"""

from stockledger.application.dto.requests import (
    ApplyMovementRequest,
    CreatePriceRuleRequest,
    NormalizeLineRequest,
    QuoteLineRequest,
    RebuildStatusRequest,
    ResolvePriceRequest,
    StockKeyRequest,
)
from stockledger.application.dto.responses import (
    ErrorResponse,
    HealthResponse,
    PriceResolutionResponse,
    QuoteLineResponse,
    StockStatusResponse,
)
from stockledger.application.services import (
    get_price_rule_resolver,
    get_rule_store,
    get_stock_ledger_service,
    reset_services,
)
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

__all__ = [
    # Request DTOs
    "StockKeyRequest",
    "ApplyMovementRequest",
    "RebuildStatusRequest",
    "CreatePriceRuleRequest",
    "ResolvePriceRequest",
    "NormalizeLineRequest",
    "QuoteLineRequest",
    # Response DTOs
    "StockStatusResponse",
    "PriceResolutionResponse",
    "QuoteLineResponse",
    "HealthResponse",
    "ErrorResponse",
    # Use Cases
    "ApplyMovementUseCase",
    "ReadStockStatusUseCase",
    "ListStockStatusesUseCase",
    "RebuildStockStatusUseCase",
    "ListMovementsUseCase",
    "ResolvePriceUseCase",
    "NormalizeLineUseCase",
    "QuoteLineUseCase",
    "ManagePriceRulesUseCase",
    # Service factories
    "get_stock_ledger_service",
    "get_price_rule_resolver",
    "get_rule_store",
    "reset_services",
]
