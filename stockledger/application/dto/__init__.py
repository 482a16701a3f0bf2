"""Data Transfer Objects for API layer.

Request DTOs: Validate and parse incoming API requests.
Response DTOs: Structure and serialize API responses.

These are the ONLY contracts between API handlers and use cases.
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
    MovementListResponse,
    MovementResponse,
    NormalizedLineResponse,
    PriceResolutionResponse,
    PriceRuleListResponse,
    PriceRuleResponse,
    ProviderHealthResponse,
    QuoteLineResponse,
    StockKeyResponse,
    StockStatusListResponse,
    StockStatusResponse,
)

__all__ = [
    # Requests
    "StockKeyRequest",
    "ApplyMovementRequest",
    "RebuildStatusRequest",
    "CreatePriceRuleRequest",
    "ResolvePriceRequest",
    "NormalizeLineRequest",
    "QuoteLineRequest",
    # Responses
    "StockKeyResponse",
    "StockStatusResponse",
    "StockStatusListResponse",
    "MovementResponse",
    "MovementListResponse",
    "PriceRuleResponse",
    "PriceRuleListResponse",
    "PriceResolutionResponse",
    "NormalizedLineResponse",
    "QuoteLineResponse",
    "HealthResponse",
    "ProviderHealthResponse",
    "ErrorResponse",
]
