"""Response DTOs for API endpoints.

Pydantic v2 models for API response serialization.
These are the ONLY contracts between use cases and API layer.
Decimal fields serialize as strings so no precision is lost in JSON.
"""

from datetime import date, datetime
from decimal import Decimal
from typing import Any

from pydantic import BaseModel, Field

from stockledger.core.entities.inventory import HealthStatus, MovementKind
from stockledger.core.entities.pricing import RuleScope


class StockKeyResponse(BaseModel):
    """Aggregation key in responses."""

    tenant_id: str
    material_name: str
    warehouse: str | None = None
    sku: str | None = None
    variant: str | None = None
    bin_code: str | None = None


class StockStatusResponse(BaseModel):
    """Stock status line with derived stock and health."""

    id: int | None = None
    key: StockKeyResponse
    total_entry: Decimal
    total_output: Decimal
    current_stock: Decimal = Field(..., description="total_entry - total_output")
    critical_level: Decimal
    status: HealthStatus
    unit: str = ""
    version: int
    created_at: datetime
    updated_at: datetime


class StockStatusListResponse(BaseModel):
    """Page of stock status lines, sorted by material name."""

    items: list[StockStatusResponse]
    count: int
    limit: int
    offset: int


class MovementResponse(BaseModel):
    """Recorded stock movement."""

    id: int | None = None
    kind: MovementKind
    key: StockKeyResponse
    quantity: Decimal
    unit: str = ""
    unit_price: Decimal | None = None
    critical_level_hint: Decimal | None = None
    occurred_at: datetime
    reference: str | None = None
    note: str | None = None
    supplier: str | None = None
    category: str | None = None
    employee: str | None = None
    department: str | None = None
    issued_by: str | None = None
    created_at: datetime | None = None


class MovementListResponse(BaseModel):
    """Page of movements, newest first."""

    items: list[MovementResponse]
    count: int
    limit: int
    offset: int


class PriceRuleResponse(BaseModel):
    """Stored price rule."""

    id: str | None = None
    tenant_id: str | None = None
    material_name: str
    sku: str | None = None
    scope: RuleScope
    price: Decimal
    currency: str
    discount_percent: Decimal | None = None
    min_quantity: Decimal | None = None
    start_date: date | None = None
    end_date: date | None = None
    effective_unit_price: Decimal = Field(..., description="Price after discount, unrounded")
    created_at: datetime | None = None
    updated_at: datetime | None = None


class PriceRuleListResponse(BaseModel):
    """Price rules in creation order."""

    items: list[PriceRuleResponse]
    count: int


class PriceResolutionResponse(BaseModel):
    """Outcome of price rule resolution.

    ``rule`` is null when no rule applies. ``quantity_break_met`` is false
    when the rule was only reached by ignoring minimum quantities.
    """

    material_name: str
    rule: PriceRuleResponse | None = None
    resolution_pass: str | None = Field(default=None, examples=["quantity_break", "fallback"])
    quantity_break_met: bool | None = None


class NormalizedLineResponse(BaseModel):
    """Line in document currency, exact and rounded for display."""

    currency: str
    unit_price: Decimal
    total: Decimal
    display_unit_price: Decimal
    display_total: Decimal


class QuoteLineResponse(BaseModel):
    """Priced document line."""

    material_name: str
    quantity: Decimal
    price_source: str = Field(..., examples=["rule", "explicit"])
    rule: PriceRuleResponse | None = None
    quantity_break_met: bool | None = None
    line_currency: str
    line_unit_price: Decimal = Field(..., description="Unit price in line currency after discount")
    line: NormalizedLineResponse


class ProviderHealthResponse(BaseModel):
    """Health of a backing component."""

    name: str
    available: bool
    latency_ms: float | None = None
    error: str | None = None


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    version: str = "1.0.0"
    uptime_seconds: float
    database: ProviderHealthResponse | None = None


class ErrorResponse(BaseModel):
    """Standardized error response DTO.

    Every error response includes:
    - error_code: machine-readable code (e.g. INSUFFICIENT_STOCK)
    - message: human-readable description
    - hint: suggested recovery action
    - path: request path that triggered the error
    """

    error_code: str = Field(..., description="Machine-readable error code")
    message: str = Field(..., description="Human-readable error description")
    hint: str | None = Field(default=None, description="Suggested recovery action")
    detail: str | None = Field(default=None, description="Additional details")
    details: dict[str, Any] | None = Field(
        default=None,
        description="Structured details (e.g. available and requested quantities)",
    )
    path: str | None = Field(default=None, description="Request path")
    timestamp: datetime = Field(default_factory=datetime.now)
