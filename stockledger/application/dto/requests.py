"""Request DTOs for API endpoints.

Pydantic v2 models for API request validation.
These are the ONLY contracts between API and use cases.
"""

from datetime import date, datetime
from decimal import Decimal

from pydantic import BaseModel, Field

from stockledger.core.entities.inventory import AggregationKey, MovementKind
from stockledger.core.entities.pricing import GeneralScope, RuleScope


class StockKeyRequest(BaseModel):
    """Aggregation key of a stock-status line.

    Omitted optional dimensions stay absent; they never match a named value.
    """

    tenant_id: str = Field(..., min_length=1, description="Tenant identifier")
    material_name: str = Field(..., min_length=1, description="Exact material name")
    warehouse: str | None = Field(default=None, description="Warehouse code")
    sku: str | None = Field(default=None, description="Stock keeping unit")
    variant: str | None = Field(default=None, description="Variant (size, color, ...)")
    bin_code: str | None = Field(default=None, description="Storage bin")

    def to_key(self) -> AggregationKey:
        return AggregationKey(**self.model_dump())


# --- Stock ledger ---


class ApplyMovementRequest(BaseModel):
    """Request to admit an entry or output movement.

    Quantity (including NaN and Infinity) and the sign of the unit price are
    checked by the ledger, so those come back as movement rejections. A
    negative critical level hint is a schema error.
    """

    kind: MovementKind = Field(..., description="entry or output")
    key: StockKeyRequest
    quantity: Decimal = Field(
        ...,
        allow_inf_nan=True,
        description="Quantity, must be a finite number greater than zero",
    )
    unit: str = Field(default="", description="Display unit", examples=["kg", "pcs"])
    unit_price: Decimal | None = Field(default=None, description="Purchase price (entries)")
    critical_level_hint: Decimal | None = Field(
        default=None,
        ge=0,
        description="New critical level; applied by entries when greater than zero",
    )
    occurred_at: datetime | None = Field(
        default=None,
        description="When the movement happened (defaults to now)",
    )
    reference: str | None = Field(default=None, description="Delivery note or document number")
    note: str | None = Field(default=None, description="Free-text note")
    supplier: str | None = Field(default=None, description="Supplier (entries)")
    category: str | None = Field(default=None, description="Material category (entries)")
    employee: str | None = Field(default=None, description="Receiving employee (outputs)")
    department: str | None = Field(default=None, description="Receiving department (outputs)")
    issued_by: str | None = Field(default=None, description="Warehouse staff issuing (outputs)")


class RebuildStatusRequest(BaseModel):
    """Request to recompute a status record from its movement log."""

    key: StockKeyRequest


# --- Pricing ---


class CreatePriceRuleRequest(BaseModel):
    """Request to create a price rule."""

    tenant_id: str = Field(..., min_length=1, description="Owning tenant")
    material_name: str = Field(..., min_length=1, description="Exact material name")
    sku: str | None = Field(default=None, description="Stock keeping unit")
    scope: RuleScope = Field(
        default_factory=GeneralScope,
        description="customer, group or general scope",
    )
    price: Decimal = Field(..., description="Unit price before discount")
    currency: str = Field(..., min_length=1, examples=["TRY", "USD", "EUR"])
    discount_percent: Decimal | None = Field(default=None, description="0 to 100")
    min_quantity: Decimal | None = Field(default=None, description="Quantity break")
    start_date: date | None = Field(default=None, description="First valid day (inclusive)")
    end_date: date | None = Field(default=None, description="Last valid day (inclusive)")


class ResolvePriceRequest(BaseModel):
    """Request to resolve the applicable price rule."""

    tenant_id: str = Field(..., min_length=1, description="Tenant whose rules apply")
    material_name: str = Field(..., min_length=1)
    customer_id: str | None = Field(default=None)
    customer_group: str | None = Field(default=None)
    quantity: Decimal | None = Field(default=None, description="Ordered quantity")
    currency: str | None = Field(default=None, description="Only rules in this currency")
    as_of: date | None = Field(default=None, description="Evaluation date (defaults to today)")


class NormalizeLineRequest(BaseModel):
    """Request to convert a line into the document currency."""

    line_currency: str = Field(..., min_length=1)
    line_unit_price: Decimal
    exchange_rate: Decimal | None = Field(
        default=None,
        description="Line currency to document currency; treated as 1 when missing",
    )
    document_currency: str = Field(..., min_length=1)
    quantity: Decimal


class QuoteLineRequest(BaseModel):
    """Request to price one document line.

    Resolves a rule, applies its discount and normalizes into the document
    currency. An explicit unit price skips rule resolution.
    """

    tenant_id: str = Field(..., min_length=1, description="Tenant whose rules apply")
    material_name: str = Field(..., min_length=1)
    quantity: Decimal
    customer_id: str | None = Field(default=None)
    customer_group: str | None = Field(default=None)
    unit_price: Decimal | None = Field(default=None, description="Explicit price, skips rules")
    line_currency: str | None = Field(
        default=None,
        description="Currency of the explicit price, or rule currency filter",
    )
    exchange_rate: Decimal | None = Field(default=None)
    document_currency: str | None = Field(
        default=None,
        description="Document currency (defaults to the configured currency)",
    )
    as_of: date | None = Field(default=None)
