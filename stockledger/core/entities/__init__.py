"""Core domain entities."""

from stockledger.core.entities.inventory import (
    ORANGE_FACTOR,
    AggregationKey,
    HealthStatus,
    Movement,
    MovementKind,
    StockStatusRecord,
    derive_status,
)
from stockledger.core.entities.pricing import (
    CustomerScope,
    GeneralScope,
    GroupScope,
    PriceRule,
    RuleScope,
)

__all__ = [
    # Inventory
    "AggregationKey",
    "HealthStatus",
    "Movement",
    "MovementKind",
    "ORANGE_FACTOR",
    "StockStatusRecord",
    "derive_status",
    # Pricing
    "CustomerScope",
    "GeneralScope",
    "GroupScope",
    "PriceRule",
    "RuleScope",
]
