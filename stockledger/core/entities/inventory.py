"""Inventory ledger domain entities."""

import json
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field, computed_field

# Stock at or below critical_level * ORANGE_FACTOR (and above critical_level) is ORANGE
ORANGE_FACTOR = Decimal("1.5")


class MovementKind(str, Enum):
    """Direction of a stock movement."""

    ENTRY = "entry"
    OUTPUT = "output"


class HealthStatus(str, Enum):
    """Three-level stock health."""

    GREEN = "green"
    ORANGE = "orange"
    RED = "red"


class AggregationKey(BaseModel):
    """
    Identity of one stock-status line.

    Optional dimensions are real ``None`` values: an absent warehouse is a
    different key from ``warehouse=""`` and from any named warehouse.
    """

    model_config = ConfigDict(frozen=True)

    tenant_id: str
    material_name: str
    warehouse: str | None = None
    sku: str | None = None
    variant: str | None = None
    bin_code: str | None = None

    def canonical(self) -> str:
        """Stable string form used as the unique storage key."""
        return json.dumps(
            [
                self.tenant_id,
                self.material_name,
                self.warehouse,
                self.sku,
                self.variant,
                self.bin_code,
            ],
            ensure_ascii=False,
            separators=(",", ":"),
        )

    @classmethod
    def from_canonical(cls, value: str) -> "AggregationKey":
        tenant_id, material_name, warehouse, sku, variant, bin_code = json.loads(value)
        return cls(
            tenant_id=tenant_id,
            material_name=material_name,
            warehouse=warehouse,
            sku=sku,
            variant=variant,
            bin_code=bin_code,
        )


class Movement(BaseModel):
    """An immutable inbound or outbound stock fact."""

    model_config = ConfigDict(frozen=True)

    id: int | None = None
    kind: MovementKind
    key: AggregationKey
    # Finiteness is checked by the movement validator, not at construction
    quantity: Annotated[Decimal, Field(allow_inf_nan=True)]
    unit: str = ""  # display only
    unit_price: Decimal | None = None  # entries only
    critical_level_hint: Decimal | None = Field(default=None, ge=0)
    occurred_at: datetime = Field(default_factory=datetime.utcnow)

    # Descriptive metadata, never used for aggregation
    reference: str | None = None
    note: str | None = None
    supplier: str | None = None  # entries
    category: str | None = None  # entries
    employee: str | None = None  # outputs
    department: str | None = None  # outputs
    issued_by: str | None = None  # outputs

    created_at: datetime | None = None


def derive_status(current_stock: Decimal, critical_level: Decimal) -> HealthStatus:
    """Health status as a pure function of stock and threshold."""
    if current_stock <= 0:
        return HealthStatus.RED
    if critical_level == 0:
        return HealthStatus.GREEN
    if current_stock <= critical_level:
        return HealthStatus.RED
    if current_stock <= critical_level * ORANGE_FACTOR:
        return HealthStatus.ORANGE
    return HealthStatus.GREEN


class StockStatusRecord(BaseModel):
    """Materialized running totals for one aggregation key."""

    id: int | None = None
    key: AggregationKey
    total_entry: Decimal = Decimal("0")
    total_output: Decimal = Decimal("0")
    critical_level: Decimal = Decimal("0")
    unit: str = ""
    version: int = 0  # bumped on every committed update
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def current_stock(self) -> Decimal:
        return self.total_entry - self.total_output

    @computed_field  # type: ignore[prop-decorator]
    @property
    def status(self) -> HealthStatus:
        return derive_status(self.current_stock, self.critical_level)
