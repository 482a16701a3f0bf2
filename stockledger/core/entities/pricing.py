"""Price rule domain entities."""

from datetime import date, datetime
from decimal import Decimal
from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


class CustomerScope(BaseModel):
    """Rule applies to a single customer."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["customer"] = "customer"
    customer_id: str = Field(..., min_length=1)

    @property
    def priority(self) -> int:
        return 1

    def matches(self, customer_id: str | None, customer_group: str | None) -> bool:
        return customer_id is not None and customer_id == self.customer_id


class GroupScope(BaseModel):
    """Rule applies to every customer in a group."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["group"] = "group"
    group: str = Field(..., min_length=1)

    @property
    def priority(self) -> int:
        return 2

    def matches(self, customer_id: str | None, customer_group: str | None) -> bool:
        return customer_group is not None and customer_group == self.group


class GeneralScope(BaseModel):
    """Rule applies to anyone."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["general"] = "general"

    @property
    def priority(self) -> int:
        return 3

    def matches(self, customer_id: str | None, customer_group: str | None) -> bool:
        return True


RuleScope = Annotated[
    CustomerScope | GroupScope | GeneralScope,
    Field(discriminator="kind"),
]


class PriceRule(BaseModel):
    """A manager-authored static price for a material."""

    id: str | None = None
    tenant_id: str | None = None
    material_name: str
    sku: str | None = None
    scope: RuleScope = Field(default_factory=GeneralScope)
    price: Decimal = Field(..., gt=0)
    currency: str = Field(..., min_length=1)
    discount_percent: Decimal | None = Field(default=None, ge=0, le=100)
    min_quantity: Decimal | None = Field(default=None, gt=0)
    start_date: date | None = None
    end_date: date | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @field_validator("currency")
    @classmethod
    def normalize_currency(cls, v: str) -> str:
        return v.strip().upper()

    @model_validator(mode="after")
    def check_window(self) -> "PriceRule":
        if self.start_date and self.end_date and self.start_date > self.end_date:
            raise ValueError("start_date must not be after end_date")
        return self

    def in_window(self, as_of: date) -> bool:
        """Inclusive validity check; missing bounds are unbounded."""
        if self.start_date is not None and self.start_date > as_of:
            return False
        if self.end_date is not None and self.end_date < as_of:
            return False
        return True

    def meets_quantity_break(self, quantity: Decimal | None) -> bool:
        if self.min_quantity is None:
            return True
        return quantity is not None and quantity >= self.min_quantity

    @property
    def effective_unit_price(self) -> Decimal:
        """Price after discount, unrounded."""
        if self.discount_percent is None:
            return self.price
        return self.price * (1 - self.discount_percent / Decimal(100))
