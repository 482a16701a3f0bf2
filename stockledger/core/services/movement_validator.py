"""
Movement admission checks.

Pure functions: no I/O, no logging. The stock ledger runs them against the
record it is about to overwrite so the check and the write share one
compare-and-swap attempt.
"""

from dataclasses import dataclass
from decimal import Decimal

from stockledger.core.entities.inventory import Movement, MovementKind, StockStatusRecord
from stockledger.core.exceptions import (
    InsufficientStockError,
    MovementRejectedError,
    NegativeUnitPriceError,
    NonPositiveQuantityError,
    RejectionReason,
)


@dataclass(frozen=True)
class Rejection:
    """A refused movement and the numbers behind the refusal."""

    reason: RejectionReason
    value: Decimal | None = None
    available: Decimal | None = None
    requested: Decimal | None = None

    def to_error(self) -> MovementRejectedError:
        if self.reason == RejectionReason.INSUFFICIENT_STOCK:
            return InsufficientStockError(
                available=self.available if self.available is not None else Decimal("0"),
                requested=self.requested if self.requested is not None else Decimal("0"),
            )
        if self.reason == RejectionReason.NEGATIVE_UNIT_PRICE:
            return NegativeUnitPriceError(self.value if self.value is not None else Decimal("0"))
        return NonPositiveQuantityError(self.value if self.value is not None else Decimal("0"))


def validate_movement(
    movement: Movement,
    current: StockStatusRecord | None,
) -> Rejection | None:
    """
    Check a movement against the current record for its key.

    Args:
        movement: Movement to admit
        current: Record the movement would update, or None for an unseen key

    Returns:
        None when the movement may be admitted, otherwise the Rejection
    """
    quantity = movement.quantity
    if not quantity.is_finite() or quantity <= 0:
        return Rejection(RejectionReason.NON_POSITIVE_QUANTITY, value=quantity)

    if movement.kind == MovementKind.ENTRY:
        if movement.unit_price is not None and movement.unit_price < 0:
            return Rejection(RejectionReason.NEGATIVE_UNIT_PRICE, value=movement.unit_price)
        return None

    available = current.current_stock if current is not None else Decimal("0")
    if quantity > available:
        return Rejection(
            RejectionReason.INSUFFICIENT_STOCK,
            value=quantity,
            available=available,
            requested=quantity,
        )
    return None
