"""
Domain exceptions for the stock ledger.

Provides specific exception types for different error scenarios.
"""

from decimal import Decimal
from enum import Enum
from typing import Any


class StockLedgerError(Exception):
    """Base exception for all stock ledger errors."""

    def __init__(
        self,
        message: str,
        code: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code or self.__class__.__name__
        self.details = details or {}

    def to_dict(self) -> dict:
        """Convert to dictionary for API responses."""
        return {
            "error": self.code,
            "message": self.message,
            "details": self.details,
        }


# Storage Exceptions
class StorageError(StockLedgerError):
    """Base exception for storage operations."""

    pass


class StockStatusNotFoundError(StorageError):
    """No stock status record exists for the aggregation key."""

    def __init__(self, key: str):
        super().__init__(
            f"Stock status not found: {key}",
            code="STOCK_STATUS_NOT_FOUND",
            details={"key": key},
        )


class PriceRuleNotFoundError(StorageError):
    """Price rule not found in storage."""

    def __init__(self, rule_id: str):
        super().__init__(
            f"Price rule not found: {rule_id}",
            code="PRICE_RULE_NOT_FOUND",
            details={"rule_id": rule_id},
        )


class ConcurrencyConflictError(StorageError):
    """An optimistic update lost the race against another writer."""

    def __init__(self, key: str, expected_version: int):
        super().__init__(
            f"Concurrent update detected for {key} (expected version {expected_version})",
            code="CONCURRENCY_CONFLICT",
            details={"key": key, "expected_version": expected_version},
        )


class StorageUnavailableError(StorageError):
    """The backing store could not complete the operation."""

    def __init__(self, operation: str, reason: str | None = None):
        super().__init__(
            f"Storage unavailable during {operation}" + (f" - {reason}" if reason else ""),
            code="STORAGE_UNAVAILABLE",
            details={"operation": operation, "reason": reason},
        )


class LedgerTimeoutError(StorageUnavailableError):
    """A ledger operation exceeded its time budget."""

    def __init__(self, timeout: float, operation: str = "apply"):
        super().__init__(operation, f"timed out after {timeout} seconds")
        self.code = "LEDGER_TIMEOUT"
        self.details["timeout"] = timeout


# Validation Exceptions
class ValidationError(StockLedgerError):
    """Input validation failed."""

    def __init__(self, field: str, message: str, value: Any = None):
        super().__init__(
            f"Validation error for '{field}': {message}",
            code="VALIDATION_ERROR",
            details={
                "field": field,
                "message": message,
                "value": str(value)[:100] if value is not None else None,
            },
        )


class RejectionReason(str, Enum):
    """Why a movement was refused admission to the ledger."""

    NON_POSITIVE_QUANTITY = "non_positive_quantity"
    NEGATIVE_UNIT_PRICE = "negative_unit_price"
    INSUFFICIENT_STOCK = "insufficient_stock"


class MovementRejectedError(ValidationError):
    """A movement failed validation and was not admitted."""

    reason: RejectionReason

    def __init__(self, reason: RejectionReason, field: str, message: str, value: Any = None):
        super().__init__(field=field, message=message, value=value)
        self.reason = reason
        self.code = reason.value.upper()
        self.details["reason"] = reason.value


class NonPositiveQuantityError(MovementRejectedError):
    """Quantity is zero, negative, or not a finite number."""

    def __init__(self, quantity: Decimal):
        super().__init__(
            RejectionReason.NON_POSITIVE_QUANTITY,
            field="quantity",
            message="Quantity must be a finite number greater than zero",
            value=quantity,
        )


class NegativeUnitPriceError(MovementRejectedError):
    """Entry carries a negative unit price."""

    def __init__(self, unit_price: Decimal):
        super().__init__(
            RejectionReason.NEGATIVE_UNIT_PRICE,
            field="unit_price",
            message="Unit price must not be negative",
            value=unit_price,
        )


class InsufficientStockError(MovementRejectedError):
    """Output would drive current stock below zero."""

    def __init__(self, available: Decimal, requested: Decimal):
        super().__init__(
            RejectionReason.INSUFFICIENT_STOCK,
            field="quantity",
            message=f"Insufficient stock: available {available}, requested {requested}",
            value=requested,
        )
        self.available = available
        self.requested = requested
        self.details.update(
            {
                "available": str(available),
                "requested": str(requested),
            }
        )
