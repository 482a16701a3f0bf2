"""
Currency and quantity normalization for document lines.

All arithmetic stays in Decimal with full precision; rounding happens only
when a line is rendered for display or export.
"""

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal, localcontext

from stockledger.core.exceptions import ValidationError

# Significant digits for intermediate line arithmetic
LINE_PRECISION = 34


def _same_currency(a: str, b: str) -> bool:
    return a.strip().upper() == b.strip().upper()


def _quantize(value: Decimal, places: int) -> Decimal:
    return value.quantize(Decimal(1).scaleb(-places), rounding=ROUND_HALF_UP)


@dataclass(frozen=True)
class NormalizedLine:
    """Unit price and total in the document currency, unrounded."""

    unit_price: Decimal
    total: Decimal
    currency: str

    def rounded(self, places: int = 2) -> "NormalizedLine":
        """Copy rounded half-up for display."""
        return NormalizedLine(
            unit_price=_quantize(self.unit_price, places),
            total=_quantize(self.total, places),
            currency=self.currency,
        )


def normalize_unit_price(
    line_currency: str,
    line_unit_price: Decimal,
    exchange_rate: Decimal | None,
    document_currency: str,
) -> Decimal:
    """
    Convert a line unit price into the document currency.

    Same-currency lines pass through untouched even if a rate is supplied.
    A missing rate for a foreign line is treated as 1.
    """
    if _same_currency(line_currency, document_currency):
        return line_unit_price

    rate = exchange_rate if exchange_rate is not None else Decimal("1")
    if rate < 0:
        raise ValidationError("exchange_rate", "Exchange rate must not be negative", rate)

    with localcontext() as ctx:
        ctx.prec = LINE_PRECISION
        return line_unit_price * rate


def normalize_line(
    line_currency: str,
    line_unit_price: Decimal,
    exchange_rate: Decimal | None,
    document_currency: str,
    quantity: Decimal,
) -> NormalizedLine:
    """Normalize a line's unit price and compute its total."""
    if quantity < 0:
        raise ValidationError("quantity", "Quantity must not be negative", quantity)

    unit_price = normalize_unit_price(
        line_currency, line_unit_price, exchange_rate, document_currency
    )
    with localcontext() as ctx:
        ctx.prec = LINE_PRECISION
        total = quantity * unit_price

    return NormalizedLine(
        unit_price=unit_price,
        total=total,
        currency=document_currency.strip().upper(),
    )
