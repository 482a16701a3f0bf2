"""Entity to response DTO conversion shared by use cases."""

from stockledger.application.dto.responses import (
    MovementResponse,
    NormalizedLineResponse,
    PriceRuleResponse,
    StockKeyResponse,
    StockStatusResponse,
)
from stockledger.core.entities.inventory import AggregationKey, Movement, StockStatusRecord
from stockledger.core.entities.pricing import PriceRule
from stockledger.core.services.line_normalizer import NormalizedLine


def key_to_response(key: AggregationKey) -> StockKeyResponse:
    return StockKeyResponse(**key.model_dump())


def status_to_response(record: StockStatusRecord) -> StockStatusResponse:
    return StockStatusResponse(
        id=record.id,
        key=key_to_response(record.key),
        total_entry=record.total_entry,
        total_output=record.total_output,
        current_stock=record.current_stock,
        critical_level=record.critical_level,
        status=record.status,
        unit=record.unit,
        version=record.version,
        created_at=record.created_at,
        updated_at=record.updated_at,
    )


def movement_to_response(movement: Movement) -> MovementResponse:
    return MovementResponse(
        **movement.model_dump(exclude={"key"}),
        key=key_to_response(movement.key),
    )


def rule_to_response(rule: PriceRule) -> PriceRuleResponse:
    return PriceRuleResponse(
        **rule.model_dump(),
        effective_unit_price=rule.effective_unit_price,
    )


def line_to_response(line: NormalizedLine, places: int) -> NormalizedLineResponse:
    """Exact values plus a half-up rounded copy for display."""
    display = line.rounded(places)
    return NormalizedLineResponse(
        currency=line.currency,
        unit_price=line.unit_price,
        total=line.total,
        display_unit_price=display.unit_price,
        display_total=display.total,
    )
