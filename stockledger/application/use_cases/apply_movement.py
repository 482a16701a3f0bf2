"""Apply Movement Use Case: admit an entry or output into the ledger."""

from datetime import datetime

from stockledger.application.dto.mappers import status_to_response
from stockledger.application.dto.requests import ApplyMovementRequest
from stockledger.application.dto.responses import StockStatusResponse
from stockledger.config import get_logger
from stockledger.core.entities.inventory import Movement, StockStatusRecord
from stockledger.core.services import StockLedgerService

logger = get_logger(__name__)


class ApplyMovementUseCase:
    """Validate and record a stock movement, returning the updated status line."""

    def __init__(self, ledger: StockLedgerService | None = None):
        self._ledger = ledger

    async def _get_ledger(self) -> StockLedgerService:
        if self._ledger is None:
            from stockledger.application.services import get_stock_ledger_service

            self._ledger = await get_stock_ledger_service()
        return self._ledger

    async def execute(self, request: ApplyMovementRequest) -> StockStatusRecord:
        """Execute apply movement use case."""
        logger.info(
            "apply_movement_started",
            kind=request.kind.value,
            material_name=request.key.material_name,
            quantity=str(request.quantity),
        )

        movement = Movement(
            kind=request.kind,
            key=request.key.to_key(),
            quantity=request.quantity,
            unit=request.unit,
            unit_price=request.unit_price,
            critical_level_hint=request.critical_level_hint,
            occurred_at=request.occurred_at or datetime.utcnow(),
            reference=request.reference,
            note=request.note,
            supplier=request.supplier,
            category=request.category,
            employee=request.employee,
            department=request.department,
            issued_by=request.issued_by,
        )

        ledger = await self._get_ledger()
        return await ledger.apply(movement)

    def to_response(self, record: StockStatusRecord) -> StockStatusResponse:
        """Convert result to API response."""
        return status_to_response(record)
