"""List Movements Use Case: entry and output history with filters."""

from stockledger.application.dto.mappers import movement_to_response
from stockledger.application.dto.responses import MovementListResponse
from stockledger.core.entities.inventory import Movement
from stockledger.core.interfaces.inventory_store import MovementFilter
from stockledger.core.services import StockLedgerService


class ListMovementsUseCase:
    """Query the movement log, newest first."""

    def __init__(self, ledger: StockLedgerService | None = None):
        self._ledger = ledger

    async def _get_ledger(self) -> StockLedgerService:
        if self._ledger is None:
            from stockledger.application.services import get_stock_ledger_service

            self._ledger = await get_stock_ledger_service()
        return self._ledger

    async def execute(
        self,
        filters: MovementFilter,
        limit: int = 100,
        offset: int = 0,
    ) -> list[Movement]:
        ledger = await self._get_ledger()
        return await ledger.list_movements(filters, limit=limit, offset=offset)

    def to_response(
        self, movements: list[Movement], limit: int, offset: int
    ) -> MovementListResponse:
        return MovementListResponse(
            items=[movement_to_response(m) for m in movements],
            count=len(movements),
            limit=limit,
            offset=offset,
        )
