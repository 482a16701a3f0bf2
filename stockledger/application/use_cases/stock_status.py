"""Stock status read use cases."""

from stockledger.application.dto.mappers import status_to_response
from stockledger.application.dto.requests import StockKeyRequest
from stockledger.application.dto.responses import StockStatusListResponse, StockStatusResponse
from stockledger.core.entities.inventory import HealthStatus, StockStatusRecord
from stockledger.core.exceptions import StockStatusNotFoundError
from stockledger.core.services import StockLedgerService


class _LedgerUseCase:
    def __init__(self, ledger: StockLedgerService | None = None):
        self._ledger = ledger

    async def _get_ledger(self) -> StockLedgerService:
        if self._ledger is None:
            from stockledger.application.services import get_stock_ledger_service

            self._ledger = await get_stock_ledger_service()
        return self._ledger


class ReadStockStatusUseCase(_LedgerUseCase):
    """Read the status line of one aggregation key."""

    async def execute(self, request: StockKeyRequest) -> StockStatusRecord:
        """Raises StockStatusNotFoundError when no movement was ever admitted."""
        key = request.to_key()
        ledger = await self._get_ledger()
        record = await ledger.read(key)
        if record is None:
            raise StockStatusNotFoundError(key.canonical())
        return record

    def to_response(self, record: StockStatusRecord) -> StockStatusResponse:
        return status_to_response(record)


class ListStockStatusesUseCase(_LedgerUseCase):
    """List a tenant's status lines, optionally only one health level."""

    async def execute(
        self,
        tenant_id: str,
        status: HealthStatus | None = None,
        material_name: str | None = None,
        limit: int = 100,
        offset: int = 0,
    ) -> list[StockStatusRecord]:
        ledger = await self._get_ledger()
        return await ledger.list_statuses(
            tenant_id,
            status=status,
            material_name=material_name,
            limit=limit,
            offset=offset,
        )

    def to_response(
        self, records: list[StockStatusRecord], limit: int, offset: int
    ) -> StockStatusListResponse:
        return StockStatusListResponse(
            items=[status_to_response(r) for r in records],
            count=len(records),
            limit=limit,
            offset=offset,
        )


class RebuildStockStatusUseCase(_LedgerUseCase):
    """Recompute a status line from the movement log."""

    async def execute(self, request: StockKeyRequest) -> StockStatusRecord:
        ledger = await self._get_ledger()
        return await ledger.rebuild(request.to_key())

    def to_response(self, record: StockStatusRecord) -> StockStatusResponse:
        return status_to_response(record)
