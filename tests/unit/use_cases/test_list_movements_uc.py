"""Tests for ListMovementsUseCase."""

from decimal import Decimal
from unittest.mock import AsyncMock

from stockledger.application.use_cases.list_movements import ListMovementsUseCase
from stockledger.core.entities.inventory import MovementKind
from stockledger.core.interfaces.inventory_store import MovementFilter


class TestListMovementsUseCase:
    async def test_delegates_to_ledger(self, bolt_key):
        ledger = AsyncMock()
        ledger.list_movements.return_value = []
        use_case = ListMovementsUseCase(ledger=ledger)
        filters = MovementFilter(tenant_id="T1", key=bolt_key, kind=MovementKind.OUTPUT)

        await use_case.execute(filters, limit=20, offset=40)

        ledger.list_movements.assert_awaited_once_with(filters, limit=20, offset=40)

    def test_to_response(self, bolt_key, make_movement):
        movements = [
            make_movement(bolt_key, MovementKind.OUTPUT, "3", id=2, employee="Ayse"),
            make_movement(bolt_key, MovementKind.ENTRY, "10", id=1, supplier="Acme"),
        ]

        response = ListMovementsUseCase(ledger=AsyncMock()).to_response(movements, 100, 0)

        assert response.count == 2
        assert response.items[0].kind == MovementKind.OUTPUT
        assert response.items[0].employee == "Ayse"
        assert response.items[1].quantity == Decimal("10")
        assert response.items[1].key.tenant_id == "T1"
