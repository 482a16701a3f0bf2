"""Tests for ApplyMovementUseCase."""

from datetime import datetime
from decimal import Decimal
from unittest.mock import AsyncMock

import pytest

from stockledger.application.dto.requests import ApplyMovementRequest
from stockledger.application.use_cases.apply_movement import ApplyMovementUseCase
from stockledger.core.entities.inventory import HealthStatus, MovementKind
from stockledger.core.exceptions import InsufficientStockError


@pytest.fixture
def mock_ledger():
    return AsyncMock()


@pytest.fixture
def use_case(mock_ledger):
    return ApplyMovementUseCase(ledger=mock_ledger)


def _request(**overrides) -> ApplyMovementRequest:
    data = {
        "kind": "entry",
        "key": {"tenant_id": "T1", "material_name": "Bolt", "warehouse": "A"},
        "quantity": "100",
        "unit": "pcs",
    }
    data.update(overrides)
    return ApplyMovementRequest(**data)


class TestApplyMovementUseCase:
    async def test_builds_movement_from_request(self, use_case, mock_ledger, bolt_key, make_record):
        """Test request fields end up on the movement passed to the ledger."""
        mock_ledger.apply.return_value = make_record(bolt_key, total_entry="100")

        await use_case.execute(
            _request(
                unit_price="2.5",
                critical_level_hint="10",
                supplier="Acme",
                reference="DN-7",
            )
        )

        movement = mock_ledger.apply.call_args[0][0]
        assert movement.kind == MovementKind.ENTRY
        assert movement.key.warehouse == "A"
        assert movement.key.sku is None
        assert movement.quantity == Decimal("100")
        assert movement.unit_price == Decimal("2.5")
        assert movement.critical_level_hint == Decimal("10")
        assert movement.supplier == "Acme"
        assert movement.reference == "DN-7"

    async def test_occurred_at_defaults_to_now(self, use_case, mock_ledger, bolt_key, make_record):
        mock_ledger.apply.return_value = make_record(bolt_key, total_entry="100")
        before = datetime.utcnow()

        await use_case.execute(_request())

        movement = mock_ledger.apply.call_args[0][0]
        assert movement.occurred_at >= before

    async def test_explicit_occurred_at_kept(self, use_case, mock_ledger, bolt_key, make_record):
        mock_ledger.apply.return_value = make_record(bolt_key, total_entry="100")

        await use_case.execute(_request(occurred_at="2026-03-01T08:30:00"))

        movement = mock_ledger.apply.call_args[0][0]
        assert movement.occurred_at == datetime(2026, 3, 1, 8, 30)

    async def test_rejection_propagates(self, use_case, mock_ledger):
        """Test ledger rejections reach the caller unchanged."""
        mock_ledger.apply.side_effect = InsufficientStockError(Decimal("5"), Decimal("10"))

        with pytest.raises(InsufficientStockError):
            await use_case.execute(_request(kind="output", quantity="10"))

    def test_to_response(self, use_case, bolt_key, make_record):
        record = make_record(bolt_key, total_entry="100", total_output="85", critical_level="20")

        response = use_case.to_response(record)

        assert response.current_stock == Decimal("15")
        assert response.status == HealthStatus.RED
        assert response.key.material_name == "Bolt"
