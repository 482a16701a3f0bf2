"""Tests for NormalizeLineUseCase."""

from decimal import Decimal

import pytest

from stockledger.application.dto.requests import NormalizeLineRequest
from stockledger.application.use_cases.normalize_line import NormalizeLineUseCase
from stockledger.core.exceptions import ValidationError


class TestNormalizeLineUseCase:
    async def test_converts_and_rounds_for_display(self):
        """Test exact values are kept next to rounded display values."""
        use_case = NormalizeLineUseCase(display_places=2)
        request = NormalizeLineRequest(
            line_currency="USD",
            line_unit_price="10.005",
            exchange_rate="35.0",
            document_currency="TRY",
            quantity="3",
        )

        line = await use_case.execute(request)
        response = use_case.to_response(line)

        assert response.currency == "TRY"
        assert response.unit_price == Decimal("350.175")
        assert response.total == Decimal("1050.525")
        assert str(response.display_unit_price) == "350.18"
        assert str(response.display_total) == "1050.53"

    async def test_display_places_from_settings(self, monkeypatch):
        from stockledger.config import reset_settings

        monkeypatch.setenv("PRICING_DISPLAY_PLACES", "3")
        reset_settings()
        use_case = NormalizeLineUseCase()

        line = await use_case.execute(
            NormalizeLineRequest(
                line_currency="TRY",
                line_unit_price="1.23456",
                document_currency="TRY",
                quantity="1",
            )
        )

        assert str(use_case.to_response(line).display_unit_price) == "1.235"

    async def test_negative_rate(self):
        use_case = NormalizeLineUseCase(display_places=2)
        request = NormalizeLineRequest(
            line_currency="USD",
            line_unit_price="10",
            exchange_rate="-2",
            document_currency="TRY",
            quantity="1",
        )
        with pytest.raises(ValidationError):
            await use_case.execute(request)
