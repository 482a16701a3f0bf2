"""Normalize Line Use Case: convert a line into the document currency."""

from stockledger.application.dto.mappers import line_to_response
from stockledger.application.dto.requests import NormalizeLineRequest
from stockledger.application.dto.responses import NormalizedLineResponse
from stockledger.config import get_settings
from stockledger.core.services import NormalizedLine, normalize_line


class NormalizeLineUseCase:
    """Normalize unit price and total; rounding is applied only to display fields."""

    def __init__(self, display_places: int | None = None):
        self._display_places = display_places

    @property
    def display_places(self) -> int:
        if self._display_places is None:
            return get_settings().pricing.display_places
        return self._display_places

    async def execute(self, request: NormalizeLineRequest) -> NormalizedLine:
        return normalize_line(
            request.line_currency,
            request.line_unit_price,
            request.exchange_rate,
            request.document_currency,
            request.quantity,
        )

    def to_response(self, line: NormalizedLine) -> NormalizedLineResponse:
        return line_to_response(line, self.display_places)
