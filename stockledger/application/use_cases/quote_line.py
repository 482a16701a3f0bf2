"""Quote Line Use Case: resolve a price, apply its discount and normalize."""

from dataclasses import dataclass
from decimal import Decimal

from stockledger.application.dto.mappers import line_to_response, rule_to_response
from stockledger.application.dto.requests import QuoteLineRequest
from stockledger.application.dto.responses import QuoteLineResponse
from stockledger.config import get_logger, get_settings
from stockledger.core.entities.pricing import PriceRule
from stockledger.core.exceptions import ValidationError
from stockledger.core.interfaces.price_rule_store import IPriceRuleStore
from stockledger.core.services import NormalizedLine, PriceRuleResolver, normalize_line

logger = get_logger(__name__)


@dataclass
class QuoteLineResult:
    """Result of pricing one document line."""

    material_name: str
    quantity: Decimal
    line_currency: str
    line_unit_price: Decimal
    line: NormalizedLine
    rule: PriceRule | None = None
    quantity_break_met: bool | None = None

    @property
    def price_source(self) -> str:
        return "rule" if self.rule is not None else "explicit"


class QuoteLineUseCase:
    """
    Price one line of an offer, proforma or invoice.

    With an explicit unit price the resolver is skipped and the price is
    taken to be in ``line_currency`` (or the document currency). Otherwise
    the resolved rule's discounted price and currency are used.
    """

    def __init__(
        self,
        rule_store: IPriceRuleStore | None = None,
        resolver: PriceRuleResolver | None = None,
    ):
        self._rule_store = rule_store
        self._resolver = resolver

    async def _get_rule_store(self) -> IPriceRuleStore:
        if self._rule_store is None:
            from stockledger.application.services import get_rule_store

            self._rule_store = await get_rule_store()
        return self._rule_store

    def _get_resolver(self) -> PriceRuleResolver:
        if self._resolver is None:
            from stockledger.application.services import get_price_rule_resolver

            self._resolver = get_price_rule_resolver()
        return self._resolver

    async def execute(self, request: QuoteLineRequest) -> QuoteLineResult:
        """
        Execute quote line use case.

        Raises:
            ValidationError: No rule applies and no unit price was given,
                or the quantity / exchange rate is negative
        """
        document_currency = request.document_currency or get_settings().pricing.default_currency

        rule = None
        quantity_break_met = None
        if request.unit_price is not None:
            line_currency = request.line_currency or document_currency
            line_unit_price = request.unit_price
        else:
            store = await self._get_rule_store()
            rules = await store.list_rules(
                tenant_id=request.tenant_id,
                material_name=request.material_name,
            )
            resolution = self._get_resolver().explain(
                request.material_name,
                rules,
                customer_id=request.customer_id,
                customer_group=request.customer_group,
                quantity=request.quantity,
                currency=request.line_currency,
                as_of=request.as_of,
            )
            if resolution is None:
                raise ValidationError(
                    "unit_price",
                    "No price rule applies and no unit price was given",
                    request.material_name,
                )
            rule = resolution.rule
            quantity_break_met = resolution.quantity_break_met
            line_currency = rule.currency
            line_unit_price = rule.effective_unit_price

        line = normalize_line(
            line_currency,
            line_unit_price,
            request.exchange_rate,
            document_currency,
            request.quantity,
        )

        logger.info(
            "quote_line_priced",
            material_name=request.material_name,
            rule_id=rule.id if rule else None,
            currency=line.currency,
            total=str(line.total),
        )
        return QuoteLineResult(
            material_name=request.material_name,
            quantity=request.quantity,
            line_currency=line_currency,
            line_unit_price=line_unit_price,
            line=line,
            rule=rule,
            quantity_break_met=quantity_break_met,
        )

    def to_response(self, result: QuoteLineResult) -> QuoteLineResponse:
        """Convert result to API response."""
        return QuoteLineResponse(
            material_name=result.material_name,
            quantity=result.quantity,
            price_source=result.price_source,
            rule=rule_to_response(result.rule) if result.rule else None,
            quantity_break_met=result.quantity_break_met,
            line_currency=result.line_currency,
            line_unit_price=result.line_unit_price,
            line=line_to_response(result.line, get_settings().pricing.display_places),
        )
