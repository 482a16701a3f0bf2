"""Resolve Price Use Case: pick the applicable rule from a tenant's rule list."""

from stockledger.application.dto.mappers import rule_to_response
from stockledger.application.dto.requests import ResolvePriceRequest
from stockledger.application.dto.responses import PriceResolutionResponse
from stockledger.config import get_logger
from stockledger.core.interfaces.price_rule_store import IPriceRuleStore
from stockledger.core.services import PriceResolution, PriceRuleResolver

logger = get_logger(__name__)


class ResolvePriceUseCase:
    """
    Fetch the tenant's rules for a material and resolve one.

    The resolver itself never touches storage; this use case is the
    caller that supplies the already-fetched rule list.
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

    async def execute(self, request: ResolvePriceRequest) -> PriceResolution | None:
        """Execute resolve price use case. Returns None when no rule applies."""
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
            currency=request.currency,
            as_of=request.as_of,
        )

        logger.info(
            "price_resolution_complete",
            material_name=request.material_name,
            candidates=len(rules),
            rule_id=resolution.rule.id if resolution else None,
        )
        return resolution

    def to_response(
        self, request: ResolvePriceRequest, resolution: PriceResolution | None
    ) -> PriceResolutionResponse:
        """Convert result to API response."""
        if resolution is None:
            return PriceResolutionResponse(material_name=request.material_name)
        return PriceResolutionResponse(
            material_name=request.material_name,
            rule=rule_to_response(resolution.rule),
            resolution_pass=resolution.resolution_pass.value,
            quantity_break_met=resolution.quantity_break_met,
        )
