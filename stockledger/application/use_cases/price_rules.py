"""Price rule management use cases."""

from pydantic import ValidationError as PydanticValidationError

from stockledger.application.dto.mappers import rule_to_response
from stockledger.application.dto.requests import CreatePriceRuleRequest
from stockledger.application.dto.responses import PriceRuleListResponse, PriceRuleResponse
from stockledger.config import get_logger
from stockledger.core.entities.pricing import PriceRule
from stockledger.core.exceptions import PriceRuleNotFoundError, ValidationError
from stockledger.core.interfaces.price_rule_store import IPriceRuleStore

logger = get_logger(__name__)


class ManagePriceRulesUseCase:
    """Create, list, read and delete price rules."""

    def __init__(self, rule_store: IPriceRuleStore | None = None):
        self._rule_store = rule_store

    async def _get_rule_store(self) -> IPriceRuleStore:
        if self._rule_store is None:
            from stockledger.application.services import get_rule_store

            self._rule_store = await get_rule_store()
        return self._rule_store

    async def create_rule(self, request: CreatePriceRuleRequest) -> PriceRule:
        """
        Validate and store a new rule.

        Raises:
            ValidationError: Price, discount, quantity or date window invalid
        """
        try:
            rule = PriceRule(**request.model_dump())
        except PydanticValidationError as e:
            first = e.errors()[0]
            field = ".".join(str(part) for part in first["loc"]) or "rule"
            raise ValidationError(field, first["msg"], first.get("input")) from e

        store = await self._get_rule_store()
        return await store.add_rule(rule)

    async def get_rule(self, rule_id: str) -> PriceRule:
        store = await self._get_rule_store()
        rule = await store.get_rule(rule_id)
        if rule is None:
            raise PriceRuleNotFoundError(rule_id)
        return rule

    async def list_rules(
        self,
        tenant_id: str,
        material_name: str | None = None,
    ) -> list[PriceRule]:
        store = await self._get_rule_store()
        return await store.list_rules(tenant_id=tenant_id, material_name=material_name)

    async def delete_rule(self, rule_id: str) -> None:
        store = await self._get_rule_store()
        if not await store.delete_rule(rule_id):
            raise PriceRuleNotFoundError(rule_id)

    def to_response(self, rule: PriceRule) -> PriceRuleResponse:
        return rule_to_response(rule)

    def to_list_response(self, rules: list[PriceRule]) -> PriceRuleListResponse:
        return PriceRuleListResponse(
            items=[rule_to_response(r) for r in rules],
            count=len(rules),
        )
