"""Pricing endpoints: rule resolution, line normalization and rule management."""

from fastapi import APIRouter, Depends, status

from stockledger.api.dependencies import (
    get_normalize_line_use_case,
    get_price_rules_use_case,
    get_quote_line_use_case,
    get_resolve_price_use_case,
)
from stockledger.application.dto.requests import (
    CreatePriceRuleRequest,
    NormalizeLineRequest,
    QuoteLineRequest,
    ResolvePriceRequest,
)
from stockledger.application.dto.responses import (
    ErrorResponse,
    NormalizedLineResponse,
    PriceResolutionResponse,
    PriceRuleListResponse,
    PriceRuleResponse,
    QuoteLineResponse,
)
from stockledger.application.use_cases import (
    ManagePriceRulesUseCase,
    NormalizeLineUseCase,
    QuoteLineUseCase,
    ResolvePriceUseCase,
)

router = APIRouter(prefix="/api/prices", tags=["prices"])


@router.post("/resolve", response_model=PriceResolutionResponse)
async def resolve_price(
    request: ResolvePriceRequest,
    use_case: ResolvePriceUseCase = Depends(get_resolve_price_use_case),
) -> PriceResolutionResponse:
    """Resolve the applicable price rule. ``rule`` is null when none applies."""
    resolution = await use_case.execute(request)
    return use_case.to_response(request, resolution)


@router.post(
    "/normalize",
    response_model=NormalizedLineResponse,
    responses={422: {"model": ErrorResponse}},
)
async def normalize(
    request: NormalizeLineRequest,
    use_case: NormalizeLineUseCase = Depends(get_normalize_line_use_case),
) -> NormalizedLineResponse:
    """Convert a line's unit price and total into the document currency."""
    line = await use_case.execute(request)
    return use_case.to_response(line)


@router.post(
    "/quote-line",
    response_model=QuoteLineResponse,
    responses={422: {"model": ErrorResponse}},
)
async def quote_line(
    request: QuoteLineRequest,
    use_case: QuoteLineUseCase = Depends(get_quote_line_use_case),
) -> QuoteLineResponse:
    """Price one document line from rules (or an explicit price) in document currency."""
    result = await use_case.execute(request)
    return use_case.to_response(result)


@router.post(
    "/rules",
    response_model=PriceRuleResponse,
    status_code=status.HTTP_201_CREATED,
    responses={422: {"model": ErrorResponse}},
)
async def create_rule(
    request: CreatePriceRuleRequest,
    use_case: ManagePriceRulesUseCase = Depends(get_price_rules_use_case),
) -> PriceRuleResponse:
    """Create a price rule."""
    rule = await use_case.create_rule(request)
    return use_case.to_response(rule)


@router.get("/rules", response_model=PriceRuleListResponse)
async def list_rules(
    tenant_id: str,
    material_name: str | None = None,
    use_case: ManagePriceRulesUseCase = Depends(get_price_rules_use_case),
) -> PriceRuleListResponse:
    """List a tenant's price rules in creation order."""
    rules = await use_case.list_rules(tenant_id=tenant_id, material_name=material_name)
    return use_case.to_list_response(rules)


@router.get(
    "/rules/{rule_id}",
    response_model=PriceRuleResponse,
    responses={404: {"model": ErrorResponse}},
)
async def get_rule(
    rule_id: str,
    use_case: ManagePriceRulesUseCase = Depends(get_price_rules_use_case),
) -> PriceRuleResponse:
    """Get a price rule by ID."""
    rule = await use_case.get_rule(rule_id)
    return use_case.to_response(rule)


@router.delete(
    "/rules/{rule_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={404: {"model": ErrorResponse}},
)
async def delete_rule(
    rule_id: str,
    use_case: ManagePriceRulesUseCase = Depends(get_price_rules_use_case),
) -> None:
    """Delete a price rule."""
    await use_case.delete_rule(rule_id)
