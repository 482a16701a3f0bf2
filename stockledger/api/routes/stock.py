"""Stock ledger endpoints."""

from datetime import datetime

from fastapi import APIRouter, Depends, Query, status

from stockledger.api.dependencies import (
    get_apply_movement_use_case,
    get_list_movements_use_case,
    get_list_statuses_use_case,
    get_read_status_use_case,
    get_rebuild_status_use_case,
)
from stockledger.application.dto.requests import (
    ApplyMovementRequest,
    RebuildStatusRequest,
    StockKeyRequest,
)
from stockledger.application.dto.responses import (
    ErrorResponse,
    MovementListResponse,
    StockStatusListResponse,
    StockStatusResponse,
)
from stockledger.application.use_cases import (
    ApplyMovementUseCase,
    ListMovementsUseCase,
    ListStockStatusesUseCase,
    ReadStockStatusUseCase,
    RebuildStockStatusUseCase,
)
from stockledger.core.entities.inventory import AggregationKey, HealthStatus, MovementKind
from stockledger.core.interfaces.inventory_store import MovementFilter

router = APIRouter(prefix="/api/stock", tags=["stock"])


@router.post(
    "/movements",
    response_model=StockStatusResponse,
    status_code=status.HTTP_201_CREATED,
    responses={422: {"model": ErrorResponse}, 503: {"model": ErrorResponse}},
)
async def apply_movement(
    request: ApplyMovementRequest,
    use_case: ApplyMovementUseCase = Depends(get_apply_movement_use_case),
) -> StockStatusResponse:
    """Record an entry or output and return the updated stock status line."""
    record = await use_case.execute(request)
    return use_case.to_response(record)


@router.get(
    "/status",
    response_model=StockStatusResponse,
    responses={404: {"model": ErrorResponse}},
)
async def read_status(
    key: StockKeyRequest = Depends(),
    use_case: ReadStockStatusUseCase = Depends(get_read_status_use_case),
) -> StockStatusResponse:
    """Get the status line for one aggregation key."""
    record = await use_case.execute(key)
    return use_case.to_response(record)


@router.get("/statuses", response_model=StockStatusListResponse)
async def list_statuses(
    tenant_id: str,
    status_filter: HealthStatus | None = Query(default=None, alias="status"),
    material_name: str | None = None,
    limit: int = Query(default=100, ge=1, le=1000),
    offset: int = Query(default=0, ge=0),
    use_case: ListStockStatusesUseCase = Depends(get_list_statuses_use_case),
) -> StockStatusListResponse:
    """List status lines sorted by material name; ``status=red`` gives low stock."""
    records = await use_case.execute(
        tenant_id,
        status=status_filter,
        material_name=material_name,
        limit=limit,
        offset=offset,
    )
    return use_case.to_response(records, limit=limit, offset=offset)


@router.get("/movements", response_model=MovementListResponse)
async def list_movements(
    tenant_id: str,
    material_name: str | None = None,
    kind: MovementKind | None = None,
    warehouse: str | None = None,
    sku: str | None = None,
    variant: str | None = None,
    bin_code: str | None = None,
    exact_key: bool = Query(
        default=False,
        description="Match the full key (absent dimensions included) instead of material only",
    ),
    date_from: datetime | None = None,
    date_to: datetime | None = None,
    supplier: str | None = None,
    employee: str | None = None,
    department: str | None = None,
    limit: int = Query(default=100, ge=1, le=1000),
    offset: int = Query(default=0, ge=0),
    use_case: ListMovementsUseCase = Depends(get_list_movements_use_case),
) -> MovementListResponse:
    """Entry and output history, newest first."""
    key = None
    if exact_key and material_name is not None:
        key = AggregationKey(
            tenant_id=tenant_id,
            material_name=material_name,
            warehouse=warehouse,
            sku=sku,
            variant=variant,
            bin_code=bin_code,
        )

    filters = MovementFilter(
        tenant_id=tenant_id,
        material_name=material_name,
        key=key,
        kind=kind,
        date_from=date_from,
        date_to=date_to,
        supplier=supplier,
        employee=employee,
        department=department,
    )
    movements = await use_case.execute(filters, limit=limit, offset=offset)
    return use_case.to_response(movements, limit=limit, offset=offset)


@router.post(
    "/status/rebuild",
    response_model=StockStatusResponse,
    responses={404: {"model": ErrorResponse}, 503: {"model": ErrorResponse}},
)
async def rebuild_status(
    request: RebuildStatusRequest,
    use_case: RebuildStockStatusUseCase = Depends(get_rebuild_status_use_case),
) -> StockStatusResponse:
    """Recompute a status line from its movement log."""
    record = await use_case.execute(request.key)
    return use_case.to_response(record)
