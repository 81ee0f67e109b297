"""Inventory endpoints: stock changes, reservations, transfers and reads."""

from datetime import datetime

from fastapi import APIRouter, Depends, Query, status

from src.api.dependencies import (
    get_adjust_stock_use_case,
    get_bulk_update_stock_use_case,
    get_caller,
    get_inventory_status_use_case,
    get_inventory_valuation_use_case,
    get_release_reservation_use_case,
    get_reserve_stock_use_case,
    get_set_reorder_levels_use_case,
    get_stock_count_use_case,
    get_stock_movements_use_case,
    get_transfer_stock_use_case,
    get_update_stock_use_case,
)
from src.application.dto.requests import (
    AdjustStockRequest,
    BulkStockUpdateRequest,
    MovementQueryRequest,
    ReorderLevelsRequest,
    ReserveStockRequest,
    StockCountRequest,
    StockUpdateRequest,
    TransferStockRequest,
)
from src.application.dto.responses import (
    BulkStockUpdateResponse,
    ErrorResponse,
    InventoryCellResponse,
    InventoryStatusResponse,
    MovementPageResponse,
    ReleaseReservationResponse,
    ReserveStockResponse,
    StockCountResponse,
    StockUpdateResponse,
    TransferResponse,
    ValuationResponse,
)
from src.application.use_cases import (
    AdjustStockUseCase,
    BulkUpdateStockUseCase,
    GetInventoryStatusUseCase,
    GetInventoryValuationUseCase,
    GetStockMovementsUseCase,
    ReleaseReservationUseCase,
    ReserveStockUseCase,
    SetReorderLevelsUseCase,
    StockCountUseCase,
    TransferStockUseCase,
    UpdateStockUseCase,
)
from src.core.entities.inventory import CostingMethod

router = APIRouter(prefix="/api/inventory", tags=["inventory"])

_MUTATION_ERRORS = {
    400: {"model": ErrorResponse},
    404: {"model": ErrorResponse},
    409: {"model": ErrorResponse},
    504: {"model": ErrorResponse},
}


@router.post("/update", response_model=StockUpdateResponse, responses=_MUTATION_ERRORS)
async def update_stock(
    request: StockUpdateRequest,
    caller: str = Depends(get_caller),
    use_case: UpdateStockUseCase = Depends(get_update_stock_use_case),
) -> StockUpdateResponse:
    """Apply one signed stock change."""
    result = await use_case.execute(request, caller)
    return use_case.to_response(result)


@router.post("/bulk-update", response_model=BulkStockUpdateResponse)
async def bulk_update_stock(
    request: BulkStockUpdateRequest,
    caller: str = Depends(get_caller),
    use_case: BulkUpdateStockUseCase = Depends(get_bulk_update_stock_use_case),
) -> BulkStockUpdateResponse:
    """Apply many stock changes; failures are reported per item."""
    result = await use_case.execute(request, caller)
    return use_case.to_response(result)


@router.post(
    "/transfer",
    response_model=TransferResponse,
    status_code=status.HTTP_201_CREATED,
    responses={**_MUTATION_ERRORS, 500: {"model": ErrorResponse}},
)
async def transfer_stock(
    request: TransferStockRequest,
    caller: str = Depends(get_caller),
    use_case: TransferStockUseCase = Depends(get_transfer_stock_use_case),
) -> TransferResponse:
    """Move stock between warehouses."""
    result = await use_case.execute(request, caller)
    return use_case.to_response(result)


@router.post("/adjust", response_model=InventoryCellResponse, responses=_MUTATION_ERRORS)
async def adjust_stock(
    request: AdjustStockRequest,
    caller: str = Depends(get_caller),
    use_case: AdjustStockUseCase = Depends(get_adjust_stock_use_case),
) -> InventoryCellResponse:
    """Manual stock correction."""
    cell = await use_case.execute(request, caller)
    return use_case.to_response(cell)


@router.post(
    "/reserve",
    response_model=ReserveStockResponse,
    status_code=status.HTTP_201_CREATED,
    responses=_MUTATION_ERRORS,
)
async def reserve_stock(
    request: ReserveStockRequest,
    caller: str = Depends(get_caller),
    use_case: ReserveStockUseCase = Depends(get_reserve_stock_use_case),
) -> ReserveStockResponse:
    """Hold available stock."""
    result = await use_case.execute(request, caller)
    return use_case.to_response(result)


@router.post(
    "/reservations/{reservation_id}/release",
    response_model=ReleaseReservationResponse,
    responses=_MUTATION_ERRORS,
)
async def release_reservation(
    reservation_id: int,
    caller: str = Depends(get_caller),
    use_case: ReleaseReservationUseCase = Depends(get_release_reservation_use_case),
) -> ReleaseReservationResponse:
    """Return a reservation to available stock."""
    cell = await use_case.execute(reservation_id, caller)
    return use_case.to_response(reservation_id, cell)


@router.post("/count", response_model=StockCountResponse, responses=_MUTATION_ERRORS)
async def stock_count(
    request: StockCountRequest,
    caller: str = Depends(get_caller),
    use_case: StockCountUseCase = Depends(get_stock_count_use_case),
) -> StockCountResponse:
    """Reconcile on-hand quantities with a physical count."""
    results = await use_case.execute(request, caller)
    return use_case.to_response(request.warehouse_id, results)


@router.put(
    "/{product_id}/{warehouse_id}/reorder-levels",
    response_model=InventoryCellResponse,
    responses=_MUTATION_ERRORS,
)
async def set_reorder_levels(
    product_id: str,
    warehouse_id: str,
    request: ReorderLevelsRequest,
    caller: str = Depends(get_caller),
    use_case: SetReorderLevelsUseCase = Depends(get_set_reorder_levels_use_case),
) -> InventoryCellResponse:
    """Set cell-level reorder thresholds."""
    cell = await use_case.execute(product_id, warehouse_id, request, caller)
    return use_case.to_response(cell)


@router.get("/status", response_model=InventoryStatusResponse)
async def get_inventory_status(
    warehouse_id: str | None = None,
    product_id: str | None = None,
    low_stock_only: bool = False,
    use_case: GetInventoryStatusUseCase = Depends(get_inventory_status_use_case),
) -> InventoryStatusResponse:
    """Current stock and derived status per cell."""
    items = await use_case.execute(
        warehouse_id=warehouse_id,
        product_id=product_id,
        low_stock_only=low_stock_only,
    )
    return use_case.to_response(items)


@router.get("/valuation", response_model=ValuationResponse)
async def get_inventory_valuation(
    warehouse_id: str | None = None,
    method: CostingMethod = CostingMethod.AVERAGE,
    use_case: GetInventoryValuationUseCase = Depends(get_inventory_valuation_use_case),
) -> ValuationResponse:
    """Value in-stock cells under a costing method."""
    valuation = await use_case.execute(warehouse_id=warehouse_id, method=method)
    return use_case.to_response(valuation)


@router.get(
    "/{product_id}/movements",
    response_model=MovementPageResponse,
    responses={400: {"model": ErrorResponse}},
)
async def get_stock_movements(
    product_id: str,
    warehouse_id: str | None = None,
    movement_type: str | None = None,
    start_date: datetime | None = None,
    end_date: datetime | None = None,
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=50, ge=1, le=500),
    use_case: GetStockMovementsUseCase = Depends(get_stock_movements_use_case),
) -> MovementPageResponse:
    """Movement ledger for a product, newest first."""
    result = await use_case.execute(
        product_id,
        MovementQueryRequest(
            warehouse_id=warehouse_id,
            movement_type=movement_type,
            start_date=start_date,
            end_date=end_date,
            page=page,
            limit=limit,
        ),
    )
    return use_case.to_response(result)
