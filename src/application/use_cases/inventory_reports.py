"""Read-side use cases: stock status, valuation and the movement ledger."""

from src.application.dto.requests import MovementQueryRequest
from src.application.dto.responses import (
    CellStatusResponse,
    InventoryStatusResponse,
    MovementPageResponse,
    StockMovementResponse,
    ValuationItemResponse,
    ValuationResponse,
    ValuationSummaryResponse,
)
from src.core.entities.inventory import CostingMethod
from src.core.services import CellStatus, InventoryQueries, MovementPage, Valuation
from src.core.services.stock_mutator import parse_movement_type


class _QueryUseCase:
    def __init__(self, queries: InventoryQueries | None = None):
        self._queries = queries

    def _get_queries(self) -> InventoryQueries:
        if self._queries is None:
            from src.application.services import get_inventory_queries

            self._queries = get_inventory_queries()
        return self._queries


class GetInventoryStatusUseCase(_QueryUseCase):
    async def execute(
        self,
        warehouse_id: str | None = None,
        product_id: str | None = None,
        low_stock_only: bool = False,
    ) -> list[CellStatus]:
        return await self._get_queries().status(
            warehouse_id=warehouse_id,
            product_id=product_id,
            low_stock_only=low_stock_only,
        )

    def to_response(self, items: list[CellStatus]) -> InventoryStatusResponse:
        return InventoryStatusResponse(
            items=[
                CellStatusResponse(
                    product_id=item.view.product.id,
                    product_name=item.view.product.name,
                    sku=item.view.product.sku,
                    unit=item.view.product.unit,
                    warehouse_id=item.view.cell.warehouse_id,
                    warehouse_name=item.view.warehouse_name,
                    on_hand=item.view.cell.on_hand,
                    reserved=item.view.cell.reserved,
                    available=item.view.cell.available,
                    weighted_avg_cost=item.view.cell.weighted_avg_cost,
                    reorder_level=item.view.reorder_level,
                    reorder_quantity=item.view.reorder_quantity,
                    stock_status=item.status.value,
                    last_movement_at=item.view.cell.last_movement_at,
                )
                for item in items
            ],
            total=len(items),
        )


class GetInventoryValuationUseCase(_QueryUseCase):
    async def execute(
        self,
        warehouse_id: str | None = None,
        method: CostingMethod = CostingMethod.AVERAGE,
    ) -> Valuation:
        return await self._get_queries().valuation(warehouse_id=warehouse_id, method=method)

    def to_response(self, valuation: Valuation) -> ValuationResponse:
        summary = valuation.summary
        return ValuationResponse(
            summary=ValuationSummaryResponse(
                total_items=summary.total_items,
                total_quantity=summary.total_quantity,
                total_available=summary.total_available,
                total_reserved=summary.total_reserved,
                total_cost_value=round(summary.total_cost_value, 2),
                total_retail_value=round(summary.total_retail_value, 2),
                total_potential_profit=round(summary.total_potential_profit, 2),
                costing_method=summary.costing_method.value,
                valuation_date=summary.valuation_date,
            ),
            items=[
                ValuationItemResponse(
                    product_id=item.product_id,
                    product_name=item.product_name,
                    sku=item.sku,
                    category=item.category,
                    warehouse_id=item.warehouse_id,
                    warehouse_name=item.warehouse_name,
                    on_hand=item.on_hand,
                    available=item.available,
                    reserved=item.reserved,
                    unit_cost=round(item.unit_cost, 4),
                    unit_price=item.unit_price,
                    total_cost=round(item.total_cost, 2),
                    total_retail_value=round(item.total_retail_value, 2),
                    potential_profit=round(item.potential_profit, 2),
                    last_movement_at=item.last_movement_at,
                )
                for item in valuation.items
            ],
        )


class GetStockMovementsUseCase(_QueryUseCase):
    async def execute(self, product_id: str, request: MovementQueryRequest) -> MovementPage:
        movement_type = (
            parse_movement_type(request.movement_type) if request.movement_type else None
        )
        return await self._get_queries().movements(
            product_id,
            warehouse_id=request.warehouse_id,
            movement_type=movement_type,
            start=request.start_date,
            end=request.end_date,
            page=request.page,
            limit=request.limit,
        )

    def to_response(self, page: MovementPage) -> MovementPageResponse:
        return MovementPageResponse(
            movements=[StockMovementResponse.from_movement(m) for m in page.movements],
            total=page.total,
            page=page.page,
            limit=page.limit,
            total_pages=page.total_pages,
        )
