"""Adjust Stock Use Case: manual corrections recorded as adjustment movements."""

from src.application.dto.requests import AdjustStockRequest
from src.application.dto.responses import InventoryCellResponse
from src.core.entities.inventory import InventoryCell
from src.core.services import AdjustmentKind, StockOperations


class AdjustStockUseCase:
    def __init__(self, operations: StockOperations | None = None):
        self._operations = operations

    def _get_operations(self) -> StockOperations:
        if self._operations is None:
            from src.application.services import get_stock_operations

            self._operations = get_stock_operations()
        return self._operations

    async def execute(self, request: AdjustStockRequest, caller: str | None) -> InventoryCell:
        return await self._get_operations().adjust(
            product_id=request.product_id,
            warehouse_id=request.warehouse_id,
            kind=AdjustmentKind(request.adjustment_type),
            quantity=request.quantity,
            reason=request.reason,
            caller=caller,
            unit_cost=request.unit_cost,
            costing_method=request.costing_method,
            deadline=request.deadline_seconds,
        )

    def to_response(self, cell: InventoryCell) -> InventoryCellResponse:
        return InventoryCellResponse.from_cell(cell)
