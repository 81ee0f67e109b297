"""Set Reorder Levels Use Case."""

from src.application.dto.requests import ReorderLevelsRequest
from src.application.dto.responses import InventoryCellResponse
from src.core.entities.inventory import InventoryCell
from src.core.services import StockOperations


class SetReorderLevelsUseCase:
    """Write cell-level reorder thresholds; they override the product's."""

    def __init__(self, operations: StockOperations | None = None):
        self._operations = operations

    def _get_operations(self) -> StockOperations:
        if self._operations is None:
            from src.application.services import get_stock_operations

            self._operations = get_stock_operations()
        return self._operations

    async def execute(
        self,
        product_id: str,
        warehouse_id: str,
        request: ReorderLevelsRequest,
        caller: str | None,
    ) -> InventoryCell:
        return await self._get_operations().set_reorder_levels(
            product_id,
            warehouse_id,
            reorder_level=request.reorder_level,
            reorder_quantity=request.reorder_quantity,
            caller=caller,
        )

    def to_response(self, cell: InventoryCell) -> InventoryCellResponse:
        return InventoryCellResponse.from_cell(cell)
