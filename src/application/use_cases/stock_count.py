"""Stock Count Use Case: reconcile on-hand quantities with a physical count."""

from src.application.dto.requests import StockCountRequest
from src.application.dto.responses import StockCountItemResponse, StockCountResponse
from src.core.services import CountResult, StockOperations


class StockCountUseCase:
    def __init__(self, operations: StockOperations | None = None):
        self._operations = operations

    def _get_operations(self) -> StockOperations:
        if self._operations is None:
            from src.application.services import get_stock_operations

            self._operations = get_stock_operations()
        return self._operations

    async def execute(self, request: StockCountRequest, caller: str | None) -> list[CountResult]:
        return await self._get_operations().stock_count(
            warehouse_id=request.warehouse_id,
            counts=[(line.product_id, line.counted_quantity) for line in request.counts],
            caller=caller,
            reason=request.reason,
        )

    def to_response(self, warehouse_id: str, results: list[CountResult]) -> StockCountResponse:
        items = [
            StockCountItemResponse(
                product_id=r.product_id,
                previous_quantity=r.previous_quantity,
                counted_quantity=r.counted_quantity,
                variance=r.variance,
                adjusted=r.variance != 0 and r.error is None,
                error=r.error,
            )
            for r in results
        ]
        return StockCountResponse(
            warehouse_id=warehouse_id,
            counted=len(items),
            adjusted=sum(1 for item in items if item.adjusted),
            items=items,
        )
