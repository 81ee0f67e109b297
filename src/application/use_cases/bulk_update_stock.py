"""Bulk Update Stock Use Case."""

from src.application.dto.requests import BulkStockUpdateRequest
from src.application.dto.responses import (
    BulkItemResponse,
    BulkStockUpdateResponse,
    InventoryCellResponse,
)
from src.application.use_cases.update_stock import to_stock_update
from src.core.exceptions import ValidationError
from src.core.services import BulkItemResult, BulkUpdateResult, StockOperations


class BulkUpdateStockUseCase:
    """
    Apply many stock updates.

    A malformed item (unknown movement type) fails on its own without
    aborting the rest of the batch.
    """

    def __init__(self, operations: StockOperations | None = None):
        self._operations = operations

    def _get_operations(self) -> StockOperations:
        if self._operations is None:
            from src.application.services import get_stock_operations

            self._operations = get_stock_operations()
        return self._operations

    async def execute(
        self, request: BulkStockUpdateRequest, caller: str | None
    ) -> BulkUpdateResult:
        updates = []
        rejected: list[BulkItemResult] = []
        for item in request.updates:
            try:
                updates.append(to_stock_update(item))
            except ValidationError as e:
                rejected.append(
                    BulkItemResult(
                        product_id=item.product_id,
                        warehouse_id=item.warehouse_id,
                        success=False,
                        error_code=e.code,
                        error=e.message,
                    )
                )

        result = await self._get_operations().bulk_update(
            updates, caller, deadline=request.deadline_seconds
        )
        result.items.extend(rejected)
        return result

    def to_response(self, result: BulkUpdateResult) -> BulkStockUpdateResponse:
        return BulkStockUpdateResponse(
            total=len(result.items),
            successful=len(result.successful),
            failed=len(result.failed),
            results=[
                BulkItemResponse(
                    product_id=item.product_id,
                    warehouse_id=item.warehouse_id,
                    success=item.success,
                    inventory=InventoryCellResponse.from_cell(item.cell) if item.cell else None,
                    error_code=item.error_code,
                    error=item.error,
                )
                for item in result.items
            ],
        )
