"""Update Stock Use Case: one signed change to a cell through the stock mutator."""

from src.application.dto.requests import StockUpdateRequest
from src.application.dto.responses import (
    InventoryCellResponse,
    StockMovementResponse,
    StockUpdateResponse,
)
from src.config import get_logger
from src.core.entities.inventory import StockUpdate
from src.core.services import StockMutator, StockUpdateResult
from src.core.services.stock_mutator import parse_movement_type

logger = get_logger(__name__)


def to_stock_update(request: StockUpdateRequest) -> StockUpdate:
    """Convert the API request into a core StockUpdate."""
    return StockUpdate(
        product_id=request.product_id,
        warehouse_id=request.warehouse_id,
        delta=request.quantity_change,
        movement_type=parse_movement_type(request.movement_type),
        unit_cost=request.unit_cost,
        reference=request.reference,
        reason=request.reason,
        batch_id=request.batch_id,
        costing_method=request.costing_method,
        prevent_negative=request.prevent_negative,
        reservation_id=request.reservation_id,
    )


class UpdateStockUseCase:
    """Apply one stock update."""

    def __init__(self, mutator: StockMutator | None = None):
        self._mutator = mutator

    def _get_mutator(self) -> StockMutator:
        if self._mutator is None:
            from src.application.services import get_stock_mutator

            self._mutator = get_stock_mutator()
        return self._mutator

    async def execute(self, request: StockUpdateRequest, caller: str | None) -> StockUpdateResult:
        """Execute update stock use case."""
        update = to_stock_update(request)
        logger.debug(
            "update_stock_started",
            product_id=update.product_id,
            warehouse_id=update.warehouse_id,
            movement_type=update.movement_type.value,
        )
        return await self._get_mutator().apply(
            update, caller, deadline=request.deadline_seconds
        )

    def to_response(self, result: StockUpdateResult) -> StockUpdateResponse:
        """Convert result to API response."""
        return StockUpdateResponse(
            inventory=InventoryCellResponse.from_cell(result.cell),
            movement=(
                StockMovementResponse.from_movement(result.movement)
                if result.movement
                else None
            ),
            unit_cost=result.unit_cost,
            total_cost=result.total_cost,
        )
