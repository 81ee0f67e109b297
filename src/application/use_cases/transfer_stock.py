"""Transfer Stock Use Case."""

from src.application.dto.requests import TransferStockRequest
from src.application.dto.responses import InventoryCellResponse, TransferResponse
from src.core.services import TransferOrchestrator, TransferResult


class TransferStockUseCase:
    """Move stock between two warehouses."""

    def __init__(self, orchestrator: TransferOrchestrator | None = None):
        self._orchestrator = orchestrator

    def _get_orchestrator(self) -> TransferOrchestrator:
        if self._orchestrator is None:
            from src.application.services import get_transfer_orchestrator

            self._orchestrator = get_transfer_orchestrator()
        return self._orchestrator

    async def execute(self, request: TransferStockRequest, caller: str | None) -> TransferResult:
        return await self._get_orchestrator().transfer(
            product_id=request.product_id,
            from_warehouse_id=request.from_warehouse_id,
            to_warehouse_id=request.to_warehouse_id,
            quantity=request.quantity,
            caller=caller,
            reference=request.reference,
            reason=request.reason,
            costing_method=request.costing_method,
            deadline=request.deadline_seconds,
        )

    def to_response(self, result: TransferResult) -> TransferResponse:
        transfer = result.transfer
        return TransferResponse(
            transfer_id=transfer.id,
            status=transfer.status.value,
            product_id=transfer.product_id,
            from_warehouse_id=transfer.from_warehouse_id,
            to_warehouse_id=transfer.to_warehouse_id,
            quantity=transfer.quantity,
            unit_cost=transfer.unit_cost,
            total_cost=transfer.total_cost,
            source=InventoryCellResponse.from_cell(result.source),
            destination=InventoryCellResponse.from_cell(result.destination),
        )
