"""Receive Purchase Order Use Case: post received lines as purchase_receive movements."""

from src.application.dto.requests import ReceivePurchaseOrderRequest
from src.application.dto.responses import (
    InventoryCellResponse,
    PurchaseOrderResponse,
    ReceivePurchaseOrderResponse,
)
from src.config import get_logger
from src.core.services import PurchaseOrderReceiver, ReceiptResult, ReceivedLine

logger = get_logger(__name__)


class ReceivePurchaseOrderUseCase:
    def __init__(self, receiver: PurchaseOrderReceiver | None = None):
        self._receiver = receiver

    def _get_receiver(self) -> PurchaseOrderReceiver:
        if self._receiver is None:
            from src.application.services import get_purchase_order_receiver

            self._receiver = get_purchase_order_receiver()
        return self._receiver

    async def execute(
        self,
        purchase_order_id: int,
        request: ReceivePurchaseOrderRequest,
        caller: str | None,
    ) -> ReceiptResult:
        logger.info(
            "receive_purchase_order_started",
            purchase_order_id=purchase_order_id,
            lines=len(request.lines),
        )
        return await self._get_receiver().receive(
            purchase_order_id,
            [
                ReceivedLine(
                    product_id=line.product_id,
                    received_quantity=line.received_quantity,
                    unit_cost=line.unit_cost,
                )
                for line in request.lines
            ],
            caller,
            notes=request.notes,
            deadline=request.deadline_seconds,
        )

    def to_response(self, result: ReceiptResult) -> ReceivePurchaseOrderResponse:
        return ReceivePurchaseOrderResponse(
            order=PurchaseOrderResponse.from_order(result.order),
            inventory=[InventoryCellResponse.from_cell(cell) for cell in result.cells],
        )
