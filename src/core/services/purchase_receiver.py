"""Purchase Order Receiver: posts received PO lines through the stock mutator."""

from __future__ import annotations

from dataclasses import dataclass, field

from src.config import get_logger
from src.core.entities.inventory import InventoryCell, MovementType, StockUpdate, utcnow
from src.core.entities.purchase_order import (
    RECEIVABLE_STATUSES,
    PurchaseOrder,
    PurchaseOrderStatus,
)
from src.core.exceptions import (
    InvalidStatusError,
    PurchaseOrderNotFoundError,
    ValidationError,
)
from src.core.interfaces.inventory_store import IInventoryGateway
from src.core.services.guards import require_caller
from src.core.services.stock_mutator import StockMutator

logger = get_logger(__name__)


@dataclass
class ReceivedLine:
    product_id: str
    received_quantity: int
    unit_cost: float | None = None


@dataclass
class ReceiptResult:
    order: PurchaseOrder
    cells: list[InventoryCell] = field(default_factory=list)


class PurchaseOrderReceiver:
    def __init__(self, gateway: IInventoryGateway, mutator: StockMutator):
        self._gateway = gateway
        self._mutator = mutator

    async def receive(
        self,
        purchase_order_id: int,
        lines: list[ReceivedLine],
        caller: str | None,
        notes: str | None = None,
        deadline: float | None = None,
    ) -> ReceiptResult:
        """
        Receive goods against a sent purchase order.

        Each line is its own stock mutation (purchase_receive, referenced by
        the order number). If a line fails, lines already posted stay posted
        and the order is left partially received.

        Raises:
            PurchaseOrderNotFoundError: Unknown order.
            InvalidStatusError: Order is not sent or partially received.
            ValidationError: A line names a product not on the order.
        """
        require_caller(caller)

        order = await self._gateway.get_purchase_order(purchase_order_id)
        if order is None:
            raise PurchaseOrderNotFoundError(purchase_order_id)
        if order.status not in RECEIVABLE_STATUSES:
            raise InvalidStatusError("purchase order", order.status.value, "receive")

        for line in lines:
            if order.line_for(line.product_id) is None:
                raise ValidationError(
                    "product_id", "Product is not on this purchase order", line.product_id
                )
            if line.received_quantity <= 0:
                raise ValidationError(
                    "received_quantity", "Received quantity must be positive", line.received_quantity
                )

        cells: list[InventoryCell] = []
        try:
            for line in lines:
                cells.append(
                    await self._receive_line(order, line, caller, deadline)
                )
        except Exception as e:
            logger.error(
                "purchase_order_receipt_failed",
                purchase_order_id=purchase_order_id,
                lines_posted=len(cells),
                error=str(e),
            )
            if cells:
                await self._finalize(purchase_order_id, caller, notes)
            raise

        order = await self._finalize(purchase_order_id, caller, notes)
        logger.info(
            "purchase_order_received",
            purchase_order_id=purchase_order_id,
            order_number=order.order_number,
            status=order.status.value,
            lines=len(lines),
            caller=caller,
        )
        return ReceiptResult(order=order, cells=cells)

    async def _receive_line(
        self,
        order: PurchaseOrder,
        line: ReceivedLine,
        caller: str,
        deadline: float | None,
    ) -> InventoryCell:
        po_line = order.line_for(line.product_id)
        unit_cost = line.unit_cost if line.unit_cost is not None else po_line.unit_cost

        if line.received_quantity > po_line.outstanding:
            logger.warning(
                "purchase_order_over_receipt",
                purchase_order_id=order.id,
                product_id=line.product_id,
                outstanding=po_line.outstanding,
                received=line.received_quantity,
            )

        cell = await self._mutator.update_stock(
            StockUpdate(
                product_id=line.product_id,
                warehouse_id=order.warehouse_id,
                delta=line.received_quantity,
                movement_type=MovementType.PURCHASE_RECEIVE,
                unit_cost=unit_cost,
                reference=order.order_number,
                reason="Purchase order receipt",
            ),
            caller,
            deadline=deadline,
        )

        async with self._gateway.unit_of_work() as uow:
            current = await uow.get_purchase_order(order.id)
            stored_line = current.line_for(line.product_id)
            stored_line.received_quantity += line.received_quantity
            await uow.update_purchase_order_line(stored_line)

        po_line.received_quantity += line.received_quantity
        return cell

    async def _finalize(
        self, purchase_order_id: int, caller: str, notes: str | None
    ) -> PurchaseOrder:
        async with self._gateway.unit_of_work() as uow:
            order = await uow.get_purchase_order(purchase_order_id)
            order.status = (
                PurchaseOrderStatus.RECEIVED
                if order.fully_received
                else PurchaseOrderStatus.PARTIALLY_RECEIVED
            )
            now = utcnow()
            order.received_at = now
            order.received_by = caller
            if notes is not None:
                order.receiving_notes = notes
            order.updated_at = now
            return await uow.update_purchase_order(order)
