"""Purchase order entities used by the receiving pathway."""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field

from src.core.entities.inventory import utcnow


class PurchaseOrderStatus(str, Enum):
    DRAFT = "draft"
    SENT = "sent"
    PARTIALLY_RECEIVED = "partially_received"
    RECEIVED = "received"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


RECEIVABLE_STATUSES = frozenset(
    {PurchaseOrderStatus.SENT, PurchaseOrderStatus.PARTIALLY_RECEIVED}
)


class PurchaseOrderLine(BaseModel):
    id: int | None = None
    purchase_order_id: int | None = None
    product_id: str
    quantity: int
    unit_cost: float = 0.0
    received_quantity: int = 0

    @property
    def outstanding(self) -> int:
        return max(0, self.quantity - self.received_quantity)


class PurchaseOrder(BaseModel):
    id: int | None = None
    order_number: str
    warehouse_id: str
    status: PurchaseOrderStatus = PurchaseOrderStatus.DRAFT
    lines: list[PurchaseOrderLine] = Field(default_factory=list)
    received_at: datetime | None = None
    received_by: str | None = None
    receiving_notes: str | None = None
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)

    @property
    def fully_received(self) -> bool:
        return all(line.outstanding == 0 for line in self.lines)

    def line_for(self, product_id: str) -> PurchaseOrderLine | None:
        for line in self.lines:
            if line.product_id == product_id:
                return line
        return None
