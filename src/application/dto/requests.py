"""Request DTOs for API endpoints.

Pydantic v2 models for API request validation.
These are the ONLY contracts between API and use cases.

Shape checks live here; business rules (sign vs. movement type, stock
sufficiency, status transitions) are enforced by the core services.
"""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field

from src.config import get_settings
from src.core.entities.inventory import AlertStatus, AlertType, CostingMethod


def default_costing_method() -> CostingMethod:
    return CostingMethod(get_settings().inventory.default_costing_method)


class StockUpdateRequest(BaseModel):
    """Request to change one cell's on-hand stock."""

    product_id: str = Field(..., description="Product ID")
    warehouse_id: str = Field(..., description="Warehouse ID")
    quantity_change: int = Field(
        ...,
        description="Signed change; positive for inbound movement types, negative for outbound",
        examples=[10, -3],
    )
    movement_type: str = Field(
        ...,
        description="Movement type",
        examples=["purchase_receive", "sale", "adjustment_decrease"],
    )
    unit_cost: float | None = Field(
        default=None,
        description="Unit cost for inbound movements (defaults to product cost price)",
    )
    reference: str | None = Field(default=None, description="External reference")
    reason: str | None = Field(default=None, description="Free-text reason")
    batch_id: str | None = Field(default=None, description="Batch identifier")
    costing_method: CostingMethod = Field(
        default_factory=default_costing_method,
        description="Cost-flow assumption for outbound movements",
    )
    prevent_negative: bool = Field(
        default=True,
        description="Reject the change if on-hand stock would drop below zero",
    )
    reservation_id: int | None = Field(
        default=None,
        description="Active reservation consumed by this outbound movement",
    )
    deadline_seconds: float | None = Field(
        default=None,
        gt=0,
        description="Abort if the change has not committed within this many seconds",
    )


class BulkStockUpdateRequest(BaseModel):
    """Request to apply many stock updates with per-item fault isolation."""

    updates: list[StockUpdateRequest] = Field(..., min_length=1, max_length=1000)
    deadline_seconds: float | None = Field(
        default=None,
        gt=0,
        description="Budget for the whole batch",
    )


class TransferStockRequest(BaseModel):
    """Request to move stock between warehouses."""

    product_id: str = Field(..., description="Product ID")
    from_warehouse_id: str = Field(..., description="Source warehouse ID")
    to_warehouse_id: str = Field(..., description="Destination warehouse ID")
    quantity: int = Field(..., description="Units to transfer")
    reference: str | None = Field(default=None, description="Transfer reference")
    reason: str | None = Field(default=None, description="Transfer reason")
    costing_method: CostingMethod = Field(default_factory=default_costing_method)
    deadline_seconds: float | None = Field(default=None, gt=0)


class AdjustStockRequest(BaseModel):
    """Request for a manual stock correction."""

    product_id: str = Field(..., description="Product ID")
    warehouse_id: str = Field(..., description="Warehouse ID")
    adjustment_type: Literal["increase", "decrease"] = Field(
        ..., description="Direction of the correction"
    )
    quantity: int = Field(..., description="Units to add or remove")
    reason: str = Field(..., description="Why the correction is needed")
    unit_cost: float | None = Field(default=None, description="Unit cost for increases")
    costing_method: CostingMethod = Field(default_factory=default_costing_method)
    deadline_seconds: float | None = Field(default=None, gt=0)


class ReserveStockRequest(BaseModel):
    """Request to hold available stock."""

    product_id: str = Field(..., description="Product ID")
    warehouse_id: str = Field(..., description="Warehouse ID")
    quantity: int = Field(..., description="Units to reserve")
    reference: str | None = Field(default=None, description="Order or quote reference")
    reason: str | None = Field(default=None, description="Reservation reason")
    deadline_seconds: float | None = Field(default=None, gt=0)


class StockCountLine(BaseModel):
    product_id: str
    counted_quantity: int = Field(..., ge=0)


class StockCountRequest(BaseModel):
    """Physical count results for one warehouse."""

    warehouse_id: str = Field(..., description="Counted warehouse")
    counts: list[StockCountLine] = Field(..., min_length=1)
    reason: str = Field(default="Physical stock count")


class ReorderLevelsRequest(BaseModel):
    """Cell-level reorder thresholds."""

    reorder_level: int = Field(..., ge=0, description="Alert when available stock drops to this level")
    reorder_quantity: int = Field(..., ge=0, description="Suggested purchase quantity")


class UpdateAlertRequest(BaseModel):
    """Acknowledge or resolve a reorder alert."""

    status: Literal["acknowledged", "resolved"]
    notes: str | None = None

    @property
    def alert_status(self) -> AlertStatus:
        return AlertStatus(self.status)


class AlertFilterRequest(BaseModel):
    status: AlertStatus = AlertStatus.PENDING
    warehouse_id: str | None = None
    alert_type: AlertType | None = None


class ReceiveLineRequest(BaseModel):
    product_id: str
    received_quantity: int
    unit_cost: float | None = Field(
        default=None,
        ge=0,
        description="Overrides the unit cost on the purchase order line",
    )


class ReceivePurchaseOrderRequest(BaseModel):
    """Goods received against a purchase order."""

    lines: list[ReceiveLineRequest] = Field(..., min_length=1)
    notes: str | None = Field(default=None, description="Receiving notes")
    deadline_seconds: float | None = Field(default=None, gt=0)


class MovementQueryRequest(BaseModel):
    """Ledger filters and pagination."""

    warehouse_id: str | None = None
    movement_type: str | None = None
    start_date: datetime | None = None
    end_date: datetime | None = None
    page: int = Field(default=1, ge=1)
    limit: int = Field(default=50, ge=1, le=500)
