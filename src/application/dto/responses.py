"""Response DTOs for API endpoints.

Pydantic v2 models for API response serialization.
These are the ONLY contracts between use cases and API layer.
"""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field

from src.core.entities.inventory import (
    InventoryCell,
    ReorderAlert,
    Reservation,
    StockMovement,
)
from src.core.entities.purchase_order import PurchaseOrder


class InventoryCellResponse(BaseModel):
    """Stock position of one product in one warehouse."""

    product_id: str
    warehouse_id: str
    on_hand: int
    reserved: int
    available: int | None
    weighted_avg_cost: float
    reorder_level: int | None = None
    reorder_quantity: int | None = None
    last_movement_at: datetime | None = None
    updated_by: str | None = None
    updated_at: datetime

    @classmethod
    def from_cell(cls, cell: InventoryCell) -> "InventoryCellResponse":
        return cls(
            product_id=cell.product_id,
            warehouse_id=cell.warehouse_id,
            on_hand=cell.on_hand,
            reserved=cell.reserved,
            available=cell.available,
            weighted_avg_cost=cell.weighted_avg_cost,
            reorder_level=cell.reorder_level,
            reorder_quantity=cell.reorder_quantity,
            last_movement_at=cell.last_movement_at,
            updated_by=cell.updated_by,
            updated_at=cell.updated_at,
        )


class StockMovementResponse(BaseModel):
    """Stock movement response DTO."""

    id: int
    product_id: str
    warehouse_id: str
    movement_type: str
    quantity: int
    unit_cost: float
    total_cost: float
    prev_on_hand: int
    new_on_hand: int
    reference: str | None = None
    reason: str | None = None
    batch_id: str | None = None
    created_by: str | None = None
    created_at: datetime

    @classmethod
    def from_movement(cls, movement: StockMovement) -> "StockMovementResponse":
        return cls(
            id=movement.id,  # type: ignore[arg-type]
            product_id=movement.product_id,
            warehouse_id=movement.warehouse_id,
            movement_type=movement.movement_type.value,
            quantity=movement.quantity,
            unit_cost=movement.unit_cost,
            total_cost=movement.total_cost,
            prev_on_hand=movement.prev_on_hand,
            new_on_hand=movement.new_on_hand,
            reference=movement.reference,
            reason=movement.reason,
            batch_id=movement.batch_id,
            created_by=movement.created_by,
            created_at=movement.created_at,
        )


class StockUpdateResponse(BaseModel):
    """Response for a single stock update."""

    inventory: InventoryCellResponse
    movement: StockMovementResponse | None = None
    unit_cost: float
    total_cost: float


class BulkItemResponse(BaseModel):
    product_id: str
    warehouse_id: str
    success: bool
    inventory: InventoryCellResponse | None = None
    error_code: str | None = None
    error: str | None = None


class BulkStockUpdateResponse(BaseModel):
    """Per-item outcome of a bulk update."""

    total: int
    successful: int
    failed: int
    results: list[BulkItemResponse] = Field(default_factory=list)


class TransferResponse(BaseModel):
    """Response for a completed transfer."""

    transfer_id: int | None
    status: str
    product_id: str
    from_warehouse_id: str
    to_warehouse_id: str
    quantity: int
    unit_cost: float
    total_cost: float
    source: InventoryCellResponse
    destination: InventoryCellResponse


class ReservationResponse(BaseModel):
    id: int
    product_id: str
    warehouse_id: str
    quantity: int
    status: str
    reference: str | None = None
    reason: str | None = None
    created_by: str | None = None
    created_at: datetime
    released_at: datetime | None = None
    released_by: str | None = None
    consumed_at: datetime | None = None

    @classmethod
    def from_reservation(cls, reservation: Reservation) -> "ReservationResponse":
        return cls(
            id=reservation.id,  # type: ignore[arg-type]
            product_id=reservation.product_id,
            warehouse_id=reservation.warehouse_id,
            quantity=reservation.quantity,
            status=reservation.status.value,
            reference=reservation.reference,
            reason=reservation.reason,
            created_by=reservation.created_by,
            created_at=reservation.created_at,
            released_at=reservation.released_at,
            released_by=reservation.released_by,
            consumed_at=reservation.consumed_at,
        )


class ReserveStockResponse(BaseModel):
    reservation: ReservationResponse
    inventory: InventoryCellResponse


class ReleaseReservationResponse(BaseModel):
    reservation_id: int
    inventory: InventoryCellResponse


class StockCountItemResponse(BaseModel):
    product_id: str
    previous_quantity: int
    counted_quantity: int
    variance: int
    adjusted: bool
    error: str | None = None


class StockCountResponse(BaseModel):
    warehouse_id: str
    counted: int
    adjusted: int
    items: list[StockCountItemResponse] = Field(default_factory=list)


class CellStatusResponse(BaseModel):
    """Cell joined with product and warehouse, plus its derived status."""

    product_id: str
    product_name: str
    sku: str
    unit: str
    warehouse_id: str
    warehouse_name: str
    on_hand: int
    reserved: int
    available: int | None
    weighted_avg_cost: float
    reorder_level: int
    reorder_quantity: int
    stock_status: str
    last_movement_at: datetime | None = None


class InventoryStatusResponse(BaseModel):
    """Current stock status across cells."""

    items: list[CellStatusResponse]
    total: int


class ValuationItemResponse(BaseModel):
    product_id: str
    product_name: str
    sku: str
    category: str
    warehouse_id: str
    warehouse_name: str
    on_hand: int
    available: int
    reserved: int
    unit_cost: float
    unit_price: float
    total_cost: float
    total_retail_value: float
    potential_profit: float
    last_movement_at: datetime | None = None


class ValuationSummaryResponse(BaseModel):
    total_items: int
    total_quantity: int
    total_available: int
    total_reserved: int
    total_cost_value: float
    total_retail_value: float
    total_potential_profit: float
    costing_method: str
    valuation_date: datetime


class ValuationResponse(BaseModel):
    summary: ValuationSummaryResponse
    items: list[ValuationItemResponse] = Field(default_factory=list)


class MovementPageResponse(BaseModel):
    """One page of a product's ledger, newest first."""

    movements: list[StockMovementResponse]
    total: int
    page: int
    limit: int
    total_pages: int


class ReorderAlertResponse(BaseModel):
    id: int
    product_id: str
    warehouse_id: str
    alert_type: str
    status: str
    on_hand_at_trigger: int
    available_at_trigger: int
    reorder_level: int
    suggested_quantity: int
    notes: str | None = None
    created_at: datetime
    updated_at: datetime
    resolved_at: datetime | None = None
    resolved_by: str | None = None

    @classmethod
    def from_alert(cls, alert: ReorderAlert) -> "ReorderAlertResponse":
        return cls(
            id=alert.id,  # type: ignore[arg-type]
            product_id=alert.product_id,
            warehouse_id=alert.warehouse_id,
            alert_type=alert.alert_type.value,
            status=alert.status.value,
            on_hand_at_trigger=alert.on_hand_at_trigger,
            available_at_trigger=alert.available_at_trigger,
            reorder_level=alert.reorder_level,
            suggested_quantity=alert.suggested_quantity,
            notes=alert.notes,
            created_at=alert.created_at,
            updated_at=alert.updated_at,
            resolved_at=alert.resolved_at,
            resolved_by=alert.resolved_by,
        )


class AlertListResponse(BaseModel):
    alerts: list[ReorderAlertResponse]
    total: int


class PurchaseOrderLineResponse(BaseModel):
    product_id: str
    quantity: int
    received_quantity: int
    outstanding: int
    unit_cost: float


class PurchaseOrderResponse(BaseModel):
    id: int
    order_number: str
    warehouse_id: str
    status: str
    lines: list[PurchaseOrderLineResponse] = Field(default_factory=list)
    received_at: datetime | None = None
    received_by: str | None = None
    receiving_notes: str | None = None

    @classmethod
    def from_order(cls, order: PurchaseOrder) -> "PurchaseOrderResponse":
        return cls(
            id=order.id,  # type: ignore[arg-type]
            order_number=order.order_number,
            warehouse_id=order.warehouse_id,
            status=order.status.value,
            lines=[
                PurchaseOrderLineResponse(
                    product_id=line.product_id,
                    quantity=line.quantity,
                    received_quantity=line.received_quantity,
                    outstanding=line.outstanding,
                    unit_cost=line.unit_cost,
                )
                for line in order.lines
            ],
            received_at=order.received_at,
            received_by=order.received_by,
            receiving_notes=order.receiving_notes,
        )


class ReceivePurchaseOrderResponse(BaseModel):
    order: PurchaseOrderResponse
    inventory: list[InventoryCellResponse] = Field(default_factory=list)


class ProviderHealthResponse(BaseModel):
    """Provider health status."""

    name: str
    available: bool
    latency_ms: float | None = None
    error: str | None = None


class ReorderMonitorHealthResponse(BaseModel):
    enabled: bool
    running: bool
    queue_depth: int


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    version: str = "1.0.0"
    uptime_seconds: float
    database: ProviderHealthResponse | None = None
    reorder_monitor: ReorderMonitorHealthResponse | None = None
    websocket_clients: int | None = None


class ErrorResponse(BaseModel):
    """Standardized error response DTO.

    Every error response includes:
    - error_code: machine-readable code (e.g. INSUFFICIENT_STOCK)
    - message: human-readable description
    - hint: suggested recovery action
    - path: request path that triggered the error
    """

    error_code: str = Field(..., description="Machine-readable error code")
    message: str = Field(..., description="Human-readable error description")
    hint: str | None = Field(default=None, description="Suggested recovery action")
    detail: str | None = Field(default=None, description="Additional details")
    details: dict[str, Any] | None = Field(default=None, description="Structured error context")
    path: str | None = Field(default=None, description="Request path")
    timestamp: datetime = Field(default_factory=datetime.now)
