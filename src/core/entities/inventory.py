"""Inventory domain entities."""

from datetime import UTC, datetime
from enum import Enum

from pydantic import BaseModel, Field


def utcnow() -> datetime:
    """Timezone-aware current UTC time."""
    return datetime.now(UTC)


class MovementType(str, Enum):
    """Types of stock movements."""

    PURCHASE_RECEIVE = "purchase_receive"
    SALE = "sale"
    TRANSFER_IN = "transfer_in"
    TRANSFER_OUT = "transfer_out"
    ADJUSTMENT_INCREASE = "adjustment_increase"
    ADJUSTMENT_DECREASE = "adjustment_decrease"
    COUNT_INCREASE = "count_increase"
    COUNT_DECREASE = "count_decrease"
    RETURN = "return"
    DAMAGE = "damage"
    EXPIRED = "expired"

    @property
    def is_inbound(self) -> bool:
        return self in INBOUND_MOVEMENTS

    @property
    def sign(self) -> int:
        """+1 for movements that add stock, -1 for movements that remove it."""
        return 1 if self.is_inbound else -1


INBOUND_MOVEMENTS = frozenset(
    {
        MovementType.PURCHASE_RECEIVE,
        MovementType.TRANSFER_IN,
        MovementType.ADJUSTMENT_INCREASE,
        MovementType.COUNT_INCREASE,
        MovementType.RETURN,
    }
)


class CostingMethod(str, Enum):
    """Cost-flow assumption used to price outbound movements."""

    FIFO = "FIFO"
    LIFO = "LIFO"
    AVERAGE = "AVERAGE"


class ReservationStatus(str, Enum):
    ACTIVE = "active"
    RELEASED = "released"
    CONSUMED = "consumed"


class AlertType(str, Enum):
    LOW_STOCK = "low_stock"
    OUT_OF_STOCK = "out_of_stock"


class AlertStatus(str, Enum):
    PENDING = "pending"
    ACKNOWLEDGED = "acknowledged"
    RESOLVED = "resolved"


class TransferStatus(str, Enum):
    COMPLETED = "completed"
    FAILED = "failed"


class StockStatus(str, Enum):
    """Derived health of a cell relative to its reorder level."""

    NORMAL = "normal"
    LOW_STOCK = "low_stock"
    OUT_OF_STOCK = "out_of_stock"
    OVERSTOCKED = "overstocked"


class Product(BaseModel):
    """Catalog attributes the inventory core reads."""

    id: str
    sku: str
    name: str
    unit: str = "units"
    cost_price: float = 0.0
    price: float = 0.0
    reorder_level: int = 0
    reorder_quantity: int = 0
    category: str | None = None


class Warehouse(BaseModel):
    id: str
    name: str


class UserProfile(BaseModel):
    """Operator account, used to resolve alert recipients."""

    id: str
    email: str
    first_name: str | None = None
    role: str = "staff"
    warehouse_id: str | None = None
    status: str = "active"


class InventoryCell(BaseModel):
    """Stock position of one product in one warehouse."""

    id: int | None = None
    product_id: str
    warehouse_id: str
    on_hand: int = 0
    reserved: int = 0
    available: int | None = 0
    weighted_avg_cost: float = 0.0
    reorder_level: int | None = None  # overrides product.reorder_level when set
    reorder_quantity: int | None = None
    last_movement_at: datetime | None = None
    created_by: str | None = None
    updated_by: str | None = None
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)

    @property
    def key(self) -> tuple[str, str]:
        return (self.product_id, self.warehouse_id)

    def recompute_available(self) -> int:
        """available = on_hand - reserved, clamped at zero."""
        self.available = max(0, self.on_hand - self.reserved)
        return self.available


class CostLayer(BaseModel):
    """An inbound batch with its acquisition cost and unconsumed quantity."""

    id: int | None = None
    product_id: str
    warehouse_id: str
    unit_cost: float
    original_quantity: int
    remaining_quantity: int
    created_at: datetime = Field(default_factory=utcnow)

    @property
    def remaining_value(self) -> float:
        return self.remaining_quantity * self.unit_cost


class StockMovement(BaseModel):
    """Immutable ledger entry for a single change to a cell."""

    id: int | None = None
    product_id: str
    warehouse_id: str
    movement_type: MovementType
    quantity: int  # always positive
    unit_cost: float = 0.0
    total_cost: float = 0.0
    prev_on_hand: int
    new_on_hand: int
    reference: str | None = None
    reason: str | None = None
    batch_id: str | None = None
    created_by: str | None = None
    created_at: datetime = Field(default_factory=utcnow)

    @property
    def signed_quantity(self) -> int:
        return self.movement_type.sign * self.quantity


class Reservation(BaseModel):
    """A releasable claim on part of a cell's stock."""

    id: int | None = None
    product_id: str
    warehouse_id: str
    quantity: int
    reference: str | None = None
    reason: str | None = None
    status: ReservationStatus = ReservationStatus.ACTIVE
    created_by: str | None = None
    created_at: datetime = Field(default_factory=utcnow)
    released_at: datetime | None = None
    released_by: str | None = None
    consumed_at: datetime | None = None


class ReorderAlert(BaseModel):
    id: int | None = None
    product_id: str
    warehouse_id: str
    on_hand_at_trigger: int
    available_at_trigger: int
    reorder_level: int
    suggested_quantity: int = 0
    alert_type: AlertType
    status: AlertStatus = AlertStatus.PENDING
    notes: str | None = None
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)
    resolved_at: datetime | None = None
    resolved_by: str | None = None


class StockTransfer(BaseModel):
    id: int | None = None
    product_id: str
    from_warehouse_id: str
    to_warehouse_id: str
    quantity: int
    unit_cost: float = 0.0
    total_cost: float = 0.0
    status: TransferStatus
    reference: str | None = None
    reason: str | None = None
    failure_reason: str | None = None
    created_by: str | None = None
    created_at: datetime = Field(default_factory=utcnow)


class InventoryCellView(BaseModel):
    """Read model joining a cell with its product and warehouse."""

    cell: InventoryCell
    product: Product
    warehouse_name: str

    @property
    def reorder_level(self) -> int:
        if self.cell.reorder_level is not None:
            return self.cell.reorder_level
        return self.product.reorder_level

    @property
    def reorder_quantity(self) -> int:
        if self.cell.reorder_quantity is not None:
            return self.cell.reorder_quantity
        return self.product.reorder_quantity


class LowStockItem(BaseModel):
    """One line of a low-stock notification."""

    product_name: str
    sku: str
    available: int
    reorder_level: int
    unit: str = "units"


class StockUpdate(BaseModel):
    """A single requested mutation of one cell."""

    product_id: str
    warehouse_id: str
    delta: int
    movement_type: MovementType
    unit_cost: float | None = None
    reference: str | None = None
    reason: str | None = None
    batch_id: str | None = None
    costing_method: CostingMethod = CostingMethod.FIFO
    prevent_negative: bool = True
    create_movement: bool = True
    reservation_id: int | None = None  # consume this reservation in the same transaction

    @property
    def key(self) -> tuple[str, str]:
        return (self.product_id, self.warehouse_id)

    @property
    def quantity(self) -> int:
        return abs(self.delta)
