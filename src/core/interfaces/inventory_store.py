"""
Abstract interfaces for inventory persistence.

The gateway is the only path to durable state. Every mutating operation runs
inside exactly one unit of work; readers outside a unit of work observe the
last committed snapshot.
"""

from abc import ABC, abstractmethod
from contextlib import AbstractAsyncContextManager
from datetime import datetime

from src.core.entities.inventory import (
    AlertStatus,
    AlertType,
    CostLayer,
    InventoryCell,
    InventoryCellView,
    MovementType,
    Product,
    ReorderAlert,
    Reservation,
    ReservationStatus,
    StockMovement,
    StockTransfer,
    UserProfile,
    Warehouse,
)
from src.core.entities.purchase_order import PurchaseOrder, PurchaseOrderLine


class IInventoryUnitOfWork(ABC):
    """Typed readers and writers bound to one open transaction."""

    # Cells
    @abstractmethod
    async def lock_cell(
        self, product_id: str, warehouse_id: str, caller: str | None = None
    ) -> InventoryCell:
        """Lock the cell for writing, creating it with zeros if absent."""

    @abstractmethod
    async def save_cell(self, cell: InventoryCell) -> InventoryCell:
        """Persist quantities, costs and audit fields of a locked cell."""

    # Reference data
    @abstractmethod
    async def get_product(self, product_id: str) -> Product | None:
        """Get product by ID."""

    @abstractmethod
    async def get_warehouse(self, warehouse_id: str) -> Warehouse | None:
        """Get warehouse by ID."""

    # Cost layers
    @abstractmethod
    async def list_cost_layers(
        self, product_id: str, warehouse_id: str
    ) -> list[CostLayer]:
        """Open layers for a cell, oldest first (created_at, then id)."""

    @abstractmethod
    async def add_cost_layer(self, layer: CostLayer) -> CostLayer:
        """Append a new cost layer."""

    @abstractmethod
    async def update_cost_layer(self, layer: CostLayer) -> None:
        """Persist a layer's remaining quantity."""

    @abstractmethod
    async def delete_cost_layer(self, layer_id: int) -> None:
        """Remove an exhausted layer."""

    # Ledger
    @abstractmethod
    async def add_movement(self, movement: StockMovement) -> StockMovement:
        """Append a stock movement."""

    # Reservations
    @abstractmethod
    async def add_reservation(self, reservation: Reservation) -> Reservation:
        """Create a reservation."""

    @abstractmethod
    async def get_reservation(self, reservation_id: int) -> Reservation | None:
        """Get reservation by ID."""

    @abstractmethod
    async def update_reservation(self, reservation: Reservation) -> Reservation:
        """Persist a reservation status transition."""

    # Transfers
    @abstractmethod
    async def add_transfer(self, transfer: StockTransfer) -> StockTransfer:
        """Record a stock transfer."""

    # Alerts
    @abstractmethod
    async def get_pending_alert(
        self, product_id: str, warehouse_id: str
    ) -> ReorderAlert | None:
        """Get the pending alert for a cell, if any."""

    @abstractmethod
    async def add_alert(self, alert: ReorderAlert) -> ReorderAlert:
        """Create a reorder alert."""

    @abstractmethod
    async def get_alert(self, alert_id: int) -> ReorderAlert | None:
        """Get reorder alert by ID."""

    @abstractmethod
    async def update_alert(self, alert: ReorderAlert) -> ReorderAlert:
        """Persist an alert status transition."""

    # Purchase orders
    @abstractmethod
    async def get_purchase_order(self, purchase_order_id: int) -> PurchaseOrder | None:
        """Get purchase order with its lines."""

    @abstractmethod
    async def update_purchase_order_line(self, line: PurchaseOrderLine) -> None:
        """Persist a line's received quantity."""

    @abstractmethod
    async def update_purchase_order(self, order: PurchaseOrder) -> PurchaseOrder:
        """Persist order status and receiving fields."""


class IInventoryGateway(ABC):
    """Entry point to inventory persistence."""

    @abstractmethod
    def unit_of_work(self) -> AbstractAsyncContextManager[IInventoryUnitOfWork]:
        """
        Open a transaction.

        Commits when the block exits normally, rolls back on any exception.
        """

    # Committed-snapshot readers
    @abstractmethod
    async def get_cell(self, product_id: str, warehouse_id: str) -> InventoryCell | None:
        """Get a cell without locking it."""

    @abstractmethod
    async def get_cell_view(
        self, product_id: str, warehouse_id: str
    ) -> InventoryCellView | None:
        """Get a cell joined with product and warehouse."""

    @abstractmethod
    async def list_cell_views(
        self,
        warehouse_id: str | None = None,
        product_id: str | None = None,
        in_stock_only: bool = False,
    ) -> list[InventoryCellView]:
        """List cells, most recently moved first."""

    @abstractmethod
    async def summarize_cost_layers(
        self, warehouse_id: str | None = None
    ) -> dict[tuple[str, str], tuple[int, float]]:
        """Map (product, warehouse) to (remaining quantity, remaining value)."""

    @abstractmethod
    async def list_cost_layers(self, product_id: str, warehouse_id: str) -> list[CostLayer]:
        """Open layers for a cell, oldest first."""

    @abstractmethod
    async def list_movements(
        self,
        product_id: str,
        warehouse_id: str | None = None,
        movement_type: MovementType | None = None,
        start: datetime | None = None,
        end: datetime | None = None,
        limit: int = 50,
        offset: int = 0,
    ) -> tuple[list[StockMovement], int]:
        """Movements for a product, newest first, with the unpaginated total."""

    @abstractmethod
    async def get_reservation(self, reservation_id: int) -> Reservation | None:
        """Get reservation by ID."""

    @abstractmethod
    async def list_reservations(
        self,
        product_id: str,
        warehouse_id: str,
        status: ReservationStatus | None = None,
    ) -> list[Reservation]:
        """List reservations for a cell."""

    @abstractmethod
    async def list_transfers(self, product_id: str) -> list[StockTransfer]:
        """List transfers recorded for a product."""

    @abstractmethod
    async def list_alerts(
        self,
        status: AlertStatus = AlertStatus.PENDING,
        warehouse_id: str | None = None,
        alert_type: AlertType | None = None,
    ) -> list[ReorderAlert]:
        """List reorder alerts, newest first."""

    @abstractmethod
    async def list_warehouse_managers(
        self, warehouse_id: str, roles: list[str]
    ) -> list[UserProfile]:
        """Active users with one of `roles` assigned to the warehouse."""

    @abstractmethod
    async def get_product(self, product_id: str) -> Product | None:
        """Get product by ID."""

    @abstractmethod
    async def get_warehouse(self, warehouse_id: str) -> Warehouse | None:
        """Get warehouse by ID."""

    @abstractmethod
    async def get_purchase_order(self, purchase_order_id: int) -> PurchaseOrder | None:
        """Get purchase order with its lines."""

    # Reference data writers (seeding; CRUD lives outside the core)
    @abstractmethod
    async def save_product(self, product: Product) -> Product:
        """Insert or replace a product."""

    @abstractmethod
    async def save_warehouse(self, warehouse: Warehouse) -> Warehouse:
        """Insert or replace a warehouse."""

    @abstractmethod
    async def save_user(self, user: UserProfile) -> UserProfile:
        """Insert or replace a user profile."""

    @abstractmethod
    async def create_purchase_order(self, order: PurchaseOrder) -> PurchaseOrder:
        """Insert a purchase order and its lines."""

    @abstractmethod
    async def ping(self) -> bool:
        """Check database reachability."""
