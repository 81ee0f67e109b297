"""Core domain entities."""

from src.core.entities.inventory import (
    AlertStatus,
    AlertType,
    CostingMethod,
    CostLayer,
    InventoryCell,
    InventoryCellView,
    LowStockItem,
    MovementType,
    Product,
    ReorderAlert,
    Reservation,
    ReservationStatus,
    StockMovement,
    StockStatus,
    StockTransfer,
    StockUpdate,
    TransferStatus,
    UserProfile,
    Warehouse,
)
from src.core.entities.purchase_order import (
    PurchaseOrder,
    PurchaseOrderLine,
    PurchaseOrderStatus,
)

__all__ = [
    # Inventory
    "InventoryCell",
    "InventoryCellView",
    "CostLayer",
    "StockMovement",
    "StockUpdate",
    "Reservation",
    "ReorderAlert",
    "StockTransfer",
    "LowStockItem",
    "MovementType",
    "CostingMethod",
    "ReservationStatus",
    "AlertType",
    "AlertStatus",
    "TransferStatus",
    "StockStatus",
    # Reference data
    "Product",
    "Warehouse",
    "UserProfile",
    # Purchasing
    "PurchaseOrder",
    "PurchaseOrderLine",
    "PurchaseOrderStatus",
]
