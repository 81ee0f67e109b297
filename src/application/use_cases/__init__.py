"""Application use cases."""

from src.application.use_cases.adjust_stock import AdjustStockUseCase
from src.application.use_cases.bulk_update_stock import BulkUpdateStockUseCase
from src.application.use_cases.inventory_reports import (
    GetInventoryStatusUseCase,
    GetInventoryValuationUseCase,
    GetStockMovementsUseCase,
)
from src.application.use_cases.receive_purchase_order import ReceivePurchaseOrderUseCase
from src.application.use_cases.reorder_alerts import (
    ListReorderAlertsUseCase,
    UpdateReorderAlertUseCase,
)
from src.application.use_cases.reserve_stock import (
    ReleaseReservationUseCase,
    ReserveStockResult,
    ReserveStockUseCase,
)
from src.application.use_cases.set_reorder_levels import SetReorderLevelsUseCase
from src.application.use_cases.stock_count import StockCountUseCase
from src.application.use_cases.transfer_stock import TransferStockUseCase
from src.application.use_cases.update_stock import UpdateStockUseCase, to_stock_update

__all__ = [
    # Mutations
    "UpdateStockUseCase",
    "BulkUpdateStockUseCase",
    "TransferStockUseCase",
    "AdjustStockUseCase",
    "StockCountUseCase",
    "SetReorderLevelsUseCase",
    "to_stock_update",
    # Reservations
    "ReserveStockUseCase",
    "ReleaseReservationUseCase",
    "ReserveStockResult",
    # Reads
    "GetInventoryStatusUseCase",
    "GetInventoryValuationUseCase",
    "GetStockMovementsUseCase",
    # Alerts
    "ListReorderAlertsUseCase",
    "UpdateReorderAlertUseCase",
    # Purchasing
    "ReceivePurchaseOrderUseCase",
]
