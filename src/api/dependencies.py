"""
Dependency injection container for FastAPI.

Provides service instances to route handlers.
"""

from functools import lru_cache

from fastapi import Header, HTTPException, status

from src.application.services import get_reorder_monitor, get_stock_mutator
from src.application.use_cases import (
    AdjustStockUseCase,
    BulkUpdateStockUseCase,
    GetInventoryStatusUseCase,
    GetInventoryValuationUseCase,
    GetStockMovementsUseCase,
    ListReorderAlertsUseCase,
    ReceivePurchaseOrderUseCase,
    ReleaseReservationUseCase,
    ReserveStockUseCase,
    SetReorderLevelsUseCase,
    StockCountUseCase,
    TransferStockUseCase,
    UpdateReorderAlertUseCase,
    UpdateStockUseCase,
)
from src.config import Settings, bind_caller, get_settings
from src.core.services import ReorderMonitor, StockMutator
from src.infrastructure.broadcast import WebSocketHub, get_websocket_hub
from src.infrastructure.storage.sqlite import SQLiteInventoryGateway, get_inventory_gateway


@lru_cache
def get_app_settings() -> Settings:
    """Get cached application settings."""
    return get_settings()


# Caller identity (authentication happens upstream)
def get_caller(x_user_id: str | None = Header(default=None, alias="X-User-Id")) -> str:
    """Resolve the authenticated caller from the X-User-Id header."""
    if x_user_id is None or not x_user_id.strip():
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing caller identity (X-User-Id header)",
        )
    caller = x_user_id.strip()
    bind_caller(caller)
    return caller


# Service dependencies
def get_gateway() -> SQLiteInventoryGateway:
    """Get inventory gateway."""
    return get_inventory_gateway()


def get_mutator() -> StockMutator:
    """Get stock mutator."""
    return get_stock_mutator()


def get_monitor() -> ReorderMonitor:
    """Get reorder monitor."""
    return get_reorder_monitor()


def get_hub() -> WebSocketHub:
    """Get WebSocket broadcast hub."""
    return get_websocket_hub()


# Use case dependencies
def get_update_stock_use_case() -> UpdateStockUseCase:
    return UpdateStockUseCase()


def get_bulk_update_stock_use_case() -> BulkUpdateStockUseCase:
    return BulkUpdateStockUseCase()


def get_transfer_stock_use_case() -> TransferStockUseCase:
    return TransferStockUseCase()


def get_adjust_stock_use_case() -> AdjustStockUseCase:
    return AdjustStockUseCase()


def get_reserve_stock_use_case() -> ReserveStockUseCase:
    return ReserveStockUseCase()


def get_release_reservation_use_case() -> ReleaseReservationUseCase:
    return ReleaseReservationUseCase()


def get_stock_count_use_case() -> StockCountUseCase:
    return StockCountUseCase()


def get_set_reorder_levels_use_case() -> SetReorderLevelsUseCase:
    return SetReorderLevelsUseCase()


def get_inventory_status_use_case() -> GetInventoryStatusUseCase:
    return GetInventoryStatusUseCase()


def get_inventory_valuation_use_case() -> GetInventoryValuationUseCase:
    return GetInventoryValuationUseCase()


def get_stock_movements_use_case() -> GetStockMovementsUseCase:
    return GetStockMovementsUseCase()


def get_list_alerts_use_case() -> ListReorderAlertsUseCase:
    return ListReorderAlertsUseCase()


def get_update_alert_use_case() -> UpdateReorderAlertUseCase:
    return UpdateReorderAlertUseCase()


def get_receive_purchase_order_use_case() -> ReceivePurchaseOrderUseCase:
    return ReceivePurchaseOrderUseCase()
