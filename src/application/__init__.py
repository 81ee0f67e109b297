"""
Application layer - Use cases, DTOs, and service factories.

This layer orchestrates business logic by:
1. Defining request/response DTOs for API contracts
2. Implementing use cases that coordinate core services
3. Providing factory functions for dependency injection

Use cases are the only entry point for API handlers.
"""

from src.application.services import (
    get_inventory_queries,
    get_purchase_order_receiver,
    get_reorder_monitor,
    get_reservation_manager,
    get_stock_mutator,
    get_stock_operations,
    get_transfer_orchestrator,
    reset_services,
)
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

__all__ = [
    # Use Cases
    "UpdateStockUseCase",
    "BulkUpdateStockUseCase",
    "TransferStockUseCase",
    "AdjustStockUseCase",
    "StockCountUseCase",
    "SetReorderLevelsUseCase",
    "ReserveStockUseCase",
    "ReleaseReservationUseCase",
    "GetInventoryStatusUseCase",
    "GetInventoryValuationUseCase",
    "GetStockMovementsUseCase",
    "ListReorderAlertsUseCase",
    "UpdateReorderAlertUseCase",
    "ReceivePurchaseOrderUseCase",
    # Service factories
    "get_stock_mutator",
    "get_reorder_monitor",
    "get_reservation_manager",
    "get_transfer_orchestrator",
    "get_stock_operations",
    "get_inventory_queries",
    "get_purchase_order_receiver",
    "reset_services",
]
