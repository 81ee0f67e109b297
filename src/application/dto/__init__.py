"""Data Transfer Objects for API layer.

Request DTOs: Validate and parse incoming API requests.
Response DTOs: Structure and serialize API responses.

These are the ONLY contracts between API handlers and use cases.
"""

from src.application.dto.requests import (
    AdjustStockRequest,
    AlertFilterRequest,
    BulkStockUpdateRequest,
    MovementQueryRequest,
    ReceiveLineRequest,
    ReceivePurchaseOrderRequest,
    ReorderLevelsRequest,
    ReserveStockRequest,
    StockCountLine,
    StockCountRequest,
    StockUpdateRequest,
    TransferStockRequest,
    UpdateAlertRequest,
)
from src.application.dto.responses import (
    AlertListResponse,
    BulkItemResponse,
    BulkStockUpdateResponse,
    CellStatusResponse,
    ErrorResponse,
    HealthResponse,
    InventoryCellResponse,
    InventoryStatusResponse,
    MovementPageResponse,
    ProviderHealthResponse,
    PurchaseOrderResponse,
    ReceivePurchaseOrderResponse,
    ReleaseReservationResponse,
    ReorderAlertResponse,
    ReorderMonitorHealthResponse,
    ReservationResponse,
    ReserveStockResponse,
    StockCountResponse,
    StockMovementResponse,
    StockUpdateResponse,
    TransferResponse,
    ValuationResponse,
)

__all__ = [
    # Requests
    "StockUpdateRequest",
    "BulkStockUpdateRequest",
    "TransferStockRequest",
    "AdjustStockRequest",
    "ReserveStockRequest",
    "StockCountLine",
    "StockCountRequest",
    "ReorderLevelsRequest",
    "UpdateAlertRequest",
    "AlertFilterRequest",
    "ReceiveLineRequest",
    "ReceivePurchaseOrderRequest",
    "MovementQueryRequest",
    # Responses
    "InventoryCellResponse",
    "StockMovementResponse",
    "StockUpdateResponse",
    "BulkItemResponse",
    "BulkStockUpdateResponse",
    "TransferResponse",
    "ReservationResponse",
    "ReserveStockResponse",
    "ReleaseReservationResponse",
    "StockCountResponse",
    "CellStatusResponse",
    "InventoryStatusResponse",
    "ValuationResponse",
    "MovementPageResponse",
    "ReorderAlertResponse",
    "AlertListResponse",
    "PurchaseOrderResponse",
    "ReceivePurchaseOrderResponse",
    "ProviderHealthResponse",
    "ReorderMonitorHealthResponse",
    "HealthResponse",
    "ErrorResponse",
]
