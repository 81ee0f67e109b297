"""
Core inventory services.

Layer-pure services that depend only on:
- src/core/entities/*
- src/core/interfaces/*
- src/core/exceptions.py

NO infrastructure imports. All dependencies injected via constructor.
"""

from src.core.services.cost_layers import CostLayerEngine, OutboundCost, weighted_average
from src.core.services.inventory_queries import (
    CellStatus,
    InventoryQueries,
    MovementPage,
    Valuation,
    derive_status,
)
from src.core.services.key_lease import KeyedLease
from src.core.services.movement_ledger import MovementLedger
from src.core.services.purchase_receiver import (
    PurchaseOrderReceiver,
    ReceiptResult,
    ReceivedLine,
)
from src.core.services.reorder_monitor import AlertThrottle, ReorderMonitor
from src.core.services.reservations import ReservationManager, consume_reservation
from src.core.services.stock_mutator import StockMutator, StockUpdateResult
from src.core.services.stock_operations import (
    AdjustmentKind,
    BulkItemResult,
    BulkUpdateResult,
    CountResult,
    StockOperations,
)
from src.core.services.transfers import TransferOrchestrator, TransferResult

__all__ = [
    # Cost layers
    "CostLayerEngine",
    "OutboundCost",
    "weighted_average",
    # Ledger
    "MovementLedger",
    # Mutation
    "KeyedLease",
    "StockMutator",
    "StockUpdateResult",
    "StockOperations",
    "AdjustmentKind",
    "BulkItemResult",
    "BulkUpdateResult",
    "CountResult",
    # Reservations
    "ReservationManager",
    "consume_reservation",
    # Transfers
    "TransferOrchestrator",
    "TransferResult",
    # Reorder
    "ReorderMonitor",
    "AlertThrottle",
    # Purchase orders
    "PurchaseOrderReceiver",
    "ReceivedLine",
    "ReceiptResult",
    # Queries
    "InventoryQueries",
    "CellStatus",
    "MovementPage",
    "Valuation",
    "derive_status",
]
