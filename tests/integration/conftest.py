"""Real services wired over a migrated temporary database."""

from dataclasses import dataclass
from unittest.mock import AsyncMock

import pytest

from src.core.services import (
    AlertThrottle,
    InventoryQueries,
    PurchaseOrderReceiver,
    ReorderMonitor,
    ReservationManager,
    StockMutator,
    StockOperations,
    TransferOrchestrator,
)
from src.infrastructure.storage.sqlite import SQLiteInventoryGateway


@dataclass
class InventoryCore:
    gateway: SQLiteInventoryGateway
    mutator: StockMutator
    monitor: ReorderMonitor
    reservations: ReservationManager
    transfers: TransferOrchestrator
    operations: StockOperations
    queries: InventoryQueries
    receiver: PurchaseOrderReceiver
    broadcaster: AsyncMock
    mail: AsyncMock


@pytest.fixture
def core(seeded_gateway, mock_broadcaster, mock_mail) -> InventoryCore:
    monitor = ReorderMonitor(
        seeded_gateway,
        mail=mock_mail,
        broadcaster=mock_broadcaster,
        throttle=AlertThrottle(window_seconds=3600),
    )
    mutator = StockMutator(
        seeded_gateway, broadcaster=mock_broadcaster, reorder_scheduler=monitor
    )
    return InventoryCore(
        gateway=seeded_gateway,
        mutator=mutator,
        monitor=monitor,
        reservations=ReservationManager(
            seeded_gateway, leases=mutator.leases, broadcaster=mock_broadcaster
        ),
        transfers=TransferOrchestrator(
            seeded_gateway, mutator, compensation_attempts=2, compensation_backoff=0
        ),
        operations=StockOperations(seeded_gateway, mutator, batch_size=2),
        queries=InventoryQueries(seeded_gateway),
        receiver=PurchaseOrderReceiver(seeded_gateway, mutator),
        broadcaster=mock_broadcaster,
        mail=mock_mail,
    )
