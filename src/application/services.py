"""
Service factory functions for dependency injection.

This module provides factory functions that wire infrastructure
implementations to core services. Use cases should import from here.

Clean Architecture: Application layer orchestrates DI, not core layer.

Every stock-changing service must share one KeyedLease; they are all built
around the singleton StockMutator for that reason.
"""

from typing import TYPE_CHECKING

from src.config import get_settings
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

if TYPE_CHECKING:
    from src.core.interfaces import IBroadcastSink, IInventoryGateway, IMailSink


# Singleton service instances
_stock_mutator: StockMutator | None = None
_reorder_monitor: ReorderMonitor | None = None
_reservation_manager: ReservationManager | None = None
_transfer_orchestrator: TransferOrchestrator | None = None
_stock_operations: StockOperations | None = None
_inventory_queries: InventoryQueries | None = None
_purchase_order_receiver: PurchaseOrderReceiver | None = None


def get_gateway() -> "IInventoryGateway":
    """Get the inventory persistence gateway."""
    # Lazy import infrastructure to avoid circular imports
    from src.infrastructure.storage.sqlite import get_inventory_gateway

    return get_inventory_gateway()


def get_broadcaster() -> "IBroadcastSink | None":
    """Get the broadcast sink, or None when broadcasting is disabled."""
    if not get_settings().broadcast.enabled:
        return None

    from src.infrastructure.broadcast import get_websocket_hub

    return get_websocket_hub()


def get_mail() -> "IMailSink":
    """Get the mail sink. A disabled sink logs instead of sending."""
    from src.infrastructure.mail import get_mail_sink

    return get_mail_sink()


def get_reorder_monitor(
    gateway: "IInventoryGateway | None" = None,
    mail: "IMailSink | None" = None,
    broadcaster: "IBroadcastSink | None" = None,
) -> ReorderMonitor:
    """
    Get or create the ReorderMonitor.

    Args:
        gateway: Optional gateway override
        mail: Optional mail sink override
        broadcaster: Optional broadcast sink override

    Returns:
        Configured ReorderMonitor (not started)
    """
    global _reorder_monitor

    if _reorder_monitor is not None and gateway is None:
        return _reorder_monitor

    settings = get_settings().reorder
    monitor = ReorderMonitor(
        gateway=gateway or get_gateway(),
        mail=mail or get_mail(),
        broadcaster=broadcaster if broadcaster is not None else get_broadcaster(),
        throttle=AlertThrottle(window_seconds=settings.throttle_seconds),
        manager_roles=settings.manager_roles,
        queue_size=settings.queue_size,
    )

    if gateway is None:
        _reorder_monitor = monitor

    return monitor


def get_stock_mutator(
    gateway: "IInventoryGateway | None" = None,
    broadcaster: "IBroadcastSink | None" = None,
) -> StockMutator:
    """
    Get or create the StockMutator.

    The reorder monitor is attached as the reorder scheduler unless reorder
    checks are disabled in settings.
    """
    global _stock_mutator

    if _stock_mutator is not None and gateway is None:
        return _stock_mutator

    settings = get_settings()
    gw = gateway or get_gateway()
    scheduler = get_reorder_monitor(gateway) if settings.reorder.enabled else None

    mutator = StockMutator(
        gateway=gw,
        broadcaster=broadcaster if broadcaster is not None else get_broadcaster(),
        reorder_scheduler=scheduler,
        default_deadline=settings.inventory.default_deadline_seconds,
    )

    if gateway is None:
        _stock_mutator = mutator

    return mutator


def get_reservation_manager() -> ReservationManager:
    global _reservation_manager

    if _reservation_manager is None:
        mutator = get_stock_mutator()
        _reservation_manager = ReservationManager(
            gateway=get_gateway(),
            leases=mutator.leases,
            broadcaster=mutator.broadcaster,
            default_deadline=get_settings().inventory.default_deadline_seconds,
        )
    return _reservation_manager


def get_transfer_orchestrator() -> TransferOrchestrator:
    global _transfer_orchestrator

    if _transfer_orchestrator is None:
        _transfer_orchestrator = TransferOrchestrator(
            gateway=get_gateway(),
            mutator=get_stock_mutator(),
        )
    return _transfer_orchestrator


def get_stock_operations() -> StockOperations:
    global _stock_operations

    if _stock_operations is None:
        _stock_operations = StockOperations(
            gateway=get_gateway(),
            mutator=get_stock_mutator(),
            batch_size=get_settings().inventory.bulk_batch_size,
        )
    return _stock_operations


def get_inventory_queries() -> InventoryQueries:
    global _inventory_queries

    if _inventory_queries is None:
        _inventory_queries = InventoryQueries(
            gateway=get_gateway(),
            overstock_multiplier=get_settings().inventory.overstock_multiplier,
        )
    return _inventory_queries


def get_purchase_order_receiver() -> PurchaseOrderReceiver:
    global _purchase_order_receiver

    if _purchase_order_receiver is None:
        _purchase_order_receiver = PurchaseOrderReceiver(
            gateway=get_gateway(),
            mutator=get_stock_mutator(),
        )
    return _purchase_order_receiver


def reset_services() -> None:
    """Reset all service singletons (for testing)."""
    global _stock_mutator, _reorder_monitor, _reservation_manager
    global _transfer_orchestrator, _stock_operations, _inventory_queries
    global _purchase_order_receiver

    _stock_mutator = None
    _reorder_monitor = None
    _reservation_manager = None
    _transfer_orchestrator = None
    _stock_operations = None
    _inventory_queries = None
    _purchase_order_receiver = None
