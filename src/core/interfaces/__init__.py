"""Core interfaces (ports) for dependency injection."""

from src.core.interfaces.inventory_store import IInventoryGateway, IInventoryUnitOfWork
from src.core.interfaces.notifications import IBroadcastSink, IMailSink

__all__ = [
    # Persistence
    "IInventoryGateway",
    "IInventoryUnitOfWork",
    # Notifications
    "IMailSink",
    "IBroadcastSink",
]
