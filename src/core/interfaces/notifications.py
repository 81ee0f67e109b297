"""Abstract interfaces for outbound notification sinks."""

from abc import ABC, abstractmethod

from src.core.entities.inventory import InventoryCell, LowStockItem, ReorderAlert


class IMailSink(ABC):
    """Delivers operator e-mail."""

    @abstractmethod
    async def send_low_stock_alert(
        self,
        recipients: list[str],
        items: list[LowStockItem],
        warehouse_name: str,
    ) -> bool:
        """Send a low-stock notification. Returns False when nothing was sent."""


class IBroadcastSink(ABC):
    """
    Pushes state changes to connected observers.

    Implementations must not block the caller on slow observers: the stock
    mutator calls these right after commit, while it still holds the cell lease.
    """

    @abstractmethod
    async def broadcast_inventory_update(self, cell: InventoryCell) -> None:
        """Publish the committed state of a cell."""

    @abstractmethod
    async def broadcast_low_stock_alert(self, alert: ReorderAlert) -> None:
        """Publish a reorder alert."""
