"""Best-effort side effects run after a unit of work has committed."""

from src.config import get_logger
from src.core.entities.inventory import InventoryCell
from src.core.interfaces.notifications import IBroadcastSink

logger = get_logger(__name__)


async def publish_cell_update(broadcaster: IBroadcastSink | None, cell: InventoryCell) -> None:
    """Broadcast a committed cell; failures are logged, never raised."""
    if broadcaster is None:
        return
    try:
        await broadcaster.broadcast_inventory_update(cell)
    except Exception as e:
        logger.warning(
            "broadcast_failed",
            product_id=cell.product_id,
            warehouse_id=cell.warehouse_id,
            error=str(e),
        )
