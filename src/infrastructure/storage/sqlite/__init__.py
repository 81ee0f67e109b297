"""SQLite storage implementations."""

from src.infrastructure.storage.sqlite.connection import (
    ConnectionPool,
    close_pool,
    get_connection,
    get_pool,
    get_transaction,
)
from src.infrastructure.storage.sqlite.inventory_store import (
    SQLiteInventoryGateway,
    SQLiteInventoryUnitOfWork,
)

# Type alias for convenience
InventoryGateway = SQLiteInventoryGateway

# Singleton instance
_inventory_gateway: SQLiteInventoryGateway | None = None


def get_inventory_gateway() -> SQLiteInventoryGateway:
    """Get singleton inventory gateway instance."""
    global _inventory_gateway
    if _inventory_gateway is None:
        _inventory_gateway = SQLiteInventoryGateway()
    return _inventory_gateway


__all__ = [
    # Connection
    "ConnectionPool",
    "get_pool",
    "close_pool",
    "get_connection",
    "get_transaction",
    # Gateway
    "SQLiteInventoryGateway",
    "SQLiteInventoryUnitOfWork",
    "InventoryGateway",
    "get_inventory_gateway",
]
