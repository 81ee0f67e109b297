"""Storage infrastructure implementations."""

from src.infrastructure.storage.sqlite import (
    SQLiteInventoryGateway,
    close_pool,
    get_connection,
    get_inventory_gateway,
    get_pool,
    get_transaction,
)

__all__ = [
    # SQLite gateway
    "SQLiteInventoryGateway",
    "get_inventory_gateway",
    # Connection pool
    "get_pool",
    "close_pool",
    "get_connection",
    "get_transaction",
]
