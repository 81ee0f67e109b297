"""Pytest configuration and fixtures."""

from collections.abc import AsyncGenerator
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

import src.infrastructure.storage.sqlite.connection as conn_module
import src.infrastructure.storage.sqlite.migrations.migrator as migrator_module
from src.core.entities.inventory import Product, UserProfile, Warehouse
from src.core.interfaces.notifications import IBroadcastSink, IMailSink
from src.infrastructure.storage.sqlite import SQLiteInventoryGateway, close_pool
from src.infrastructure.storage.sqlite.migrations.migrator import initialize_database

CALLER = "user-1"


@pytest.fixture
def caller() -> str:
    return CALLER


@pytest.fixture
def temp_db_path(tmp_path: Path) -> Path:
    """Create a temporary database path."""
    return tmp_path / "stockcore_test.db"


@pytest.fixture
def storage_settings(temp_db_path: Path) -> MagicMock:
    mock_settings = MagicMock()
    mock_settings.storage.db_path = temp_db_path
    mock_settings.storage.pool_size = 3
    mock_settings.storage.busy_timeout = 5000
    return mock_settings


@pytest.fixture
async def migrated_db(
    temp_db_path: Path, storage_settings: MagicMock
) -> AsyncGenerator[Path, None]:
    """Temporary database with the real schema, wired into the global pool."""
    conn_module._pool = None
    with (
        patch.object(conn_module, "get_settings", return_value=storage_settings),
        patch.object(migrator_module, "get_settings", return_value=storage_settings),
    ):
        results = await initialize_database(temp_db_path, create_backup_before=False)
        assert all(r.success for r in results)
        try:
            yield temp_db_path
        finally:
            await close_pool()


@pytest.fixture
async def gateway(migrated_db: Path) -> SQLiteInventoryGateway:
    return SQLiteInventoryGateway()


@pytest.fixture
async def seeded_gateway(gateway: SQLiteInventoryGateway) -> SQLiteInventoryGateway:
    """Gateway over a database holding two warehouses, two products and a manager."""
    await gateway.save_warehouse(Warehouse(id="WH-1", name="Main Warehouse"))
    await gateway.save_warehouse(Warehouse(id="WH-2", name="Overflow Warehouse"))
    await gateway.save_product(
        Product(
            id="P-1",
            sku="SKU-001",
            name="Steel Bolt M8",
            unit="pcs",
            cost_price=5.0,
            price=12.0,
            reorder_level=10,
            reorder_quantity=50,
            category="Fasteners",
        )
    )
    await gateway.save_product(
        Product(
            id="P-2",
            sku="SKU-002",
            name="Copper Washer",
            cost_price=0.5,
            price=1.5,
        )
    )
    await gateway.save_user(
        UserProfile(
            id="U-MGR",
            email="manager@example.com",
            first_name="Dana",
            role="manager",
            warehouse_id="WH-1",
        )
    )
    return gateway


@pytest.fixture
def mock_broadcaster() -> AsyncMock:
    return AsyncMock(spec=IBroadcastSink)


@pytest.fixture
def mock_mail() -> AsyncMock:
    mail = AsyncMock(spec=IMailSink)
    mail.send_low_stock_alert.return_value = True
    return mail
