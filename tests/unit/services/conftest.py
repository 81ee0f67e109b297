"""Fixtures for service unit tests: an in-memory gateway double."""

from contextlib import asynccontextmanager
from unittest.mock import AsyncMock, MagicMock

import pytest

from src.core.entities.inventory import InventoryCell, InventoryCellView, Product


def _make_view(
    available: int | None,
    on_hand: int | None = None,
    reorder_level: int = 10,
    reorder_quantity: int = 50,
) -> InventoryCellView:
    return InventoryCellView(
        cell=InventoryCell(
            product_id="P-1",
            warehouse_id="WH-1",
            on_hand=on_hand if on_hand is not None else (available or 0),
            available=available,
        ),
        product=Product(
            id="P-1",
            sku="SKU-001",
            name="Steel Bolt M8",
            unit="pcs",
            reorder_level=reorder_level,
            reorder_quantity=reorder_quantity,
        ),
        warehouse_name="Main Warehouse",
    )


@pytest.fixture
def uow() -> AsyncMock:
    return AsyncMock()


@pytest.fixture
def gateway(uow: AsyncMock) -> MagicMock:
    """Gateway whose unit_of_work() yields the `uow` mock."""
    gateway = MagicMock()

    @asynccontextmanager
    async def unit_of_work():
        yield uow

    gateway.unit_of_work = unit_of_work
    gateway.get_cell_view = AsyncMock()
    gateway.list_warehouse_managers = AsyncMock(return_value=[])
    gateway.list_alerts = AsyncMock(return_value=[])
    return gateway


@pytest.fixture
def make_view():
    """Factory for P-1/WH-1 cell views at a given stock level."""
    return _make_view
