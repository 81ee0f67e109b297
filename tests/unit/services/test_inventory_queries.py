"""Unit tests for stock status derivation."""

import pytest

from src.core.entities.inventory import StockStatus
from src.core.services.inventory_queries import MovementPage, derive_status


@pytest.mark.parametrize(
    ("available", "reorder_level", "expected"),
    [
        (0, 10, StockStatus.OUT_OF_STOCK),
        (-2, 10, StockStatus.OUT_OF_STOCK),
        (10, 10, StockStatus.LOW_STOCK),
        (11, 10, StockStatus.NORMAL),
        (30, 10, StockStatus.NORMAL),
        (31, 10, StockStatus.OVERSTOCKED),
        (500, 0, StockStatus.OVERSTOCKED),
    ],
)
def test_derive_status(make_view, available, reorder_level, expected):
    view = make_view(available=available, reorder_level=reorder_level)
    assert derive_status(view) == expected


def test_derive_status_custom_multiplier(make_view):
    view = make_view(available=25, reorder_level=10)
    assert derive_status(view, overstock_multiplier=2) == StockStatus.OVERSTOCKED


def test_zero_reorder_level_is_overstocked(make_view):
    view = make_view(available=5, reorder_level=0)
    assert derive_status(view) == StockStatus.OVERSTOCKED


def test_cell_override_wins_over_product_level(make_view):
    view = make_view(available=8, reorder_level=10)
    view.cell.reorder_level = 5
    assert derive_status(view) == StockStatus.NORMAL


def test_total_pages():
    assert MovementPage(movements=[], total=101, page=1, limit=50).total_pages == 3
    assert MovementPage(movements=[], total=0, page=1, limit=50).total_pages == 0
