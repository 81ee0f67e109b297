"""Tests for inventory entities."""

from datetime import UTC, datetime

import pytest

from src.core.entities.inventory import (
    INBOUND_MOVEMENTS,
    CostLayer,
    InventoryCell,
    InventoryCellView,
    MovementType,
    Product,
    StockMovement,
    StockUpdate,
)


class TestMovementType:
    @pytest.mark.parametrize("movement_type", sorted(INBOUND_MOVEMENTS, key=lambda m: m.value))
    def test_inbound_sign(self, movement_type):
        assert movement_type.is_inbound
        assert movement_type.sign == 1

    @pytest.mark.parametrize(
        "movement_type",
        [
            MovementType.SALE,
            MovementType.TRANSFER_OUT,
            MovementType.ADJUSTMENT_DECREASE,
            MovementType.COUNT_DECREASE,
            MovementType.DAMAGE,
            MovementType.EXPIRED,
        ],
    )
    def test_outbound_sign(self, movement_type):
        assert not movement_type.is_inbound
        assert movement_type.sign == -1

    def test_return_is_inbound(self):
        assert MovementType("return") is MovementType.RETURN
        assert MovementType.RETURN.is_inbound


class TestInventoryCell:
    def test_defaults(self):
        cell = InventoryCell(product_id="P-1", warehouse_id="WH-1")
        assert cell.on_hand == 0
        assert cell.reserved == 0
        assert cell.available == 0
        assert cell.weighted_avg_cost == 0.0
        assert cell.reorder_level is None
        assert cell.key == ("P-1", "WH-1")

    def test_recompute_available(self):
        cell = InventoryCell(product_id="P-1", warehouse_id="WH-1", on_hand=10, reserved=4)
        assert cell.recompute_available() == 6
        assert cell.available == 6

    def test_recompute_available_clamps_at_zero(self):
        # Outbound sales may take on-hand below the reserved quantity
        cell = InventoryCell(product_id="P-1", warehouse_id="WH-1", on_hand=2, reserved=5)
        assert cell.recompute_available() == 0


class TestCostLayer:
    def test_remaining_value(self):
        layer = CostLayer(
            product_id="P-1",
            warehouse_id="WH-1",
            unit_cost=2.5,
            original_quantity=10,
            remaining_quantity=4,
        )
        assert layer.remaining_value == 10.0

    def test_created_at_is_utc(self):
        layer = CostLayer(
            product_id="P-1",
            warehouse_id="WH-1",
            unit_cost=1.0,
            original_quantity=1,
            remaining_quantity=1,
        )
        assert layer.created_at.tzinfo is not None


class TestStockMovement:
    def test_signed_quantity(self):
        movement = StockMovement(
            product_id="P-1",
            warehouse_id="WH-1",
            movement_type=MovementType.SALE,
            quantity=3,
            prev_on_hand=10,
            new_on_hand=7,
            created_at=datetime(2024, 1, 1, tzinfo=UTC),
        )
        assert movement.signed_quantity == -3


class TestInventoryCellView:
    def _view(self, **cell_fields) -> InventoryCellView:
        return InventoryCellView(
            cell=InventoryCell(product_id="P-1", warehouse_id="WH-1", **cell_fields),
            product=Product(
                id="P-1", sku="SKU-001", name="Bolt", reorder_level=10, reorder_quantity=50
            ),
            warehouse_name="Main",
        )

    def test_product_thresholds_by_default(self):
        view = self._view()
        assert view.reorder_level == 10
        assert view.reorder_quantity == 50

    def test_cell_thresholds_override_product(self):
        view = self._view(reorder_level=3, reorder_quantity=7)
        assert view.reorder_level == 3
        assert view.reorder_quantity == 7

    def test_cell_zero_threshold_still_overrides(self):
        view = self._view(reorder_level=0)
        assert view.reorder_level == 0


class TestStockUpdate:
    def test_quantity_is_absolute(self):
        update = StockUpdate(
            product_id="P-1",
            warehouse_id="WH-1",
            delta=-4,
            movement_type=MovementType.SALE,
        )
        assert update.quantity == 4
        assert update.key == ("P-1", "WH-1")
        assert update.prevent_negative is True
        assert update.create_movement is True
