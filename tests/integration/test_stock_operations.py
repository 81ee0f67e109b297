"""Bulk updates and manual adjustments against a real database."""

import pytest

from src.core.entities.inventory import MovementType, StockUpdate
from src.core.exceptions import ValidationError
from src.core.services import AdjustmentKind


def update(delta: int, warehouse_id: str = "WH-1", product_id: str = "P-1", **kwargs) -> StockUpdate:
    movement_type = MovementType.PURCHASE_RECEIVE if delta > 0 else MovementType.SALE
    return StockUpdate(
        product_id=product_id,
        warehouse_id=warehouse_id,
        delta=delta,
        movement_type=movement_type,
        unit_cost=2.0 if delta > 0 else None,
        **kwargs,
    )


async def _on_hand(core, product_id: str, warehouse_id: str) -> int:
    cell = await core.gateway.get_cell(product_id, warehouse_id)
    return cell.on_hand if cell else 0


class TestBulkUpdate:
    async def test_failed_item_does_not_block_others(self, core, caller):
        result = await core.operations.bulk_update(
            [
                update(10),
                update(5, product_id="P-2"),
                update(-50, product_id="P-2"),
                update(3, warehouse_id="WH-2"),
            ],
            caller,
        )

        assert len(result.successful) == 3
        assert len(result.failed) == 1
        failure = result.failed[0]
        assert failure.product_id == "P-2"
        assert failure.error_code == "INSUFFICIENT_STOCK"
        assert failure.cell is None

        assert await _on_hand(core, "P-1", "WH-1") == 10
        assert await _on_hand(core, "P-2", "WH-1") == 5
        assert await _on_hand(core, "P-1", "WH-2") == 3

    async def test_items_grouped_by_warehouse(self, core, caller):
        result = await core.operations.bulk_update(
            [
                update(1, warehouse_id="WH-1"),
                update(1, warehouse_id="WH-2"),
                update(1, warehouse_id="WH-1", product_id="P-2"),
                update(1, warehouse_id="WH-2", product_id="P-2"),
                update(2, warehouse_id="WH-1"),
            ],
            caller,
        )

        assert [item.warehouse_id for item in result.items] == [
            "WH-1",
            "WH-1",
            "WH-1",
            "WH-2",
            "WH-2",
        ]
        # Three WH-1 items span two batches of two
        assert all(item.success for item in result.items)
        assert await _on_hand(core, "P-1", "WH-1") == 3

    async def test_each_item_writes_its_own_movement(self, core, caller):
        await core.operations.bulk_update([update(4), update(6)], caller)

        movements, total = await core.gateway.list_movements("P-1", limit=10)
        assert total == 2
        assert sorted(m.quantity for m in movements) == [4, 6]

    async def test_expired_deadline_skips_remaining_items(self, core, caller):
        result = await core.operations.bulk_update([update(1), update(2)], caller, deadline=0)

        assert len(result.failed) == 2
        assert {item.error_code for item in result.failed} == {"DEADLINE_EXCEEDED"}
        assert await core.gateway.get_cell("P-1", "WH-1") is None
        _, total = await core.gateway.list_movements("P-1")
        assert total == 0

    async def test_missing_caller_fails_each_item(self, core):
        result = await core.operations.bulk_update([update(1)], None)

        assert not result.successful
        assert result.failed[0].error_code == "VALIDATION_ERROR"


class TestAdjust:
    async def test_increase_and_decrease(self, core, caller):
        cell = await core.operations.adjust(
            "P-1", "WH-1", AdjustmentKind.INCREASE, 8, "Found on shelf", caller, unit_cost=3.0
        )
        assert cell.on_hand == 8

        cell = await core.operations.adjust(
            "P-1", "WH-1", AdjustmentKind.DECREASE, 3, "Damaged", caller
        )
        assert cell.on_hand == 5

        movements, _ = await core.gateway.list_movements("P-1", limit=10)
        latest, first = movements[0], movements[1]
        assert first.movement_type == MovementType.ADJUSTMENT_INCREASE
        assert first.reason == "Found on shelf"
        assert latest.movement_type == MovementType.ADJUSTMENT_DECREASE
        assert latest.quantity == 3
        assert latest.unit_cost == pytest.approx(3.0)
        assert latest.new_on_hand == 5

    @pytest.mark.parametrize(("quantity", "reason"), [(0, "Damaged"), (-2, "Damaged"), (2, "")])
    async def test_rejects_bad_input(self, core, caller, quantity, reason):
        with pytest.raises(ValidationError):
            await core.operations.adjust(
                "P-1", "WH-1", AdjustmentKind.INCREASE, quantity, reason, caller
            )
        assert await core.gateway.get_cell("P-1", "WH-1") is None
