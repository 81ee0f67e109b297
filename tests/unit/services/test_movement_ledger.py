"""Unit tests for the movement ledger."""

from unittest.mock import AsyncMock

import pytest

from src.core.entities.inventory import MovementType, StockUpdate
from src.core.exceptions import InvariantViolationError
from src.core.services.movement_ledger import MovementLedger


def _update(delta: int, movement_type: MovementType) -> StockUpdate:
    return StockUpdate(
        product_id="P-1",
        warehouse_id="WH-1",
        delta=delta,
        movement_type=movement_type,
        reference="SO-1",
        batch_id="B-1",
    )


@pytest.fixture
def uow() -> AsyncMock:
    uow = AsyncMock()
    uow.add_movement.side_effect = lambda movement: movement.model_copy(update={"id": 1})
    return uow


async def test_append_records_movement(uow):
    movement = await MovementLedger().append(
        uow, _update(-3, MovementType.SALE), 10, 7, 2.0, 6.0, "user-1"
    )

    assert movement.id == 1
    assert movement.quantity == 3
    assert movement.prev_on_hand == 10
    assert movement.new_on_hand == 7
    assert movement.total_cost == 6.0
    assert movement.created_by == "user-1"
    assert movement.reference == "SO-1"
    uow.add_movement.assert_awaited_once()


async def test_append_rejects_broken_continuity(uow):
    with pytest.raises(InvariantViolationError):
        await MovementLedger().append(
            uow, _update(5, MovementType.PURCHASE_RECEIVE), 10, 14, 1.0, 5.0, "user-1"
        )
    uow.add_movement.assert_not_awaited()


async def test_write_failure_becomes_invariant_violation(uow):
    uow.add_movement.side_effect = RuntimeError("disk I/O error")

    with pytest.raises(InvariantViolationError, match="Ledger write failed"):
        await MovementLedger().append(
            uow, _update(5, MovementType.PURCHASE_RECEIVE), 0, 5, 1.0, 5.0, "user-1"
        )
