"""Unit tests for StockMutator request validation and leasing."""

import pytest

from src.core.entities.inventory import MovementType, StockUpdate
from src.core.exceptions import ConcurrentUpdateError, ValidationError
from src.core.services.stock_mutator import (
    StockMutator,
    parse_movement_type,
    validate_update,
)


def _update(delta: int, movement_type: MovementType = MovementType.SALE, **kwargs) -> StockUpdate:
    return StockUpdate(
        product_id="P-1", warehouse_id="WH-1", delta=delta, movement_type=movement_type, **kwargs
    )


class TestParseMovementType:
    def test_known_value(self):
        assert parse_movement_type("transfer_in") == MovementType.TRANSFER_IN

    def test_enum_passthrough(self):
        assert parse_movement_type(MovementType.DAMAGE) is MovementType.DAMAGE

    def test_unknown_value(self):
        with pytest.raises(ValidationError) as exc_info:
            parse_movement_type("teleport")
        assert exc_info.value.details["field"] == "movement_type"


class TestValidateUpdate:
    def test_valid_outbound(self):
        validate_update(_update(-5), "user-1")

    def test_valid_inbound(self):
        validate_update(_update(5, MovementType.PURCHASE_RECEIVE, unit_cost=2.0), "user-1")

    @pytest.mark.parametrize("caller", [None, "", "   "])
    def test_requires_caller(self, caller):
        with pytest.raises(ValidationError):
            validate_update(_update(-5), caller)

    def test_zero_delta(self):
        with pytest.raises(ValidationError, match="cannot be zero"):
            validate_update(_update(0), "user-1")

    def test_inbound_with_negative_delta(self):
        with pytest.raises(ValidationError, match="positive"):
            validate_update(_update(-5, MovementType.RETURN), "user-1")

    def test_outbound_with_positive_delta(self):
        with pytest.raises(ValidationError, match="negative"):
            validate_update(_update(5, MovementType.DAMAGE), "user-1")

    def test_negative_unit_cost(self):
        with pytest.raises(ValidationError):
            validate_update(_update(5, MovementType.PURCHASE_RECEIVE, unit_cost=-1.0), "user-1")

    def test_inbound_cannot_consume_reservation(self):
        with pytest.raises(ValidationError):
            validate_update(
                _update(5, MovementType.PURCHASE_RECEIVE, reservation_id=3), "user-1"
            )


class TestLeasing:
    async def test_held_cell_fails_fast(self, gateway, uow):
        mutator = StockMutator(gateway)
        mutator.leases.try_acquire(("P-1", "WH-1"))

        with pytest.raises(ConcurrentUpdateError):
            await mutator.apply(_update(-1), "user-1")

        uow.lock_cell.assert_not_awaited()

    async def test_invalid_request_takes_no_lease(self, gateway):
        mutator = StockMutator(gateway)

        with pytest.raises(ValidationError):
            await mutator.apply(_update(0), "user-1")

        assert len(mutator.leases) == 0
