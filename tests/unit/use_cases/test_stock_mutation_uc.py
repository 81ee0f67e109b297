"""Tests for the stock mutation use cases."""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from src.application.dto.requests import (
    AdjustStockRequest,
    BulkStockUpdateRequest,
    ReserveStockRequest,
    StockUpdateRequest,
    TransferStockRequest,
)
from src.application.use_cases import (
    AdjustStockUseCase,
    BulkUpdateStockUseCase,
    ReleaseReservationUseCase,
    ReserveStockUseCase,
    TransferStockUseCase,
    UpdateStockUseCase,
    to_stock_update,
)
from src.core.entities.inventory import (
    CostingMethod,
    InventoryCell,
    MovementType,
    Reservation,
    StockMovement,
    StockTransfer,
    TransferStatus,
)
from src.core.exceptions import ValidationError
from src.core.services import (
    AdjustmentKind,
    BulkItemResult,
    BulkUpdateResult,
    StockUpdateResult,
    TransferResult,
)


def _cell(warehouse_id: str = "WH-1", on_hand: int = 7) -> InventoryCell:
    return InventoryCell(
        id=1, product_id="P-1", warehouse_id=warehouse_id, on_hand=on_hand, available=on_hand
    )


@pytest.fixture
def mock_mutator():
    return AsyncMock()


@pytest.fixture
def mock_operations():
    return AsyncMock()


class TestToStockUpdate:
    def test_maps_fields(self):
        update = to_stock_update(
            StockUpdateRequest(
                product_id="P-1",
                warehouse_id="WH-1",
                quantity_change=-3,
                movement_type="sale",
                reference="SO-1",
                costing_method=CostingMethod.LIFO,
                reservation_id=4,
            )
        )
        assert update.delta == -3
        assert update.movement_type == MovementType.SALE
        assert update.costing_method == CostingMethod.LIFO
        assert update.reservation_id == 4
        assert update.prevent_negative

    def test_costing_method_defaults_from_settings(self):
        settings = MagicMock()
        settings.inventory.default_costing_method = "AVERAGE"
        with patch("src.application.dto.requests.get_settings", return_value=settings):
            request = StockUpdateRequest(
                product_id="P-1", warehouse_id="WH-1", quantity_change=-1, movement_type="sale"
            )

        assert to_stock_update(request).costing_method == CostingMethod.AVERAGE

    def test_unknown_movement_type(self):
        request = StockUpdateRequest(
            product_id="P-1", warehouse_id="WH-1", quantity_change=1, movement_type="gift"
        )
        with pytest.raises(ValidationError):
            to_stock_update(request)


class TestUpdateStockUseCase:
    async def test_execute_passes_deadline(self, mock_mutator):
        mock_mutator.apply.return_value = StockUpdateResult(
            cell=_cell(), movement=None, unit_cost=5.0, total_cost=15.0
        )
        use_case = UpdateStockUseCase(mutator=mock_mutator)
        request = StockUpdateRequest(
            product_id="P-1",
            warehouse_id="WH-1",
            quantity_change=-3,
            movement_type="sale",
            deadline_seconds=2.5,
        )

        await use_case.execute(request, "user-1")

        update, caller = mock_mutator.apply.call_args.args
        assert update.delta == -3
        assert caller == "user-1"
        assert mock_mutator.apply.call_args.kwargs["deadline"] == 2.5

    def test_to_response(self):
        movement = StockMovement(
            id=9,
            product_id="P-1",
            warehouse_id="WH-1",
            movement_type=MovementType.SALE,
            quantity=3,
            unit_cost=5.0,
            total_cost=15.0,
            prev_on_hand=10,
            new_on_hand=7,
        )
        response = UpdateStockUseCase(mutator=AsyncMock()).to_response(
            StockUpdateResult(cell=_cell(), movement=movement, unit_cost=5.0, total_cost=15.0)
        )
        assert response.inventory.on_hand == 7
        assert response.movement.id == 9
        assert response.movement.movement_type == "sale"
        assert response.total_cost == 15.0


class TestBulkUpdateStockUseCase:
    async def test_malformed_item_is_isolated(self, mock_operations):
        mock_operations.bulk_update.return_value = BulkUpdateResult(
            items=[BulkItemResult(product_id="P-1", warehouse_id="WH-1", success=True, cell=_cell())]
        )
        use_case = BulkUpdateStockUseCase(operations=mock_operations)
        request = BulkStockUpdateRequest(
            updates=[
                StockUpdateRequest(
                    product_id="P-1", warehouse_id="WH-1", quantity_change=-1, movement_type="sale"
                ),
                StockUpdateRequest(
                    product_id="P-2", warehouse_id="WH-1", quantity_change=-1, movement_type="lost"
                ),
            ]
        )

        result = await use_case.execute(request, "user-1")

        sent = mock_operations.bulk_update.call_args.args[0]
        assert [u.product_id for u in sent] == ["P-1"]
        response = use_case.to_response(result)
        assert response.total == 2
        assert response.successful == 1
        assert response.failed == 1
        failed = [r for r in response.results if not r.success][0]
        assert failed.product_id == "P-2"
        assert failed.error_code == "VALIDATION_ERROR"


class TestTransferStockUseCase:
    async def test_execute_and_response(self):
        orchestrator = AsyncMock()
        orchestrator.transfer.return_value = TransferResult(
            transfer=StockTransfer(
                id=1,
                product_id="P-1",
                from_warehouse_id="WH-1",
                to_warehouse_id="WH-2",
                quantity=4,
                unit_cost=5.0,
                total_cost=20.0,
                status=TransferStatus.COMPLETED,
            ),
            source=_cell("WH-1", 6),
            destination=_cell("WH-2", 4),
        )
        use_case = TransferStockUseCase(orchestrator=orchestrator)
        request = TransferStockRequest(
            product_id="P-1", from_warehouse_id="WH-1", to_warehouse_id="WH-2", quantity=4
        )

        result = await use_case.execute(request, "user-1")
        response = use_case.to_response(result)

        kwargs = orchestrator.transfer.call_args.kwargs
        assert kwargs["quantity"] == 4
        assert kwargs["caller"] == "user-1"
        assert response.status == "completed"
        assert response.source.on_hand == 6
        assert response.destination.on_hand == 4


class TestAdjustStockUseCase:
    async def test_execute(self, mock_operations):
        mock_operations.adjust.return_value = _cell(on_hand=12)
        use_case = AdjustStockUseCase(operations=mock_operations)
        request = AdjustStockRequest(
            product_id="P-1",
            warehouse_id="WH-1",
            adjustment_type="increase",
            quantity=5,
            reason="Found in back room",
        )

        cell = await use_case.execute(request, "user-1")

        assert use_case.to_response(cell).on_hand == 12
        kwargs = mock_operations.adjust.call_args.kwargs
        assert kwargs["kind"] == AdjustmentKind.INCREASE
        assert kwargs["reason"] == "Found in back room"


class TestReservationUseCases:
    async def test_reserve(self):
        manager = AsyncMock()
        reservation = Reservation(id=9, product_id="P-1", warehouse_id="WH-1", quantity=3)
        manager.reserve.return_value = (_cell(), reservation)
        use_case = ReserveStockUseCase(manager=manager)
        request = ReserveStockRequest(
            product_id="P-1", warehouse_id="WH-1", quantity=3, reference="SO-7"
        )

        result = await use_case.execute(request, "user-1")

        response = use_case.to_response(result)
        assert response.reservation.id == 9
        assert response.reservation.status == "active"
        kwargs = manager.reserve.call_args.kwargs
        assert kwargs["quantity"] == 3
        assert kwargs["reference"] == "SO-7"
        assert kwargs["caller"] == "user-1"

    async def test_release(self):
        manager = AsyncMock()
        manager.release.return_value = _cell(on_hand=10)
        use_case = ReleaseReservationUseCase(manager=manager)

        cell = await use_case.execute(9, "user-1")

        manager.release.assert_awaited_once_with(9, "user-1")
        assert use_case.to_response(9, cell).inventory.on_hand == 10
