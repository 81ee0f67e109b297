"""Tests for the read-side and alert use cases."""

from unittest.mock import AsyncMock

import pytest

from src.application.dto.requests import (
    AlertFilterRequest,
    MovementQueryRequest,
    UpdateAlertRequest,
)
from src.application.use_cases import (
    GetStockMovementsUseCase,
    ListReorderAlertsUseCase,
    UpdateReorderAlertUseCase,
)
from src.core.entities.inventory import (
    AlertStatus,
    AlertType,
    MovementType,
    ReorderAlert,
    StockMovement,
)
from src.core.exceptions import ValidationError
from src.core.services import MovementPage


def _alert(status: AlertStatus = AlertStatus.PENDING) -> ReorderAlert:
    return ReorderAlert(
        id=1,
        product_id="P-1",
        warehouse_id="WH-1",
        on_hand_at_trigger=3,
        available_at_trigger=3,
        reorder_level=10,
        suggested_quantity=50,
        alert_type=AlertType.LOW_STOCK,
        status=status,
    )


class TestGetStockMovementsUseCase:
    async def test_filters_are_forwarded(self):
        queries = AsyncMock()
        queries.movements.return_value = MovementPage(
            movements=[
                StockMovement(
                    id=1,
                    product_id="P-1",
                    warehouse_id="WH-1",
                    movement_type=MovementType.SALE,
                    quantity=2,
                    prev_on_hand=5,
                    new_on_hand=3,
                )
            ],
            total=51,
            page=2,
            limit=50,
        )
        use_case = GetStockMovementsUseCase(queries=queries)

        page = await use_case.execute(
            "P-1", MovementQueryRequest(warehouse_id="WH-1", movement_type="sale", page=2)
        )
        response = use_case.to_response(page)

        kwargs = queries.movements.call_args.kwargs
        assert kwargs["movement_type"] == MovementType.SALE
        assert kwargs["page"] == 2
        assert response.total_pages == 2
        assert response.movements[0].new_on_hand == 3

    async def test_unknown_movement_type(self):
        use_case = GetStockMovementsUseCase(queries=AsyncMock())
        with pytest.raises(ValidationError):
            await use_case.execute("P-1", MovementQueryRequest(movement_type="gift"))


class TestAlertUseCases:
    async def test_list(self):
        monitor = AsyncMock()
        monitor.list_alerts.return_value = [_alert()]
        use_case = ListReorderAlertsUseCase(monitor=monitor)

        alerts = await use_case.execute(AlertFilterRequest(warehouse_id="WH-1"))
        response = use_case.to_response(alerts)

        assert response.total == 1
        assert response.alerts[0].alert_type == "low_stock"
        assert monitor.list_alerts.call_args.kwargs["status"] == AlertStatus.PENDING

    async def test_update(self):
        monitor = AsyncMock()
        monitor.update_alert.return_value = _alert(AlertStatus.ACKNOWLEDGED)
        use_case = UpdateReorderAlertUseCase(monitor=monitor)

        alert = await use_case.execute(
            1, UpdateAlertRequest(status="acknowledged", notes="On it"), "user-1"
        )

        monitor.update_alert.assert_awaited_once_with(
            1, AlertStatus.ACKNOWLEDGED, "user-1", notes="On it"
        )
        assert use_case.to_response(alert).status == "acknowledged"
