"""API tests for reorder alert and purchase order endpoints."""

from unittest.mock import AsyncMock, MagicMock

import pytest
from httpx import ASGITransport, AsyncClient

from src.api.dependencies import (
    get_list_alerts_use_case,
    get_receive_purchase_order_use_case,
    get_update_alert_use_case,
)
from src.api.main import app
from src.application.use_cases import (
    ListReorderAlertsUseCase,
    ReceivePurchaseOrderUseCase,
    UpdateReorderAlertUseCase,
)
from src.core.entities.inventory import AlertStatus, AlertType, ReorderAlert
from src.core.exceptions import (
    InvalidStatusError,
    PurchaseOrderNotFoundError,
    ReorderAlertNotFoundError,
)

HEADERS = {"X-User-Id": "user-1"}


def _alert(**overrides) -> ReorderAlert:
    data = dict(
        id=3,
        product_id="P-1",
        warehouse_id="WH-1",
        on_hand_at_trigger=7,
        available_at_trigger=7,
        reorder_level=10,
        suggested_quantity=50,
        alert_type=AlertType.LOW_STOCK,
    )
    data.update(overrides)
    return ReorderAlert(**data)


@pytest.fixture
def mock_list_use_case():
    uc = AsyncMock(spec=ListReorderAlertsUseCase)
    alerts = [_alert()]
    uc.execute.return_value = alerts
    uc.to_response.return_value = ListReorderAlertsUseCase(monitor=MagicMock()).to_response(alerts)
    return uc


@pytest.fixture
def mock_update_use_case():
    uc = AsyncMock(spec=UpdateReorderAlertUseCase)
    alert = _alert(status=AlertStatus.RESOLVED, resolved_by="user-1")
    uc.execute.return_value = alert
    uc.to_response.return_value = UpdateReorderAlertUseCase(monitor=MagicMock()).to_response(alert)
    return uc


@pytest.fixture
def mock_receive_use_case():
    return AsyncMock(spec=ReceivePurchaseOrderUseCase)


@pytest.fixture
async def client(mock_list_use_case, mock_update_use_case, mock_receive_use_case):
    overrides = {
        get_list_alerts_use_case: lambda: mock_list_use_case,
        get_update_alert_use_case: lambda: mock_update_use_case,
        get_receive_purchase_order_use_case: lambda: mock_receive_use_case,
    }
    app.dependency_overrides.update(overrides)
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    for dependency in overrides:
        app.dependency_overrides.pop(dependency, None)


class TestAlerts:
    async def test_list_pending(self, client, mock_list_use_case):
        response = await client.get("/api/alerts?warehouse_id=WH-1")

        assert response.status_code == 200
        data = response.json()
        assert data["total"] == 1
        assert data["alerts"][0]["alert_type"] == "low_stock"
        filters = mock_list_use_case.execute.await_args.args[0]
        assert filters.status == AlertStatus.PENDING
        assert filters.warehouse_id == "WH-1"

    async def test_resolve(self, client, mock_update_use_case):
        response = await client.patch(
            "/api/alerts/3", json={"status": "resolved", "notes": "PO sent"}, headers=HEADERS
        )

        assert response.status_code == 200
        assert response.json()["resolved_by"] == "user-1"
        alert_id, request, caller = mock_update_use_case.execute.await_args.args
        assert (alert_id, request.alert_status, caller) == (3, AlertStatus.RESOLVED, "user-1")

    async def test_pending_is_not_a_target(self, client):
        response = await client.patch("/api/alerts/3", json={"status": "pending"}, headers=HEADERS)
        assert response.status_code == 422

    async def test_unknown_alert(self, client, mock_update_use_case):
        mock_update_use_case.execute.side_effect = ReorderAlertNotFoundError(99)

        response = await client.patch(
            "/api/alerts/99", json={"status": "acknowledged"}, headers=HEADERS
        )

        assert response.status_code == 404
        assert response.json()["error_code"] == "REORDER_ALERT_NOT_FOUND"


class TestPurchaseOrderReceipt:
    BODY = {"lines": [{"product_id": "P-1", "received_quantity": 5}]}

    async def test_unknown_order(self, client, mock_receive_use_case):
        mock_receive_use_case.execute.side_effect = PurchaseOrderNotFoundError(42)

        response = await client.post(
            "/api/purchase-orders/42/receive", json=self.BODY, headers=HEADERS
        )

        assert response.status_code == 404
        assert response.json()["error_code"] == "PURCHASE_ORDER_NOT_FOUND"

    async def test_wrong_status(self, client, mock_receive_use_case):
        mock_receive_use_case.execute.side_effect = InvalidStatusError(
            "purchase order", "draft", "receive"
        )

        response = await client.post(
            "/api/purchase-orders/1/receive", json=self.BODY, headers=HEADERS
        )

        assert response.status_code == 400

    async def test_empty_lines_rejected(self, client):
        response = await client.post(
            "/api/purchase-orders/1/receive", json={"lines": []}, headers=HEADERS
        )
        assert response.status_code == 422
