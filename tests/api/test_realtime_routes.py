"""Tests for the realtime WebSocket feed."""

import pytest
from fastapi.testclient import TestClient

from src.api.main import app
from src.infrastructure.broadcast import reset_websocket_hub


@pytest.fixture
def client():
    reset_websocket_hub()
    yield TestClient(app)
    reset_websocket_hub()


def test_subscribe_and_ping(client: TestClient):
    with client.websocket_connect("/ws/inventory?user_id=user-1") as ws:
        assert ws.receive_json()["type"] == "connection_established"

        ws.send_json(
            {
                "type": "subscribe",
                "subscription": "inventory_updates",
                "filters": {"warehouse_id": "WH-1"},
            }
        )
        confirmed = ws.receive_json()
        assert confirmed["type"] == "subscription_confirmed"
        assert confirmed["filters"] == {"warehouse_id": "WH-1"}

        ws.send_json({"type": "ping"})
        assert ws.receive_json()["type"] == "pong"


def test_unknown_channel(client: TestClient):
    with client.websocket_connect("/ws/inventory") as ws:
        ws.receive_json()

        ws.send_json({"type": "subscribe", "subscription": "price_changes"})

        assert ws.receive_json()["type"] == "subscription_error"
