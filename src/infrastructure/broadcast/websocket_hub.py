"""
WebSocket broadcast hub.

Clients subscribe to named channels, optionally filtered by warehouse. Each
client has its own bounded outbox drained by a writer task, so publishing
never waits on a slow socket. A client whose outbox overflows or whose send
fails is dropped.
"""

import asyncio
import uuid
from dataclasses import dataclass, field
from typing import Any

from fastapi import WebSocket

from src.config import get_logger
from src.core.entities.inventory import InventoryCell, ReorderAlert, utcnow
from src.core.interfaces.notifications import IBroadcastSink

logger = get_logger(__name__)

INVENTORY_UPDATES = "inventory_updates"
LOW_STOCK_ALERTS = "low_stock_alerts"
CHANNELS = frozenset({INVENTORY_UPDATES, LOW_STOCK_ALERTS})


@dataclass
class Subscriber:
    """One connected WebSocket client."""

    websocket: WebSocket
    user_id: str | None = None
    id: str = field(default_factory=lambda: uuid.uuid4().hex[:12])
    # channel -> warehouse filter (None = every warehouse)
    channels: dict[str, str | None] = field(default_factory=dict)
    outbox: asyncio.Queue = field(default_factory=lambda: asyncio.Queue(maxsize=100))
    writer: asyncio.Task | None = None
    alive: bool = True

    def wants(self, channel: str, warehouse_id: str | None) -> bool:
        if channel not in self.channels:
            return False
        wanted = self.channels[channel]
        return wanted is None or warehouse_id is None or wanted == warehouse_id


def inventory_payload(cell: InventoryCell) -> dict[str, Any]:
    return {
        "product_id": cell.product_id,
        "warehouse_id": cell.warehouse_id,
        "on_hand": cell.on_hand,
        "reserved": cell.reserved,
        "available": cell.available,
        "weighted_avg_cost": cell.weighted_avg_cost,
        "last_movement_at": cell.last_movement_at.isoformat() if cell.last_movement_at else None,
    }


def alert_payload(alert: ReorderAlert) -> dict[str, Any]:
    return {
        "alert_id": alert.id,
        "product_id": alert.product_id,
        "warehouse_id": alert.warehouse_id,
        "alert_type": alert.alert_type.value,
        "on_hand": alert.on_hand_at_trigger,
        "available": alert.available_at_trigger,
        "reorder_level": alert.reorder_level,
        "suggested_quantity": alert.suggested_quantity,
    }


class WebSocketHub(IBroadcastSink):
    """In-process fan-out of inventory events to WebSocket subscribers."""

    def __init__(self, send_timeout: float = 5.0, outbox_size: int = 100):
        self.send_timeout = send_timeout
        self.outbox_size = outbox_size
        self._subscribers: dict[str, Subscriber] = {}

    @property
    def client_count(self) -> int:
        return len(self._subscribers)

    async def connect(self, websocket: WebSocket, user_id: str | None = None) -> Subscriber:
        """Accept the socket and start its writer."""
        await websocket.accept()
        subscriber = Subscriber(
            websocket=websocket,
            user_id=user_id,
            outbox=asyncio.Queue(maxsize=self.outbox_size),
        )
        self._subscribers[subscriber.id] = subscriber
        subscriber.writer = asyncio.create_task(
            self._write(subscriber), name=f"ws-writer-{subscriber.id}"
        )
        self._enqueue(
            subscriber,
            {"type": "connection_established", "client_id": subscriber.id},
        )
        logger.info("websocket_connected", client_id=subscriber.id, user_id=user_id)
        return subscriber

    async def disconnect(self, subscriber: Subscriber) -> None:
        self._drop(subscriber, reason="closed")
        if subscriber.writer is not None:
            subscriber.writer.cancel()
            try:
                await subscriber.writer
            except asyncio.CancelledError:
                pass
            subscriber.writer = None

    async def handle_message(self, subscriber: Subscriber, message: Any) -> None:
        """Apply one client control message."""
        if not isinstance(message, dict):
            self._enqueue(subscriber, {"type": "error", "message": "Invalid message format"})
            return

        kind = message.get("type")
        if kind == "subscribe":
            channel = message.get("subscription")
            if channel not in CHANNELS:
                self._enqueue(
                    subscriber,
                    {"type": "subscription_error", "message": "Invalid subscription type"},
                )
                return
            filters = message.get("filters") or {}
            subscriber.channels[channel] = filters.get("warehouse_id")
            self._enqueue(
                subscriber,
                {"type": "subscription_confirmed", "subscription": channel, "filters": filters},
            )
            logger.debug("websocket_subscribed", client_id=subscriber.id, channel=channel)
        elif kind == "unsubscribe":
            channel = message.get("subscription")
            subscriber.channels.pop(channel, None)
            self._enqueue(
                subscriber, {"type": "unsubscription_confirmed", "subscription": channel}
            )
        elif kind == "ping":
            self._enqueue(subscriber, {"type": "pong", "timestamp": utcnow().isoformat()})
        else:
            self._enqueue(subscriber, {"type": "error", "message": "Unknown message type"})

    def publish(self, channel: str, data: dict[str, Any]) -> int:
        """Queue an event for every matching subscriber; returns how many got it."""
        envelope = {"type": channel, "data": data, "timestamp": utcnow().isoformat()}
        warehouse_id = data.get("warehouse_id")
        delivered = 0
        for subscriber in list(self._subscribers.values()):
            if subscriber.wants(channel, warehouse_id) and self._enqueue(subscriber, envelope):
                delivered += 1
        return delivered

    async def broadcast_inventory_update(self, cell: InventoryCell) -> None:
        self.publish(INVENTORY_UPDATES, inventory_payload(cell))

    async def broadcast_low_stock_alert(self, alert: ReorderAlert) -> None:
        self.publish(LOW_STOCK_ALERTS, alert_payload(alert))

    async def close(self) -> None:
        for subscriber in list(self._subscribers.values()):
            await self.disconnect(subscriber)
            try:
                await subscriber.websocket.close()
            except RuntimeError:
                # Already closed by the peer
                pass
        logger.info("websocket_hub_closed")

    def _enqueue(self, subscriber: Subscriber, message: dict[str, Any]) -> bool:
        if not subscriber.alive:
            return False
        try:
            subscriber.outbox.put_nowait(message)
        except asyncio.QueueFull:
            self._drop(subscriber, reason="outbox_full")
            return False
        return True

    def _drop(self, subscriber: Subscriber, reason: str) -> None:
        if self._subscribers.pop(subscriber.id, None) is None:
            return
        subscriber.alive = False
        writer = subscriber.writer
        if writer is not None and writer is not asyncio.current_task():
            writer.cancel()
        logger.info("websocket_dropped", client_id=subscriber.id, reason=reason)

    async def _write(self, subscriber: Subscriber) -> None:
        while True:
            message = await subscriber.outbox.get()
            try:
                await asyncio.wait_for(
                    subscriber.websocket.send_json(message), timeout=self.send_timeout
                )
            except Exception as e:
                logger.warning("websocket_send_failed", client_id=subscriber.id, error=str(e))
                self._drop(subscriber, reason="send_failed")
                return


# Singleton instance
_hub: WebSocketHub | None = None


def get_websocket_hub() -> WebSocketHub:
    """Get singleton broadcast hub instance."""
    global _hub
    if _hub is None:
        from src.config import get_settings

        _hub = WebSocketHub(send_timeout=get_settings().broadcast.send_timeout)
    return _hub


def reset_websocket_hub() -> None:
    """Reset hub (for testing)."""
    global _hub
    _hub = None
