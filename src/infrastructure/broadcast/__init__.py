"""Push notifications to connected observers."""

from src.infrastructure.broadcast.websocket_hub import (
    CHANNELS,
    INVENTORY_UPDATES,
    LOW_STOCK_ALERTS,
    Subscriber,
    WebSocketHub,
    get_websocket_hub,
    reset_websocket_hub,
)

__all__ = [
    "CHANNELS",
    "INVENTORY_UPDATES",
    "LOW_STOCK_ALERTS",
    "Subscriber",
    "WebSocketHub",
    "get_websocket_hub",
    "reset_websocket_hub",
]
