"""
Realtime inventory feed over WebSocket.

Clients subscribe to ``inventory_updates`` or ``low_stock_alerts``,
optionally filtered to one warehouse.
"""

from fastapi import APIRouter, WebSocket, WebSocketDisconnect

from src.config import get_logger
from src.infrastructure.broadcast import get_websocket_hub

logger = get_logger(__name__)

router = APIRouter(tags=["realtime"])


@router.websocket("/ws/inventory")
async def inventory_feed(websocket: WebSocket, user_id: str | None = None) -> None:
    hub = get_websocket_hub()
    subscriber = await hub.connect(websocket, user_id=user_id)
    try:
        while True:
            message = await websocket.receive_json()
            await hub.handle_message(subscriber, message)
            if not subscriber.alive:
                # Dropped by the hub as a slow consumer
                await websocket.close(code=1008)
                break
    except WebSocketDisconnect:
        logger.debug("websocket_client_left", subscriber_id=subscriber.id)
    except ValueError as e:
        # receive_json on a non-JSON frame
        logger.warning("websocket_bad_frame", subscriber_id=subscriber.id, error=str(e))
    finally:
        await hub.disconnect(subscriber)
