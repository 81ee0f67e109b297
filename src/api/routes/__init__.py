"""API route modules."""

from src.api.routes.alerts import router as alerts_router
from src.api.routes.health import router as health_router
from src.api.routes.inventory import router as inventory_router
from src.api.routes.purchase_orders import router as purchase_orders_router
from src.api.routes.realtime import router as realtime_router

__all__ = [
    "health_router",
    "inventory_router",
    "alerts_router",
    "purchase_orders_router",
    "realtime_router",
]
