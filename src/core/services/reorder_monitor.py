"""
Reorder Monitor.

Consumes (product, warehouse) keys enqueued by the stock mutator after each
commit, detects low and out-of-stock cells, and notifies warehouse managers.
The queue is best-effort: a dropped key is picked up again on the next
movement for that cell.
"""

from __future__ import annotations

import asyncio
import threading
import time
from collections.abc import Callable

from src.config import get_logger
from src.core.entities.inventory import (
    AlertStatus,
    AlertType,
    InventoryCellView,
    LowStockItem,
    ReorderAlert,
    utcnow,
)
from src.core.exceptions import InvalidStatusError, ReorderAlertNotFoundError
from src.core.interfaces.inventory_store import IInventoryGateway
from src.core.interfaces.notifications import IBroadcastSink, IMailSink
from src.core.services.guards import require_caller
from src.core.services.key_lease import CellKey

logger = get_logger(__name__)

DEFAULT_THROTTLE_SECONDS = 3600.0


class AlertThrottle:
    """
    In-memory map of cell key to the time of its last alert.

    Not persisted: a restart may produce one extra alert per cell.
    """

    def __init__(
        self,
        window_seconds: float = DEFAULT_THROTTLE_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.window_seconds = window_seconds
        self._clock = clock
        self._last_alert: dict[CellKey, float] = {}
        self._lock = threading.Lock()

    def is_throttled(self, key: CellKey) -> bool:
        with self._lock:
            last = self._last_alert.get(key)
        if last is None:
            return False
        return self._clock() - last < self.window_seconds

    def record(self, key: CellKey) -> None:
        with self._lock:
            self._last_alert[key] = self._clock()

    def clear(self) -> None:
        with self._lock:
            self._last_alert.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._last_alert)


def current_level(view: InventoryCellView) -> int:
    """Available stock, or on-hand when available has never been computed."""
    cell = view.cell
    return cell.available if cell.available is not None else cell.on_hand


class ReorderMonitor:
    """Single cooperative consumer of reorder check requests."""

    def __init__(
        self,
        gateway: IInventoryGateway,
        mail: IMailSink | None = None,
        broadcaster: IBroadcastSink | None = None,
        throttle: AlertThrottle | None = None,
        manager_roles: list[str] | None = None,
        queue_size: int = 1000,
    ):
        self._gateway = gateway
        self._mail = mail
        self._broadcaster = broadcaster
        self.throttle = throttle or AlertThrottle()
        self._manager_roles = manager_roles or ["admin", "manager"]
        self._queue: asyncio.Queue[CellKey] = asyncio.Queue(maxsize=queue_size)
        self._pending: set[CellKey] = set()
        self._task: asyncio.Task | None = None

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    @property
    def queue_depth(self) -> int:
        return self._queue.qsize()

    def enqueue(self, product_id: str, warehouse_id: str) -> bool:
        """
        Request a check without blocking.

        Returns False when the queue is full and the request was dropped.
        """
        key = (product_id, warehouse_id)
        if key in self._pending:
            return True
        try:
            self._queue.put_nowait(key)
        except asyncio.QueueFull:
            logger.warning("reorder_queue_full", product_id=product_id, warehouse_id=warehouse_id)
            return False
        self._pending.add(key)
        return True

    def start(self) -> None:
        if self.is_running:
            return
        self._task = asyncio.create_task(self._run(), name="reorder-monitor")
        logger.info("reorder_monitor_started")

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None
        logger.info("reorder_monitor_stopped")

    async def _run(self) -> None:
        while True:
            key = await self._queue.get()
            try:
                await self._process(key)
            finally:
                self._queue.task_done()

    async def process_pending(self) -> list[ReorderAlert]:
        """Drain the queue in the calling task; returns the alerts raised."""
        alerts = []
        while not self._queue.empty():
            key = self._queue.get_nowait()
            try:
                alert = await self._process(key)
            finally:
                self._queue.task_done()
            if alert is not None:
                alerts.append(alert)
        return alerts

    async def _process(self, key: CellKey) -> ReorderAlert | None:
        self._pending.discard(key)
        try:
            return await self.check(*key)
        except Exception as e:
            logger.error(
                "reorder_check_failed",
                product_id=key[0],
                warehouse_id=key[1],
                error=str(e),
            )
            return None

    async def check(self, product_id: str, warehouse_id: str) -> ReorderAlert | None:
        """
        Evaluate one cell and raise an alert if it is at or below its reorder level.

        Returns the pending alert when notifications were dispatched, None when
        the cell is healthy, unknown, or throttled.
        """
        view = await self._gateway.get_cell_view(product_id, warehouse_id)
        if view is None:
            return None

        current = current_level(view)
        reorder_level = view.reorder_level
        if current > reorder_level:
            return None

        key = (product_id, warehouse_id)
        if self.throttle.is_throttled(key):
            logger.debug("reorder_alert_throttled", product_id=product_id, warehouse_id=warehouse_id)
            return None

        alert_type = AlertType.OUT_OF_STOCK if current <= 0 else AlertType.LOW_STOCK

        async with self._gateway.unit_of_work() as uow:
            alert = await uow.get_pending_alert(product_id, warehouse_id)
            if alert is None:
                now = utcnow()
                alert = await uow.add_alert(
                    ReorderAlert(
                        product_id=product_id,
                        warehouse_id=warehouse_id,
                        on_hand_at_trigger=view.cell.on_hand,
                        available_at_trigger=current,
                        reorder_level=reorder_level,
                        suggested_quantity=view.reorder_quantity,
                        alert_type=alert_type,
                        created_at=now,
                        updated_at=now,
                    )
                )

        logger.info(
            "reorder_alert_triggered",
            alert_id=alert.id,
            product_id=product_id,
            warehouse_id=warehouse_id,
            alert_type=alert_type.value,
            available=current,
            reorder_level=reorder_level,
        )

        await self._notify_managers(view, current, reorder_level)
        await self._broadcast(alert)
        self.throttle.record(key)
        return alert

    async def _notify_managers(
        self, view: InventoryCellView, current: int, reorder_level: int
    ) -> None:
        if self._mail is None:
            return
        try:
            managers = await self._gateway.list_warehouse_managers(
                view.cell.warehouse_id, self._manager_roles
            )
            recipients = [m.email for m in managers if m.email]
            if not recipients:
                logger.info("reorder_alert_no_recipients", warehouse_id=view.cell.warehouse_id)
                return

            item = LowStockItem(
                product_name=view.product.name,
                sku=view.product.sku,
                available=current,
                reorder_level=reorder_level,
                unit=view.product.unit,
            )
            await self._mail.send_low_stock_alert(recipients, [item], view.warehouse_name)
        except Exception as e:
            logger.warning(
                "low_stock_mail_failed",
                product_id=view.cell.product_id,
                warehouse_id=view.cell.warehouse_id,
                error=str(e),
            )

    async def _broadcast(self, alert: ReorderAlert) -> None:
        if self._broadcaster is None:
            return
        try:
            await self._broadcaster.broadcast_low_stock_alert(alert)
        except Exception as e:
            logger.warning(
                "alert_broadcast_failed",
                alert_id=alert.id,
                product_id=alert.product_id,
                warehouse_id=alert.warehouse_id,
                error=str(e),
            )

    # Operator transitions

    async def list_alerts(
        self,
        status: AlertStatus = AlertStatus.PENDING,
        warehouse_id: str | None = None,
        alert_type: AlertType | None = None,
    ) -> list[ReorderAlert]:
        return await self._gateway.list_alerts(
            status=status, warehouse_id=warehouse_id, alert_type=alert_type
        )

    async def update_alert(
        self,
        alert_id: int,
        status: AlertStatus,
        caller: str | None,
        notes: str | None = None,
    ) -> ReorderAlert:
        """
        Acknowledge or resolve an alert.

        Raises:
            ReorderAlertNotFoundError: Unknown alert.
            InvalidStatusError: The alert is resolved, or the target is pending.
        """
        require_caller(caller)
        if status == AlertStatus.PENDING:
            raise InvalidStatusError("reorder alert", status.value, "move back to")

        async with self._gateway.unit_of_work() as uow:
            alert = await uow.get_alert(alert_id)
            if alert is None:
                raise ReorderAlertNotFoundError(alert_id)
            if alert.status == AlertStatus.RESOLVED:
                raise InvalidStatusError("reorder alert", alert.status.value, "update")

            now = utcnow()
            alert.status = status
            alert.updated_at = now
            if notes is not None:
                alert.notes = notes
            if status == AlertStatus.RESOLVED:
                alert.resolved_at = now
                alert.resolved_by = caller
            alert = await uow.update_alert(alert)

        logger.info(
            "reorder_alert_updated",
            alert_id=alert_id,
            status=status.value,
            caller=caller,
        )
        return alert
