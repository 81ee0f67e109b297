"""Unit tests for the reorder monitor and its alert throttle."""

import pytest

from src.core.entities.inventory import AlertStatus, AlertType, ReorderAlert, UserProfile
from src.core.exceptions import InvalidStatusError, ReorderAlertNotFoundError, ValidationError
from src.core.services.reorder_monitor import AlertThrottle, ReorderMonitor, current_level



class FakeClock:
    def __init__(self) -> None:
        self.now = 1000.0

    def __call__(self) -> float:
        return self.now


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def monitor(gateway, uow, clock, mock_mail, mock_broadcaster) -> ReorderMonitor:
    uow.get_pending_alert.return_value = None
    uow.add_alert.side_effect = lambda alert: alert.model_copy(update={"id": 7})
    return ReorderMonitor(
        gateway,
        mail=mock_mail,
        broadcaster=mock_broadcaster,
        throttle=AlertThrottle(window_seconds=60, clock=clock),
        queue_size=2,
    )


class TestAlertThrottle:
    def test_window(self, clock):
        throttle = AlertThrottle(window_seconds=60, clock=clock)
        key = ("P-1", "WH-1")
        assert not throttle.is_throttled(key)

        throttle.record(key)
        clock.now += 59
        assert throttle.is_throttled(key)

        clock.now += 1
        assert not throttle.is_throttled(key)

    def test_keys_are_independent(self, clock):
        throttle = AlertThrottle(window_seconds=60, clock=clock)
        throttle.record(("P-1", "WH-1"))
        assert not throttle.is_throttled(("P-1", "WH-2"))

    def test_clear(self, clock):
        throttle = AlertThrottle(clock=clock)
        throttle.record(("P-1", "WH-1"))
        throttle.clear()
        assert len(throttle) == 0


def test_current_level_falls_back_to_on_hand(make_view):
    assert current_level(make_view(available=None, on_hand=4)) == 4
    assert current_level(make_view(available=3, on_hand=8)) == 3


class TestEnqueue:
    def test_duplicate_keys_are_coalesced(self, monitor):
        assert monitor.enqueue("P-1", "WH-1")
        assert monitor.enqueue("P-1", "WH-1")
        assert monitor.queue_depth == 1

    def test_full_queue_drops(self, monitor):
        assert monitor.enqueue("P-1", "WH-1")
        assert monitor.enqueue("P-2", "WH-1")
        assert not monitor.enqueue("P-3", "WH-1")
        assert monitor.queue_depth == 2


class TestCheck:
    async def test_healthy_cell(self, make_view, monitor, gateway, uow):
        gateway.get_cell_view.return_value = make_view(available=11)

        assert await monitor.check("P-1", "WH-1") is None
        uow.add_alert.assert_not_awaited()

    async def test_unknown_cell(self, make_view, monitor, gateway):
        gateway.get_cell_view.return_value = None
        assert await monitor.check("P-1", "WH-1") is None

    async def test_at_reorder_level_raises_low_stock(
        self, make_view, monitor, gateway, mock_mail, mock_broadcaster
    ):
        gateway.get_cell_view.return_value = make_view(available=10)
        gateway.list_warehouse_managers.return_value = [
            UserProfile(id="U-MGR", email="manager@example.com", role="manager")
        ]

        alert = await monitor.check("P-1", "WH-1")

        assert alert.id == 7
        assert alert.alert_type == AlertType.LOW_STOCK
        assert alert.suggested_quantity == 50
        recipients, items, warehouse_name = mock_mail.send_low_stock_alert.await_args.args
        assert recipients == ["manager@example.com"]
        assert items[0].sku == "SKU-001"
        assert warehouse_name == "Main Warehouse"
        mock_broadcaster.broadcast_low_stock_alert.assert_awaited_once_with(alert)

    async def test_empty_cell_raises_out_of_stock(self, make_view, monitor, gateway):
        gateway.get_cell_view.return_value = make_view(available=0)
        alert = await monitor.check("P-1", "WH-1")
        assert alert.alert_type == AlertType.OUT_OF_STOCK

    async def test_zero_level_zero_stock_alerts(self, make_view, monitor, gateway):
        gateway.get_cell_view.return_value = make_view(available=0, reorder_level=0)
        alert = await monitor.check("P-1", "WH-1")
        assert alert.alert_type == AlertType.OUT_OF_STOCK

    async def test_second_check_within_window_is_throttled(
        self, make_view, monitor, gateway, uow, clock
    ):
        gateway.get_cell_view.return_value = make_view(available=2)

        assert await monitor.check("P-1", "WH-1") is not None
        assert await monitor.check("P-1", "WH-1") is None
        clock.now += 61
        assert await monitor.check("P-1", "WH-1") is not None
        assert uow.add_alert.await_count == 2

    async def test_existing_pending_alert_is_reused(self, make_view, monitor, gateway, uow):
        existing = ReorderAlert(
            id=3,
            product_id="P-1",
            warehouse_id="WH-1",
            on_hand_at_trigger=5,
            available_at_trigger=5,
            reorder_level=10,
            alert_type=AlertType.LOW_STOCK,
        )
        uow.get_pending_alert.return_value = existing
        gateway.get_cell_view.return_value = make_view(available=2)

        alert = await monitor.check("P-1", "WH-1")

        assert alert.id == 3
        uow.add_alert.assert_not_awaited()

    async def test_mail_failure_does_not_block_alert(
        self, make_view, monitor, gateway, mock_mail, mock_broadcaster
    ):
        gateway.get_cell_view.return_value = make_view(available=2)
        gateway.list_warehouse_managers.return_value = [
            UserProfile(id="U-MGR", email="manager@example.com", role="manager")
        ]
        mock_mail.send_low_stock_alert.side_effect = OSError("connection refused")

        alert = await monitor.check("P-1", "WH-1")

        assert alert is not None
        mock_broadcaster.broadcast_low_stock_alert.assert_awaited_once()

    async def test_process_pending_drains_queue(self, make_view, monitor, gateway):
        gateway.get_cell_view.return_value = make_view(available=1)
        monitor.enqueue("P-1", "WH-1")

        alerts = await monitor.process_pending()

        assert len(alerts) == 1
        assert monitor.queue_depth == 0

    async def test_process_pending_survives_check_errors(self, make_view, monitor, gateway):
        gateway.get_cell_view.side_effect = RuntimeError("database is locked")
        monitor.enqueue("P-1", "WH-1")

        assert await monitor.process_pending() == []
        # Key is released so the next movement can enqueue it again
        assert monitor.enqueue("P-1", "WH-1")
        assert monitor.queue_depth == 1


class TestLifecycle:
    async def test_start_and_stop(self, monitor):
        monitor.start()
        assert monitor.is_running
        await monitor.stop()
        assert not monitor.is_running


class TestUpdateAlert:
    def _alert(self, status: AlertStatus) -> ReorderAlert:
        return ReorderAlert(
            id=3,
            product_id="P-1",
            warehouse_id="WH-1",
            on_hand_at_trigger=5,
            available_at_trigger=5,
            reorder_level=10,
            alert_type=AlertType.LOW_STOCK,
            status=status,
        )

    async def test_resolve(self, monitor, uow):
        uow.get_alert.return_value = self._alert(AlertStatus.PENDING)
        uow.update_alert.side_effect = lambda alert: alert

        alert = await monitor.update_alert(3, AlertStatus.RESOLVED, "user-1", notes="PO raised")

        assert alert.status == AlertStatus.RESOLVED
        assert alert.resolved_by == "user-1"
        assert alert.resolved_at is not None
        assert alert.notes == "PO raised"

    async def test_acknowledge_keeps_unresolved(self, monitor, uow):
        uow.get_alert.return_value = self._alert(AlertStatus.PENDING)
        uow.update_alert.side_effect = lambda alert: alert

        alert = await monitor.update_alert(3, AlertStatus.ACKNOWLEDGED, "user-1")

        assert alert.status == AlertStatus.ACKNOWLEDGED
        assert alert.resolved_at is None

    async def test_unknown_alert(self, monitor, uow):
        uow.get_alert.return_value = None
        with pytest.raises(ReorderAlertNotFoundError):
            await monitor.update_alert(99, AlertStatus.RESOLVED, "user-1")

    async def test_resolved_alert_is_final(self, monitor, uow):
        uow.get_alert.return_value = self._alert(AlertStatus.RESOLVED)
        with pytest.raises(InvalidStatusError):
            await monitor.update_alert(3, AlertStatus.ACKNOWLEDGED, "user-1")

    async def test_cannot_return_to_pending(self, monitor):
        with pytest.raises(InvalidStatusError):
            await monitor.update_alert(3, AlertStatus.PENDING, "user-1")

    async def test_requires_caller(self, monitor):
        with pytest.raises(ValidationError):
            await monitor.update_alert(3, AlertStatus.RESOLVED, None)
