"""Reorder alert use cases: list and acknowledge/resolve."""

from src.application.dto.requests import AlertFilterRequest, UpdateAlertRequest
from src.application.dto.responses import AlertListResponse, ReorderAlertResponse
from src.core.entities.inventory import ReorderAlert
from src.core.services import ReorderMonitor


class _AlertUseCase:
    def __init__(self, monitor: ReorderMonitor | None = None):
        self._monitor = monitor

    def _get_monitor(self) -> ReorderMonitor:
        if self._monitor is None:
            from src.application.services import get_reorder_monitor

            self._monitor = get_reorder_monitor()
        return self._monitor


class ListReorderAlertsUseCase(_AlertUseCase):
    async def execute(self, filters: AlertFilterRequest) -> list[ReorderAlert]:
        return await self._get_monitor().list_alerts(
            status=filters.status,
            warehouse_id=filters.warehouse_id,
            alert_type=filters.alert_type,
        )

    def to_response(self, alerts: list[ReorderAlert]) -> AlertListResponse:
        return AlertListResponse(
            alerts=[ReorderAlertResponse.from_alert(a) for a in alerts],
            total=len(alerts),
        )


class UpdateReorderAlertUseCase(_AlertUseCase):
    async def execute(
        self, alert_id: int, request: UpdateAlertRequest, caller: str | None
    ) -> ReorderAlert:
        return await self._get_monitor().update_alert(
            alert_id, request.alert_status, caller, notes=request.notes
        )

    def to_response(self, alert: ReorderAlert) -> ReorderAlertResponse:
        return ReorderAlertResponse.from_alert(alert)
