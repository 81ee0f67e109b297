"""Reorder alert endpoints."""

from fastapi import APIRouter, Depends

from src.api.dependencies import get_caller, get_list_alerts_use_case, get_update_alert_use_case
from src.application.dto.requests import AlertFilterRequest, UpdateAlertRequest
from src.application.dto.responses import AlertListResponse, ErrorResponse, ReorderAlertResponse
from src.application.use_cases import ListReorderAlertsUseCase, UpdateReorderAlertUseCase
from src.core.entities.inventory import AlertStatus, AlertType

router = APIRouter(prefix="/api/alerts", tags=["alerts"])


@router.get("", response_model=AlertListResponse)
async def list_alerts(
    status: AlertStatus = AlertStatus.PENDING,
    warehouse_id: str | None = None,
    alert_type: AlertType | None = None,
    use_case: ListReorderAlertsUseCase = Depends(get_list_alerts_use_case),
) -> AlertListResponse:
    """List reorder alerts, newest first."""
    alerts = await use_case.execute(
        AlertFilterRequest(status=status, warehouse_id=warehouse_id, alert_type=alert_type)
    )
    return use_case.to_response(alerts)


@router.patch(
    "/{alert_id}",
    response_model=ReorderAlertResponse,
    responses={404: {"model": ErrorResponse}},
)
async def update_alert(
    alert_id: int,
    request: UpdateAlertRequest,
    caller: str = Depends(get_caller),
    use_case: UpdateReorderAlertUseCase = Depends(get_update_alert_use_case),
) -> ReorderAlertResponse:
    """Acknowledge or resolve an alert."""
    alert = await use_case.execute(alert_id, request, caller)
    return use_case.to_response(alert)
