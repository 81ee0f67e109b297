"""Purchase order receipt endpoint."""

from fastapi import APIRouter, Depends

from src.api.dependencies import get_caller, get_receive_purchase_order_use_case
from src.application.dto.requests import ReceivePurchaseOrderRequest
from src.application.dto.responses import ErrorResponse, ReceivePurchaseOrderResponse
from src.application.use_cases import ReceivePurchaseOrderUseCase

router = APIRouter(prefix="/api/purchase-orders", tags=["purchase-orders"])


@router.post(
    "/{purchase_order_id}/receive",
    response_model=ReceivePurchaseOrderResponse,
    responses={
        400: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
        409: {"model": ErrorResponse},
    },
)
async def receive_purchase_order(
    purchase_order_id: int,
    request: ReceivePurchaseOrderRequest,
    caller: str = Depends(get_caller),
    use_case: ReceivePurchaseOrderUseCase = Depends(get_receive_purchase_order_use_case),
) -> ReceivePurchaseOrderResponse:
    """Post received quantities into the destination warehouse."""
    result = await use_case.execute(purchase_order_id, request, caller)
    return use_case.to_response(result)
