"""
Error handling middleware.

Standardizes all API error responses to include:
- error_code: machine-readable identifier
- message: human-readable description
- hint: suggested recovery action
"""

import traceback
from collections.abc import Awaitable, Callable

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response

from src.application.dto.responses import ErrorResponse
from src.config import get_logger
from src.core.exceptions import (
    ConcurrentUpdateError,
    ConfigurationError,
    DeadlineExceededError,
    InsufficientAvailableError,
    InsufficientStockError,
    InvariantViolationError,
    InventoryError,
    NotFoundError,
    PersistenceError,
    ValidationError,
)

logger = get_logger(__name__)


# Map exceptions to HTTP status codes
EXCEPTION_STATUS_MAP: dict[type[Exception], int] = {
    ConcurrentUpdateError: status.HTTP_409_CONFLICT,
    InsufficientStockError: status.HTTP_400_BAD_REQUEST,
    InsufficientAvailableError: status.HTTP_400_BAD_REQUEST,
    ValidationError: status.HTTP_400_BAD_REQUEST,
    NotFoundError: status.HTTP_404_NOT_FOUND,
    DeadlineExceededError: status.HTTP_504_GATEWAY_TIMEOUT,
    InvariantViolationError: status.HTTP_500_INTERNAL_SERVER_ERROR,
    PersistenceError: status.HTTP_500_INTERNAL_SERVER_ERROR,
    ConfigurationError: status.HTTP_500_INTERNAL_SERVER_ERROR,
}

# Hint messages per error code
HINT_MAP: dict[str, str] = {
    "CONCURRENT_UPDATE": "Another update for this product and warehouse is in progress. Retry shortly.",
    "INSUFFICIENT_STOCK": "Not enough stock on hand. Check GET /api/inventory/status.",
    "INSUFFICIENT_AVAILABLE": "Stock is on hand but held by reservations. Release a reservation or reserve less.",
    "INVENTORY_NOT_FOUND": "No stock has been recorded for this product in this warehouse.",
    "RESERVATION_NOT_FOUND": "The reservation does not exist or was already consumed or released.",
    "PRODUCT_NOT_FOUND": "Check the product ID.",
    "WAREHOUSE_NOT_FOUND": "Check the warehouse ID.",
    "PURCHASE_ORDER_NOT_FOUND": "Check the purchase order ID.",
    "REORDER_ALERT_NOT_FOUND": "Check the alert ID and try GET /api/alerts to list alerts.",
    "SAME_WAREHOUSE_TRANSFER": "Choose a destination warehouse different from the source.",
    "INVALID_STATUS": "The record's current status does not allow this action.",
    "DEADLINE_EXCEEDED": "The operation did not commit in time and was rolled back. Retry.",
    "INVARIANT_VIOLATION": "The operation was rolled back. Check server logs.",
    "PERSISTENCE_ERROR": "A database operation failed. Check server logs.",
    "VALIDATION_ERROR": "Check the request body against the API schema.",
    "UNAUTHENTICATED": "Send the caller's user ID in the X-User-Id header.",
}

# Default hints by HTTP status code
STATUS_HINTS: dict[int, str] = {
    400: "Check the request parameters and body.",
    401: "Authenticate the request.",
    404: "The requested resource was not found. Verify the ID.",
    409: "The resource is busy. Retry the request.",
    422: "The request could not be processed. Check the input format.",
    500: "An internal error occurred. Check server logs.",
    504: "The request timed out. Retry later.",
}


def _get_hint(error_code: str, status_code: int) -> str:
    """Resolve hint from error code, falling back to status-based hint."""
    return HINT_MAP.get(error_code) or STATUS_HINTS.get(status_code, "")


def _status_for(exc: Exception) -> int:
    for exc_type, code in EXCEPTION_STATUS_MAP.items():
        if isinstance(exc, exc_type):
            return code
    return status.HTTP_500_INTERNAL_SERVER_ERROR


def build_error_response(request: Request, exc: Exception) -> JSONResponse:
    """Convert an exception to a standardized JSON response."""
    status_code = _status_for(exc)

    # Prefer InventoryError.code, fall back to class name
    if isinstance(exc, InventoryError):
        error_code = exc.code
        message = exc.message
        details = exc.details
    else:
        error_code = exc.__class__.__name__
        message = str(exc)
        details = {}

    request_id = getattr(request.state, "request_id", None)

    log = logger.error if status_code >= 500 else logger.warning
    log(
        "request_error",
        request_id=request_id,
        path=request.url.path,
        status=status_code,
        error_type=error_code,
        error=message,
        traceback=traceback.format_exc() if status_code >= 500 else None,
    )

    error_response = ErrorResponse(
        error_code=error_code,
        message=message,
        hint=_get_hint(error_code, status_code),
        details=details,
        path=request.url.path,
    )

    return JSONResponse(
        status_code=status_code,
        content=error_response.model_dump(mode="json"),
    )


class ErrorHandlerMiddleware(BaseHTTPMiddleware):
    """
    Global error handling middleware.

    Converts exceptions that escape the routers to standardized JSON error
    responses.
    """

    async def dispatch(
        self,
        request: Request,
        call_next: Callable[[Request], Awaitable[Response]],
    ) -> Response:
        """Handle request with error catching."""
        try:
            return await call_next(request)

        except Exception as e:
            return build_error_response(request, e)


def setup_exception_handlers(app: FastAPI) -> None:
    """Set up FastAPI exception handlers."""
    from fastapi.exceptions import RequestValidationError
    from starlette.exceptions import HTTPException

    @app.exception_handler(InventoryError)
    async def inventory_exception_handler(
        request: Request,
        exc: InventoryError,
    ) -> JSONResponse:
        """Handle domain errors raised by the inventory core."""
        return build_error_response(request, exc)

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(
        request: Request,
        exc: RequestValidationError,
    ) -> JSONResponse:
        """Handle Pydantic validation errors."""
        errors = []
        for error in exc.errors():
            loc = " -> ".join(str(part) for part in error["loc"])
            errors.append(f"{loc}: {error['msg']}")

        return JSONResponse(
            status_code=422,
            content=ErrorResponse(
                error_code="VALIDATION_ERROR",
                message="Request validation failed",
                hint="Check the request body fields and types.",
                detail="; ".join(errors),
                path=request.url.path,
            ).model_dump(mode="json"),
        )

    @app.exception_handler(HTTPException)
    async def http_exception_handler(
        request: Request,
        exc: HTTPException,
    ) -> JSONResponse:
        """Handle HTTP exceptions with standardized format."""
        error_code = _infer_error_code(exc.status_code, exc.detail or "")
        hint = _get_hint(error_code, exc.status_code)

        return JSONResponse(
            status_code=exc.status_code,
            content=ErrorResponse(
                error_code=error_code,
                message=exc.detail or "An error occurred",
                hint=hint,
                path=request.url.path,
            ).model_dump(mode="json"),
            headers=getattr(exc, "headers", None),
        )


def _infer_error_code(status_code: int, detail: str) -> str:
    """Infer a machine-readable error code from HTTPException detail."""
    detail_lower = detail.lower()

    if status_code == 401:
        return "UNAUTHENTICATED"

    if status_code == 404:
        if "reservation" in detail_lower:
            return "RESERVATION_NOT_FOUND"
        if "alert" in detail_lower:
            return "REORDER_ALERT_NOT_FOUND"
        if "purchase order" in detail_lower:
            return "PURCHASE_ORDER_NOT_FOUND"
        return "NOT_FOUND"

    if status_code == 400:
        return "BAD_REQUEST"

    if status_code == 405:
        return "METHOD_NOT_ALLOWED"

    if status_code == 422:
        return "UNPROCESSABLE_ENTITY"

    return "HTTP_ERROR"
