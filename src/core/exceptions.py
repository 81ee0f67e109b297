"""
Domain exceptions for the inventory core.

Provides specific exception types for different error scenarios.
"""

from typing import Any


class InventoryError(Exception):
    """Base exception for all inventory core errors."""

    def __init__(
        self,
        message: str,
        code: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code or self.__class__.__name__
        self.details = details or {}

    def to_dict(self) -> dict:
        """Convert to dictionary for API responses."""
        return {
            "error": self.code,
            "message": self.message,
            "details": self.details,
        }


# Concurrency
class ConcurrentUpdateError(InventoryError):
    """Another in-process update for the same cell is in progress."""

    def __init__(self, product_id: str, warehouse_id: str):
        super().__init__(
            f"Another update is in progress for product {product_id} "
            f"in warehouse {warehouse_id}",
            code="CONCURRENT_UPDATE",
            details={"product_id": product_id, "warehouse_id": warehouse_id},
        )


class DeadlineExceededError(InventoryError):
    """Caller-supplied deadline elapsed before the operation committed."""

    def __init__(self, operation: str, deadline: float):
        super().__init__(
            f"{operation} exceeded its deadline of {deadline}s",
            code="DEADLINE_EXCEEDED",
            details={"operation": operation, "deadline": deadline},
        )


# Stock Exceptions
class InsufficientStockError(InventoryError):
    """Mutation would drive on-hand stock below zero."""

    def __init__(self, product_id: str, warehouse_id: str, on_hand: int, requested: int):
        super().__init__(
            f"Insufficient stock. On hand: {on_hand}, Requested: {requested}",
            code="INSUFFICIENT_STOCK",
            details={
                "product_id": product_id,
                "warehouse_id": warehouse_id,
                "on_hand": on_hand,
                "requested": requested,
            },
        )


class InsufficientAvailableError(InventoryError):
    """Reservation would exceed available stock."""

    def __init__(self, product_id: str, warehouse_id: str, available: int, requested: int):
        super().__init__(
            f"Insufficient available stock. Available: {available}, Requested: {requested}",
            code="INSUFFICIENT_AVAILABLE",
            details={
                "product_id": product_id,
                "warehouse_id": warehouse_id,
                "available": available,
                "requested": requested,
            },
        )


# Not Found Exceptions
class NotFoundError(InventoryError):
    """Base exception for missing records."""

    pass


class InventoryCellNotFoundError(NotFoundError):
    """Inventory cell does not exist."""

    def __init__(self, product_id: str, warehouse_id: str):
        super().__init__(
            f"Inventory record not found for product {product_id} "
            f"in warehouse {warehouse_id}",
            code="INVENTORY_NOT_FOUND",
            details={"product_id": product_id, "warehouse_id": warehouse_id},
        )


class ReservationNotFoundError(NotFoundError):
    """Active reservation not found."""

    def __init__(self, reservation_id: int):
        super().__init__(
            f"Active reservation not found: {reservation_id}",
            code="RESERVATION_NOT_FOUND",
            details={"reservation_id": reservation_id},
        )


class ProductNotFoundError(NotFoundError):
    """Product not found."""

    def __init__(self, product_id: str):
        super().__init__(
            f"Product not found: {product_id}",
            code="PRODUCT_NOT_FOUND",
            details={"product_id": product_id},
        )


class WarehouseNotFoundError(NotFoundError):
    """Warehouse not found."""

    def __init__(self, warehouse_id: str):
        super().__init__(
            f"Warehouse not found: {warehouse_id}",
            code="WAREHOUSE_NOT_FOUND",
            details={"warehouse_id": warehouse_id},
        )


class PurchaseOrderNotFoundError(NotFoundError):
    """Purchase order not found."""

    def __init__(self, purchase_order_id: int):
        super().__init__(
            f"Purchase order not found: {purchase_order_id}",
            code="PURCHASE_ORDER_NOT_FOUND",
            details={"purchase_order_id": purchase_order_id},
        )


class ReorderAlertNotFoundError(NotFoundError):
    """Reorder alert not found."""

    def __init__(self, alert_id: int):
        super().__init__(
            f"Reorder alert not found: {alert_id}",
            code="REORDER_ALERT_NOT_FOUND",
            details={"alert_id": alert_id},
        )


# Invariant Exceptions
class InvariantViolationError(InventoryError):
    """A consistency rule was broken; the enclosing transaction must roll back."""

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(
            message,
            code="INVARIANT_VIOLATION",
            details=details,
        )


class CostLayerShortfallError(InvariantViolationError):
    """Open cost layers cannot cover an outbound quantity."""

    def __init__(self, product_id: str, warehouse_id: str, remaining: int, requested: int):
        super().__init__(
            f"Cost layers hold {remaining} units, cannot draw {requested}",
            details={
                "product_id": product_id,
                "warehouse_id": warehouse_id,
                "remaining": remaining,
                "requested": requested,
            },
        )


class TransferCompensationError(InvariantViolationError):
    """Transfer destination leg failed and the source leg could not be restored."""

    def __init__(self, transfer_id: int | None, reason: str, details: dict[str, Any]):
        super().__init__(
            f"Transfer rollback failed, operator review required: {reason}",
            details={"transfer_id": transfer_id, "reason": reason, **details},
        )


# Storage Exceptions
class PersistenceError(InventoryError):
    """Persistence gateway reported an I/O failure."""

    def __init__(self, operation: str, error: str):
        super().__init__(
            f"Database error during {operation}: {error}",
            code="PERSISTENCE_ERROR",
            details={"operation": operation, "error": error},
        )


# Validation Exceptions
class ValidationError(InventoryError):
    """Input validation failed."""

    def __init__(self, field: str, message: str, value: Any = None):
        super().__init__(
            f"Validation error for '{field}': {message}",
            code="VALIDATION_ERROR",
            details={
                "field": field,
                "message": message,
                "value": str(value)[:100] if value is not None else None,
            },
        )


class SameWarehouseTransferError(ValidationError):
    """Source and destination warehouses are the same."""

    def __init__(self, warehouse_id: str):
        super().__init__(
            field="to_warehouse_id",
            message="Source and destination warehouses cannot be the same",
            value=warehouse_id,
        )
        self.code = "SAME_WAREHOUSE_TRANSFER"


class InvalidStatusError(ValidationError):
    """Record is in a status that does not allow the requested action."""

    def __init__(self, entity: str, status: str, action: str):
        super().__init__(
            field="status",
            message=f"Cannot {action} {entity} in status '{status}'",
            value=status,
        )
        self.code = "INVALID_STATUS"
        self.details.update({"entity": entity, "action": action})


class ConfigurationError(InventoryError):
    """Configuration error."""

    pass
