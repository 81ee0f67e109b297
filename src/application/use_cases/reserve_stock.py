"""Reservation Use Cases: hold and release available stock."""

from dataclasses import dataclass

from src.application.dto.requests import ReserveStockRequest
from src.application.dto.responses import (
    InventoryCellResponse,
    ReleaseReservationResponse,
    ReservationResponse,
    ReserveStockResponse,
)
from src.config import get_logger
from src.core.entities.inventory import InventoryCell, Reservation
from src.core.services import ReservationManager

logger = get_logger(__name__)


@dataclass
class ReserveStockResult:
    cell: InventoryCell
    reservation: Reservation


class ReserveStockUseCase:
    def __init__(self, manager: ReservationManager | None = None):
        self._manager = manager

    def _get_manager(self) -> ReservationManager:
        if self._manager is None:
            from src.application.services import get_reservation_manager

            self._manager = get_reservation_manager()
        return self._manager

    async def execute(self, request: ReserveStockRequest, caller: str | None) -> ReserveStockResult:
        logger.info(
            "reserve_stock_started",
            product_id=request.product_id,
            warehouse_id=request.warehouse_id,
            quantity=request.quantity,
        )
        cell, reservation = await self._get_manager().reserve(
            product_id=request.product_id,
            warehouse_id=request.warehouse_id,
            quantity=request.quantity,
            caller=caller,
            reference=request.reference,
            reason=request.reason,
            deadline=request.deadline_seconds,
        )
        return ReserveStockResult(cell=cell, reservation=reservation)

    def to_response(self, result: ReserveStockResult) -> ReserveStockResponse:
        return ReserveStockResponse(
            reservation=ReservationResponse.from_reservation(result.reservation),
            inventory=InventoryCellResponse.from_cell(result.cell),
        )


class ReleaseReservationUseCase:
    def __init__(self, manager: ReservationManager | None = None):
        self._manager = manager

    def _get_manager(self) -> ReservationManager:
        if self._manager is None:
            from src.application.services import get_reservation_manager

            self._manager = get_reservation_manager()
        return self._manager

    async def execute(self, reservation_id: int, caller: str | None) -> InventoryCell:
        logger.info("release_reservation_started", reservation_id=reservation_id)
        return await self._get_manager().release(reservation_id, caller)

    def to_response(self, reservation_id: int, cell: InventoryCell) -> ReleaseReservationResponse:
        return ReleaseReservationResponse(
            reservation_id=reservation_id,
            inventory=InventoryCellResponse.from_cell(cell),
        )
