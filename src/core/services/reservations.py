"""
Reservation Manager.

Owns Reservation rows and the `reserved` field of a cell. Reserve and
release share the cell lease with the stock mutator, so a reservation never
interleaves with a stock change on the same cell inside one process.
"""

from __future__ import annotations

from datetime import datetime

from src.config import get_logger
from src.core.entities.inventory import (
    InventoryCell,
    Reservation,
    ReservationStatus,
    utcnow,
)
from src.core.exceptions import (
    InsufficientAvailableError,
    ReservationNotFoundError,
    ValidationError,
)
from src.core.interfaces.inventory_store import IInventoryGateway, IInventoryUnitOfWork
from src.core.interfaces.notifications import IBroadcastSink
from src.core.services.deadlines import deadline_scope
from src.core.services.guards import require_caller, require_reference_data
from src.core.services.key_lease import KeyedLease
from src.core.services.post_commit import publish_cell_update

logger = get_logger(__name__)


def _release_quantity(cell: InventoryCell, quantity: int) -> None:
    cell.reserved = max(0, cell.reserved - quantity)
    cell.recompute_available()


async def consume_reservation(
    uow: IInventoryUnitOfWork,
    cell: InventoryCell,
    reservation_id: int,
    caller: str | None,
    now: datetime | None = None,
) -> Reservation:
    """
    Mark an active reservation consumed inside an open unit of work.

    Decrements the locked cell's reserved quantity; the caller persists the
    cell. Used by the sale path that fulfils a reservation.

    Raises:
        ReservationNotFoundError: No active reservation with that id.
        ValidationError: The reservation belongs to another cell.
    """
    reservation = await uow.get_reservation(reservation_id)
    if reservation is None or reservation.status != ReservationStatus.ACTIVE:
        raise ReservationNotFoundError(reservation_id)
    if (reservation.product_id, reservation.warehouse_id) != cell.key:
        raise ValidationError(
            "reservation_id",
            "Reservation does not belong to this product and warehouse",
            reservation_id,
        )

    _release_quantity(cell, reservation.quantity)
    reservation.status = ReservationStatus.CONSUMED
    reservation.consumed_at = now or utcnow()
    reservation.released_by = caller
    return await uow.update_reservation(reservation)


class ReservationManager:
    """Allocates and releases soft holds against available stock."""

    def __init__(
        self,
        gateway: IInventoryGateway,
        leases: KeyedLease,
        broadcaster: IBroadcastSink | None = None,
        default_deadline: float | None = None,
    ) -> None:
        self._gateway = gateway
        self._leases = leases
        self._broadcaster = broadcaster
        self._default_deadline = default_deadline

    async def reserve(
        self,
        product_id: str,
        warehouse_id: str,
        quantity: int,
        caller: str | None,
        reference: str | None = None,
        reason: str | None = None,
        deadline: float | None = None,
    ) -> tuple[InventoryCell, Reservation]:
        """
        Hold `quantity` units of available stock.

        Raises:
            InsufficientAvailableError: available < quantity.
            ConcurrentUpdateError: The cell is being changed by another caller.
        """
        require_caller(caller)
        if quantity <= 0:
            raise ValidationError("quantity", "Reservation quantity must be positive", quantity)

        key = (product_id, warehouse_id)
        deadline = deadline if deadline is not None else self._default_deadline

        with self._leases.hold(key):
            async with deadline_scope("reserve", deadline):
                async with self._gateway.unit_of_work() as uow:
                    await require_reference_data(uow, product_id, warehouse_id)
                    cell = await uow.lock_cell(product_id, warehouse_id, caller)
                    available = cell.available
                    if available is None:
                        available = max(0, cell.on_hand - cell.reserved)
                    if available < quantity:
                        raise InsufficientAvailableError(
                            product_id, warehouse_id, available=available, requested=quantity
                        )

                    now = utcnow()
                    cell.reserved += quantity
                    cell.recompute_available()
                    cell.updated_at = now
                    cell.updated_by = caller
                    cell = await uow.save_cell(cell)

                    reservation = await uow.add_reservation(
                        Reservation(
                            product_id=product_id,
                            warehouse_id=warehouse_id,
                            quantity=quantity,
                            reference=reference,
                            reason=reason,
                            created_by=caller,
                            created_at=now,
                        )
                    )

            await publish_cell_update(self._broadcaster, cell)

        logger.info(
            "stock_reserved",
            reservation_id=reservation.id,
            product_id=product_id,
            warehouse_id=warehouse_id,
            quantity=quantity,
            reserved=cell.reserved,
            available=cell.available,
            caller=caller,
        )
        return cell, reservation

    async def release(
        self,
        reservation_id: int,
        caller: str | None,
        deadline: float | None = None,
    ) -> InventoryCell:
        """
        Return a reservation's quantity to available stock.

        Raises:
            ReservationNotFoundError: Missing or no longer active.
        """
        require_caller(caller)

        existing = await self._gateway.get_reservation(reservation_id)
        if existing is None or existing.status != ReservationStatus.ACTIVE:
            raise ReservationNotFoundError(reservation_id)

        key = (existing.product_id, existing.warehouse_id)
        deadline = deadline if deadline is not None else self._default_deadline

        with self._leases.hold(key):
            async with deadline_scope("release", deadline):
                async with self._gateway.unit_of_work() as uow:
                    cell = await uow.lock_cell(*key, caller)
                    # Re-read under the write lock; another process may have released it
                    reservation = await uow.get_reservation(reservation_id)
                    if reservation is None or reservation.status != ReservationStatus.ACTIVE:
                        raise ReservationNotFoundError(reservation_id)

                    now = utcnow()
                    _release_quantity(cell, reservation.quantity)
                    cell.updated_at = now
                    cell.updated_by = caller
                    cell = await uow.save_cell(cell)

                    reservation.status = ReservationStatus.RELEASED
                    reservation.released_at = now
                    reservation.released_by = caller
                    await uow.update_reservation(reservation)

            await publish_cell_update(self._broadcaster, cell)

        logger.info(
            "reservation_released",
            reservation_id=reservation_id,
            product_id=key[0],
            warehouse_id=key[1],
            reserved=cell.reserved,
            available=cell.available,
            caller=caller,
        )
        return cell
