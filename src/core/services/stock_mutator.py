"""
Stock Mutator: the single path for changing a cell's on-hand stock.

Each call is one transactional stage (lock, compute, cost, persist, ledger)
followed by best-effort post-commit side effects (reorder enqueue and
broadcast). Side effects never run inside the transaction and never roll
back a committed change.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol

from src.config import get_logger
from src.core.entities.inventory import (
    InventoryCell,
    MovementType,
    StockMovement,
    StockUpdate,
    utcnow,
)
from src.core.exceptions import InsufficientStockError, ValidationError
from src.core.interfaces.inventory_store import IInventoryGateway
from src.core.interfaces.notifications import IBroadcastSink
from src.core.services.cost_layers import CostLayerEngine, OutboundCost
from src.core.services.deadlines import deadline_scope
from src.core.services.guards import require_caller, require_reference_data
from src.core.services.key_lease import KeyedLease
from src.core.services.movement_ledger import MovementLedger
from src.core.services.post_commit import publish_cell_update
from src.core.services.reservations import consume_reservation

logger = get_logger(__name__)


class ReorderScheduler(Protocol):
    """Anything that accepts non-blocking reorder check requests."""

    def enqueue(self, product_id: str, warehouse_id: str) -> bool: ...


@dataclass
class StockUpdateResult:
    """Committed outcome of one mutation."""

    cell: InventoryCell
    movement: StockMovement | None
    unit_cost: float
    total_cost: float


def parse_movement_type(value: str | MovementType) -> MovementType:
    """Parse a movement type, rejecting unknown values as input errors."""
    if isinstance(value, MovementType):
        return value
    try:
        return MovementType(value)
    except ValueError:
        raise ValidationError("movement_type", "Unknown movement type", value) from None


def validate_update(update: StockUpdate, caller: str | None) -> None:
    """Reject requests whose shape is inconsistent before any lock is taken."""
    require_caller(caller)
    if update.delta == 0:
        raise ValidationError("delta", "Quantity change cannot be zero", update.delta)

    movement_type = update.movement_type
    if movement_type.is_inbound and update.delta < 0:
        raise ValidationError(
            "delta",
            f"Movement type '{movement_type.value}' requires a positive quantity change",
            update.delta,
        )
    if not movement_type.is_inbound and update.delta > 0:
        raise ValidationError(
            "delta",
            f"Movement type '{movement_type.value}' requires a negative quantity change",
            update.delta,
        )
    if update.unit_cost is not None and update.unit_cost < 0:
        raise ValidationError("unit_cost", "Unit cost cannot be negative", update.unit_cost)
    if update.reservation_id is not None and movement_type.is_inbound:
        raise ValidationError(
            "reservation_id",
            "Only outbound movements can consume a reservation",
            update.reservation_id,
        )


class StockMutator:
    """Atomic, serialized mutation of one (product, warehouse) cell."""

    def __init__(
        self,
        gateway: IInventoryGateway,
        leases: KeyedLease | None = None,
        cost_engine: CostLayerEngine | None = None,
        ledger: MovementLedger | None = None,
        broadcaster: IBroadcastSink | None = None,
        reorder_scheduler: ReorderScheduler | None = None,
        default_deadline: float | None = None,
    ) -> None:
        self._gateway = gateway
        self._leases = leases or KeyedLease()
        self._costs = cost_engine or CostLayerEngine()
        self._ledger = ledger or MovementLedger()
        self._broadcaster = broadcaster
        self._reorder = reorder_scheduler
        self._default_deadline = default_deadline

    @property
    def leases(self) -> KeyedLease:
        return self._leases

    @property
    def broadcaster(self) -> IBroadcastSink | None:
        return self._broadcaster

    async def update_stock(
        self,
        update: StockUpdate,
        caller: str | None,
        deadline: float | None = None,
    ) -> InventoryCell:
        """Apply one mutation and return the committed cell."""
        result = await self.apply(update, caller, deadline=deadline)
        return result.cell

    async def apply(
        self,
        update: StockUpdate,
        caller: str | None,
        deadline: float | None = None,
    ) -> StockUpdateResult:
        """
        Apply one mutation.

        Args:
            update: Requested change; the sign of `delta` must match the
                movement type.
            caller: Identity recorded in the audit fields.
            deadline: Seconds before the transaction is aborted.

        Returns:
            The committed cell, its ledger entry and the recorded cost.

        Raises:
            ConcurrentUpdateError: Another in-process update holds the cell.
            InsufficientStockError: `prevent_negative` and on-hand would drop below zero.
            ValidationError: The request is inconsistent.
            DeadlineExceededError: The deadline elapsed; nothing was committed.
        """
        validate_update(update, caller)
        deadline = deadline if deadline is not None else self._default_deadline

        with self._leases.hold(update.key):
            async with deadline_scope("update_stock", deadline):
                result = await self._mutate(update, caller)

            # Post-commit, still under the lease so per-cell events keep commit order
            self.schedule_reorder_check(result.cell)
            await publish_cell_update(self._broadcaster, result.cell)

        logger.info(
            "stock_updated",
            product_id=update.product_id,
            warehouse_id=update.warehouse_id,
            movement_type=update.movement_type.value,
            delta=update.delta,
            on_hand=result.cell.on_hand,
            available=result.cell.available,
            unit_cost=round(result.unit_cost, 4),
            caller=caller,
        )
        return result

    async def _mutate(self, update: StockUpdate, caller: str | None) -> StockUpdateResult:
        async with self._gateway.unit_of_work() as uow:
            product = await require_reference_data(uow, update.product_id, update.warehouse_id)

            cell = await uow.lock_cell(update.product_id, update.warehouse_id, caller)
            prev_on_hand = cell.on_hand
            new_on_hand = prev_on_hand + update.delta

            if update.prevent_negative and new_on_hand < 0:
                raise InsufficientStockError(
                    update.product_id,
                    update.warehouse_id,
                    on_hand=prev_on_hand,
                    requested=update.quantity,
                )

            layers = await uow.list_cost_layers(update.product_id, update.warehouse_id)
            now = utcnow()

            if update.delta > 0:
                unit_cost = (
                    update.unit_cost if update.unit_cost is not None else product.cost_price
                )
                layer = self._costs.on_inbound(cell, layers, update.quantity, unit_cost, now)
                await uow.add_cost_layer(layer)
                total_cost = update.quantity * unit_cost
            else:
                draw = self._costs.on_outbound(
                    cell,
                    layers,
                    update.quantity,
                    update.costing_method,
                    fallback_cost=product.cost_price,
                )
                await self._persist_draw(uow, draw)
                unit_cost = draw.unit_cost
                total_cost = draw.total_cost

            if update.reservation_id is not None:
                await consume_reservation(uow, cell, update.reservation_id, caller, now)

            cell.on_hand = new_on_hand
            cell.recompute_available()
            cell.last_movement_at = now
            cell.updated_at = now
            cell.updated_by = caller
            cell = await uow.save_cell(cell)

            movement = None
            if update.create_movement:
                movement = await self._ledger.append(
                    uow,
                    update,
                    prev_on_hand,
                    new_on_hand,
                    unit_cost,
                    total_cost,
                    caller,
                )

        return StockUpdateResult(
            cell=cell,
            movement=movement,
            unit_cost=unit_cost,
            total_cost=total_cost,
        )

    @staticmethod
    async def _persist_draw(uow, draw: OutboundCost) -> None:
        for layer in draw.exhausted_layers:
            await uow.delete_cost_layer(layer.id)
        for layer in draw.partially_drawn_layers:
            await uow.update_cost_layer(layer)

    def schedule_reorder_check(self, cell: InventoryCell) -> None:
        if self._reorder is None:
            return
        try:
            self._reorder.enqueue(cell.product_id, cell.warehouse_id)
        except Exception as e:
            logger.warning(
                "reorder_enqueue_failed",
                product_id=cell.product_id,
                warehouse_id=cell.warehouse_id,
                error=str(e),
            )
