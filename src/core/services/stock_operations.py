"""Composite stock operations built on the stock mutator."""

from __future__ import annotations

import asyncio
from collections import OrderedDict
from dataclasses import dataclass
from enum import Enum

from src.config import get_logger
from src.core.entities.inventory import (
    CostingMethod,
    InventoryCell,
    MovementType,
    StockUpdate,
    utcnow,
)
from src.core.exceptions import DeadlineExceededError, InventoryError, ValidationError
from src.core.interfaces.inventory_store import IInventoryGateway
from src.core.services.deadlines import deadline_scope
from src.core.services.guards import require_caller, require_reference_data
from src.core.services.post_commit import publish_cell_update
from src.core.services.stock_mutator import StockMutator

logger = get_logger(__name__)


class AdjustmentKind(str, Enum):
    INCREASE = "increase"
    DECREASE = "decrease"


@dataclass
class BulkItemResult:
    product_id: str
    warehouse_id: str
    success: bool
    cell: InventoryCell | None = None
    error_code: str | None = None
    error: str | None = None


@dataclass
class BulkUpdateResult:
    items: list[BulkItemResult]

    @property
    def successful(self) -> list[BulkItemResult]:
        return [item for item in self.items if item.success]

    @property
    def failed(self) -> list[BulkItemResult]:
        return [item for item in self.items if not item.success]


@dataclass
class CountResult:
    product_id: str
    previous_quantity: int
    counted_quantity: int
    variance: int
    cell: InventoryCell | None = None
    error: str | None = None


def _group_by_warehouse(updates: list[StockUpdate]) -> list[list[StockUpdate]]:
    groups: OrderedDict[str, list[StockUpdate]] = OrderedDict()
    for update in updates:
        groups.setdefault(update.warehouse_id, []).append(update)
    return list(groups.values())


class StockOperations:
    """Bulk updates, adjustments, physical counts and reorder thresholds."""

    def __init__(
        self,
        gateway: IInventoryGateway,
        mutator: StockMutator,
        batch_size: int = 50,
    ):
        self._gateway = gateway
        self._mutator = mutator
        self._batch_size = max(1, batch_size)

    async def bulk_update(
        self,
        updates: list[StockUpdate],
        caller: str | None,
        deadline: float | None = None,
    ) -> BulkUpdateResult:
        """
        Apply many updates with per-item fault isolation.

        Updates are grouped by warehouse and run in batches. `deadline` bounds
        the whole call: items not started before it elapses are reported as
        failed without being attempted.
        """
        loop = asyncio.get_running_loop()
        expires = loop.time() + deadline if deadline is not None else None
        results: list[BulkItemResult] = []

        for group in _group_by_warehouse(updates):
            for start in range(0, len(group), self._batch_size):
                for update in group[start:start + self._batch_size]:
                    remaining = None
                    if expires is not None:
                        remaining = expires - loop.time()
                        if remaining <= 0:
                            error = DeadlineExceededError("bulk_update", deadline)
                            results.append(self._failure(update, error))
                            continue
                    try:
                        cell = await self._mutator.update_stock(update, caller, deadline=remaining)
                    except InventoryError as e:
                        results.append(self._failure(update, e))
                    else:
                        results.append(
                            BulkItemResult(
                                product_id=update.product_id,
                                warehouse_id=update.warehouse_id,
                                success=True,
                                cell=cell,
                            )
                        )

        result = BulkUpdateResult(items=results)
        logger.info(
            "bulk_stock_update",
            total=len(updates),
            successful=len(result.successful),
            failed=len(result.failed),
            caller=caller,
        )
        return result

    @staticmethod
    def _failure(update: StockUpdate, error: InventoryError) -> BulkItemResult:
        return BulkItemResult(
            product_id=update.product_id,
            warehouse_id=update.warehouse_id,
            success=False,
            error_code=error.code,
            error=error.message,
        )

    async def adjust(
        self,
        product_id: str,
        warehouse_id: str,
        kind: AdjustmentKind,
        quantity: int,
        reason: str,
        caller: str | None,
        unit_cost: float | None = None,
        costing_method: CostingMethod = CostingMethod.FIFO,
        deadline: float | None = None,
    ) -> InventoryCell:
        """Manual stock correction as an adjustment movement."""
        if quantity <= 0:
            raise ValidationError("quantity", "Adjustment quantity must be positive", quantity)
        if not reason:
            raise ValidationError("reason", "An adjustment reason is required")

        increase = kind == AdjustmentKind.INCREASE
        return await self._mutator.update_stock(
            StockUpdate(
                product_id=product_id,
                warehouse_id=warehouse_id,
                delta=quantity if increase else -quantity,
                movement_type=(
                    MovementType.ADJUSTMENT_INCREASE
                    if increase
                    else MovementType.ADJUSTMENT_DECREASE
                ),
                unit_cost=unit_cost,
                reason=reason,
                costing_method=costing_method,
            ),
            caller,
            deadline=deadline,
        )

    async def stock_count(
        self,
        warehouse_id: str,
        counts: list[tuple[str, int]],
        caller: str | None,
        reason: str = "Physical stock count",
        deadline: float | None = None,
    ) -> list[CountResult]:
        """
        Reconcile on-hand quantities with a physical count.

        Products without a cell in the warehouse are skipped. Each non-zero
        variance is posted as count_increase or count_decrease.
        """
        require_caller(caller)
        for product_id, counted in counts:
            if counted < 0:
                raise ValidationError("counted_quantity", "Counted quantity cannot be negative", counted)

        results: list[CountResult] = []
        for product_id, counted in counts:
            cell = await self._gateway.get_cell(product_id, warehouse_id)
            if cell is None:
                logger.debug("stock_count_skipped", product_id=product_id, warehouse_id=warehouse_id)
                continue

            variance = counted - cell.on_hand
            result = CountResult(
                product_id=product_id,
                previous_quantity=cell.on_hand,
                counted_quantity=counted,
                variance=variance,
                cell=cell,
            )
            if variance != 0:
                try:
                    result.cell = await self._mutator.update_stock(
                        StockUpdate(
                            product_id=product_id,
                            warehouse_id=warehouse_id,
                            delta=variance,
                            movement_type=(
                                MovementType.COUNT_INCREASE
                                if variance > 0
                                else MovementType.COUNT_DECREASE
                            ),
                            reason=reason,
                        ),
                        caller,
                        deadline=deadline,
                    )
                except InventoryError as e:
                    result.error = e.message
                else:
                    if result.cell.on_hand != counted:
                        # Another movement landed between the read and the update
                        logger.warning(
                            "stock_count_drift",
                            product_id=product_id,
                            warehouse_id=warehouse_id,
                            counted=counted,
                            on_hand=result.cell.on_hand,
                        )
            results.append(result)

        logger.info(
            "stock_count_completed",
            warehouse_id=warehouse_id,
            counted=len(results),
            adjusted=sum(1 for r in results if r.variance != 0 and r.error is None),
            caller=caller,
        )
        return results

    async def set_reorder_levels(
        self,
        product_id: str,
        warehouse_id: str,
        reorder_level: int,
        reorder_quantity: int,
        caller: str | None,
        deadline: float | None = None,
    ) -> InventoryCell:
        """Write cell-level reorder thresholds, creating the cell if needed."""
        require_caller(caller)
        if reorder_level < 0:
            raise ValidationError("reorder_level", "Reorder level cannot be negative", reorder_level)
        if reorder_quantity < 0:
            raise ValidationError(
                "reorder_quantity", "Reorder quantity cannot be negative", reorder_quantity
            )

        with self._mutator.leases.hold((product_id, warehouse_id)):
            async with deadline_scope("set_reorder_levels", deadline):
                async with self._gateway.unit_of_work() as uow:
                    await require_reference_data(uow, product_id, warehouse_id)
                    cell = await uow.lock_cell(product_id, warehouse_id, caller)
                    cell.reorder_level = reorder_level
                    cell.reorder_quantity = reorder_quantity
                    cell.updated_at = utcnow()
                    cell.updated_by = caller
                    cell = await uow.save_cell(cell)

            self._mutator.schedule_reorder_check(cell)
            await publish_cell_update(self._mutator.broadcaster, cell)

        logger.info(
            "reorder_levels_updated",
            product_id=product_id,
            warehouse_id=warehouse_id,
            reorder_level=reorder_level,
            reorder_quantity=reorder_quantity,
            caller=caller,
        )
        return cell
