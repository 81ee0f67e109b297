"""
Transfer Orchestrator.

A transfer is two stock mutations, not one transaction: the source leg
commits first, then the destination leg. When the destination leg fails
the source leg is compensated with an inverse adjustment. If that also
fails the stock is orphaned and the transfer is recorded as failed for
operator review.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass

from tenacity import (
    AsyncRetrying,
    RetryCallState,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from src.config import get_logger
from src.core.entities.inventory import (
    CostingMethod,
    InventoryCell,
    MovementType,
    StockTransfer,
    StockUpdate,
    TransferStatus,
    utcnow,
)
from src.core.exceptions import (
    ConcurrentUpdateError,
    SameWarehouseTransferError,
    TransferCompensationError,
    ValidationError,
)
from src.core.interfaces.inventory_store import IInventoryGateway
from src.core.services.guards import require_caller
from src.core.services.stock_mutator import StockMutator, StockUpdateResult

logger = get_logger(__name__)

TRANSFER_ROLLBACK_REASON = "transfer_rollback"


def _log_compensation_retry(retry_state: RetryCallState) -> None:
    logger.warning(
        "transfer_compensation_retry",
        attempt=retry_state.attempt_number,
        error=str(retry_state.outcome.exception()) if retry_state.outcome else None,
    )


@dataclass
class TransferResult:
    transfer: StockTransfer
    source: InventoryCell
    destination: InventoryCell


class TransferOrchestrator:
    """Moves stock between two warehouses with an explicit compensating write."""

    def __init__(
        self,
        gateway: IInventoryGateway,
        mutator: StockMutator,
        compensation_attempts: int = 3,
        compensation_backoff: float = 0.05,
    ) -> None:
        self._gateway = gateway
        self._mutator = mutator
        self._compensation_attempts = max(1, compensation_attempts)
        self._compensation_backoff = compensation_backoff

    async def transfer(
        self,
        product_id: str,
        from_warehouse_id: str,
        to_warehouse_id: str,
        quantity: int,
        caller: str | None,
        reference: str | None = None,
        reason: str | None = None,
        costing_method: CostingMethod = CostingMethod.FIFO,
        deadline: float | None = None,
    ) -> TransferResult:
        """
        Transfer `quantity` units of a product between warehouses.

        The destination receives the stock at the source's weighted average
        cost as observed after the source leg.

        Raises:
            SameWarehouseTransferError: from == to.
            InsufficientStockError: The source cannot cover the quantity.
            TransferCompensationError: The destination leg failed and the
                source could not be restored.
        """
        if from_warehouse_id == to_warehouse_id:
            raise SameWarehouseTransferError(from_warehouse_id)
        if quantity <= 0:
            raise ValidationError("quantity", "Transfer quantity must be positive", quantity)
        require_caller(caller)

        loop = asyncio.get_running_loop()
        expires = loop.time() + deadline if deadline is not None else None

        def remaining() -> float | None:
            if expires is None:
                return None
            return max(0.0, expires - loop.time())

        outbound = await self._mutator.apply(
            StockUpdate(
                product_id=product_id,
                warehouse_id=from_warehouse_id,
                delta=-quantity,
                movement_type=MovementType.TRANSFER_OUT,
                reference=reference,
                reason=reason,
                costing_method=costing_method,
                prevent_negative=True,
            ),
            caller,
            deadline=remaining(),
        )

        unit_cost = outbound.cell.weighted_avg_cost or outbound.unit_cost

        try:
            inbound = await self._mutator.apply(
                StockUpdate(
                    product_id=product_id,
                    warehouse_id=to_warehouse_id,
                    delta=quantity,
                    movement_type=MovementType.TRANSFER_IN,
                    unit_cost=unit_cost,
                    reference=reference,
                    reason=reason,
                    costing_method=costing_method,
                    prevent_negative=False,
                ),
                caller,
                deadline=remaining(),
            )
        except (Exception, asyncio.CancelledError) as leg_error:
            await self._compensate(
                product_id,
                from_warehouse_id,
                to_warehouse_id,
                quantity,
                outbound,
                leg_error,
                caller,
                reference,
            )
            raise

        transfer = StockTransfer(
            product_id=product_id,
            from_warehouse_id=from_warehouse_id,
            to_warehouse_id=to_warehouse_id,
            quantity=quantity,
            unit_cost=unit_cost,
            total_cost=quantity * unit_cost,
            status=TransferStatus.COMPLETED,
            reference=reference,
            reason=reason,
            created_by=caller,
            created_at=utcnow(),
        )
        try:
            async with self._gateway.unit_of_work() as uow:
                transfer = await uow.add_transfer(transfer)
        except Exception as e:
            # Both legs committed; only the summary row is missing
            logger.error(
                "transfer_record_failed",
                product_id=product_id,
                from_warehouse_id=from_warehouse_id,
                to_warehouse_id=to_warehouse_id,
                quantity=quantity,
                error=str(e),
            )
            raise

        logger.info(
            "stock_transferred",
            transfer_id=transfer.id,
            product_id=product_id,
            from_warehouse_id=from_warehouse_id,
            to_warehouse_id=to_warehouse_id,
            quantity=quantity,
            unit_cost=round(unit_cost, 4),
            caller=caller,
        )
        return TransferResult(
            transfer=transfer,
            source=outbound.cell,
            destination=inbound.cell,
        )

    def _compensation_retry(self) -> AsyncRetrying:
        """Retry the rollback only while another update holds the source cell."""
        return AsyncRetrying(
            stop=stop_after_attempt(self._compensation_attempts),
            wait=wait_exponential(
                multiplier=self._compensation_backoff,
                max=self._compensation_backoff * 8,
            ),
            retry=retry_if_exception_type(ConcurrentUpdateError),
            before_sleep=_log_compensation_retry,
            reraise=True,
        )

    async def _compensate(
        self,
        product_id: str,
        from_warehouse_id: str,
        to_warehouse_id: str,
        quantity: int,
        outbound: StockUpdateResult,
        leg_error: BaseException,
        caller: str,
        reference: str | None,
    ) -> None:
        """Restore the source leg, or record the transfer as failed and raise."""
        restore = StockUpdate(
            product_id=product_id,
            warehouse_id=from_warehouse_id,
            delta=quantity,
            movement_type=MovementType.ADJUSTMENT_INCREASE,
            unit_cost=outbound.unit_cost,
            reference=reference,
            reason=TRANSFER_ROLLBACK_REASON,
            prevent_negative=False,
        )

        try:
            async for attempt in self._compensation_retry():
                with attempt:
                    # The caller deadline does not apply; an abandoned rollback orphans stock
                    await self._mutator.apply(restore, caller)
        except Exception as e:
            compensation_error = e
        else:
            logger.warning(
                "transfer_compensated",
                product_id=product_id,
                from_warehouse_id=from_warehouse_id,
                to_warehouse_id=to_warehouse_id,
                quantity=quantity,
                error=str(leg_error),
            )
            return

        failed = StockTransfer(
            product_id=product_id,
            from_warehouse_id=from_warehouse_id,
            to_warehouse_id=to_warehouse_id,
            quantity=quantity,
            unit_cost=outbound.unit_cost,
            total_cost=outbound.total_cost,
            status=TransferStatus.FAILED,
            reference=reference,
            reason=TRANSFER_ROLLBACK_REASON,
            failure_reason=f"destination: {leg_error}; rollback: {compensation_error}",
            created_by=caller,
            created_at=utcnow(),
        )
        transfer_id = None
        try:
            async with self._gateway.unit_of_work() as uow:
                transfer_id = (await uow.add_transfer(failed)).id
        except Exception as e:
            logger.error("transfer_failure_record_failed", product_id=product_id, error=str(e))

        details = {
            "product_id": product_id,
            "from_warehouse_id": from_warehouse_id,
            "to_warehouse_id": to_warehouse_id,
            "quantity": quantity,
            "outbound_movement_id": outbound.movement.id if outbound.movement else None,
        }
        logger.critical(
            "transfer_orphaned",
            transfer_id=transfer_id,
            destination_error=str(leg_error),
            rollback_error=str(compensation_error),
            **details,
        )
        raise TransferCompensationError(
            transfer_id, str(compensation_error), details
        ) from compensation_error
