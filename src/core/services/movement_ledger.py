"""Movement Ledger: append-only writer of stock movements."""

from src.config import get_logger
from src.core.entities.inventory import StockMovement, StockUpdate, utcnow
from src.core.exceptions import InvariantViolationError
from src.core.interfaces.inventory_store import IInventoryUnitOfWork

logger = get_logger(__name__)


class MovementLedger:
    """
    Writes exactly one record per successful mutation.

    Runs inside the mutator's unit of work. Any failure is raised as an
    InvariantViolationError so the enclosing transaction rolls back and the
    cell update never commits without its ledger entry.
    """

    async def append(
        self,
        uow: IInventoryUnitOfWork,
        update: StockUpdate,
        prev_on_hand: int,
        new_on_hand: int,
        unit_cost: float,
        total_cost: float,
        caller: str | None,
    ) -> StockMovement:
        quantity = update.quantity
        if prev_on_hand + update.movement_type.sign * quantity != new_on_hand:
            raise InvariantViolationError(
                "Ledger continuity broken: pre/post quantities do not match movement",
                details={
                    "product_id": update.product_id,
                    "warehouse_id": update.warehouse_id,
                    "movement_type": update.movement_type.value,
                    "quantity": quantity,
                    "prev_on_hand": prev_on_hand,
                    "new_on_hand": new_on_hand,
                },
            )

        movement = StockMovement(
            product_id=update.product_id,
            warehouse_id=update.warehouse_id,
            movement_type=update.movement_type,
            quantity=quantity,
            unit_cost=unit_cost,
            total_cost=total_cost,
            prev_on_hand=prev_on_hand,
            new_on_hand=new_on_hand,
            reference=update.reference,
            reason=update.reason,
            batch_id=update.batch_id,
            created_by=caller,
            created_at=utcnow(),
        )

        try:
            return await uow.add_movement(movement)
        except Exception as e:
            logger.error(
                "ledger_write_failed",
                product_id=update.product_id,
                warehouse_id=update.warehouse_id,
                error=str(e),
            )
            raise InvariantViolationError(
                f"Ledger write failed: {e}",
                details={
                    "product_id": update.product_id,
                    "warehouse_id": update.warehouse_id,
                },
            ) from e
