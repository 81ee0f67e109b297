"""SQLite implementation of the inventory persistence gateway."""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import UTC, datetime

import aiosqlite

from src.config import get_logger
from src.core.entities.inventory import (
    AlertStatus,
    AlertType,
    CostLayer,
    InventoryCell,
    InventoryCellView,
    MovementType,
    Product,
    ReorderAlert,
    Reservation,
    ReservationStatus,
    StockMovement,
    StockTransfer,
    TransferStatus,
    UserProfile,
    Warehouse,
    utcnow,
)
from src.core.entities.purchase_order import (
    PurchaseOrder,
    PurchaseOrderLine,
    PurchaseOrderStatus,
)
from src.core.exceptions import PersistenceError
from src.core.interfaces.inventory_store import IInventoryGateway, IInventoryUnitOfWork
from src.infrastructure.storage.sqlite.connection import get_connection, get_transaction

logger = get_logger(__name__)

# Fixed-width UTC layout so stored timestamps compare correctly as text
_TS_FORMAT = "%Y-%m-%dT%H:%M:%S.%f+00:00"

_CELL_VIEW_SELECT = """
    SELECT i.*,
           p.sku, p.name AS product_name, p.unit, p.cost_price, p.price,
           p.reorder_level AS product_reorder_level,
           p.reorder_quantity AS product_reorder_quantity,
           p.category,
           w.name AS warehouse_name
    FROM inventory i
    JOIN products p ON p.id = i.product_id
    JOIN warehouses w ON w.id = i.warehouse_id
"""


def _ts(value: datetime | None) -> str | None:
    if value is None:
        return None
    if value.tzinfo is None:
        value = value.replace(tzinfo=UTC)
    return value.astimezone(UTC).strftime(_TS_FORMAT)


def _parse_ts(value: str | None) -> datetime | None:
    if not value:
        return None
    parsed = datetime.fromisoformat(value)
    return parsed if parsed.tzinfo else parsed.replace(tzinfo=UTC)


def _row_to_cell(row: aiosqlite.Row) -> InventoryCell:
    return InventoryCell(
        id=row["id"],
        product_id=row["product_id"],
        warehouse_id=row["warehouse_id"],
        on_hand=row["on_hand"],
        reserved=row["reserved"],
        available=row["available"],
        weighted_avg_cost=float(row["weighted_avg_cost"]),
        reorder_level=row["reorder_level"],
        reorder_quantity=row["reorder_quantity"],
        last_movement_at=_parse_ts(row["last_movement_at"]),
        created_by=row["created_by"],
        updated_by=row["updated_by"],
        created_at=_parse_ts(row["created_at"]),
        updated_at=_parse_ts(row["updated_at"]),
    )


def _row_to_cell_view(row: aiosqlite.Row) -> InventoryCellView:
    product = Product(
        id=row["product_id"],
        sku=row["sku"],
        name=row["product_name"],
        unit=row["unit"],
        cost_price=float(row["cost_price"]),
        price=float(row["price"]),
        reorder_level=row["product_reorder_level"],
        reorder_quantity=row["product_reorder_quantity"],
        category=row["category"],
    )
    return InventoryCellView(
        cell=_row_to_cell(row),
        product=product,
        warehouse_name=row["warehouse_name"],
    )


def _row_to_product(row: aiosqlite.Row) -> Product:
    return Product(
        id=row["id"],
        sku=row["sku"],
        name=row["name"],
        unit=row["unit"],
        cost_price=float(row["cost_price"]),
        price=float(row["price"]),
        reorder_level=row["reorder_level"],
        reorder_quantity=row["reorder_quantity"],
        category=row["category"],
    )


def _row_to_layer(row: aiosqlite.Row) -> CostLayer:
    return CostLayer(
        id=row["id"],
        product_id=row["product_id"],
        warehouse_id=row["warehouse_id"],
        unit_cost=float(row["unit_cost"]),
        original_quantity=row["original_quantity"],
        remaining_quantity=row["remaining_quantity"],
        created_at=_parse_ts(row["created_at"]),
    )


def _row_to_movement(row: aiosqlite.Row) -> StockMovement:
    return StockMovement(
        id=row["id"],
        product_id=row["product_id"],
        warehouse_id=row["warehouse_id"],
        movement_type=MovementType(row["movement_type"]),
        quantity=row["quantity"],
        unit_cost=float(row["unit_cost"]),
        total_cost=float(row["total_cost"]),
        prev_on_hand=row["prev_on_hand"],
        new_on_hand=row["new_on_hand"],
        reference=row["reference"],
        reason=row["reason"],
        batch_id=row["batch_id"],
        created_by=row["created_by"],
        created_at=_parse_ts(row["created_at"]),
    )


def _row_to_reservation(row: aiosqlite.Row) -> Reservation:
    return Reservation(
        id=row["id"],
        product_id=row["product_id"],
        warehouse_id=row["warehouse_id"],
        quantity=row["quantity"],
        reference=row["reference"],
        reason=row["reason"],
        status=ReservationStatus(row["status"]),
        created_by=row["created_by"],
        created_at=_parse_ts(row["created_at"]),
        released_at=_parse_ts(row["released_at"]),
        released_by=row["released_by"],
        consumed_at=_parse_ts(row["consumed_at"]),
    )


def _row_to_alert(row: aiosqlite.Row) -> ReorderAlert:
    return ReorderAlert(
        id=row["id"],
        product_id=row["product_id"],
        warehouse_id=row["warehouse_id"],
        on_hand_at_trigger=row["on_hand_at_trigger"],
        available_at_trigger=row["available_at_trigger"],
        reorder_level=row["reorder_level"],
        suggested_quantity=row["suggested_quantity"],
        alert_type=AlertType(row["alert_type"]),
        status=AlertStatus(row["status"]),
        notes=row["notes"],
        created_at=_parse_ts(row["created_at"]),
        updated_at=_parse_ts(row["updated_at"]),
        resolved_at=_parse_ts(row["resolved_at"]),
        resolved_by=row["resolved_by"],
    )


def _row_to_transfer(row: aiosqlite.Row) -> StockTransfer:
    return StockTransfer(
        id=row["id"],
        product_id=row["product_id"],
        from_warehouse_id=row["from_warehouse_id"],
        to_warehouse_id=row["to_warehouse_id"],
        quantity=row["quantity"],
        unit_cost=float(row["unit_cost"]),
        total_cost=float(row["total_cost"]),
        status=TransferStatus(row["status"]),
        reference=row["reference"],
        reason=row["reason"],
        failure_reason=row["failure_reason"],
        created_by=row["created_by"],
        created_at=_parse_ts(row["created_at"]),
    )


async def _fetch_product(conn: aiosqlite.Connection, product_id: str) -> Product | None:
    cursor = await conn.execute("SELECT * FROM products WHERE id = ?", (product_id,))
    row = await cursor.fetchone()
    return _row_to_product(row) if row else None


async def _fetch_warehouse(conn: aiosqlite.Connection, warehouse_id: str) -> Warehouse | None:
    cursor = await conn.execute("SELECT * FROM warehouses WHERE id = ?", (warehouse_id,))
    row = await cursor.fetchone()
    return Warehouse(id=row["id"], name=row["name"]) if row else None


async def _fetch_cell(
    conn: aiosqlite.Connection, product_id: str, warehouse_id: str
) -> InventoryCell | None:
    cursor = await conn.execute(
        "SELECT * FROM inventory WHERE product_id = ? AND warehouse_id = ?",
        (product_id, warehouse_id),
    )
    row = await cursor.fetchone()
    return _row_to_cell(row) if row else None


async def _fetch_layers(
    conn: aiosqlite.Connection, product_id: str, warehouse_id: str
) -> list[CostLayer]:
    cursor = await conn.execute(
        """
        SELECT * FROM cost_layers
        WHERE product_id = ? AND warehouse_id = ? AND remaining_quantity > 0
        ORDER BY created_at, id
        """,
        (product_id, warehouse_id),
    )
    return [_row_to_layer(row) for row in await cursor.fetchall()]


async def _fetch_reservation(
    conn: aiosqlite.Connection, reservation_id: int
) -> Reservation | None:
    cursor = await conn.execute(
        "SELECT * FROM stock_reservations WHERE id = ?", (reservation_id,)
    )
    row = await cursor.fetchone()
    return _row_to_reservation(row) if row else None


async def _fetch_purchase_order(
    conn: aiosqlite.Connection, purchase_order_id: int
) -> PurchaseOrder | None:
    cursor = await conn.execute(
        "SELECT * FROM purchase_orders WHERE id = ?", (purchase_order_id,)
    )
    row = await cursor.fetchone()
    if row is None:
        return None

    cursor = await conn.execute(
        "SELECT * FROM purchase_order_lines WHERE purchase_order_id = ? ORDER BY id",
        (purchase_order_id,),
    )
    lines = [
        PurchaseOrderLine(
            id=line["id"],
            purchase_order_id=line["purchase_order_id"],
            product_id=line["product_id"],
            quantity=line["quantity"],
            unit_cost=float(line["unit_cost"]),
            received_quantity=line["received_quantity"],
        )
        for line in await cursor.fetchall()
    ]
    return PurchaseOrder(
        id=row["id"],
        order_number=row["order_number"],
        warehouse_id=row["warehouse_id"],
        status=PurchaseOrderStatus(row["status"]),
        lines=lines,
        received_at=_parse_ts(row["received_at"]),
        received_by=row["received_by"],
        receiving_notes=row["receiving_notes"],
        created_at=_parse_ts(row["created_at"]),
        updated_at=_parse_ts(row["updated_at"]),
    )


class SQLiteInventoryUnitOfWork(IInventoryUnitOfWork):
    """Typed readers and writers bound to one `BEGIN IMMEDIATE` transaction."""

    def __init__(self, conn: aiosqlite.Connection):
        self._conn = conn

    async def lock_cell(
        self, product_id: str, warehouse_id: str, caller: str | None = None
    ) -> InventoryCell:
        # The transaction already holds the database write lock
        now = _ts(utcnow())
        await self._conn.execute(
            """
            INSERT INTO inventory (
                product_id, warehouse_id, on_hand, reserved, available,
                weighted_avg_cost, created_by, updated_by, created_at, updated_at
            ) VALUES (?, ?, 0, 0, 0, 0, ?, ?, ?, ?)
            ON CONFLICT (product_id, warehouse_id) DO NOTHING
            """,
            (product_id, warehouse_id, caller, caller, now, now),
        )
        return await _fetch_cell(self._conn, product_id, warehouse_id)

    async def save_cell(self, cell: InventoryCell) -> InventoryCell:
        await self._conn.execute(
            """
            UPDATE inventory SET
                on_hand = ?,
                reserved = ?,
                available = ?,
                weighted_avg_cost = ?,
                reorder_level = ?,
                reorder_quantity = ?,
                last_movement_at = ?,
                updated_by = ?,
                updated_at = ?
            WHERE product_id = ? AND warehouse_id = ?
            """,
            (
                cell.on_hand,
                cell.reserved,
                cell.available,
                cell.weighted_avg_cost,
                cell.reorder_level,
                cell.reorder_quantity,
                _ts(cell.last_movement_at),
                cell.updated_by,
                _ts(cell.updated_at),
                cell.product_id,
                cell.warehouse_id,
            ),
        )
        return cell

    async def get_product(self, product_id: str) -> Product | None:
        return await _fetch_product(self._conn, product_id)

    async def get_warehouse(self, warehouse_id: str) -> Warehouse | None:
        return await _fetch_warehouse(self._conn, warehouse_id)

    async def list_cost_layers(self, product_id: str, warehouse_id: str) -> list[CostLayer]:
        return await _fetch_layers(self._conn, product_id, warehouse_id)

    async def add_cost_layer(self, layer: CostLayer) -> CostLayer:
        cursor = await self._conn.execute(
            """
            INSERT INTO cost_layers (
                product_id, warehouse_id, unit_cost,
                original_quantity, remaining_quantity, created_at
            ) VALUES (?, ?, ?, ?, ?, ?)
            """,
            (
                layer.product_id,
                layer.warehouse_id,
                layer.unit_cost,
                layer.original_quantity,
                layer.remaining_quantity,
                _ts(layer.created_at),
            ),
        )
        layer.id = cursor.lastrowid
        return layer

    async def update_cost_layer(self, layer: CostLayer) -> None:
        await self._conn.execute(
            "UPDATE cost_layers SET remaining_quantity = ? WHERE id = ?",
            (layer.remaining_quantity, layer.id),
        )

    async def delete_cost_layer(self, layer_id: int) -> None:
        await self._conn.execute("DELETE FROM cost_layers WHERE id = ?", (layer_id,))

    async def add_movement(self, movement: StockMovement) -> StockMovement:
        cursor = await self._conn.execute(
            """
            INSERT INTO stock_movements (
                product_id, warehouse_id, movement_type, quantity,
                unit_cost, total_cost, prev_on_hand, new_on_hand,
                reference, reason, batch_id, created_by, created_at
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                movement.product_id,
                movement.warehouse_id,
                movement.movement_type.value,
                movement.quantity,
                movement.unit_cost,
                movement.total_cost,
                movement.prev_on_hand,
                movement.new_on_hand,
                movement.reference,
                movement.reason,
                movement.batch_id,
                movement.created_by,
                _ts(movement.created_at),
            ),
        )
        movement.id = cursor.lastrowid
        return movement

    async def add_reservation(self, reservation: Reservation) -> Reservation:
        cursor = await self._conn.execute(
            """
            INSERT INTO stock_reservations (
                product_id, warehouse_id, quantity, reference, reason,
                status, created_by, created_at
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                reservation.product_id,
                reservation.warehouse_id,
                reservation.quantity,
                reservation.reference,
                reservation.reason,
                reservation.status.value,
                reservation.created_by,
                _ts(reservation.created_at),
            ),
        )
        reservation.id = cursor.lastrowid
        return reservation

    async def get_reservation(self, reservation_id: int) -> Reservation | None:
        return await _fetch_reservation(self._conn, reservation_id)

    async def update_reservation(self, reservation: Reservation) -> Reservation:
        await self._conn.execute(
            """
            UPDATE stock_reservations SET
                status = ?, released_at = ?, released_by = ?, consumed_at = ?
            WHERE id = ?
            """,
            (
                reservation.status.value,
                _ts(reservation.released_at),
                reservation.released_by,
                _ts(reservation.consumed_at),
                reservation.id,
            ),
        )
        return reservation

    async def add_transfer(self, transfer: StockTransfer) -> StockTransfer:
        cursor = await self._conn.execute(
            """
            INSERT INTO stock_transfers (
                product_id, from_warehouse_id, to_warehouse_id, quantity,
                unit_cost, total_cost, status, reference, reason,
                failure_reason, created_by, created_at
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                transfer.product_id,
                transfer.from_warehouse_id,
                transfer.to_warehouse_id,
                transfer.quantity,
                transfer.unit_cost,
                transfer.total_cost,
                transfer.status.value,
                transfer.reference,
                transfer.reason,
                transfer.failure_reason,
                transfer.created_by,
                _ts(transfer.created_at),
            ),
        )
        transfer.id = cursor.lastrowid
        return transfer

    async def get_pending_alert(
        self, product_id: str, warehouse_id: str
    ) -> ReorderAlert | None:
        cursor = await self._conn.execute(
            """
            SELECT * FROM reorder_alerts
            WHERE product_id = ? AND warehouse_id = ? AND status = 'pending'
            """,
            (product_id, warehouse_id),
        )
        row = await cursor.fetchone()
        return _row_to_alert(row) if row else None

    async def add_alert(self, alert: ReorderAlert) -> ReorderAlert:
        cursor = await self._conn.execute(
            """
            INSERT INTO reorder_alerts (
                product_id, warehouse_id, on_hand_at_trigger, available_at_trigger,
                reorder_level, suggested_quantity, alert_type, status, notes,
                created_at, updated_at
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                alert.product_id,
                alert.warehouse_id,
                alert.on_hand_at_trigger,
                alert.available_at_trigger,
                alert.reorder_level,
                alert.suggested_quantity,
                alert.alert_type.value,
                alert.status.value,
                alert.notes,
                _ts(alert.created_at),
                _ts(alert.updated_at),
            ),
        )
        alert.id = cursor.lastrowid
        return alert

    async def get_alert(self, alert_id: int) -> ReorderAlert | None:
        cursor = await self._conn.execute(
            "SELECT * FROM reorder_alerts WHERE id = ?", (alert_id,)
        )
        row = await cursor.fetchone()
        return _row_to_alert(row) if row else None

    async def update_alert(self, alert: ReorderAlert) -> ReorderAlert:
        await self._conn.execute(
            """
            UPDATE reorder_alerts SET
                status = ?, notes = ?, updated_at = ?, resolved_at = ?, resolved_by = ?
            WHERE id = ?
            """,
            (
                alert.status.value,
                alert.notes,
                _ts(alert.updated_at),
                _ts(alert.resolved_at),
                alert.resolved_by,
                alert.id,
            ),
        )
        return alert

    async def get_purchase_order(self, purchase_order_id: int) -> PurchaseOrder | None:
        return await _fetch_purchase_order(self._conn, purchase_order_id)

    async def update_purchase_order_line(self, line: PurchaseOrderLine) -> None:
        await self._conn.execute(
            "UPDATE purchase_order_lines SET received_quantity = ? WHERE id = ?",
            (line.received_quantity, line.id),
        )

    async def update_purchase_order(self, order: PurchaseOrder) -> PurchaseOrder:
        await self._conn.execute(
            """
            UPDATE purchase_orders SET
                status = ?, received_at = ?, received_by = ?,
                receiving_notes = ?, updated_at = ?
            WHERE id = ?
            """,
            (
                order.status.value,
                _ts(order.received_at),
                order.received_by,
                order.receiving_notes,
                _ts(order.updated_at),
                order.id,
            ),
        )
        return order


class SQLiteInventoryGateway(IInventoryGateway):
    """SQLite implementation of the inventory persistence gateway."""

    @asynccontextmanager
    async def unit_of_work(self) -> AsyncIterator[SQLiteInventoryUnitOfWork]:
        try:
            async with get_transaction(immediate=True) as conn:
                yield SQLiteInventoryUnitOfWork(conn)
        except aiosqlite.Error as e:
            logger.error("unit_of_work_failed", error=str(e))
            raise PersistenceError("unit_of_work", str(e)) from e

    @asynccontextmanager
    async def _writing(self, operation: str) -> AsyncIterator[aiosqlite.Connection]:
        try:
            async with get_transaction() as conn:
                yield conn
        except aiosqlite.Error as e:
            logger.error("write_failed", operation=operation, error=str(e))
            raise PersistenceError(operation, str(e)) from e

    @asynccontextmanager
    async def _reading(self, operation: str) -> AsyncIterator[aiosqlite.Connection]:
        try:
            async with get_connection() as conn:
                yield conn
        except aiosqlite.Error as e:
            raise PersistenceError(operation, str(e)) from e

    async def get_cell(self, product_id: str, warehouse_id: str) -> InventoryCell | None:
        async with self._reading("get_cell") as conn:
            return await _fetch_cell(conn, product_id, warehouse_id)

    async def get_cell_view(
        self, product_id: str, warehouse_id: str
    ) -> InventoryCellView | None:
        async with self._reading("get_cell_view") as conn:
            cursor = await conn.execute(
                _CELL_VIEW_SELECT + " WHERE i.product_id = ? AND i.warehouse_id = ?",
                (product_id, warehouse_id),
            )
            row = await cursor.fetchone()
            return _row_to_cell_view(row) if row else None

    async def list_cell_views(
        self,
        warehouse_id: str | None = None,
        product_id: str | None = None,
        in_stock_only: bool = False,
    ) -> list[InventoryCellView]:
        conditions = []
        params: list = []
        if warehouse_id:
            conditions.append("i.warehouse_id = ?")
            params.append(warehouse_id)
        if product_id:
            conditions.append("i.product_id = ?")
            params.append(product_id)
        if in_stock_only:
            conditions.append("i.on_hand > 0")

        sql = _CELL_VIEW_SELECT
        if conditions:
            sql += " WHERE " + " AND ".join(conditions)
        sql += " ORDER BY i.last_movement_at IS NULL, i.last_movement_at DESC, i.id"

        async with self._reading("list_cell_views") as conn:
            cursor = await conn.execute(sql, params)
            return [_row_to_cell_view(row) for row in await cursor.fetchall()]

    async def summarize_cost_layers(
        self, warehouse_id: str | None = None
    ) -> dict[tuple[str, str], tuple[int, float]]:
        sql = """
            SELECT product_id, warehouse_id,
                   SUM(remaining_quantity) AS quantity,
                   SUM(remaining_quantity * unit_cost) AS value
            FROM cost_layers
            WHERE remaining_quantity > 0
        """
        params: list = []
        if warehouse_id:
            sql += " AND warehouse_id = ?"
            params.append(warehouse_id)
        sql += " GROUP BY product_id, warehouse_id"

        async with self._reading("summarize_cost_layers") as conn:
            cursor = await conn.execute(sql, params)
            return {
                (row["product_id"], row["warehouse_id"]): (row["quantity"], float(row["value"]))
                for row in await cursor.fetchall()
            }

    async def list_cost_layers(self, product_id: str, warehouse_id: str) -> list[CostLayer]:
        async with self._reading("list_cost_layers") as conn:
            return await _fetch_layers(conn, product_id, warehouse_id)

    async def list_movements(
        self,
        product_id: str,
        warehouse_id: str | None = None,
        movement_type: MovementType | None = None,
        start: datetime | None = None,
        end: datetime | None = None,
        limit: int = 50,
        offset: int = 0,
    ) -> tuple[list[StockMovement], int]:
        conditions = ["product_id = ?"]
        params: list = [product_id]
        if warehouse_id:
            conditions.append("warehouse_id = ?")
            params.append(warehouse_id)
        if movement_type:
            conditions.append("movement_type = ?")
            params.append(movement_type.value)
        if start:
            conditions.append("created_at >= ?")
            params.append(_ts(start))
        if end:
            conditions.append("created_at <= ?")
            params.append(_ts(end))
        where = " AND ".join(conditions)

        async with self._reading("list_movements") as conn:
            cursor = await conn.execute(
                f"SELECT COUNT(*) FROM stock_movements WHERE {where}", params
            )
            total = (await cursor.fetchone())[0]

            cursor = await conn.execute(
                f"""
                SELECT * FROM stock_movements
                WHERE {where}
                ORDER BY created_at DESC, id DESC
                LIMIT ? OFFSET ?
                """,
                [*params, limit, offset],
            )
            movements = [_row_to_movement(row) for row in await cursor.fetchall()]
            return movements, total

    async def get_reservation(self, reservation_id: int) -> Reservation | None:
        async with self._reading("get_reservation") as conn:
            return await _fetch_reservation(conn, reservation_id)

    async def list_reservations(
        self,
        product_id: str,
        warehouse_id: str,
        status: ReservationStatus | None = None,
    ) -> list[Reservation]:
        sql = "SELECT * FROM stock_reservations WHERE product_id = ? AND warehouse_id = ?"
        params: list = [product_id, warehouse_id]
        if status:
            sql += " AND status = ?"
            params.append(status.value)
        sql += " ORDER BY created_at, id"

        async with self._reading("list_reservations") as conn:
            cursor = await conn.execute(sql, params)
            return [_row_to_reservation(row) for row in await cursor.fetchall()]

    async def list_transfers(self, product_id: str) -> list[StockTransfer]:
        async with self._reading("list_transfers") as conn:
            cursor = await conn.execute(
                "SELECT * FROM stock_transfers WHERE product_id = ? ORDER BY created_at, id",
                (product_id,),
            )
            return [_row_to_transfer(row) for row in await cursor.fetchall()]

    async def list_alerts(
        self,
        status: AlertStatus = AlertStatus.PENDING,
        warehouse_id: str | None = None,
        alert_type: AlertType | None = None,
    ) -> list[ReorderAlert]:
        sql = "SELECT * FROM reorder_alerts WHERE status = ?"
        params: list = [status.value]
        if warehouse_id:
            sql += " AND warehouse_id = ?"
            params.append(warehouse_id)
        if alert_type:
            sql += " AND alert_type = ?"
            params.append(alert_type.value)
        sql += " ORDER BY created_at DESC, id DESC"

        async with self._reading("list_alerts") as conn:
            cursor = await conn.execute(sql, params)
            return [_row_to_alert(row) for row in await cursor.fetchall()]

    async def list_warehouse_managers(
        self, warehouse_id: str, roles: list[str]
    ) -> list[UserProfile]:
        if not roles:
            return []
        placeholders = ", ".join("?" for _ in roles)
        async with self._reading("list_warehouse_managers") as conn:
            cursor = await conn.execute(
                f"""
                SELECT * FROM user_profiles
                WHERE warehouse_id = ? AND status = 'active' AND role IN ({placeholders})
                ORDER BY id
                """,
                [warehouse_id, *roles],
            )
            return [
                UserProfile(
                    id=row["id"],
                    email=row["email"],
                    first_name=row["first_name"],
                    role=row["role"],
                    warehouse_id=row["warehouse_id"],
                    status=row["status"],
                )
                for row in await cursor.fetchall()
            ]

    async def get_product(self, product_id: str) -> Product | None:
        async with self._reading("get_product") as conn:
            return await _fetch_product(conn, product_id)

    async def get_warehouse(self, warehouse_id: str) -> Warehouse | None:
        async with self._reading("get_warehouse") as conn:
            return await _fetch_warehouse(conn, warehouse_id)

    async def get_purchase_order(self, purchase_order_id: int) -> PurchaseOrder | None:
        async with self._reading("get_purchase_order") as conn:
            return await _fetch_purchase_order(conn, purchase_order_id)

    async def save_product(self, product: Product) -> Product:
        async with self._writing("save_product") as conn:
            await conn.execute(
                """
                INSERT INTO products (
                    id, sku, name, unit, cost_price, price,
                    reorder_level, reorder_quantity, category
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
                ON CONFLICT (id) DO UPDATE SET
                    sku = excluded.sku,
                    name = excluded.name,
                    unit = excluded.unit,
                    cost_price = excluded.cost_price,
                    price = excluded.price,
                    reorder_level = excluded.reorder_level,
                    reorder_quantity = excluded.reorder_quantity,
                    category = excluded.category
                """,
                (
                    product.id,
                    product.sku,
                    product.name,
                    product.unit,
                    product.cost_price,
                    product.price,
                    product.reorder_level,
                    product.reorder_quantity,
                    product.category,
                ),
            )
        logger.debug("product_saved", product_id=product.id)
        return product

    async def save_warehouse(self, warehouse: Warehouse) -> Warehouse:
        async with self._writing("save_warehouse") as conn:
            await conn.execute(
                """
                INSERT INTO warehouses (id, name) VALUES (?, ?)
                ON CONFLICT (id) DO UPDATE SET name = excluded.name
                """,
                (warehouse.id, warehouse.name),
            )
        logger.debug("warehouse_saved", warehouse_id=warehouse.id)
        return warehouse

    async def save_user(self, user: UserProfile) -> UserProfile:
        async with self._writing("save_user") as conn:
            await conn.execute(
                """
                INSERT INTO user_profiles (id, email, first_name, role, warehouse_id, status)
                VALUES (?, ?, ?, ?, ?, ?)
                ON CONFLICT (id) DO UPDATE SET
                    email = excluded.email,
                    first_name = excluded.first_name,
                    role = excluded.role,
                    warehouse_id = excluded.warehouse_id,
                    status = excluded.status
                """,
                (
                    user.id,
                    user.email,
                    user.first_name,
                    user.role,
                    user.warehouse_id,
                    user.status,
                ),
            )
        logger.debug("user_saved", user_id=user.id)
        return user

    async def create_purchase_order(self, order: PurchaseOrder) -> PurchaseOrder:
        async with self._writing("create_purchase_order") as conn:
            cursor = await conn.execute(
                """
                INSERT INTO purchase_orders (
                    order_number, warehouse_id, status, created_at, updated_at
                ) VALUES (?, ?, ?, ?, ?)
                """,
                (
                    order.order_number,
                    order.warehouse_id,
                    order.status.value,
                    _ts(order.created_at),
                    _ts(order.updated_at),
                ),
            )
            order.id = cursor.lastrowid
            for line in order.lines:
                cursor = await conn.execute(
                    """
                    INSERT INTO purchase_order_lines (
                        purchase_order_id, product_id, quantity, unit_cost, received_quantity
                    ) VALUES (?, ?, ?, ?, ?)
                    """,
                    (
                        order.id,
                        line.product_id,
                        line.quantity,
                        line.unit_cost,
                        line.received_quantity,
                    ),
                )
                line.id = cursor.lastrowid
                line.purchase_order_id = order.id

        logger.info(
            "purchase_order_created",
            purchase_order_id=order.id,
            order_number=order.order_number,
            lines=len(order.lines),
        )
        return order

    async def ping(self) -> bool:
        try:
            async with get_connection() as conn:
                cursor = await conn.execute("SELECT 1")
                return (await cursor.fetchone())[0] == 1
        except aiosqlite.Error as e:
            logger.warning("database_ping_failed", error=str(e))
            return False
