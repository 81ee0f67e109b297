"""
Read-side queries: stock status, valuation and the movement ledger.

Queries take no lease and read the last committed snapshot.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import datetime

from src.core.entities.inventory import (
    CostingMethod,
    InventoryCellView,
    MovementType,
    StockMovement,
    StockStatus,
    utcnow,
)
from src.core.interfaces.inventory_store import IInventoryGateway

UNCATEGORIZED = "Uncategorized"


def derive_status(view: InventoryCellView, overstock_multiplier: int = 3) -> StockStatus:
    """Classify a cell against its effective reorder level."""
    cell = view.cell
    current = cell.available if cell.available is not None else cell.on_hand
    reorder_level = view.reorder_level

    if current <= 0:
        return StockStatus.OUT_OF_STOCK
    if current <= reorder_level:
        return StockStatus.LOW_STOCK
    if current > overstock_multiplier * reorder_level:
        return StockStatus.OVERSTOCKED
    return StockStatus.NORMAL


@dataclass
class CellStatus:
    view: InventoryCellView
    status: StockStatus


@dataclass
class ValuationItem:
    product_id: str
    product_name: str
    sku: str
    category: str
    warehouse_id: str
    warehouse_name: str
    on_hand: int
    available: int
    reserved: int
    unit_cost: float
    unit_price: float
    total_cost: float
    total_retail_value: float
    potential_profit: float
    last_movement_at: datetime | None = None


@dataclass
class ValuationSummary:
    total_items: int
    total_quantity: int
    total_available: int
    total_reserved: int
    total_cost_value: float
    total_retail_value: float
    total_potential_profit: float
    costing_method: CostingMethod
    valuation_date: datetime


@dataclass
class Valuation:
    summary: ValuationSummary
    items: list[ValuationItem] = field(default_factory=list)


@dataclass
class MovementPage:
    movements: list[StockMovement]
    total: int
    page: int
    limit: int

    @property
    def total_pages(self) -> int:
        return math.ceil(self.total / self.limit) if self.limit else 0


class InventoryQueries:
    def __init__(self, gateway: IInventoryGateway, overstock_multiplier: int = 3):
        self._gateway = gateway
        self._overstock_multiplier = overstock_multiplier

    async def status(
        self,
        warehouse_id: str | None = None,
        product_id: str | None = None,
        low_stock_only: bool = False,
    ) -> list[CellStatus]:
        """Cells with their derived status, most recently moved first."""
        views = await self._gateway.list_cell_views(
            warehouse_id=warehouse_id, product_id=product_id
        )
        result = [
            CellStatus(view=view, status=derive_status(view, self._overstock_multiplier))
            for view in views
        ]
        if low_stock_only:
            result = [
                item
                for item in result
                if item.status in (StockStatus.LOW_STOCK, StockStatus.OUT_OF_STOCK)
            ]
        return result

    async def valuation(
        self,
        warehouse_id: str | None = None,
        method: CostingMethod = CostingMethod.AVERAGE,
    ) -> Valuation:
        """
        Value in-stock cells under a costing method.

        FIFO and LIFO use the cost of the cell's open layers, which is the
        same for both orders; AVERAGE uses the cell's weighted average cost.
        Cells without cost information fall back to the product cost price.
        """
        views = await self._gateway.list_cell_views(
            warehouse_id=warehouse_id, in_stock_only=True
        )
        layer_totals: dict[tuple[str, str], tuple[int, float]] = {}
        if method != CostingMethod.AVERAGE:
            layer_totals = await self._gateway.summarize_cost_layers(warehouse_id)

        items = []
        for view in views:
            cell = view.cell
            product = view.product

            unit_cost = 0.0
            if method == CostingMethod.AVERAGE:
                unit_cost = cell.weighted_avg_cost
            else:
                quantity, value = layer_totals.get(cell.key, (0, 0.0))
                if quantity > 0:
                    unit_cost = value / quantity
            if not unit_cost:
                unit_cost = product.cost_price

            total_cost = cell.on_hand * unit_cost
            total_retail = cell.on_hand * product.price
            items.append(
                ValuationItem(
                    product_id=product.id,
                    product_name=product.name,
                    sku=product.sku,
                    category=product.category or UNCATEGORIZED,
                    warehouse_id=cell.warehouse_id,
                    warehouse_name=view.warehouse_name,
                    on_hand=cell.on_hand,
                    available=cell.available or 0,
                    reserved=cell.reserved,
                    unit_cost=unit_cost,
                    unit_price=product.price,
                    total_cost=total_cost,
                    total_retail_value=total_retail,
                    potential_profit=total_retail - total_cost,
                    last_movement_at=cell.last_movement_at,
                )
            )

        summary = ValuationSummary(
            total_items=len(items),
            total_quantity=sum(i.on_hand for i in items),
            total_available=sum(i.available for i in items),
            total_reserved=sum(i.reserved for i in items),
            total_cost_value=sum(i.total_cost for i in items),
            total_retail_value=sum(i.total_retail_value for i in items),
            total_potential_profit=sum(i.potential_profit for i in items),
            costing_method=method,
            valuation_date=utcnow(),
        )
        return Valuation(summary=summary, items=items)

    async def movements(
        self,
        product_id: str,
        warehouse_id: str | None = None,
        movement_type: MovementType | None = None,
        start: datetime | None = None,
        end: datetime | None = None,
        page: int = 1,
        limit: int = 50,
    ) -> MovementPage:
        """Page through a product's ledger, newest first."""
        page = max(1, page)
        limit = max(1, limit)
        movements, total = await self._gateway.list_movements(
            product_id,
            warehouse_id=warehouse_id,
            movement_type=movement_type,
            start=start,
            end=end,
            limit=limit,
            offset=(page - 1) * limit,
        )
        return MovementPage(movements=movements, total=total, page=page, limit=limit)
