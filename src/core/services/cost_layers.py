"""
Cost Layer Engine.

Translates an intended movement into the unit cost recorded on the ledger and
keeps the cell's cost layers consistent. The engine works on the in-memory
list of a cell's open layers; callers persist what it returns.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime

from src.config import get_logger
from src.core.entities.inventory import CostingMethod, CostLayer, InventoryCell, utcnow
from src.core.exceptions import CostLayerShortfallError, ValidationError

logger = get_logger(__name__)


@dataclass
class LayerDraw:
    """Quantity taken from one layer by an outbound movement."""

    layer: CostLayer
    quantity: int


@dataclass
class OutboundCost:
    """Result of pricing an outbound movement."""

    unit_cost: float
    total_cost: float
    draws: list[LayerDraw] = field(default_factory=list)
    used_fallback: bool = False

    @property
    def exhausted_layers(self) -> list[CostLayer]:
        return [d.layer for d in self.draws if d.layer.remaining_quantity == 0]

    @property
    def partially_drawn_layers(self) -> list[CostLayer]:
        return [d.layer for d in self.draws if d.layer.remaining_quantity > 0]


def weighted_average(layers: list[CostLayer]) -> float | None:
    """Sum(remaining * unit_cost) / Sum(remaining), or None without stock."""
    quantity = sum(layer.remaining_quantity for layer in layers)
    if quantity <= 0:
        return None
    return sum(layer.remaining_value for layer in layers) / quantity


def _consumption_order(layers: list[CostLayer], method: CostingMethod) -> list[CostLayer]:
    # Identical timestamps fall back to insertion order (persistent id)
    ordered = sorted(
        layers,
        key=lambda layer: (layer.created_at, layer.id if layer.id is not None else 0),
    )
    if method == CostingMethod.LIFO:
        ordered.reverse()
    return ordered


class CostLayerEngine:
    """FIFO / LIFO / weighted-average cost accounting for one cell."""

    def on_inbound(
        self,
        cell: InventoryCell,
        layers: list[CostLayer],
        quantity: int,
        unit_cost: float,
        now: datetime | None = None,
    ) -> CostLayer:
        """
        Append a layer for received stock and refresh the cell's average.

        Args:
            cell: Locked cell; its weighted_avg_cost is updated in place.
            layers: The cell's open layers; the new layer is appended.
            quantity: Units received (> 0).
            unit_cost: Acquisition cost per unit.

        Returns:
            The new, not yet persisted, layer.
        """
        if quantity <= 0:
            raise ValidationError("quantity", "Inbound quantity must be positive", quantity)
        if unit_cost < 0:
            raise ValidationError("unit_cost", "Unit cost cannot be negative", unit_cost)

        layer = CostLayer(
            product_id=cell.product_id,
            warehouse_id=cell.warehouse_id,
            unit_cost=unit_cost,
            original_quantity=quantity,
            remaining_quantity=quantity,
            created_at=now or utcnow(),
        )
        layers.append(layer)

        average = weighted_average(layers)
        cell.weighted_avg_cost = average if average is not None else unit_cost
        return layer

    def on_outbound(
        self,
        cell: InventoryCell,
        layers: list[CostLayer],
        quantity: int,
        method: CostingMethod,
        fallback_cost: float,
    ) -> OutboundCost:
        """
        Consume `quantity` units from the cell's layers.

        FIFO draws oldest layers first and LIFO newest first; both are charged
        at the drawn layers' costs. AVERAGE is a single draw charged at the
        cell's weighted_avg_cost; it still retires quantity oldest-first so
        that open layers keep summing to on-hand.

        A cell with no layers at all predates cost tracking: it is charged at
        `fallback_cost` (the product cost price) and no layer is touched.

        Raises:
            CostLayerShortfallError: Layers exist but hold fewer than `quantity`.
        """
        if quantity <= 0:
            raise ValidationError("quantity", "Outbound quantity must be positive", quantity)

        remaining = sum(layer.remaining_quantity for layer in layers)
        if remaining == 0:
            logger.warning(
                "cost_layer_fallback",
                product_id=cell.product_id,
                warehouse_id=cell.warehouse_id,
                quantity=quantity,
                fallback_cost=fallback_cost,
            )
            return OutboundCost(
                unit_cost=fallback_cost,
                total_cost=quantity * fallback_cost,
                used_fallback=True,
            )

        if remaining < quantity:
            raise CostLayerShortfallError(
                cell.product_id, cell.warehouse_id, remaining, quantity
            )

        order_method = CostingMethod.FIFO if method == CostingMethod.AVERAGE else method
        draws: list[LayerDraw] = []
        total = 0.0
        needed = quantity
        for layer in _consumption_order(layers, order_method):
            if needed == 0:
                break
            if layer.remaining_quantity == 0:
                continue
            take = min(layer.remaining_quantity, needed)
            layer.remaining_quantity -= take
            needed -= take
            total += take * layer.unit_cost
            draws.append(LayerDraw(layer=layer, quantity=take))

        # weighted_avg_cost is refreshed on inbound only
        if method == CostingMethod.AVERAGE:
            unit_cost = cell.weighted_avg_cost
            return OutboundCost(
                unit_cost=unit_cost,
                total_cost=quantity * unit_cost,
                draws=draws,
            )

        return OutboundCost(
            unit_cost=total / quantity,
            total_cost=total,
            draws=draws,
        )
