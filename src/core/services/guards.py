"""Precondition checks shared by the mutating services."""

from src.core.entities.inventory import Product
from src.core.exceptions import ProductNotFoundError, ValidationError, WarehouseNotFoundError
from src.core.interfaces.inventory_store import IInventoryUnitOfWork


def require_caller(caller: str | None) -> str:
    if not caller or not caller.strip():
        raise ValidationError("caller", "A caller identity is required")
    return caller


async def require_reference_data(
    uow: IInventoryUnitOfWork, product_id: str, warehouse_id: str
) -> Product:
    """Ensure the product and warehouse of a cell exist; returns the product."""
    product = await uow.get_product(product_id)
    if product is None:
        raise ProductNotFoundError(product_id)
    if await uow.get_warehouse(warehouse_id) is None:
        raise WarehouseNotFoundError(warehouse_id)
    return product
