# Overview: Inventory ledger; authoritative stock counts and their atomic mutations.

# backend/foodbook/services/inventory_service.py

from __future__ import annotations

from dataclasses import dataclass

from flask import current_app
from sqlalchemy import update

from ..errors import NotFound, InsufficientStock
from ..extensions import db
from ..models import Product
from ..validation import validate_quantity, validate_stock_value
from .concurrency import run_with_retry
from .tenant_service import TenantContext
"""
Inventory invariants (authoritative)

- Product.stock >= 0 at rest, enforced twice: by the CHECK constraint and by
  every decrement being a single conditional UPDATE
  (stock = stock - q WHERE stock >= q). A read-then-save decrement is never
  used, so two concurrent orders cannot both take the last unit.
- reserve/release/set_stock accept commit=False so the order and billing
  services can fold them into one transaction; the caller then owns retry
  and commit.
- Products are looked up by (id, owner_id); a product of another tenant is
  reported as NotFound.
"""


@dataclass(frozen=True)
class ProductSnapshot:
    """Name and price captured at reservation time for order lines."""
    product_id: int
    name: str
    price: int


def _get_product(tenant: TenantContext, product_id: int, *, refresh: bool = False) -> Product:
    query = db.session.query(Product).filter_by(id=product_id, owner_id=tenant.owner_id)
    if refresh:
        query = query.populate_existing()
    product = query.first()
    if product is None:
        raise NotFound("Product not found", details={"product_id": product_id})
    return product


def get_stock(tenant: TenantContext, product_id: int) -> int:
    return _get_product(tenant, product_id, refresh=True).stock


def reserve(
    tenant: TenantContext,
    product_id: int,
    quantity: int,
    *,
    commit: bool = True,
) -> ProductSnapshot:
    """
    Take `quantity` units of a product out of stock.

    Raises NotFound when the product does not exist for this tenant and
    InsufficientStock when stock < quantity. Nothing is written on failure.
    """
    quantity = validate_quantity(quantity)

    def _op():
        result = db.session.execute(
            update(Product)
            .where(
                Product.id == product_id,
                Product.owner_id == tenant.owner_id,
                Product.stock >= quantity,
            )
            .values(stock=Product.stock - quantity)
            .execution_options(synchronize_session="fetch")
        )

        product = _get_product(tenant, product_id, refresh=True)

        if result.rowcount == 0:
            current_app.logger.warning(
                "Stock reservation rejected: product_id=%s requested=%s stock=%s",
                product_id, quantity, product.stock,
            )
            raise InsufficientStock(
                f"Not enough stock for {product.name}",
                details={
                    "product_id": product.id,
                    "name": product.name,
                    "requested_quantity": quantity,
                    "stock": product.stock,
                },
            )

        snapshot = ProductSnapshot(product_id=product.id, name=product.name, price=product.price)
        if commit:
            db.session.commit()
        current_app.logger.info(
            "Reserved %s x product_id=%s for owner_id=%s", quantity, product_id, tenant.owner_id
        )
        return snapshot

    if not commit:
        return _op()
    return run_with_retry(_op)


def release(
    tenant: TenantContext,
    product_id: int,
    quantity: int,
    *,
    commit: bool = True,
) -> bool:
    """
    Put `quantity` units back into stock.

    Returns False when the product has since been deleted from the menu;
    order history keeps its lines but there is no stock left to restore.
    """
    quantity = validate_quantity(quantity)

    def _op():
        result = db.session.execute(
            update(Product)
            .where(Product.id == product_id, Product.owner_id == tenant.owner_id)
            .values(stock=Product.stock + quantity)
            .execution_options(synchronize_session="fetch")
        )
        released = result.rowcount > 0
        if commit:
            db.session.commit()
        if released:
            current_app.logger.info(
                "Released %s x product_id=%s for owner_id=%s", quantity, product_id, tenant.owner_id
            )
        return released

    if not commit:
        return _op()
    return run_with_retry(_op)


def set_stock(
    tenant: TenantContext,
    product_id: int,
    new_value,
    *,
    commit: bool = True,
) -> Product:
    """Unconditional overwrite for manual corrections and restocking."""
    stock = validate_stock_value(new_value)

    def _op():
        product = _get_product(tenant, product_id)
        product.stock = stock
        if commit:
            db.session.commit()
        current_app.logger.info(
            "Stock set to %s for product_id=%s owner_id=%s", stock, product_id, tenant.owner_id
        )
        return product

    if not commit:
        return _op()
    return run_with_retry(_op)
