"""
Order Service - turns cart line items into a persisted order

WHY: An order is all-or-nothing. Every line reserves stock inside the same
database transaction as the order insert, so a shortfall on the third item
rolls back the reservations made for the first two.
"""

from __future__ import annotations

from flask import current_app

from ..errors import EmptyOrder, MixedOwnerError, NotFound
from ..extensions import db
from ..models import Order, OrderLine, Owner, Product
from ..models.orders import PENDING
from ..validation import ValidationError, clean_seat_number, coerce_int, validate_quantity
from . import inventory_service
from .concurrency import run_with_retry
from .tenant_service import TenantContext, scoped_query

MAX_NOTE_LENGTH = 500


def _parse_items(items) -> list[tuple[int, int]]:
    if not items:
        raise EmptyOrder()
    if not isinstance(items, (list, tuple)):
        raise ValidationError("items must be a list")

    parsed = []
    for i, item in enumerate(items):
        if not isinstance(item, dict):
            raise ValidationError(f"items[{i}] must be an object")
        product_id = item.get("product_id")
        if product_id is None:
            raise ValidationError(f"items[{i}].product_id is required")
        parsed.append((
            coerce_int(product_id, f"items[{i}].product_id"),
            validate_quantity(item.get("quantity")),
        ))
    return parsed


def _clean_note(note) -> str | None:
    if note is None:
        return None
    note = str(note).strip()
    if len(note) > MAX_NOTE_LENGTH:
        raise ValidationError(f"note exceeds max length {MAX_NOTE_LENGTH}")
    return note or None


def _resolve_tenant(first_product_id: int, tenant: TenantContext | None) -> TenantContext:
    """
    The restaurant that receives the order is the owner of the first product.

    Guests order without a session, so the owner comes from the catalog. When
    a staff session places the order, the first product must be its own.
    """
    product = db.session.get(Product, first_product_id)
    if product is None or (tenant is not None and product.owner_id != tenant.owner_id):
        raise NotFound("Product not found", details={"product_id": first_product_id})
    if tenant is not None:
        return tenant
    owner = db.session.get(Owner, product.owner_id)
    if owner is None or not owner.is_active:
        raise NotFound("Product not found", details={"product_id": first_product_id})
    return TenantContext.for_owner(owner)


def create_order(
    seat_number,
    items,
    note: str | None = None,
    apply_tax: bool = False,
    tenant: TenantContext | None = None,
) -> Order:
    """
    Create a Pending order from [{"product_id": .., "quantity": ..}, ...].

    Raises EmptyOrder, NotFound, MixedOwnerError or InsufficientStock; on any
    failure no stock is taken and no order is written.
    """
    seat = clean_seat_number(seat_number)
    requests = _parse_items(items)
    note = _clean_note(note)

    def _op():
        order_tenant = _resolve_tenant(requests[0][0], tenant)

        lines = []
        for position, (product_id, quantity) in enumerate(requests):
            product = db.session.get(Product, product_id)
            if product is None:
                raise NotFound("Product not found", details={"product_id": product_id})
            if product.owner_id != order_tenant.owner_id:
                raise MixedOwnerError(
                    "Product invalid or mixed owners",
                    details={"product_id": product_id},
                )

            snapshot = inventory_service.reserve(order_tenant, product_id, quantity, commit=False)
            lines.append(OrderLine(
                product_id=snapshot.product_id,
                name=snapshot.name,
                quantity=quantity,
                unit_price=snapshot.price,
                position=position,
            ))

        order = Order(
            owner_id=order_tenant.owner_id,
            seat_number=seat,
            status=PENDING,
            note=note,
            tax_rate_percent=current_app.config["TAX_RATE_PERCENT"] if apply_tax else 0,
        )
        order.lines = lines
        order.recalculate_totals()

        db.session.add(order)
        db.session.commit()

        current_app.logger.info(
            "Order %s created for seat %s (owner_id=%s, lines=%s, total=%s)",
            order.id, seat, order.owner_id, len(lines), order.total_amount,
        )
        return order

    return run_with_retry(_op)


def list_orders(tenant: TenantContext, status: str | None = None) -> list[Order]:
    """All orders for the tenant, newest first."""
    query = scoped_query(Order, tenant)
    if status:
        query = query.filter(Order.status == status)
    return query.order_by(Order.created_at.desc(), Order.id.desc()).all()


def get_order(tenant: TenantContext, order_id: int) -> Order:
    order = scoped_query(Order, tenant).filter(Order.id == order_id).first()
    if order is None:
        raise NotFound("Order not found", details={"order_id": order_id})
    return order
