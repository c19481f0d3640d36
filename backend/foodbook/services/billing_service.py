"""
Billing Service - one running bill per seat

WHY: A seat usually orders several times during a visit. The bill is not a
stored record; it is every Completed order for (owner, seat) read together.
Edits made from the billing screen mutate those underlying orders.

INVARIANTS:
- grand_total == sum(order.total_amount) over exactly the Completed orders
- every edited order is recomputed from its remaining lines using the tax
  rate it was created with
- an order whose last line is removed is deleted
- lines are never merged across orders, even when names repeat
"""

from __future__ import annotations

from flask import current_app
from sqlalchemy import func

from ..errors import InsufficientStock, ItemNotFound, OutOfStock
from ..extensions import db
from ..models import Order, OrderLine
from ..models.orders import COMPLETED
from ..validation import ValidationError, clean_seat_number, coerce_int
from foodbook.time_utils import utcnow
from . import inventory_service
from .concurrency import lock_for_update, run_with_retry
from .tenant_service import TenantContext, get_owner, scoped_query


def _completed_orders_query(tenant: TenantContext, seat: str):
    # Oldest first so "first match wins" is deterministic
    return (
        scoped_query(Order, tenant)
        .filter(Order.seat_number == seat, Order.status == COMPLETED)
        .order_by(Order.created_at.asc(), Order.id.asc())
    )


def get_bill(tenant: TenantContext, seat_number) -> dict | None:
    """Consolidated bill for a seat, or None when nothing is awaiting payment."""
    seat = clean_seat_number(seat_number)
    orders = _completed_orders_query(tenant, seat).all()
    if not orders:
        return None

    items = []
    subtotal = 0
    tax_total = 0
    grand_total = 0
    note = None

    for order in orders:
        subtotal += order.subtotal
        tax_total += order.tax_amount
        grand_total += order.total_amount
        if note is None and order.note:
            note = order.note
        for line in order.lines:
            items.append(line.to_dict())

    owner = get_owner(tenant)

    return {
        "seat_number": seat,
        "orders_count": len(orders),
        "order_ids": [o.id for o in orders],
        "items": items,
        "subtotal": subtotal,
        "tax_total": tax_total,
        "grand_total": grand_total,
        "company_name": owner.company_name or current_app.config["DEFAULT_COMPANY_NAME"],
        "note": note,
    }


def list_open_seats(tenant: TenantContext) -> list[dict]:
    """Seats that currently have a running bill, with order count and total."""
    rows = (
        db.session.query(
            Order.seat_number,
            func.count(Order.id),
            func.coalesce(func.sum(Order.total_amount), 0),
        )
        .filter(Order.owner_id == tenant.owner_id, Order.status == COMPLETED)
        .group_by(Order.seat_number)
        .order_by(Order.seat_number.asc())
        .all()
    )
    return [
        {"seat_number": seat, "orders_count": int(count), "grand_total": int(total)}
        for seat, count, total in rows
    ]


def _find_line(order: Order, item_name: str | None, line_id: int | None) -> OrderLine | None:
    for line in order.lines:
        if line_id is not None:
            if line.id == line_id:
                return line
        elif line.name == item_name:
            return line
    return None


def remove_item(
    tenant: TenantContext,
    seat_number,
    *,
    item_name: str | None = None,
    line_id=None,
    restock: bool = False,
) -> dict:
    """
    Remove one unit of an item from the seat's bill.

    The line is chosen by line_id when given, otherwise by exact item name;
    Completed orders are scanned oldest first and the first match wins.
    Stock is only restored when restock=True.

    Raises ItemNotFound when no Completed order of the seat has the item.
    """
    seat = clean_seat_number(seat_number)
    if line_id is not None:
        line_id = coerce_int(line_id, "line_id")
    elif not item_name:
        raise ValidationError("item_name or line_id is required")

    def _op():
        orders = lock_for_update(_completed_orders_query(tenant, seat)).all()

        for order in orders:
            line = _find_line(order, item_name, line_id)
            if line is None:
                continue

            order_id = order.id
            removed_name = line.name
            product_id = line.product_id

            if line.quantity > 1:
                line.quantity -= 1
            else:
                order.lines.remove(line)

            order_deleted = not order.lines
            if order_deleted:
                db.session.delete(order)
            else:
                order.recalculate_totals()
                # Touch the row so the version check covers line-only edits
                order.updated_at = utcnow()

            restocked = False
            if restock and product_id is not None:
                restocked = inventory_service.release(tenant, product_id, 1, commit=False)

            db.session.commit()

            current_app.logger.info(
                "Removed 1 x %r from seat %s (order %s%s, restocked=%s)",
                removed_name, seat, order_id, ", deleted" if order_deleted else "", restocked,
            )
            return {
                "order_id": order_id,
                "item_name": removed_name,
                "order_deleted": order_deleted,
                "restocked": restocked,
            }

        current_app.logger.warning("Bill edit on seat %s found no matching item", seat)
        raise ItemNotFound(
            details={"seat_number": seat, "item_name": item_name, "line_id": line_id}
        )

    return run_with_retry(_op)


def add_item(tenant: TenantContext, seat_number, product_id) -> Order:
    """
    Append one unit of a product to the seat's bill.

    Walk-in additions skip the kitchen queue: a new single-line order is
    created directly as Completed, without tax. Nothing is written when the
    product is out of stock.
    """
    seat = clean_seat_number(seat_number)
    product_id = coerce_int(product_id, "product_id")

    def _op():
        try:
            snapshot = inventory_service.reserve(tenant, product_id, 1, commit=False)
        except InsufficientStock as exc:
            raise OutOfStock(details=exc.details) from exc

        order = Order(
            owner_id=tenant.owner_id,
            seat_number=seat,
            status=COMPLETED,
            tax_rate_percent=0,
        )
        order.lines = [OrderLine(
            product_id=snapshot.product_id,
            name=snapshot.name,
            quantity=1,
            unit_price=snapshot.price,
            position=0,
        )]
        order.recalculate_totals()

        db.session.add(order)
        db.session.commit()

        current_app.logger.info(
            "Added 1 x %r to seat %s as order %s (owner_id=%s)",
            snapshot.name, seat, order.id, tenant.owner_id,
        )
        return order

    return run_with_retry(_op)
