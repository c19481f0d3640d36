# Overview: Service-layer operations for order lifecycle; status transitions and bill settlement.

"""
FoodBook Order Lifecycle Service

================================================================================
PURPOSE: Enforce Pending -> Completed -> Paid (or Pending -> Cancelled)
================================================================================

STATE MACHINE:
    Pending -> Completed -> Paid
    Pending -> Cancelled

    Pending:   Placed by a guest or staff, waiting for the kitchen. Stock is
               already reserved.
    Completed: Served. Part of the seat's running bill; editable by billing.
    Cancelled: Terminal. Reserved stock is returned to the menu.
    Paid:      Terminal and immutable. Excluded from bills.

RULES:
1. Only the transitions above are legal; anything else is InvalidTransition
2. Setting the current status again is a no-op
3. Cancelling releases every line's quantity back to stock in the same
   transaction as the status change
4. Closing a bill moves every Completed order of a seat to Paid in one
   UPDATE statement

================================================================================
"""

from __future__ import annotations

from flask import current_app
from sqlalchemy import update

from ..errors import InvalidTransition, NoOrdersFound, NotFound
from ..extensions import db
from ..models import Order
from ..models.orders import PENDING, COMPLETED, CANCELLED, PAID
from ..validation import ValidationError, clean_seat_number
from . import inventory_service
from .concurrency import lock_for_update, run_with_retry
from .tenant_service import TenantContext


VALID_STATUSES = (PENDING, COMPLETED, CANCELLED, PAID)

VALID_TRANSITIONS = {
    (PENDING, COMPLETED),
    (PENDING, CANCELLED),
    (COMPLETED, PAID),
}

TERMINAL_STATUSES = {CANCELLED, PAID}


def validate_status(status: str) -> str:
    """
    Validate that a status value is one of the allowed states.

    Raises:
        ValidationError: If status is not in VALID_STATUSES
    """
    if status not in VALID_STATUSES:
        raise ValidationError(
            f"Invalid status '{status}'. Must be one of: {', '.join(VALID_STATUSES)}"
        )
    return status


def can_transition(from_status: str, to_status: str) -> bool:
    validate_status(from_status)
    validate_status(to_status)

    if from_status == to_status:
        return True
    if from_status in TERMINAL_STATUSES:
        return False

    return (from_status, to_status) in VALID_TRANSITIONS


def set_status(tenant: TenantContext, order_id: int, new_status: str) -> Order:
    """
    Move an order to `new_status`.

    Raises:
        NotFound: order missing or owned by another tenant
        ValidationError: unknown status value
        InvalidTransition: transition not in the table above
    """
    validate_status(new_status)

    def _op():
        order = lock_for_update(
            db.session.query(Order).filter_by(id=order_id, owner_id=tenant.owner_id)
        ).first()
        if order is None:
            raise NotFound("Order not found", details={"order_id": order_id})

        old_status = order.status
        if old_status == new_status:
            return order

        if not can_transition(old_status, new_status):
            current_app.logger.warning(
                "Rejected status change for order %s: %s -> %s", order_id, old_status, new_status
            )
            raise InvalidTransition(
                f"Cannot change order from {old_status} to {new_status}",
                details={"order_id": order_id, "from": old_status, "to": new_status},
            )

        if new_status == CANCELLED:
            for line in order.lines:
                if line.product_id is not None:
                    inventory_service.release(tenant, line.product_id, line.quantity, commit=False)

        order.status = new_status
        db.session.commit()

        current_app.logger.info(
            "Order %s status %s -> %s (owner_id=%s)", order_id, old_status, new_status, tenant.owner_id
        )
        return order

    return run_with_retry(_op)


def close_bill(tenant: TenantContext, seat_number) -> int:
    """
    Mark every Completed order of a seat as Paid.

    Returns the number of orders settled. Raises NoOrdersFound when the seat
    has no Completed orders, which is also what a second close reports.
    """
    seat = clean_seat_number(seat_number)

    def _op():
        result = db.session.execute(
            update(Order)
            .where(
                Order.owner_id == tenant.owner_id,
                Order.seat_number == seat,
                Order.status == COMPLETED,
            )
            .values(status=PAID, version_id=Order.version_id + 1)
            .execution_options(synchronize_session="fetch")
        )
        count = result.rowcount
        if count == 0:
            raise NoOrdersFound(details={"seat_number": seat})

        db.session.commit()
        current_app.logger.info(
            "Bill closed for seat %s: %s orders paid (owner_id=%s)", seat, count, tenant.owner_id
        )
        return count

    return run_with_retry(_op)
