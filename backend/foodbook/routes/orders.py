# Overview: Flask API routes for orders; parses input and returns JSON responses.

# backend/foodbook/routes/orders.py
"""Order placement and kitchen status routes"""

from flask import Blueprint, request, g, current_app

from ..decorators import bearer_token, require_auth, require_permission
from ..errors import FoodbookError
from ..services import order_service, lifecycle_service, session_service
from ..validation import ValidationError, coerce_bool


orders_bp = Blueprint("orders", __name__, url_prefix="/api/orders")


@orders_bp.post("")
def create_order_route():
    """
    Place an order for a seat.

    Public: guests order without a session and the restaurant is resolved
    from the products. A staff session, when present, pins the order to its
    own tenant.

    Body: {"seat_number": "A1", "items": [{"product_id": 1, "quantity": 2}],
           "note": "no onions", "apply_tax": true}
    """
    data = request.get_json(silent=True) or {}

    tenant = None
    token = bearer_token()
    if token:
        tenant = session_service.validate_session(token)
        if tenant is None:
            return {"error": "Unauthorized", "message": "Invalid or expired token"}, 401

    try:
        order = order_service.create_order(
            data.get("seat_number"),
            data.get("items"),
            note=data.get("note"),
            apply_tax=coerce_bool(data.get("apply_tax"), "apply_tax"),
            tenant=tenant,
        )
        return {"order": order.to_dict()}, 201

    except FoodbookError as e:
        return e.to_response()
    except ValidationError as e:
        return {"error": "ValidationError", "message": str(e)}, 400
    except Exception:
        current_app.logger.exception("Failed to create order")
        return {"error": "InternalError", "message": "Internal server error"}, 500


@orders_bp.get("")
@require_auth
@require_permission("VIEW_ORDERS")
def list_orders_route():
    """
    List the tenant's orders, newest first.

    Query params:
    - status: Pending | Completed | Cancelled | Paid (optional)
    """
    status = request.args.get("status")
    try:
        if status:
            lifecycle_service.validate_status(status)
        orders = order_service.list_orders(g.tenant, status=status)
    except ValidationError as e:
        return {"error": "ValidationError", "message": str(e)}, 400

    return {"items": [o.to_dict() for o in orders], "count": len(orders)}


@orders_bp.get("/<int:order_id>")
@require_auth
@require_permission("VIEW_ORDERS")
def get_order_route(order_id: int):
    try:
        order = order_service.get_order(g.tenant, order_id)
    except FoodbookError as e:
        return e.to_response()
    return {"order": order.to_dict()}


@orders_bp.patch("/<int:order_id>/status")
@require_auth
@require_permission("UPDATE_ORDER_STATUS")
def update_order_status_route(order_id: int):
    """
    Advance an order through its lifecycle.

    Body: {"status": "Completed"}
    Cancelling a Pending order returns its stock.
    """
    data = request.get_json(silent=True) or {}
    status = data.get("status")
    if not status:
        return {"error": "ValidationError", "message": "status required"}, 400

    try:
        order = lifecycle_service.set_status(g.tenant, order_id, status)
        return {"order": order.to_dict()}

    except FoodbookError as e:
        return e.to_response()
    except ValidationError as e:
        return {"error": "ValidationError", "message": str(e)}, 400
    except Exception:
        current_app.logger.exception("Failed to update order status")
        return {"error": "InternalError", "message": "Internal server error"}, 500
