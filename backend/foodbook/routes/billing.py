# Overview: Flask API routes for billing; per-seat running bills and settlement.

"""Billing API routes with permission enforcement"""

from flask import Blueprint, request, g, current_app

from ..decorators import require_auth, require_permission
from ..errors import FoodbookError
from ..services import billing_service, lifecycle_service
from ..validation import ValidationError, coerce_bool


billing_bp = Blueprint("billing", __name__, url_prefix="/api/bills")


@billing_bp.get("")
@require_auth
@require_permission("VIEW_BILLS")
def list_open_seats_route():
    """Seats with Completed orders awaiting payment."""
    seats = billing_service.list_open_seats(g.tenant)
    return {"items": seats, "count": len(seats)}


@billing_bp.get("/<seat_number>")
@require_auth
@require_permission("VIEW_BILLS")
def get_bill_route(seat_number: str):
    """Consolidated bill for a seat; 404 when nothing is awaiting payment."""
    try:
        bill = billing_service.get_bill(g.tenant, seat_number)
    except ValidationError as e:
        return {"error": "ValidationError", "message": str(e)}, 400

    if bill is None:
        return {"error": "NoOrdersFound", "message": "No completed orders for this seat"}, 404
    return {"bill": bill}


@billing_bp.post("/<seat_number>/close")
@require_auth
@require_permission("SETTLE_BILLS")
def close_bill_route(seat_number: str):
    """Mark all Completed orders for the seat as Paid."""
    try:
        count = lifecycle_service.close_bill(g.tenant, seat_number)
        return {"success": True, "count": count}

    except FoodbookError as e:
        body, status = e.to_response()
        return {"success": False, **body}, status
    except ValidationError as e:
        return {"success": False, "error": "ValidationError", "message": str(e)}, 400
    except Exception:
        current_app.logger.exception("Failed to close bill")
        return {"success": False, "error": "InternalError", "message": "Failed to close bill"}, 500


@billing_bp.delete("/<seat_number>/items")
@require_auth
@require_permission("EDIT_BILLS")
def remove_item_route(seat_number: str):
    """
    Remove one unit of an item from the bill.

    Body: {"item_name": "Coke"} or {"line_id": 12}, optional "restock": true
    """
    data = request.get_json(silent=True) or {}

    try:
        result = billing_service.remove_item(
            g.tenant,
            seat_number,
            item_name=data.get("item_name"),
            line_id=data.get("line_id"),
            restock=coerce_bool(data.get("restock"), "restock"),
        )
        return {"success": True, **result}

    except FoodbookError as e:
        body, status = e.to_response()
        return {"success": False, **body}, status
    except ValidationError as e:
        return {"success": False, "error": "ValidationError", "message": str(e)}, 400
    except Exception:
        current_app.logger.exception("Failed to remove bill item")
        return {"success": False, "error": "InternalError", "message": "Failed to remove item"}, 500


@billing_bp.post("/<seat_number>/items")
@require_auth
@require_permission("EDIT_BILLS")
def add_item_route(seat_number: str):
    """
    Add one unit of a product to the bill.

    Body: {"product_id": 3}
    """
    data = request.get_json(silent=True) or {}
    if data.get("product_id") is None:
        return {"success": False, "error": "ValidationError", "message": "product_id required"}, 400

    try:
        order = billing_service.add_item(g.tenant, seat_number, data["product_id"])
        return {"success": True, "order": order.to_dict()}, 201

    except FoodbookError as e:
        body, status = e.to_response()
        return {"success": False, **body}, status
    except ValidationError as e:
        return {"success": False, "error": "ValidationError", "message": str(e)}, 400
    except Exception:
        current_app.logger.exception("Failed to add bill item")
        return {"success": False, "error": "InternalError", "message": "Failed to add item"}, 500
