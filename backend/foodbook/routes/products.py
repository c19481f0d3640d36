# Overview: Flask API routes for products operations; parses input and returns JSON responses.

# backend/foodbook/routes/products.py
"""
Menu and stock routes with multi-tenant support.

MULTI-TENANT: All product operations are scoped to g.tenant (set by
@require_auth). The public menu route resolves the tenant from the owner
email in the URL.

SECURITY:
- Read operations require VIEW_MENU
- Catalog writes require MANAGE_MENU
- Stock overwrites require MANAGE_STOCK
"""
from flask import Blueprint, request, g, current_app

from ..decorators import require_auth, require_permission
from ..errors import FoodbookError
from ..models import Product
from ..services import inventory_service, products_service
from ..validation import (
    ModelValidationPolicy,
    validate_payload,
    enforce_rules_product,
    ValidationError,
)

PRODUCT_POLICY = ModelValidationPolicy(
    writable_fields={"name", "description", "category", "image_url", "price", "stock"},
    required_on_create={"name", "price", "category"},
)

products_bp = Blueprint("products", __name__, url_prefix="/api/products")


@products_bp.get("")
@require_auth
@require_permission("VIEW_MENU")
def list_products_route():
    """
    List the tenant's products.

    Query params:
    - category: str (optional)
    """
    products = products_service.list_products(g.tenant, category=request.args.get("category"))
    return {"items": [p.to_dict() for p in products], "count": len(products)}


@products_bp.get("/public/<owner_email>")
def public_menu_route(owner_email: str):
    """Menu shown to guests ordering from a restaurant (no authentication)."""
    try:
        products = products_service.list_public_menu(owner_email)
    except FoodbookError as e:
        return e.to_response()
    return {"items": [p.to_dict() for p in products], "count": len(products)}


@products_bp.post("")
@require_auth
@require_permission("MANAGE_MENU")
def create_product_route():
    payload = request.get_json(silent=True) or {}

    try:
        patch = validate_payload(model=Product, payload=payload, policy=PRODUCT_POLICY, partial=False)
        enforce_rules_product(patch)
    except ValidationError as e:
        return {"error": "ValidationError", "message": str(e)}, 400

    product = products_service.create_product(g.tenant, patch)
    return {"product": product.to_dict()}, 201


@products_bp.patch("/<int:product_id>")
@require_auth
@require_permission("MANAGE_MENU")
def update_product_route(product_id: int):
    payload = request.get_json(silent=True) or {}

    try:
        patch = validate_payload(model=Product, payload=payload, policy=PRODUCT_POLICY, partial=True)
        enforce_rules_product(patch)
        product = products_service.update_product(g.tenant, product_id, patch)
    except ValidationError as e:
        return {"error": "ValidationError", "message": str(e)}, 400
    except FoodbookError as e:
        return e.to_response()

    return {"product": product.to_dict()}


@products_bp.delete("/<int:product_id>")
@require_auth
@require_permission("MANAGE_MENU")
def delete_product_route(product_id: int):
    """Delete a product from the menu. Order history keeps its line snapshots."""
    try:
        products_service.delete_product(g.tenant, product_id)
    except FoodbookError as e:
        return e.to_response()
    return {"success": True}


@products_bp.put("/<int:product_id>/stock")
@require_auth
@require_permission("MANAGE_STOCK")
def update_stock_route(product_id: int):
    """
    Overwrite stock for manual correction or restocking.

    Body: {"stock": 25}
    """
    data = request.get_json(silent=True) or {}
    if "stock" not in data:
        return {"error": "ValidationError", "message": "stock required"}, 400

    try:
        product = inventory_service.set_stock(g.tenant, product_id, data["stock"])
        return {"product": product.to_dict()}

    except FoodbookError as e:
        return e.to_response()
    except ValidationError as e:
        return {"error": "ValidationError", "message": str(e)}, 400
    except Exception:
        current_app.logger.exception("Failed to update stock")
        return {"error": "InternalError", "message": "Internal server error"}, 500


@products_bp.post("/seed")
@require_auth
@require_permission("MANAGE_MENU")
def seed_products_route():
    """Load the starter menu for a tenant with no products."""
    created = products_service.seed_default_products(g.tenant)
    return {"success": True, "created": created}
