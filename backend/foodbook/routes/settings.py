# Overview: Flask API routes for tenant settings; role passwords and company name.

from flask import Blueprint, request, g

from ..decorators import require_auth, require_permission
from ..services import settings_service
from ..validation import ValidationError

settings_bp = Blueprint("settings", __name__, url_prefix="/api/settings")


@settings_bp.get("/roles")
@require_auth
@require_permission("MANAGE_SETTINGS")
def get_role_settings_route():
    """Which staff roles still use the default password (passwords are never returned)."""
    return {"roles": settings_service.get_role_settings(g.tenant)}


@settings_bp.put("/roles/<role>")
@require_auth
@require_permission("MANAGE_SETTINGS")
def update_role_password_route(role: str):
    """
    Change a staff role password.

    Body: {"password": "..."}
    """
    data = request.get_json(silent=True) or {}
    try:
        cred = settings_service.update_role_password(g.tenant, role, data.get("password"))
    except ValidationError as e:
        return {"error": "ValidationError", "message": str(e)}, 400
    return {"success": True, "role": cred.to_dict()}


@settings_bp.patch("/company")
@require_auth
@require_permission("MANAGE_SETTINGS")
def update_company_route():
    data = request.get_json(silent=True) or {}
    try:
        name = settings_service.update_company_name(g.tenant, data.get("company_name"))
    except ValidationError as e:
        return {"error": "ValidationError", "message": str(e)}, 400
    return {"success": True, "company_name": name}
