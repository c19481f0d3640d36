# Overview: Flask API routes for authentication; OTP, password login and staff role sessions.

"""
Authentication routes

Owners authenticate with an emailed one-time code or, once set, a password.
Both return a bearer token for a MASTER session. A MASTER session can mint a
staff session (chief, billing, inventory, menu) by presenting that role's
password; staff sessions carry only their role's permissions.
"""

from flask import Blueprint, request, g, current_app

from ..decorators import require_auth, require_master
from ..errors import FoodbookError
from ..permissions import STAFF_ROLES
from ..services import auth_service, session_service, settings_service
from ..services.auth_service import AccountError, PasswordValidationError

auth_bp = Blueprint("auth", __name__, url_prefix="/api/auth")


def _session_response(owner, role="master"):
    session, token = session_service.create_session(
        owner.id,
        role=role,
        user_agent=request.headers.get("User-Agent"),
        ip_address=request.remote_addr,
    )
    return {
        "token": token,
        "role": role,
        "expires_at": session.to_dict()["expires_at"],
        "owner": owner.to_dict(),
    }


@auth_bp.post("/otp")
def send_otp_route():
    """
    Send a one-time code.

    Body: {"email": "...", "purpose": "login" | "signup" | "security" | "delete_account"}
    """
    data = request.get_json(silent=True) or {}
    try:
        result = auth_service.issue_otp(data.get("email") or "", data.get("purpose") or "login")
    except AccountError as e:
        return {"success": False, "error": e.code, "message": str(e)}, 400
    except Exception:
        current_app.logger.exception("Failed to send OTP")
        return {"success": False, "error": "InternalError", "message": "Failed to send OTP"}, 500
    return {"success": True, **result}


@auth_bp.post("/signup")
def signup_route():
    data = request.get_json(silent=True) or {}
    try:
        owner = auth_service.signup_with_otp(data.get("email") or "", data.get("code"), data.get("company_name"))
    except AccountError as e:
        return {"error": e.code, "message": str(e)}, 400
    except FoodbookError as e:
        return e.to_response()
    return _session_response(owner), 201


@auth_bp.post("/login/otp")
def login_otp_route():
    data = request.get_json(silent=True) or {}
    try:
        owner = auth_service.login_with_otp(data.get("email") or "", data.get("code"))
    except AccountError as e:
        return {"error": e.code, "message": str(e)}, 400
    except FoodbookError as e:
        return e.to_response()
    return _session_response(owner)


@auth_bp.post("/login")
def login_route():
    data = request.get_json(silent=True) or {}
    owner = auth_service.authenticate(data.get("email") or "", data.get("password") or "")
    if owner is None:
        return {"error": "Unauthorized", "message": "Invalid credentials"}, 401
    return _session_response(owner)


@auth_bp.post("/logout")
@require_auth
def logout_route():
    session_service.revoke_session(g.session_token)
    return {"success": True}


@auth_bp.get("/me")
@require_auth
def me_route():
    owner = auth_service.get_owner_by_email(g.tenant.owner_email)
    return {"owner": owner.to_dict(), "role": g.tenant.role}


@auth_bp.post("/password")
@require_auth
@require_master
def set_password_route():
    data = request.get_json(silent=True) or {}
    try:
        auth_service.set_owner_password(g.tenant, data.get("password") or "")
    except PasswordValidationError as e:
        return {"success": False, "error": "ValidationError", "message": str(e)}, 400
    return {"success": True}


@auth_bp.post("/staff-session")
@require_auth
@require_master
def staff_session_route():
    """
    Unlock a staff dashboard.

    Body: {"role": "billing", "password": "..."}
    """
    data = request.get_json(silent=True) or {}
    role = data.get("role")
    if role not in STAFF_ROLES:
        return {"error": "ValidationError", "message": f"role must be one of: {', '.join(STAFF_ROLES)}"}, 400

    if not settings_service.verify_role_password(g.tenant, role, data.get("password") or ""):
        return {"error": "Unauthorized", "message": "Incorrect Password"}, 401

    owner = auth_service.get_owner_by_email(g.tenant.owner_email)
    return _session_response(owner, role=role), 201


@auth_bp.post("/step-up")
@require_auth
@require_master
def step_up_route():
    """Confirm a 'security' OTP before opening admin settings."""
    data = request.get_json(silent=True) or {}
    try:
        auth_service.verify_otp(g.tenant.owner_email, "security", data.get("code"))
    except FoodbookError as e:
        return e.to_response()
    return {"success": True}


@auth_bp.delete("/account")
@require_auth
@require_master
def delete_account_route():
    """Permanently delete the tenant. Body: {"code": "<delete_account OTP>"}"""
    data = request.get_json(silent=True) or {}
    try:
        auth_service.delete_account(g.tenant, data.get("code"))
    except FoodbookError as e:
        return e.to_response()
    return {"success": True}
