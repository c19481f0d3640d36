# Overview: Request and permission decorators for API routes.

from functools import wraps
from flask import request, g, current_app

from .permissions import MASTER
from .services import session_service


def _is_authenticated() -> bool:
    return getattr(g, "tenant", None) is not None


def bearer_token() -> str | None:
    auth_header = request.headers.get("Authorization")
    if not auth_header or not auth_header.startswith("Bearer "):
        return None
    return auth_header.split(" ", 1)[1].strip() or None


def require_auth(f):
    """
    Require authentication and establish tenant context.

    MULTI-TENANT: Sets g.tenant (TenantContext with owner_id, owner_email
    and the session's role). Every tenant-scoped service call in the route
    receives g.tenant explicitly.

    SECURITY: Returns 401 if:
    - No Authorization header
    - Invalid, expired, idle or revoked token
    - Owner account deactivated or deleted
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        token = bearer_token()
        if not token:
            return {"error": "Unauthorized", "message": "Authentication required"}, 401

        tenant = session_service.validate_session(token)
        if tenant is None:
            return {"error": "Unauthorized", "message": "Invalid or expired token"}, 401

        g.tenant = tenant
        g.session_token = token
        return f(*args, **kwargs)

    return decorated_function


def require_permission(permission_code: str):
    """Require the session's role to carry a specific permission."""
    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            if not _is_authenticated():
                return {"error": "Unauthorized", "message": "Authentication required"}, 401

            if not g.tenant.can(permission_code):
                current_app.logger.warning(
                    "Permission denied: owner_id=%s role=%s permission=%s path=%s",
                    g.tenant.owner_id, g.tenant.role, permission_code, request.path,
                )
                return {
                    "error": "PermissionDenied",
                    "required_permission": permission_code,
                    "message": f"Role '{g.tenant.role}' lacks {permission_code}",
                }, 403

            return f(*args, **kwargs)

        return decorated_function
    return decorator


def require_master(f):
    """Require the owner's own session (not a staff role session)."""
    @wraps(f)
    def decorated_function(*args, **kwargs):
        if not _is_authenticated():
            return {"error": "Unauthorized", "message": "Authentication required"}, 401
        if g.tenant.role != MASTER:
            return {"error": "PermissionDenied", "message": "Owner session required"}, 403
        return f(*args, **kwargs)
    return decorated_function
