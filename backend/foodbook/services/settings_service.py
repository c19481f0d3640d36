# Overview: Service-layer operations for tenant settings; staff role passwords and company details.

"""
Tenant Settings Service

Each owner has one RoleCredential per role in the closed role set. Rows are
created lazily with the default password the first time settings are read.
Passwords are stored bcrypt-hashed and never returned; callers only learn
whether a role still uses the default.

Owner.has_set_password is kept in sync: it is True once every staff role
(chief, billing, inventory, menu) has a non-default password.
"""

from __future__ import annotations

from flask import current_app

from ..extensions import db
from ..models import RoleCredential
from ..permissions import ALL_ROLES, STAFF_ROLES, validate_role
from ..validation import ValidationError
from .auth_service import hash_password, verify_password
from .tenant_service import TenantContext, get_owner

MAX_COMPANY_NAME_LENGTH = 120


def ensure_role_credentials(tenant: TenantContext) -> dict[str, RoleCredential]:
    """Return credentials keyed by role, creating missing ones with the default password."""
    existing = {
        cred.role: cred
        for cred in db.session.query(RoleCredential).filter_by(owner_id=tenant.owner_id).all()
    }
    missing = [role for role in ALL_ROLES if role not in existing]
    if missing:
        default_hash = hash_password(current_app.config["DEFAULT_ROLE_PASSWORD"])
        for role in missing:
            cred = RoleCredential(owner_id=tenant.owner_id, role=role, password_hash=default_hash, is_default=True)
            db.session.add(cred)
            existing[role] = cred
        db.session.commit()
    return existing


def get_role_settings(tenant: TenantContext) -> dict:
    creds = ensure_role_credentials(tenant)
    return {role: creds[role].to_dict() for role in ALL_ROLES}


def update_role_password(tenant: TenantContext, role: str, new_password: str) -> RoleCredential:
    try:
        validate_role(role)
    except ValueError as e:
        raise ValidationError(str(e))
    if not new_password or not new_password.strip():
        raise ValidationError("password cannot be blank")

    creds = ensure_role_credentials(tenant)
    cred = creds[role]
    cred.password_hash = hash_password(new_password)
    cred.is_default = new_password == current_app.config["DEFAULT_ROLE_PASSWORD"]

    owner = get_owner(tenant)
    owner.has_set_password = all(not creds[r].is_default for r in STAFF_ROLES)

    db.session.commit()
    current_app.logger.info("Role password updated: owner_id=%s role=%s", tenant.owner_id, role)
    return cred


def verify_role_password(tenant: TenantContext, role: str, password: str) -> bool:
    if role not in ALL_ROLES:
        return False
    creds = ensure_role_credentials(tenant)
    ok = verify_password(password, creds[role].password_hash)
    if not ok:
        current_app.logger.warning("Incorrect role password: owner_id=%s role=%s", tenant.owner_id, role)
    return ok


def update_company_name(tenant: TenantContext, company_name: str) -> str:
    name = (company_name or "").strip()
    if not name:
        raise ValidationError("company_name cannot be blank")
    if len(name) > MAX_COMPANY_NAME_LENGTH:
        raise ValidationError(f"company_name exceeds max length {MAX_COMPANY_NAME_LENGTH}")
    owner = get_owner(tenant)
    owner.company_name = name
    db.session.commit()
    return name
