"""
Multi-Tenant Service: explicit tenant context

WHY: Every ordering, stock and billing operation is scoped to one owner.
Instead of comparing a bare email string ad hoc, services receive a
TenantContext built from the authenticated session (or, for guest orders,
from the first ordered product's owner) and filter every query by it.

SECURITY INVARIANTS:
1. Every authenticated request has g.tenant set by @require_auth (decorators.py)
2. Queries touching tenant data filter by tenant.owner_id
3. Records owned by another tenant are reported as NotFound, never as forbidden
"""

from __future__ import annotations

from dataclasses import dataclass

from ..errors import Unauthorized
from ..extensions import db
from ..models import Owner
from ..permissions import MASTER, role_has_permission


@dataclass(frozen=True)
class TenantContext:
    """Tenant handle threaded through every service call."""
    owner_id: int
    owner_email: str
    role: str = MASTER

    @classmethod
    def for_owner(cls, owner: Owner, role: str = MASTER) -> "TenantContext":
        return cls(owner_id=owner.id, owner_email=owner.email, role=role)

    def can(self, permission_code: str) -> bool:
        return role_has_permission(self.role, permission_code)


def get_owner(tenant: TenantContext) -> Owner:
    owner = db.session.get(Owner, tenant.owner_id)
    if owner is None:
        raise Unauthorized("Owner account no longer exists")
    return owner


def scoped_query(model, tenant: TenantContext):
    """Query for a tenant-owned model filtered to the tenant."""
    return db.session.query(model).filter(model.owner_id == tenant.owner_id)
