# Overview: Permission system package.
# Re-exports the closed staff role set and its permission table.

from .definitions import PermissionCategory, PERMISSION_DEFINITIONS
from .roles import (
    MASTER,
    CHIEF,
    BILLING,
    INVENTORY,
    MENU,
    ALL_ROLES,
    STAFF_ROLES,
    ROLE_PERMISSIONS,
    role_has_permission,
    validate_role,
)

__all__ = [
    "PermissionCategory",
    "PERMISSION_DEFINITIONS",
    "MASTER",
    "CHIEF",
    "BILLING",
    "INVENTORY",
    "MENU",
    "ALL_ROLES",
    "STAFF_ROLES",
    "ROLE_PERMISSIONS",
    "role_has_permission",
    "validate_role",
]
