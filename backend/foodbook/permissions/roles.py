# Overview: Closed set of staff roles and the permissions each one carries.

from .definitions import get_all_permission_codes

MASTER = "master"
CHIEF = "chief"
BILLING = "billing"
INVENTORY = "inventory"
MENU = "menu"

# Staff roles unlocked with a per-tenant role password. The owner session is MASTER.
STAFF_ROLES = (CHIEF, BILLING, INVENTORY, MENU)
ALL_ROLES = STAFF_ROLES + (MASTER,)

ROLE_PERMISSIONS: dict[str, frozenset[str]] = {
    CHIEF: frozenset({"VIEW_ORDERS", "UPDATE_ORDER_STATUS", "MANAGE_STOCK", "VIEW_MENU"}),
    BILLING: frozenset({"VIEW_ORDERS", "VIEW_BILLS", "EDIT_BILLS", "SETTLE_BILLS", "VIEW_MENU"}),
    INVENTORY: frozenset({"VIEW_MENU", "MANAGE_STOCK", "MANAGE_MENU"}),
    MENU: frozenset({"VIEW_MENU", "MANAGE_MENU"}),
    MASTER: frozenset(get_all_permission_codes()),
}


def validate_role(role: str) -> str:
    if role not in ALL_ROLES:
        raise ValueError(f"Invalid role '{role}'. Must be one of: {', '.join(ALL_ROLES)}")
    return role


def role_has_permission(role: str, permission_code: str) -> bool:
    return permission_code in ROLE_PERMISSIONS.get(role, frozenset())
