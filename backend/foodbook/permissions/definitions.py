# Overview: All permission definitions organized by category.
# Each permission is defined as: (code, name, description, category)


class PermissionCategory:
    """Permission categories for grouping related permissions."""
    ORDERS = "ORDERS"
    BILLING = "BILLING"
    MENU = "MENU"
    SETTINGS = "SETTINGS"


PERMISSION_DEFINITIONS = [
    (
        "VIEW_ORDERS",
        "View Orders",
        "See the kitchen order queue",
        PermissionCategory.ORDERS,
    ),
    (
        "UPDATE_ORDER_STATUS",
        "Update Order Status",
        "Mark orders completed or cancelled",
        PermissionCategory.ORDERS,
    ),
    (
        "VIEW_BILLS",
        "View Bills",
        "See running bills per seat",
        PermissionCategory.BILLING,
    ),
    (
        "EDIT_BILLS",
        "Edit Bills",
        "Add or remove items on a running bill",
        PermissionCategory.BILLING,
    ),
    (
        "SETTLE_BILLS",
        "Settle Bills",
        "Mark a seat's bill as paid",
        PermissionCategory.BILLING,
    ),
    (
        "VIEW_MENU",
        "View Menu",
        "See products, prices and stock",
        PermissionCategory.MENU,
    ),
    (
        "MANAGE_MENU",
        "Manage Menu",
        "Create, edit and delete products",
        PermissionCategory.MENU,
    ),
    (
        "MANAGE_STOCK",
        "Manage Stock",
        "Overwrite product stock counts",
        PermissionCategory.MENU,
    ),
    (
        "MANAGE_SETTINGS",
        "Manage Settings",
        "Change staff role passwords and company details",
        PermissionCategory.SETTINGS,
    ),
]


def get_all_permission_codes() -> list[str]:
    return [perm[0] for perm in PERMISSION_DEFINITIONS]
