# Overview: Named permission presets offered when creating users.

from .definitions import (
    MANAGE_PRODUCTS,
    MANAGE_CUSTOMERS,
    MANAGE_SALES,
    VIEW_REPORTS,
    MANAGE_USERS,
)


# Users carry permissions directly; a role is only a starting set.
DEFAULT_ROLE_PERMISSIONS = {
    "admin": [
        MANAGE_PRODUCTS,
        MANAGE_CUSTOMERS,
        MANAGE_SALES,
        VIEW_REPORTS,
        MANAGE_USERS,
    ],
    "manager": [
        MANAGE_PRODUCTS,
        MANAGE_CUSTOMERS,
        MANAGE_SALES,
        VIEW_REPORTS,
    ],
    "cashier": [
        MANAGE_CUSTOMERS,
        MANAGE_SALES,
    ],
}
