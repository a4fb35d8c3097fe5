# Overview: Permission system package.
# Re-exports all public APIs.

from .categories import PermissionCategory
from .definitions import (
    PERMISSION_DEFINITIONS,
    PERMISSION_COLUMNS,
    MANAGE_PRODUCTS,
    MANAGE_CUSTOMERS,
    MANAGE_SALES,
    VIEW_REPORTS,
    MANAGE_USERS,
)
from .roles import DEFAULT_ROLE_PERMISSIONS
from .helpers import (
    get_all_permission_codes,
    get_permissions_by_category,
    get_permission_definition,
    validate_permission_code,
    normalize_permission_codes,
    get_role_permissions,
)

ALL_PERMISSIONS = frozenset(PERMISSION_COLUMNS)

__all__ = [
    "PermissionCategory",
    "PERMISSION_DEFINITIONS",
    "PERMISSION_COLUMNS",
    "ALL_PERMISSIONS",
    "MANAGE_PRODUCTS",
    "MANAGE_CUSTOMERS",
    "MANAGE_SALES",
    "VIEW_REPORTS",
    "MANAGE_USERS",
    "DEFAULT_ROLE_PERMISSIONS",
    "get_all_permission_codes",
    "get_permissions_by_category",
    "get_permission_definition",
    "validate_permission_code",
    "normalize_permission_codes",
    "get_role_permissions",
]
