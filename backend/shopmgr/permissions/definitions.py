# Overview: All permission definitions organized by category.
# Each permission is defined as: (code, name, description, category)

from .categories import PermissionCategory


MANAGE_PRODUCTS = "MANAGE_PRODUCTS"
MANAGE_CUSTOMERS = "MANAGE_CUSTOMERS"
MANAGE_SALES = "MANAGE_SALES"
VIEW_REPORTS = "VIEW_REPORTS"
MANAGE_USERS = "MANAGE_USERS"


PERMISSION_DEFINITIONS = [
    (
        MANAGE_PRODUCTS,
        "Manage Products",
        "Add, list, search and restock products",
        PermissionCategory.INVENTORY,
    ),
    (
        MANAGE_CUSTOMERS,
        "Manage Customers",
        "Add, list and search customers",
        PermissionCategory.CUSTOMERS,
    ),
    (
        MANAGE_SALES,
        "Manage Sales",
        "Record sales and view the sales log",
        PermissionCategory.SALES,
    ),
    (
        VIEW_REPORTS,
        "View Reports",
        "Low stock, sales summary and profit reports",
        PermissionCategory.REPORTS,
    ),
    (
        MANAGE_USERS,
        "Manage Users",
        "Create, edit and delete operator accounts",
        PermissionCategory.USERS,
    ),
]

# On-disk column order of the permission flags in users.csv (fields 3..7).
PERMISSION_COLUMNS = (
    MANAGE_PRODUCTS,
    MANAGE_CUSTOMERS,
    MANAGE_SALES,
    VIEW_REPORTS,
    MANAGE_USERS,
)
