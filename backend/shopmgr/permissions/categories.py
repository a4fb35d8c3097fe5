# Overview: Permission category constants for grouping related permissions.


class PermissionCategory:
    """Permission categories for grouping in listings."""
    INVENTORY = "INVENTORY"
    CUSTOMERS = "CUSTOMERS"
    SALES = "SALES"
    REPORTS = "REPORTS"
    USERS = "USERS"
