# Overview: Utility functions for permission lookups and validation.

from .definitions import PERMISSION_DEFINITIONS
from .roles import DEFAULT_ROLE_PERMISSIONS


def get_all_permission_codes():
    """Get list of all permission codes."""
    return [perm[0] for perm in PERMISSION_DEFINITIONS]


def get_permissions_by_category(category):
    """Get all permissions in a category."""
    return [perm for perm in PERMISSION_DEFINITIONS if perm[3] == category]


def get_permission_definition(code):
    """Get full definition for a permission code."""
    for perm in PERMISSION_DEFINITIONS:
        if perm[0] == code:
            return {
                "code": perm[0],
                "name": perm[1],
                "description": perm[2],
                "category": perm[3],
            }
    return None


def validate_permission_code(code):
    """Check if a permission code is valid."""
    return code in get_all_permission_codes()


def normalize_permission_codes(codes) -> frozenset[str]:
    """
    Upper-case and validate a collection of codes.

    Raises ValueError naming the first unknown code.
    """
    normalized = set()
    for code in codes:
        code = code.strip().upper().replace("-", "_")
        if not validate_permission_code(code):
            raise ValueError(f"Unknown permission: {code}")
        normalized.add(code)
    return frozenset(normalized)


def get_role_permissions(role_name):
    """Permission set for a preset role name, or None if unknown."""
    codes = DEFAULT_ROLE_PERMISSIONS.get(role_name)
    return frozenset(codes) if codes is not None else None
