from __future__ import annotations

from dataclasses import dataclass, field


@dataclass
class User:
    """
    Operator account.

    permissions holds capability codes (see shopmgr.permissions). On disk they
    are five 0/1 columns; in memory a set, checked through has().
    """
    id: int
    username: str
    password_hash: str
    permissions: frozenset[str] = field(default_factory=frozenset)
    is_active: bool = True

    def has(self, permission_code: str) -> bool:
        return permission_code in self.permissions

    def to_dict(self) -> dict:
        # password_hash stays out of exports
        return {
            "id": self.id,
            "username": self.username,
            "permissions": sorted(self.permissions),
            "is_active": self.is_active,
        }
