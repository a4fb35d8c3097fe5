# Overview: Service-layer operations for session; holds the authenticated user context for one run.

"""
Session Context

A session is created by auth_service.login() and lives for one CLI run. It
carries a snapshot of the User record taken at login; permission checks read
that snapshot, not the file.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime

from ..models import User
from ..time_utils import now


@dataclass
class Session:
    user: User
    started_at: datetime = field(default_factory=now)

    @property
    def user_id(self) -> int:
        return self.user.id

    @property
    def username(self) -> str:
        return self.user.username

    def has(self, permission_code: str) -> bool:
        """Single capability predicate used by every permission check."""
        return self.user.has(permission_code)

    def refresh(self, user: User) -> None:
        """Replace the user snapshot after this session changed its own record."""
        if user.id != self.user.id:
            raise ValueError("Cannot attach a different user to an existing session")
        self.user = user


def create_session(user: User) -> Session:
    return Session(user=user)
