# Overview: Service-layer operations for permission; capability checks and security event logging.

"""
Permission Checking and Security Event Logging

DESIGN PRINCIPLES:
- Fail closed: a session without the capability is denied
- Exactly one capability gates each operation, checked before any effect
- Denials are logged as security events; grants are not
"""

from __future__ import annotations

import logging

from ..permissions import validate_permission_code
from .session_service import Session

logger = logging.getLogger(__name__)


class PermissionDeniedError(Exception):
    """Raised when the session lacks the required capability."""

    def __init__(self, permission_code: str, message: str | None = None):
        self.permission_code = permission_code
        super().__init__(message or f"Permission denied: requires {permission_code}")


def log_security_event(
    user_id: int | None,
    event_type: str,
    success: bool,
    resource: str | None = None,
    action: str | None = None,
    reason: str | None = None,
) -> None:
    """
    Log a security event (PERMISSION_DENIED, LOGIN_FAILED, USER_DELETED, ...).

    Failures go out at WARNING, successes at INFO.
    """
    fields = {
        "event_type": event_type,
        "user_id": user_id,
        "success": success,
        "resource": resource,
        "action": action,
        "reason": reason,
    }
    fields = {k: v for k, v in fields.items() if v is not None}
    level = logging.INFO if success else logging.WARNING
    logger.log(level, "Security event %s", event_type, extra={"extra": fields})


def has_permission(session: Session | None, permission_code: str) -> bool:
    if session is None:
        return False
    return session.has(permission_code)


def require_permission(session: Session | None, permission_code: str, resource: str | None = None) -> None:
    """
    Raise PermissionDeniedError unless ``session`` holds ``permission_code``.

    An unknown code is a programming error and raises ValueError.
    """
    if not validate_permission_code(permission_code):
        raise ValueError(f"Unknown permission code: {permission_code}")

    if has_permission(session, permission_code):
        return

    log_security_event(
        user_id=session.user_id if session is not None else None,
        event_type="PERMISSION_DENIED",
        success=False,
        resource=resource,
        action=permission_code,
        reason=f"Missing {permission_code}",
    )
    raise PermissionDeniedError(permission_code)


authorize = require_permission
