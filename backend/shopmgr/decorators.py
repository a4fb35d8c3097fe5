# Overview: Session and permission decorators for service operations.

"""
Service operations take ``(stores, session, ...)`` as their first two
positional arguments. These decorators inspect ``session`` before the body
runs, so a denied call has no effects at all.
"""

from functools import wraps

from .services import permission_service
from .validation import AuthenticationError


def require_auth(f):
    """Require a logged-in session (any capabilities)."""
    @wraps(f)
    def decorated_function(stores, session, *args, **kwargs):
        if session is None:
            raise AuthenticationError("Authentication required")
        return f(stores, session, *args, **kwargs)

    return decorated_function


def require_permission(permission_code: str):
    """
    Require a specific capability.

    Denials are logged by permission_service with the operation name as the
    resource.
    """
    def decorator(f):
        @wraps(f)
        def decorated_function(stores, session, *args, **kwargs):
            if session is None:
                raise AuthenticationError("Authentication required")
            permission_service.require_permission(
                session,
                permission_code,
                resource=f.__name__,
            )
            return f(stores, session, *args, **kwargs)

        decorated_function.required_permission = permission_code
        return decorated_function
    return decorator
