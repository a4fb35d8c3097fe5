# Overview: Service-layer operations for auth; password hashing, login, bootstrap and user management.

"""
Authentication Service

Every mutating operation is attributed to a logged-in user. Passwords are
hashed with bcrypt (cost from Config.bcrypt_rounds, default 12).

SECURITY NOTES:
- Files written by the older tool hold a 16-hex-digit djb2 digest. Those are
  still accepted at login and replaced with a bcrypt hash on the first
  successful login. They are never written for new passwords.
- Minimum 4 characters. Commas, quotes and newlines are rejected because the
  user store is a delimited text file. At most 72 bytes (bcrypt input limit).
- No lockout or rate limiting; failed attempts are only logged.
- If users.csv is missing, a default administrator (admin/admin, all
  permissions) is created before the first login. Change that password
  immediately.
"""

from __future__ import annotations

import hmac
import logging
import re

import bcrypt

from ..decorators import require_auth, require_permission
from ..extensions import DataStores
from ..models import User
from ..permissions import ALL_PERMISSIONS, MANAGE_USERS
from ..storage import StorageError
from ..validation import AuthenticationError, NotFoundError, ValidationError, require_text
from .identifier_service import next_id
from .permission_service import log_security_event
from .session_service import Session, create_session

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 4
MAX_PASSWORD_BYTES = 72

_LEGACY_HASH_RE = re.compile(r"^[0-9a-f]{16}$")
_LEGACY_HASH_SEED = 5381
_LEGACY_HASH_MASK = (1 << 64) - 1

INVALID_CREDENTIALS = "Invalid username or password, or account is inactive"


class PasswordValidationError(ValidationError):
    """Raised when a password doesn't meet the policy."""
    pass


def validate_password_strength(password: str) -> None:
    """
    Validate password meets the policy.

    Raises PasswordValidationError if requirements not met.
    """
    if not isinstance(password, str):
        raise PasswordValidationError("Password must be text")
    if len(password) < MIN_PASSWORD_LENGTH:
        raise PasswordValidationError(
            f"Password must be at least {MIN_PASSWORD_LENGTH} characters long"
        )
    if len(password.encode("utf-8")) > MAX_PASSWORD_BYTES:
        raise PasswordValidationError(f"Password must be at most {MAX_PASSWORD_BYTES} bytes")
    if any(ch in password for ch in (",", '"', "\n", "\r")):
        raise PasswordValidationError("Password cannot contain commas, quotes or line breaks")


def legacy_hash(password: str) -> str:
    """djb2 digest (hash * 33 + byte, seed 5381, 64-bit wrap) as 16 hex digits."""
    value = _LEGACY_HASH_SEED
    for byte in password.encode("utf-8"):
        value = ((value << 5) + value + byte) & _LEGACY_HASH_MASK
    return f"{value:016x}"


def is_legacy_hash(password_hash: str) -> bool:
    return bool(_LEGACY_HASH_RE.match(password_hash or ""))


def hash_password(password: str, rounds: int = 12) -> str:
    """
    Hash password using bcrypt.

    Password is validated against the policy before hashing.
    """
    validate_password_strength(password)
    salt = bcrypt.gensalt(rounds=rounds)
    hashed = bcrypt.hashpw(password.encode("utf-8"), salt)
    return hashed.decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    """
    Verify password against a stored hash.

    Returns True if password matches hash, False otherwise (including for a
    malformed stored hash).
    """
    if not password_hash:
        return False

    if is_legacy_hash(password_hash):
        return hmac.compare_digest(legacy_hash(password), password_hash)

    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        return False


def _rounds(stores: DataStores) -> int:
    return stores.config.bcrypt_rounds


# ---- Bootstrap ----

def ensure_default_user(stores: DataStores) -> User | None:
    """
    Create the default administrator if the users store is absent.

    Returns the created User, or None when the store already exists (even if
    it is empty).
    """
    if stores.users.exists():
        return None

    config = stores.config
    admin = User(
        id=1,
        username=config.default_admin_username,
        password_hash=hash_password(config.default_admin_password, rounds=_rounds(stores)),
        permissions=ALL_PERMISSIONS,
        is_active=True,
    )
    stores.users.append(admin)
    logger.warning(
        "Created default administrator account; change its password immediately",
        extra={"extra": {"username": admin.username}},
    )
    return admin


# ---- Login ----

def authenticate(stores: DataStores, username: str, password: str) -> User | None:
    """
    Check credentials against the users store.

    Only the first record whose username matches (case-sensitive) is
    considered. Returns the User if the password verifies and the account is
    active, None otherwise.
    """
    ensure_default_user(stores)

    user = stores.users.find_first(lambda u: u.username == username)
    if user is None:
        log_security_event(None, "LOGIN_FAILED", False, action=username, reason="Unknown username")
        return None

    if not verify_password(password, user.password_hash):
        log_security_event(user.id, "LOGIN_FAILED", False, action=username, reason="Wrong password")
        return None

    if not user.is_active:
        log_security_event(user.id, "LOGIN_FAILED", False, action=username, reason="Account inactive")
        return None

    if is_legacy_hash(user.password_hash):
        user = _upgrade_legacy_hash(stores, user, password)

    log_security_event(user.id, "LOGIN", True, action=username)
    return user


def _upgrade_legacy_hash(stores: DataStores, user: User, password: str) -> User:
    try:
        new_hash = bcrypt.hashpw(
            password.encode("utf-8"), bcrypt.gensalt(rounds=_rounds(stores))
        ).decode("utf-8")

        def _set_hash(u: User) -> None:
            u.password_hash = new_hash

        upgraded = stores.users.update_in_place(user.id, _set_hash)
    except (StorageError, NotFoundError) as exc:
        # Login still succeeds; the legacy hash is retried next time
        logger.warning(
            "Could not upgrade legacy password hash",
            extra={"extra": {"user_id": user.id, "reason": str(exc)}},
        )
        return user
    logger.info("Upgraded legacy password hash", extra={"extra": {"user_id": user.id}})
    return upgraded


def login(stores: DataStores, username: str, password: str) -> Session:
    """Authenticate and open a session. Raises AuthenticationError on any failure."""
    user = authenticate(stores, username, password)
    if user is None:
        raise AuthenticationError(INVALID_CREDENTIALS)
    return create_session(user)


@require_auth
def change_password(stores: DataStores, session: Session, old_password: str, new_password: str) -> User:
    """
    Change the session user's own password.

    The old password is checked against the stored record, not the session
    snapshot.
    """
    current = stores.users.find_by_id(session.user_id)
    if current is None:
        raise NotFoundError(f"User ID {session.user_id} not found")
    if not verify_password(old_password, current.password_hash):
        log_security_event(session.user_id, "PASSWORD_CHANGE_FAILED", False, reason="Wrong current password")
        raise ValidationError("Current password is incorrect")

    new_hash = hash_password(new_password, rounds=_rounds(stores))

    def _set_hash(u: User) -> None:
        u.password_hash = new_hash

    updated = stores.users.update_in_place(session.user_id, _set_hash)
    session.refresh(updated)
    log_security_event(session.user_id, "PASSWORD_CHANGED", True)
    return updated


# ---- User management ----

def _validate_username(username: str) -> str:
    username = require_text(username, "username")
    if any(ch.isspace() for ch in username):
        raise ValidationError("username cannot contain whitespace")
    return username


@require_permission(MANAGE_USERS)
def create_user(
    stores: DataStores,
    session: Session,
    *,
    username: str,
    password: str,
    permissions=frozenset(),
    is_active: bool = True,
) -> User:
    """
    Create new user with a bcrypt password hash.

    Username must be unique (case-sensitive) or ValidationError is raised.
    Password must meet the policy or PasswordValidationError is raised.
    """
    username = _validate_username(username)
    unknown = set(permissions) - ALL_PERMISSIONS
    if unknown:
        raise ValidationError(f"Unknown permission(s): {', '.join(sorted(unknown))}")

    if stores.users.find_first(lambda u: u.username == username) is not None:
        raise ValidationError("Username already exists")

    password_hash = hash_password(password, rounds=_rounds(stores))

    user = User(
        id=next_id(stores.users),
        username=username,
        password_hash=password_hash,
        permissions=frozenset(permissions),
        is_active=bool(is_active),
    )
    stores.users.append(user)
    log_security_event(session.user_id, "USER_CREATED", True, resource=f"user:{user.id}", action=username)
    return user


@require_permission(MANAGE_USERS)
def list_users(stores: DataStores, session: Session) -> list[User]:
    return list(stores.users.scan())


@require_permission(MANAGE_USERS)
def get_user(stores: DataStores, session: Session, user_id: int) -> User:
    user = stores.users.find_by_id(user_id)
    if user is None:
        raise NotFoundError(f"User ID {user_id} not found")
    return user


@require_permission(MANAGE_USERS)
def update_user_permissions(
    stores: DataStores,
    session: Session,
    user_id: int,
    *,
    permissions,
    is_active: bool,
) -> User:
    """
    Replace a user's permission set and active flag.

    A session cannot deactivate itself or drop its own MANAGE_USERS, which
    would leave it unable to undo the change.
    """
    permissions = frozenset(permissions)
    unknown = permissions - ALL_PERMISSIONS
    if unknown:
        raise ValidationError(f"Unknown permission(s): {', '.join(sorted(unknown))}")

    if user_id == session.user_id:
        if not is_active:
            raise ValidationError("You cannot deactivate your own account")
        if MANAGE_USERS not in permissions:
            raise ValidationError("You cannot remove your own MANAGE_USERS permission")

    def _apply(u: User) -> None:
        u.permissions = permissions
        u.is_active = bool(is_active)

    updated = stores.users.update_in_place(user_id, _apply)
    if user_id == session.user_id:
        session.refresh(updated)
    log_security_event(
        session.user_id,
        "USER_PERMISSIONS_UPDATED",
        True,
        resource=f"user:{user_id}",
        action=",".join(sorted(permissions)) or "-",
    )
    return updated


@require_permission(MANAGE_USERS)
def delete_user(stores: DataStores, session: Session, user_id: int, confirm=None) -> bool:
    """
    Remove a user record entirely.

    Returns False if ``confirm`` declined. Raises ValidationError on an
    attempt to delete the session's own account, NotFoundError if absent.
    """
    if user_id == session.user_id:
        raise ValidationError("You cannot delete your own account")

    deleted = stores.users.delete_by_id(user_id, confirm=confirm)
    if deleted:
        log_security_event(session.user_id, "USER_DELETED", True, resource=f"user:{user_id}")
    return deleted
