"""
Authentication and user management tests.

Verifies:
- Bootstrap creates admin/admin only when users.csv is missing
- Login failures raise one generic AuthenticationError
- Legacy djb2 hashes verify and are upgraded to bcrypt on login
- Password policy and password change
- User create / edit / delete rules
"""

import pytest

from shopmgr.models import User
from shopmgr.permissions import ALL_PERMISSIONS, MANAGE_SALES, MANAGE_USERS, VIEW_REPORTS
from shopmgr.services import auth_service
from shopmgr.services.auth_service import PasswordValidationError
from shopmgr.validation import AuthenticationError, NotFoundError, ValidationError


# =============================================================================
# HASHING
# =============================================================================


class TestPasswordHashing:

    def test_legacy_hash_known_values(self):
        # djb2 seed only
        assert auth_service.legacy_hash("") == "0000000000001505"
        # 5381 * 33 + ord("a")
        assert auth_service.legacy_hash("a") == f"{5381 * 33 + 97:016x}"

    def test_legacy_hash_wraps_at_64_bits(self):
        digest = auth_service.legacy_hash("x" * 64)
        assert len(digest) == 16
        assert auth_service.is_legacy_hash(digest)

    def test_bcrypt_round_trip(self):
        hashed = auth_service.hash_password("s3cret", rounds=4)
        assert hashed.startswith("$2")
        assert auth_service.verify_password("s3cret", hashed)
        assert not auth_service.verify_password("wrong", hashed)

    def test_legacy_digest_verifies(self):
        digest = auth_service.legacy_hash("admin")
        assert auth_service.verify_password("admin", digest)
        assert not auth_service.verify_password("admin2", digest)

    def test_garbage_hash_does_not_verify(self):
        assert not auth_service.verify_password("admin", "not-a-hash")
        assert not auth_service.verify_password("admin", "")

    @pytest.mark.parametrize("password", ["abc", "has,comma", 'has"quote', "line\nbreak", "x" * 73])
    def test_policy_rejects(self, password):
        with pytest.raises(PasswordValidationError):
            auth_service.validate_password_strength(password)

    def test_policy_accepts_four_characters(self):
        auth_service.validate_password_strength("abcd")


# =============================================================================
# BOOTSTRAP AND LOGIN
# =============================================================================


class TestBootstrap:

    def test_default_admin_created_when_store_missing(self, stores):
        assert not stores.users.exists()
        created = auth_service.ensure_default_user(stores)

        assert created.id == 1
        assert created.username == "admin"
        assert created.permissions == ALL_PERMISSIONS
        assert created.is_active
        assert stores.users.find_by_id(1).username == "admin"

    def test_not_recreated_when_store_exists(self, stores):
        stores.users.path.write_text("")
        assert auth_service.ensure_default_user(stores) is None
        with pytest.raises(AuthenticationError):
            auth_service.login(stores, "admin", "admin")

    def test_first_login_bootstraps(self, stores):
        session = auth_service.login(stores, "admin", "admin")
        assert session.user_id == 1
        assert all(session.has(code) for code in ALL_PERMISSIONS)


class TestLogin:

    def test_wrong_password(self, stores, admin_session):
        with pytest.raises(AuthenticationError) as excinfo:
            auth_service.login(stores, "admin", "nope")
        assert str(excinfo.value) == auth_service.INVALID_CREDENTIALS

    def test_unknown_user_same_message(self, stores, admin_session):
        with pytest.raises(AuthenticationError) as excinfo:
            auth_service.login(stores, "ghost", "admin")
        assert str(excinfo.value) == auth_service.INVALID_CREDENTIALS

    def test_username_is_case_sensitive(self, stores, admin_session):
        with pytest.raises(AuthenticationError):
            auth_service.login(stores, "ADMIN", "admin")

    def test_inactive_user_rejected(self, stores, admin_session):
        auth_service.create_user(
            stores, admin_session, username="sleepy", password="pass1", is_active=False
        )
        with pytest.raises(AuthenticationError):
            auth_service.login(stores, "sleepy", "pass1")

    def test_failed_login_is_logged(self, stores, admin_session, caplog):
        with pytest.raises(AuthenticationError):
            auth_service.login(stores, "admin", "nope")
        assert "LOGIN_FAILED" in caplog.text

    def test_legacy_hash_upgraded_on_login(self, stores):
        stores.users.append(User(
            id=1,
            username="old",
            password_hash=auth_service.legacy_hash("oldpass"),
            permissions=frozenset({MANAGE_SALES}),
        ))

        session = auth_service.login(stores, "old", "oldpass")

        stored = stores.users.find_by_id(1)
        assert session.username == "old"
        assert stored.password_hash.startswith("$2")
        assert stored.permissions == frozenset({MANAGE_SALES})
        # still works after the upgrade
        auth_service.login(stores, "old", "oldpass")


class TestChangePassword:

    def test_change_then_login_with_new(self, stores, admin_session):
        auth_service.change_password(stores, admin_session, "admin", "n3wpass")

        with pytest.raises(AuthenticationError):
            auth_service.login(stores, "admin", "admin")
        assert auth_service.login(stores, "admin", "n3wpass").user_id == 1
        assert auth_service.verify_password("n3wpass", admin_session.user.password_hash)

    def test_wrong_old_password(self, stores, admin_session):
        before = stores.users.path.read_bytes()
        with pytest.raises(ValidationError, match="Current password is incorrect"):
            auth_service.change_password(stores, admin_session, "bad", "n3wpass")
        assert stores.users.path.read_bytes() == before

    def test_new_password_policy(self, stores, admin_session):
        with pytest.raises(PasswordValidationError):
            auth_service.change_password(stores, admin_session, "admin", "abc")

    def test_requires_session(self, stores):
        with pytest.raises(AuthenticationError):
            auth_service.change_password(stores, None, "admin", "n3wpass")


# =============================================================================
# USER MANAGEMENT
# =============================================================================


class TestUserManagement:

    def test_create_user_gets_next_id(self, stores, admin_session):
        user = auth_service.create_user(
            stores,
            admin_session,
            username="bob",
            password="bobpass",
            permissions={MANAGE_SALES, VIEW_REPORTS},
        )
        assert user.id == 2
        stored = auth_service.get_user(stores, admin_session, 2)
        assert stored.permissions == frozenset({MANAGE_SALES, VIEW_REPORTS})
        assert auth_service.login(stores, "bob", "bobpass").has(MANAGE_SALES)

    def test_duplicate_username_rejected(self, stores, admin_session):
        with pytest.raises(ValidationError, match="already exists"):
            auth_service.create_user(stores, admin_session, username="admin", password="whatever")

    def test_unknown_permission_rejected(self, stores, admin_session):
        with pytest.raises(ValidationError, match="Unknown permission"):
            auth_service.create_user(
                stores, admin_session, username="bob", password="bobpass", permissions={"FLY"}
            )

    def test_list_users_omits_hash_in_dict(self, stores, admin_session):
        users = auth_service.list_users(stores, admin_session)
        assert [u.username for u in users] == ["admin"]
        assert "password_hash" not in users[0].to_dict()

    def test_update_permissions_and_active(self, stores, admin_session):
        bob = auth_service.create_user(stores, admin_session, username="bob", password="bobpass")
        updated = auth_service.update_user_permissions(
            stores, admin_session, bob.id, permissions={VIEW_REPORTS}, is_active=False
        )
        assert updated.permissions == frozenset({VIEW_REPORTS})
        assert not stores.users.find_by_id(bob.id).is_active

    def test_cannot_drop_own_manage_users(self, stores, admin_session):
        with pytest.raises(ValidationError):
            auth_service.update_user_permissions(
                stores, admin_session, 1, permissions={VIEW_REPORTS}, is_active=True
            )
        assert stores.users.find_by_id(1).has(MANAGE_USERS)

    def test_cannot_deactivate_self(self, stores, admin_session):
        with pytest.raises(ValidationError):
            auth_service.update_user_permissions(
                stores, admin_session, 1, permissions=ALL_PERMISSIONS, is_active=False
            )

    def test_update_missing_user(self, stores, admin_session):
        with pytest.raises(NotFoundError):
            auth_service.update_user_permissions(
                stores, admin_session, 42, permissions=set(), is_active=True
            )

    def test_delete_user(self, stores, admin_session):
        bob = auth_service.create_user(stores, admin_session, username="bob", password="bobpass")
        assert auth_service.delete_user(stores, admin_session, bob.id) is True
        assert stores.users.find_by_id(bob.id) is None

    def test_delete_declined(self, stores, admin_session):
        bob = auth_service.create_user(stores, admin_session, username="bob", password="bobpass")
        assert auth_service.delete_user(stores, admin_session, bob.id, confirm=lambda u: False) is False
        assert stores.users.find_by_id(bob.id) is not None

    def test_cannot_delete_self(self, stores, admin_session):
        with pytest.raises(ValidationError, match="own account"):
            auth_service.delete_user(stores, admin_session, admin_session.user_id)
        assert stores.users.find_by_id(1) is not None
