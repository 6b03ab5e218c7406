"""Tests for the user store and authorization."""

import pytest

from payment_ledger.authorization import require_permission
from payment_ledger.errors import (
    DuplicateUsername,
    InvalidCredentials,
    NotFound,
    PermissionDenied,
    SelfDeletion,
    SelfLockout,
    ValidationError,
)
from payment_ledger.models import Permission, Permissions, User, UserDraft
from payment_ledger.stores import UserStore


class TestAuthentication:
    """Tests for login."""

    def test_authenticate(self, user_store, admin):
        assert user_store.authenticate("admin", "admin") == admin

    def test_wrong_password(self, user_store):
        with pytest.raises(InvalidCredentials):
            user_store.authenticate("admin", "wrong")

    def test_username_is_case_sensitive(self, user_store):
        with pytest.raises(InvalidCredentials):
            user_store.authenticate("Admin", "admin")

    def test_duplicate_seed_usernames(self, admin):
        with pytest.raises(DuplicateUsername):
            UserStore([admin, User(username="admin", password="x")])


class TestAccountManagement:
    """Tests for adding, removing and re-permissioning users."""

    def test_add_user(self, user_store, admin):
        """Test that a new account gets a fresh id and the given permissions."""
        draft = UserDraft(username="clerk", password="pw", permissions=Permissions(add=True))
        user = user_store.add_user(draft, admin)
        assert user.id not in {"1", "2"}
        assert user.permissions.add is True
        assert user_store.get_by_username("clerk") == user
        assert user_store.authenticate("clerk", "pw") == user

    def test_add_user_requires_manage_users(self, user_store, viewer):
        with pytest.raises(PermissionDenied) as exc_info:
            user_store.add_user(UserDraft(username="x", password="pw"), viewer)
        assert exc_info.value.permission == "manageUsers"
        assert len(user_store) == 2

    def test_add_duplicate_username(self, user_store, admin):
        with pytest.raises(DuplicateUsername):
            user_store.add_user(UserDraft(username="viewer", password="pw"), admin)
        assert len(user_store) == 2

    def test_add_user_requires_credentials(self, user_store, admin):
        """Test that empty username or password is rejected."""
        with pytest.raises(ValidationError) as exc_info:
            user_store.add_user(UserDraft(username="  ", password=""), admin)
        assert exc_info.value.issues == ["username: required", "password: required"]
        assert len(user_store) == 2

    def test_remove_user(self, user_store, admin, viewer):
        removed = user_store.remove_user(viewer.id, admin)
        assert removed == viewer
        assert user_store.snapshot() == [admin]

    def test_cannot_remove_self(self, user_store, admin):
        with pytest.raises(SelfDeletion):
            user_store.remove_user(admin.id, admin)
        assert len(user_store) == 2

    def test_remove_unknown_user(self, user_store, admin):
        with pytest.raises(NotFound):
            user_store.remove_user("missing", admin)

    def test_update_permissions(self, user_store, admin, viewer):
        updated = user_store.update_permissions(viewer.id, Permissions(delete=True), admin)
        assert updated.id == viewer.id
        assert updated.permissions.delete is True
        assert user_store.get(viewer.id).permissions.delete is True

    def test_cannot_lock_self_out(self, user_store, admin):
        """Test that nobody can drop their own manageUsers permission."""
        with pytest.raises(SelfLockout):
            user_store.update_permissions(admin.id, Permissions(add=True), admin)
        assert user_store.get(admin.id).permissions.manage_users is True

    def test_can_reduce_own_other_permissions(self, user_store, admin):
        updated = user_store.update_permissions(
            admin.id, Permissions(manage_users=True), admin
        )
        assert updated.permissions.manage_users is True
        assert updated.permissions.add is False


class TestRequirePermission:
    """Tests for the permission gate."""

    def test_allows(self, admin):
        require_permission(admin, Permission.DELETE, "delete a payment")

    def test_denies(self, viewer):
        with pytest.raises(PermissionDenied, match="delete a payment"):
            require_permission(viewer, Permission.DELETE, "delete a payment")


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
