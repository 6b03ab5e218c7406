"""
User and Permission Store

Holds the accounts and enforces the self-protection rules:
- usernames are unique (case-sensitive)
- nobody can delete their own account
- nobody can take away their own user-management permission

Passwords are opaque and compared by exact match. Hashing belongs to
a security collaborator, not to this store.
"""

from typing import Iterable, Iterator, Optional

import structlog

from payment_ledger.authorization import require_permission
from payment_ledger.errors import (
    DuplicateUsername,
    InvalidCredentials,
    NotFound,
    SelfDeletion,
    SelfLockout,
    ValidationError,
)
from payment_ledger.models.user import Permission, Permissions, User, UserDraft


logger = structlog.get_logger(__name__)


class UserStore:
    """Owns the lifetime of all user accounts."""

    def __init__(self, users: Optional[Iterable[User]] = None):
        self._users: list[User] = []
        for user in users or []:
            if self.get_by_username(user.username) is not None:
                raise DuplicateUsername(user.username)
            self._users.append(user)

    def __len__(self) -> int:
        return len(self._users)

    def __iter__(self) -> Iterator[User]:
        return iter(tuple(self._users))

    def snapshot(self) -> list[User]:
        return list(self._users)

    def _index_of(self, user_id: str) -> int:
        for index, user in enumerate(self._users):
            if user.id == user_id:
                return index
        raise NotFound("User", user_id)

    def get(self, user_id: str) -> User:
        return self._users[self._index_of(user_id)]

    def get_by_username(self, username: str) -> Optional[User]:
        for user in self._users:
            if user.username == username:
                return user
        return None

    def authenticate(self, username: str, password: str) -> User:
        """
        Find the account matching both username and password exactly.

        Raises:
            InvalidCredentials: If no account matches
        """
        for user in self._users:
            if user.username == username and user.check_password(password):
                return user
        raise InvalidCredentials()

    def add_user(self, draft: UserDraft, acting_user: User) -> User:
        """
        Create an account with a fresh id.

        Raises:
            PermissionDenied: Without the `manageUsers` permission
            ValidationError: If username or password is empty
            DuplicateUsername: If the username is already taken
        """
        require_permission(acting_user, Permission.MANAGE_USERS, "add a user")

        issues = []
        if not draft.username:
            issues.append("username: required")
        if not draft.password.get_secret_value():
            issues.append("password: required")
        if issues:
            raise ValidationError(
                "Username and password are required",
                record={"username": draft.username},
                issues=issues,
            )
        if self.get_by_username(draft.username) is not None:
            raise DuplicateUsername(draft.username)

        user = User(
            username=draft.username,
            password=draft.password,
            permissions=draft.permissions,
        )
        self._users.append(user)
        logger.debug("user_added", user_id=user.id)
        return user

    def remove_user(self, user_id: str, acting_user: User) -> User:
        """
        Delete an account.

        Returns:
            The removed user

        Raises:
            PermissionDenied: Without the `manageUsers` permission
            SelfDeletion: If the actor targets their own account
            NotFound: If no user has this id
        """
        require_permission(acting_user, Permission.MANAGE_USERS, "remove a user")
        if user_id == acting_user.id:
            raise SelfDeletion()

        removed = self._users.pop(self._index_of(user_id))
        logger.debug("user_removed", user_id=removed.id)
        return removed

    def update_permissions(
        self,
        user_id: str,
        permissions: Permissions,
        acting_user: User,
    ) -> User:
        """
        Replace an account's permission set.

        Raises:
            PermissionDenied: Without the `manageUsers` permission
            SelfLockout: If the actor would drop their own `manageUsers`
            NotFound: If no user has this id
        """
        require_permission(
            acting_user, Permission.MANAGE_USERS, "change user permissions"
        )
        if user_id == acting_user.id and not permissions.manage_users:
            raise SelfLockout()

        index = self._index_of(user_id)
        user = self._users[index].model_copy(update={"permissions": permissions})
        self._users[index] = user
        return user
