"""
User and Permission Models

Each account carries six independent capabilities. Every mutating
operation in the ledger is gated by exactly one of them.

Passwords are opaque secrets compared by exact match. They are held as
SecretStr so they never show up in reprs or structured logs.
"""

from enum import Enum
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field, SecretStr


class Permission(str, Enum):
    """The six capabilities. Values are the persisted key names."""
    ADD = "add"
    EDIT = "edit"
    DELETE = "delete"
    CHANGE_STATUS = "changeStatus"
    MANAGE_CATEGORIES = "manageCategories"
    MANAGE_USERS = "manageUsers"


class Permissions(BaseModel):
    """Permission set of one user. Everything defaults to denied."""
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    add: bool = False
    edit: bool = False
    delete: bool = False
    change_status: bool = Field(default=False, alias="changeStatus")
    manage_categories: bool = Field(default=False, alias="manageCategories")
    manage_users: bool = Field(default=False, alias="manageUsers")

    @classmethod
    def all_granted(cls) -> "Permissions":
        return cls(
            add=True,
            edit=True,
            delete=True,
            change_status=True,
            manage_categories=True,
            manage_users=True,
        )

    def allows(self, permission: Permission) -> bool:
        """Check a single capability."""
        return bool(self.model_dump(by_alias=True)[permission.value])


class UserDraft(BaseModel):
    """Input for creating a user."""
    model_config = ConfigDict(str_strip_whitespace=True)

    username: str = Field(
        ...,
        max_length=100,
        description="Login name, unique and case-sensitive"
    )
    password: SecretStr = Field(
        ...,
        description="Opaque secret compared by exact match"
    )
    permissions: Permissions = Field(default_factory=Permissions)


class User(BaseModel):
    """A stored account."""
    model_config = ConfigDict(frozen=True)

    id: str = Field(
        default_factory=lambda: str(uuid4()),
        min_length=1,
        description="Opaque unique user ID"
    )
    username: str = Field(..., min_length=1, max_length=100)
    password: SecretStr
    permissions: Permissions = Field(default_factory=Permissions)

    def can(self, permission: Permission) -> bool:
        return self.permissions.allows(permission)

    def check_password(self, password: str) -> bool:
        return self.password.get_secret_value() == password

    def to_record(self) -> dict:
        """
        Convert to the persisted user layout:
        {id, username, password, permissions: {add, edit, ...}}
        """
        return {
            "id": self.id,
            "username": self.username,
            "password": self.password.get_secret_value(),
            "permissions": self.permissions.model_dump(by_alias=True),
        }
