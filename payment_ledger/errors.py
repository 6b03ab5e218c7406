"""
Ledger Error Taxonomy

Every failure the engine can report is one of these exceptions.
They are all local and synchronous: the engine never retries, it raises
to the immediate caller, which shows the message to the user.

A rejected operation leaves every store unchanged. The one exception is
bulk import, which reports per-record ValidationErrors alongside the
records that were accepted.
"""

from typing import Any, Mapping, Optional


class LedgerError(Exception):
    """Base class for all ledger errors."""
    pass


class PermissionDenied(LedgerError):
    """The acting user lacks the capability an operation requires."""

    def __init__(self, permission: str, action: str):
        self.permission = permission
        self.action = action
        super().__init__(
            f"Permission '{permission}' is required to {action}"
        )


class NotFound(LedgerError):
    """A referenced id or label does not exist."""

    def __init__(self, entity_type: str, key: Any):
        self.entity_type = entity_type
        self.key = key
        super().__init__(f"{entity_type} not found: {key}")


class DuplicateUsername(LedgerError):
    """Another account already uses this username."""

    def __init__(self, username: str):
        self.username = username
        super().__init__(f"Username is already taken: {username}")


class SelfDeletion(LedgerError):
    """A user tried to delete their own account."""

    def __init__(self):
        super().__init__("You cannot delete your own account")


class SelfLockout(LedgerError):
    """A user tried to remove their own user-management permission."""

    def __init__(self):
        super().__init__(
            "You cannot remove your own user management permission"
        )


class LabelInUse(LedgerError):
    """A category label is referenced by at least one payment."""

    def __init__(self, category_id: str, label: str):
        self.category_id = category_id
        self.label = label
        super().__init__(
            f'"{label}" is used by existing payments and cannot be removed'
        )


class ValidationError(LedgerError):
    """
    A record failed validation.

    Carries the offending record so bulk import can report it back.
    `index` is the record's position in its batch, when there is one.
    """

    def __init__(
        self,
        message: str,
        record: Optional[Mapping[str, Any]] = None,
        index: Optional[int] = None,
        issues: Optional[list[str]] = None,
    ):
        self.record = dict(record) if record is not None else None
        self.index = index
        self.issues = issues or []
        super().__init__(message)


class InvalidCredentials(LedgerError):
    """No account matches the given username and password."""

    def __init__(self):
        super().__init__("Invalid username or password")


class NoPendingConfirmation(LedgerError):
    """confirm_status_change was called without a matching outstanding request."""

    def __init__(self, payment_id: Any, reason: str = "no status change is awaiting confirmation"):
        self.payment_id = payment_id
        super().__init__(f"Payment {payment_id}: {reason}")
