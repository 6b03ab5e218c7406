"""
Authorization Gate

Every mutating ledger operation calls require_permission exactly once,
before it touches any state, with the acting user passed in explicitly.
"""

from payment_ledger.errors import PermissionDenied
from payment_ledger.models.user import Permission, User


def require_permission(user: User, permission: Permission, action: str) -> None:
    """
    Raise PermissionDenied unless `user` holds `permission`.

    Args:
        user: The acting user
        permission: The capability the operation needs
        action: Short description of the operation, for the error message
    """
    if not user.can(permission):
        raise PermissionDenied(permission.value, action)
