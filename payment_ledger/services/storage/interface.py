"""
Abstract Storage Interface

DESIGN DECISION: Persistence is an injected collaborator, not ambient state.
The ledger only needs two contracts:
1. Users: load the whole account list, save the whole account list
2. Audit: append-only event log

The interface is intentionally simple - whole-collection load/save is
enough for a single-process ledger with a handful of accounts.
"""

from abc import ABC, abstractmethod
from typing import Optional
from uuid import UUID

from payment_ledger.models.audit import AuditEvent
from payment_ledger.models.user import User


class UserRepository(ABC):
    """
    Abstract interface for user account persistence.

    The ledger calls load() once at bootstrap and save() after every
    account mutation.
    """

    @abstractmethod
    def load(self) -> list[User]:
        """
        Load all stored users in their persisted order.

        Returns:
            The stored users, or an empty list if nothing is stored yet

        Raises:
            StorageError: If the stored data cannot be read
        """
        pass

    @abstractmethod
    def save(self, users: list[User]) -> None:
        """
        Replace the stored users with `users`.

        Raises:
            StorageError: If the write fails
        """
        pass


class AuditStorageInterface(ABC):
    """
    Abstract interface for audit log storage.

    Audit logs are append-only - we never delete or modify them.
    """

    @abstractmethod
    def append_event(self, event: AuditEvent) -> bool:
        """
        Append an audit event to the log.

        Returns:
            True if logged successfully
        """
        pass

    @abstractmethod
    def get_events_by_correlation_id(
        self,
        correlation_id: UUID,
    ) -> list[AuditEvent]:
        """Get all events for a correlation ID, in chronological order."""
        pass

    @abstractmethod
    def get_events_by_entity(
        self,
        entity_type: str,
        entity_id: str,
    ) -> list[AuditEvent]:
        """Get all events for a specific entity, in chronological order."""
        pass

    @abstractmethod
    def get_recent_events(
        self,
        limit: int = 100,
        actor: Optional[str] = None,
    ) -> list[AuditEvent]:
        """
        Get the most recent audit events (newest first).

        Args:
            limit: Maximum number of events to return
            actor: Only events by this username
        """
        pass


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class CorruptDataError(StorageError):
    """Stored data exists but cannot be parsed."""
    pass


class WriteError(StorageError):
    """Could not write to the storage backend."""
    pass
