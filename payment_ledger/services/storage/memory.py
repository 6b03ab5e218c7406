"""
In-Memory Storage

Used when no users file is configured, and in tests.
Nothing survives the process.
"""

from typing import Iterable, Optional
from uuid import UUID

from payment_ledger.models.audit import AuditEvent
from payment_ledger.models.user import User
from payment_ledger.services.storage.interface import (
    AuditStorageInterface,
    UserRepository,
)


class InMemoryUserRepository(UserRepository):
    """Keeps the saved user list in a Python list."""

    def __init__(self, users: Optional[Iterable[User]] = None):
        self._users: list[User] = list(users or [])
        self.save_count = 0

    def load(self) -> list[User]:
        return list(self._users)

    def save(self, users: list[User]) -> None:
        self._users = list(users)
        self.save_count += 1


class InMemoryAuditStorage(AuditStorageInterface):
    """Append-only list of audit events."""

    def __init__(self):
        self._events: list[AuditEvent] = []

    def append_event(self, event: AuditEvent) -> bool:
        self._events.append(event)
        return True

    def get_events_by_correlation_id(
        self,
        correlation_id: UUID,
    ) -> list[AuditEvent]:
        return [e for e in self._events if e.correlation_id == correlation_id]

    def get_events_by_entity(
        self,
        entity_type: str,
        entity_id: str,
    ) -> list[AuditEvent]:
        return [
            e for e in self._events
            if e.entity_type == entity_type and e.entity_id == entity_id
        ]

    def get_recent_events(
        self,
        limit: int = 100,
        actor: Optional[str] = None,
    ) -> list[AuditEvent]:
        events = [e for e in self._events if actor is None or e.actor == actor]
        return list(reversed(events))[:limit]

    def __len__(self) -> int:
        return len(self._events)
