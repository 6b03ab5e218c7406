"""
Audit Models for the Payment Ledger

Every significant action on the ledger is logged for audit purposes.
This provides:
1. Traceability of who changed which payment, label or account
2. A record of rejected operations (permission denials, bad imports)
3. Debugging information when things go wrong

DESIGN DECISION: Audit logs are append-only. We never delete or modify them.
"""

import json
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


class AuditEventType(str, Enum):
    """Types of events we audit."""
    # Payments
    PAYMENT_CREATED = "payment_created"
    PAYMENT_UPDATED = "payment_updated"
    PAYMENT_DELETED = "payment_deleted"
    STATUS_CHANGE_REQUESTED = "status_change_requested"
    STATUS_CHANGED = "status_changed"

    # Categories
    LABEL_ADDED = "label_added"
    LABEL_REMOVED = "label_removed"

    # Accounts
    LOGIN_SUCCEEDED = "login_succeeded"
    LOGIN_FAILED = "login_failed"
    USER_ADDED = "user_added"
    USER_REMOVED = "user_removed"
    PERMISSIONS_UPDATED = "permissions_updated"

    # Reconciliation
    PAYMENTS_IMPORTED = "payments_imported"
    IMPORT_RECORD_REJECTED = "import_record_rejected"
    PAYMENTS_RESTORED = "payments_restored"

    # Rejections and system events
    PERMISSION_DENIED = "permission_denied"
    OPERATION_REJECTED = "operation_rejected"
    LEDGER_STARTED = "ledger_started"
    LEDGER_STOPPED = "ledger_stopped"


class AuditSeverity(str, Enum):
    """Severity level for audit events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


class AuditEvent(BaseModel):
    """
    A single audit event.

    Every significant action creates one of these.
    """

    # Identity
    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="When the event occurred (UTC)"
    )

    # Event classification
    event_type: AuditEventType = Field(
        ...,
        description="Type of event"
    )
    severity: AuditSeverity = Field(
        default=AuditSeverity.INFO,
        description="Event severity"
    )

    # Context - what entity is this about?
    entity_type: Optional[str] = Field(
        default=None,
        description="Type of entity (e.g., 'payment', 'user', 'category')"
    )
    entity_id: Optional[str] = Field(
        default=None,
        description="ID or label of the entity this event relates to"
    )

    # Who did it
    actor: Optional[str] = Field(
        default=None,
        description="Username of the acting user"
    )

    # Correlation - for tracking related events
    correlation_id: Optional[UUID] = Field(
        default=None,
        description="ID to correlate related events (e.g., all rejections of one import)"
    )

    description: str = Field(
        ...,
        max_length=500,
        description="Human-readable description of what happened"
    )
    details: dict[str, Any] = Field(
        default_factory=dict,
        description="Additional event-specific data"
    )

    error_code: Optional[str] = None
    error_message: Optional[str] = None

    def to_log_dict(self) -> dict:
        """
        Convert to a dictionary suitable for structured logging.
        """
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "entity_type": self.entity_type,
            "entity_id": self.entity_id,
            "actor": self.actor,
            "correlation_id": str(self.correlation_id) if self.correlation_id else None,
            "description": self.description,
            "details": self.details,
            "error_code": self.error_code,
            "error_message": self.error_message,
        }

    def to_row(self) -> list:
        """
        Convert to a flat row for tabular audit storage.

        Returns columns in order:
        [event_id, timestamp, event_type, severity, entity_type, entity_id,
         actor, correlation_id, description, details_json, error_message]
        """
        return [
            str(self.event_id),
            self.timestamp.isoformat(),
            self.event_type.value,
            self.severity.value,
            self.entity_type or "",
            self.entity_id or "",
            self.actor or "",
            str(self.correlation_id) if self.correlation_id else "",
            self.description,
            json.dumps(self.details, default=str) if self.details else "",
            self.error_message or "",
        ]


class AuditEventBuilder:
    """
    Helper class to build audit events with common patterns.

    Usage:
        event = AuditEventBuilder.payment_created(payment_id, "admin", "1500")
        event = AuditEventBuilder.permission_denied("clerk", "delete", "delete a payment")
    """

    @staticmethod
    def payment_created(
        payment_id: UUID,
        actor: str,
        bank: str,
        amount: str,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.PAYMENT_CREATED,
            entity_type="payment",
            entity_id=str(payment_id),
            actor=actor,
            description=f"Payment created: {bank} - {amount}",
            details={"bank": bank, "amount": amount},
        )

    @staticmethod
    def payment_updated(payment_id: UUID, actor: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.PAYMENT_UPDATED,
            entity_type="payment",
            entity_id=str(payment_id),
            actor=actor,
            description="Payment updated",
        )

    @staticmethod
    def payment_deleted(payment_id: UUID, actor: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.PAYMENT_DELETED,
            entity_type="payment",
            entity_id=str(payment_id),
            actor=actor,
            description="Payment deleted",
        )

    @staticmethod
    def status_change_requested(
        payment_id: UUID,
        actor: str,
        current: str,
        requested: str,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.STATUS_CHANGE_REQUESTED,
            entity_type="payment",
            entity_id=str(payment_id),
            actor=actor,
            description=f"Status change {current} -> {requested} awaits confirmation",
            details={"current": current, "requested": requested},
        )

    @staticmethod
    def status_changed(
        payment_id: UUID,
        actor: str,
        previous: str,
        status: str,
        confirmed: bool,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.STATUS_CHANGED,
            entity_type="payment",
            entity_id=str(payment_id),
            actor=actor,
            description=f"Status changed: {previous} -> {status}",
            details={
                "previous": previous,
                "status": status,
                "confirmed": confirmed,
            },
        )

    @staticmethod
    def label_changed(
        category_id: str,
        label: str,
        actor: str,
        added: bool,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=(
                AuditEventType.LABEL_ADDED if added else AuditEventType.LABEL_REMOVED
            ),
            entity_type="category",
            entity_id=category_id,
            actor=actor,
            description=f"Label {'added to' if added else 'removed from'} {category_id}: {label}",
            details={"label": label},
        )

    @staticmethod
    def login(username: str, succeeded: bool) -> AuditEvent:
        return AuditEvent(
            event_type=(
                AuditEventType.LOGIN_SUCCEEDED if succeeded else AuditEventType.LOGIN_FAILED
            ),
            severity=AuditSeverity.INFO if succeeded else AuditSeverity.WARNING,
            entity_type="user",
            entity_id=username,
            actor=username,
            description="Login succeeded" if succeeded else "Login failed",
        )

    @staticmethod
    def user_added(user_id: str, username: str, actor: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.USER_ADDED,
            entity_type="user",
            entity_id=str(user_id),
            actor=actor,
            description=f"User added: {username}",
            details={"username": username},
        )

    @staticmethod
    def user_removed(user_id: str, actor: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.USER_REMOVED,
            entity_type="user",
            entity_id=str(user_id),
            actor=actor,
            description="User removed",
        )

    @staticmethod
    def permissions_updated(
        user_id: str,
        actor: str,
        permissions: dict[str, bool],
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.PERMISSIONS_UPDATED,
            entity_type="user",
            entity_id=str(user_id),
            actor=actor,
            description="Permissions updated",
            details={"permissions": permissions},
        )

    @staticmethod
    def payments_imported(
        actor: str,
        imported: int,
        rejected: int,
        correlation_id: UUID,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.PAYMENTS_IMPORTED,
            severity=AuditSeverity.WARNING if rejected else AuditSeverity.INFO,
            entity_type="payment",
            actor=actor,
            correlation_id=correlation_id,
            description=f"Imported {imported} payments, rejected {rejected}",
            details={"imported": imported, "rejected": rejected},
        )

    @staticmethod
    def import_record_rejected(
        actor: str,
        index: Optional[int],
        issues: list[str],
        correlation_id: UUID,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.IMPORT_RECORD_REJECTED,
            severity=AuditSeverity.WARNING,
            entity_type="import_record",
            entity_id=str(index) if index is not None else None,
            actor=actor,
            correlation_id=correlation_id,
            description=f"Import record {index} rejected with {len(issues)} issues",
            details={"issues": issues},
        )

    @staticmethod
    def payments_restored(actor: str, previous: int, restored: int) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.PAYMENTS_RESTORED,
            severity=AuditSeverity.WARNING,
            entity_type="payment",
            actor=actor,
            description=f"Payments replaced from backup: {previous} -> {restored}",
            details={"previous": previous, "restored": restored},
        )

    @staticmethod
    def permission_denied(
        actor: Optional[str],
        permission: str,
        action: str,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.PERMISSION_DENIED,
            severity=AuditSeverity.WARNING,
            actor=actor,
            description=f"Permission denied: {action}",
            error_code="permission_denied",
            details={"permission": permission, "action": action},
        )

    @staticmethod
    def operation_rejected(
        actor: Optional[str],
        action: str,
        error: Exception,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.OPERATION_REJECTED,
            severity=AuditSeverity.WARNING,
            actor=actor,
            description=f"Operation rejected: {action}",
            error_code=type(error).__name__,
            error_message=str(error),
        )

    @staticmethod
    def lifecycle(started: bool, details: Optional[dict] = None) -> AuditEvent:
        return AuditEvent(
            event_type=(
                AuditEventType.LEDGER_STARTED if started else AuditEventType.LEDGER_STOPPED
            ),
            description="Ledger started" if started else "Ledger stopped",
            details=details or {},
        )
