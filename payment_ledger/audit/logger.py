"""
Audit Logger

DESIGN DECISION: Every significant action on the ledger is logged.
This provides:
1. Complete traceability of payment, category and account changes
2. A record of every rejected operation
3. Debugging capability

The audit logger:
- Is synchronous, like the rest of the engine
- Never fails the operation it is logging (storage failures are logged)
- Supports correlation IDs to trace related events
"""

import logging
from typing import Optional
from uuid import UUID, uuid4

import structlog

from payment_ledger.config import get_settings
from payment_ledger.models.audit import AuditEvent, AuditEventBuilder, AuditSeverity
from payment_ledger.services.storage import AuditStorageInterface, StorageError


logging.basicConfig(
    format="%(message)s",
    level=getattr(logging, get_settings().app.log_level),
)

# Configure structlog for local logging
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.processors.JSONRenderer()
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)


class AuditLogger:
    """
    Central audit logging service.

    Logs events both to:
    1. Structured local log (for debugging)
    2. Audit storage, if one is configured
    """

    def __init__(
        self,
        storage: Optional[AuditStorageInterface] = None,
    ):
        """
        Initialize audit logger.

        Args:
            storage: Storage backend for persistence.
                    If None, only logs locally.
        """
        self._storage = storage
        self._logger = structlog.get_logger("payment_ledger.audit")

    @property
    def storage(self) -> Optional[AuditStorageInterface]:
        return self._storage

    def log(self, event: AuditEvent) -> bool:
        """
        Log an audit event.

        Always logs locally. Persists to storage if available.

        Returns True if storage write succeeded (or no storage configured).
        """
        log_dict = event.to_log_dict()

        if event.severity == AuditSeverity.ERROR:
            self._logger.error("audit_event", **log_dict)
        elif event.severity == AuditSeverity.WARNING:
            self._logger.warning("audit_event", **log_dict)
        elif event.severity == AuditSeverity.DEBUG:
            self._logger.debug("audit_event", **log_dict)
        else:
            self._logger.info("audit_event", **log_dict)

        if self._storage:
            try:
                return self._storage.append_event(event)
            except StorageError as e:
                self._logger.error(
                    "audit_storage_failed",
                    error=str(e),
                    event_id=str(event.event_id),
                )
                return False

        return True

    def log_permission_denied(
        self,
        actor: Optional[str],
        permission: str,
        action: str,
    ) -> None:
        """Log a rejected operation the actor was not allowed to perform."""
        self.log(AuditEventBuilder.permission_denied(
            actor=actor,
            permission=permission,
            action=action,
        ))

    def log_rejected(
        self,
        actor: Optional[str],
        action: str,
        error: Exception,
    ) -> None:
        """Log an operation rejected by a ledger rule."""
        self.log(AuditEventBuilder.operation_rejected(
            actor=actor,
            action=action,
            error=error,
        ))

    def log_import_rejections(
        self,
        actor: str,
        rejections: list[tuple[Optional[int], list[str]]],
        correlation_id: UUID,
    ) -> None:
        """Log one event per rejected import record."""
        for index, issues in rejections:
            self.log(AuditEventBuilder.import_record_rejected(
                actor=actor,
                index=index,
                issues=issues,
                correlation_id=correlation_id,
            ))


def create_correlation_id() -> UUID:
    """
    Create a new correlation ID for tracking related events.

    Use this at the start of a multi-event action (e.g., a bulk import).
    """
    return uuid4()
