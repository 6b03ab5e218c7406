"""
Data Models Package

This package contains all Pydantic models used in the Payment Ledger.
All data flowing through the ledger must conform to these schemas.
"""

from payment_ledger.models.payment import (
    Payment,
    PaymentDraft,
    PaymentStatus,
    StatusChangeRequest,
    canonical_amount,
)
from payment_ledger.models.category import (
    CATEGORY_FIELDS,
    Category,
    CategoryId,
    category_value,
)
from payment_ledger.models.user import (
    Permission,
    Permissions,
    User,
    UserDraft,
)
from payment_ledger.models.query import (
    BankTotal,
    FilterCriteria,
    FilterResult,
    LedgerSummary,
    Month,
    Totals,
)
from payment_ledger.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)

__all__ = [
    # Payment models
    "Payment",
    "PaymentDraft",
    "PaymentStatus",
    "StatusChangeRequest",
    "canonical_amount",
    # Category models
    "CATEGORY_FIELDS",
    "Category",
    "CategoryId",
    "category_value",
    # User models
    "Permission",
    "Permissions",
    "User",
    "UserDraft",
    # Query models
    "BankTotal",
    "FilterCriteria",
    "FilterResult",
    "LedgerSummary",
    "Month",
    "Totals",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]
