"""
Import and Restore Reconciliation

Two ways external payment batches enter the ledger:

BULK IMPORT (append):
- every record is validated on its own
- valid records get fresh ids and go after the existing payments
- invalid records are reported, one ValidationError each, without
  aborting the batch (partial success)

RESTORE (replace):
- the whole collection is discarded and replaced by the backup, verbatim
- ids and statuses in the backup are kept
- a malformed backup is rejected as a whole; nothing is replaced

Restore keeps no copy of what it discards. Any undo must happen before
the call (e.g. a confirmation step in the caller).
"""

from dataclasses import dataclass, field
from typing import Any, Iterable, Mapping, Optional

from payment_ledger.authorization import require_permission
from payment_ledger.errors import ValidationError
from payment_ledger.models.payment import Payment
from payment_ledger.models.user import Permission, User
from payment_ledger.validation import RecordValidator


@dataclass
class ImportResult:
    """Outcome of a bulk import."""
    payments: list[Payment]
    imported: list[Payment] = field(default_factory=list)
    errors: list[ValidationError] = field(default_factory=list)

    @property
    def imported_count(self) -> int:
        return len(self.imported)

    @property
    def rejected_count(self) -> int:
        return len(self.errors)

    @property
    def fully_succeeded(self) -> bool:
        return not self.errors


def bulk_import(
    existing: Iterable[Payment],
    incoming: Iterable[Mapping[str, Any]],
    acting_user: User,
    validator: Optional[RecordValidator] = None,
) -> ImportResult:
    """
    Append incoming records to the existing payments.

    Args:
        existing: Current payments; not modified
        incoming: Plain records with dueDate, checkNumber, bank, company,
            businessGroup, description, amount and optional status
        acting_user: Needs the `add` permission
        validator: Record validator (strict category checks, if any)

    Returns:
        ImportResult with the merged collection, the accepted payments
        and one ValidationError per rejected record

    Raises:
        PermissionDenied: Without the `add` permission
    """
    require_permission(acting_user, Permission.ADD, "import payments")
    validator = validator or RecordValidator()

    imported: list[Payment] = []
    errors: list[ValidationError] = []

    for index, record in enumerate(incoming):
        try:
            parsed = validator.validate_import(record, index=index)
        except ValidationError as e:
            errors.append(e)
            continue
        imported.append(Payment(**parsed.model_dump()))

    return ImportResult(
        payments=list(existing) + imported,
        imported=imported,
        errors=errors,
    )


def restore(
    existing: Iterable[Payment],
    backup: Iterable[Mapping[str, Any]],
    acting_user: User,
    validator: Optional[RecordValidator] = None,
) -> list[Payment]:
    """
    Replace the existing payments with a backup snapshot.

    Args:
        existing: Current payments; discarded by the caller on success
        backup: Records produced by export_backup
        acting_user: Needs the `add` permission

    Returns:
        The restored payments, in backup order

    Raises:
        PermissionDenied: Without the `add` permission
        ValidationError: If any backup record is malformed or ids repeat
    """
    require_permission(acting_user, Permission.ADD, "restore payments")
    validator = validator or RecordValidator()

    restored: list[Payment] = []
    seen = set()
    for index, record in enumerate(backup):
        payment = validator.validate_backup(record, index=index)
        if payment.id in seen:
            raise ValidationError(
                f"Backup record {index}: duplicate id {payment.id}",
                record=record,
                index=index,
                issues=[f"id: duplicate {payment.id}"],
            )
        seen.add(payment.id)
        restored.append(payment)

    return restored


def export_backup(payments: Iterable[Payment]) -> list[dict]:
    """
    Serialize payments in the ledger's own backup format.

    JSON-compatible camelCase records: ISO dates, amounts as decimal
    strings, ids and statuses included. restore() reads them back as-is.
    """
    return [
        payment.model_dump(mode="json", by_alias=True)
        for payment in payments
    ]
