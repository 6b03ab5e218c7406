"""Tests for bulk import, backup export and restore."""

import json
import pytest
from datetime import date
from decimal import Decimal
from uuid import uuid4

from payment_ledger.errors import PermissionDenied, ValidationError
from payment_ledger.models import PaymentStatus
from payment_ledger.reconciliation import bulk_import, export_backup, restore
from payment_ledger.validation import RecordValidator


class TestBulkImport:
    """Tests for appending external records."""

    def test_partial_success(self, admin, make_payment, draft_record):
        """Test that one bad record does not abort the batch."""
        existing = [make_payment()]
        bad = dict(draft_record)
        del bad["checkNumber"]

        result = bulk_import(existing, [draft_record, bad], admin)

        assert result.imported_count == 1
        assert result.rejected_count == 1
        assert not result.fully_succeeded
        assert result.payments[:1] == existing
        assert len(result.payments) == 2

        error = result.errors[0]
        assert isinstance(error, ValidationError)
        assert error.index == 1
        assert error.record["bank"] == "A"

    def test_only_valid_record_is_kept(self, admin, draft_record):
        bad = dict(draft_record)
        del bad["checkNumber"]
        result = bulk_import([], [draft_record, bad], admin)
        assert [p.check_number for p in result.payments] == ["A-100"]
        assert len(result.errors) == 1

    def test_imported_payments_get_fresh_ids(self, admin, draft_record):
        draft_record["id"] = str(uuid4())
        result = bulk_import([], [draft_record, draft_record], admin)
        ids = {p.id for p in result.imported}
        assert len(ids) == 2
        assert draft_record["id"] not in {str(i) for i in ids}

    def test_status_defaults_to_pending(self, admin, draft_record):
        paid = dict(draft_record, status="paid")
        blank = dict(draft_record, status="")
        result = bulk_import([], [draft_record, paid, blank], admin)
        assert [p.status for p in result.imported] == [
            PaymentStatus.PENDING, PaymentStatus.PAID, PaymentStatus.PENDING,
        ]

    def test_unknown_status_is_rejected(self, admin, draft_record):
        result = bulk_import([], [dict(draft_record, status="bounced")], admin)
        assert result.imported == []
        assert any(issue.startswith("status") for issue in result.errors[0].issues)

    def test_non_mapping_record(self, admin, draft_record):
        result = bulk_import([], ["not a record", draft_record], admin)
        assert result.imported_count == 1
        assert result.errors[0].index == 0

    def test_strict_categories(self, admin, categories, draft_record):
        validator = RecordValidator(categories, strict_categories=True)
        unknown = dict(draft_record, company="Nobody")
        result = bulk_import([], [draft_record, unknown], admin, validator=validator)
        assert result.imported_count == 1
        assert result.errors[0].issues == ["company: unknown label 'Nobody'"]

    def test_requires_add(self, viewer, draft_record):
        with pytest.raises(PermissionDenied):
            bulk_import([], [draft_record], viewer)

    def test_existing_is_not_modified(self, admin, make_payment, draft_record):
        existing = [make_payment()]
        bulk_import(existing, [draft_record], admin)
        assert len(existing) == 1


class TestBackup:
    """Tests for export_backup and restore."""

    def test_export_is_json_compatible(self, make_payment):
        payment = make_payment(amount=Decimal("12.50"), status=PaymentStatus.PAID)
        records = export_backup([payment])
        json.dumps(records)

        record = records[0]
        assert record["id"] == str(payment.id)
        assert record["dueDate"] == "2024-03-15"
        assert record["status"] == "paid"
        assert Decimal(record["amount"]) == Decimal("12.50")

    def test_restore_reproduces_export(self, admin, make_payment):
        """Test that restore(export(P)) gives P back, ids and statuses included."""
        payments = [
            make_payment(status=PaymentStatus.PAID),
            make_payment(bank="B", due_date=date(2024, 5, 1)),
        ]
        restored = restore([make_payment()], export_backup(payments), admin)
        assert restored == payments

    def test_restore_replaces_not_merges(self, admin, make_payment):
        kept = make_payment()
        restored = restore([make_payment(), make_payment()], export_backup([kept]), admin)
        assert restored == [kept]

    def test_malformed_backup_is_rejected_whole(self, admin, make_payment):
        records = export_backup([make_payment(), make_payment()])
        records[1]["amount"] = "-3"
        with pytest.raises(ValidationError) as exc_info:
            restore([], records, admin)
        assert exc_info.value.index == 1

    def test_duplicate_ids_are_rejected(self, admin, make_payment):
        payment = make_payment()
        records = export_backup([payment, payment])
        with pytest.raises(ValidationError, match="duplicate id"):
            restore([], records, admin)

    def test_restore_requires_add(self, viewer, make_payment):
        with pytest.raises(PermissionDenied):
            restore([], export_backup([make_payment()]), viewer)


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
