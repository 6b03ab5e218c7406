"""Tests for the payment store and its status workflow."""

import pytest
from datetime import date
from decimal import Decimal
from uuid import uuid4

from payment_ledger.errors import (
    NoPendingConfirmation,
    NotFound,
    PermissionDenied,
    ValidationError,
)
from payment_ledger.models import PaymentDraft, PaymentStatus, Permissions, User
from payment_ledger.stores import PaymentStore
from payment_ledger.validation import RecordValidator


class TestCreate:
    """Tests for adding payments."""

    def test_create_from_mapping(self, payment_store, admin, draft_record):
        """Test that a new payment is pending with a fresh id."""
        payment = payment_store.create(draft_record, admin)
        assert payment.status == PaymentStatus.PENDING
        assert payment_store.get(payment.id) == payment
        assert len(payment_store) == 1

    def test_create_from_draft(self, payment_store, admin, draft_record):
        draft = PaymentDraft.model_validate(draft_record)
        payment = payment_store.create(draft, admin)
        assert payment.bank == "A"
        assert payment.description == "Rent"

    def test_ids_are_unique(self, payment_store, admin, draft_record):
        first = payment_store.create(draft_record, admin)
        second = payment_store.create(draft_record, admin)
        assert first.id != second.id

    def test_create_requires_add(self, payment_store, viewer, draft_record):
        """Test that a denied create leaves the store empty."""
        with pytest.raises(PermissionDenied) as exc_info:
            payment_store.create(draft_record, viewer)
        assert exc_info.value.permission == "add"
        assert len(payment_store) == 0

    def test_create_rejects_malformed(self, payment_store, admin, draft_record):
        del draft_record["checkNumber"]
        with pytest.raises(ValidationError) as exc_info:
            payment_store.create(draft_record, admin)
        assert any("checkNumber" in issue for issue in exc_info.value.issues)
        assert exc_info.value.record["bank"] == "A"
        assert len(payment_store) == 0

    def test_strict_categories(self, categories, admin, draft_record):
        """Test that unknown labels are rejected only in strict mode."""
        strict = PaymentStore(validator=RecordValidator(categories, strict_categories=True))
        loose = PaymentStore(validator=RecordValidator(categories))
        draft_record["bank"] = "Unknown Bank"

        with pytest.raises(ValidationError, match="unknown label"):
            strict.create(draft_record, admin)
        assert loose.create(draft_record, admin).bank == "Unknown Bank"


class TestUpdateDelete:
    """Tests for editing and deleting payments."""

    def test_update_keeps_id_and_status(self, admin, make_payment, draft_record):
        """Test that editing content never resets the status."""
        stored = make_payment(status=PaymentStatus.PAID)
        store = PaymentStore([stored])
        draft_record["amount"] = "250"

        updated = store.update(stored.id, draft_record, admin)
        assert updated.id == stored.id
        assert updated.status == PaymentStatus.PAID
        assert updated.amount == Decimal("250")
        assert store.get(stored.id).amount == Decimal("250")

    def test_update_unknown_id(self, payment_store, admin, draft_record):
        with pytest.raises(NotFound):
            payment_store.update(uuid4(), draft_record, admin)

    def test_update_requires_edit(self, clerk, make_payment, draft_record):
        stored = make_payment()
        store = PaymentStore([stored])
        with pytest.raises(PermissionDenied):
            store.update(stored.id, draft_record, clerk)
        assert store.get(stored.id) == stored

    def test_invalid_update_changes_nothing(self, admin, make_payment, draft_record):
        stored = make_payment()
        store = PaymentStore([stored])
        draft_record["amount"] = "-5"
        with pytest.raises(ValidationError):
            store.update(stored.id, draft_record, admin)
        assert store.get(stored.id) == stored

    def test_delete(self, admin, make_payment):
        first, second = make_payment(), make_payment()
        store = PaymentStore([first, second])
        removed = store.delete(first.id, admin)
        assert removed == first
        assert first.id not in store
        assert store.snapshot() == [second]

    def test_delete_requires_permission(self, clerk, make_payment):
        stored = make_payment()
        store = PaymentStore([stored])
        with pytest.raises(PermissionDenied):
            store.delete(stored.id, clerk)
        assert len(store) == 1

    def test_delete_unknown_id(self, payment_store, admin):
        with pytest.raises(NotFound):
            payment_store.delete(uuid4(), admin)


class TestStatusWorkflow:
    """Tests for the two-phase status change."""

    def test_pending_to_paid_is_immediate(self, clerk, make_payment):
        stored = make_payment()
        store = PaymentStore([stored])

        request = store.request_status_change(stored.id, PaymentStatus.PAID, clerk)
        assert request.applied is True
        assert request.requires_confirmation is False
        assert store.get(stored.id).status == PaymentStatus.PAID

    def test_paid_to_pending_needs_confirmation(self, clerk, make_payment):
        """Test that un-paying a check changes nothing until confirmed."""
        stored = make_payment(status=PaymentStatus.PAID)
        store = PaymentStore([stored])

        request = store.request_status_change(stored.id, PaymentStatus.PENDING, clerk)
        assert request.requires_confirmation is True
        assert request.applied is False
        assert store.get(stored.id).status == PaymentStatus.PAID
        assert store.awaiting_confirmation(stored.id) == request

        confirmed = store.confirm_status_change(stored.id, clerk)
        assert confirmed.status == PaymentStatus.PENDING
        assert store.get(stored.id).status == PaymentStatus.PENDING
        assert store.awaiting_confirmation(stored.id) is None

    def test_cancel_leaves_status(self, clerk, make_payment):
        stored = make_payment(status=PaymentStatus.PAID)
        store = PaymentStore([stored])
        store.request_status_change(stored.id, PaymentStatus.PENDING, clerk)

        assert store.cancel_status_change(stored.id) is True
        assert store.cancel_status_change(stored.id) is False
        assert store.get(stored.id).status == PaymentStatus.PAID
        with pytest.raises(NoPendingConfirmation):
            store.confirm_status_change(stored.id, clerk)

    def test_confirm_without_request(self, clerk, make_payment):
        stored = make_payment()
        store = PaymentStore([stored])
        with pytest.raises(NoPendingConfirmation):
            store.confirm_status_change(stored.id, clerk)

    def test_same_status_is_noop(self, clerk, make_payment):
        stored = make_payment(status=PaymentStatus.PAID)
        store = PaymentStore([stored])
        request = store.request_status_change(stored.id, PaymentStatus.PAID, clerk)
        assert request.applied is False
        assert request.requires_confirmation is False
        assert store.get(stored.id) == stored

    def test_set_status_accepts_string(self, clerk, make_payment):
        stored = make_payment()
        store = PaymentStore([stored])
        store.set_status(stored.id, "paid", clerk)
        assert store.get(stored.id).status == PaymentStatus.PAID

    def test_toggle(self, clerk, make_payment):
        stored = make_payment()
        store = PaymentStore([stored])

        store.toggle_status(stored.id, clerk)
        assert store.get(stored.id).status == PaymentStatus.PAID

        request = store.toggle_status(stored.id, clerk)
        assert request.requires_confirmation is True
        assert store.get(stored.id).status == PaymentStatus.PAID

    def test_status_change_requires_permission(self, make_payment):
        editor = User(username="editor", password="pw", permissions=Permissions(edit=True))
        stored = make_payment()
        store = PaymentStore([stored])
        with pytest.raises(PermissionDenied) as exc_info:
            store.request_status_change(stored.id, PaymentStatus.PAID, editor)
        assert exc_info.value.permission == "changeStatus"

    def test_delete_drops_outstanding_request(self, admin, make_payment):
        stored = make_payment(status=PaymentStatus.PAID)
        store = PaymentStore([stored])
        store.request_status_change(stored.id, PaymentStatus.PENDING, admin)
        store.delete(stored.id, admin)
        assert store.awaiting_confirmation(stored.id) is None


class TestBulk:
    """Tests for extend and replace_all."""

    def test_extend_rejects_duplicate_ids(self, make_payment):
        stored = make_payment()
        store = PaymentStore([stored])
        with pytest.raises(ValidationError):
            store.extend([stored])
        assert len(store) == 1

    def test_replace_all(self, make_payment):
        store = PaymentStore([make_payment(), make_payment()])
        replacement = make_payment(due_date=date(2025, 1, 1))
        store.replace_all([replacement])
        assert store.snapshot() == [replacement]

    def test_snapshot_is_a_copy(self, admin, make_payment):
        store = PaymentStore([make_payment()])
        snapshot = store.snapshot()
        snapshot.clear()
        assert len(store) == 1


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
