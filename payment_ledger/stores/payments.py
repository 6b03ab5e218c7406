"""
Payment Store

The payment collection with create, update, delete and status change.

DESIGN DECISION: Every operation checks permission first, then
validates, and only then mutates. A rejected operation leaves the
collection exactly as it was.

STATUS WORKFLOW:
- pending -> paid is applied immediately
- paid -> pending is "un-paying" a check. It is only recorded as a
  request; nothing changes until confirm_status_change is called
"""

from typing import Any, Iterator, Mapping, Optional, Union
from uuid import UUID

import structlog

from payment_ledger.authorization import require_permission
from payment_ledger.errors import NoPendingConfirmation, NotFound, ValidationError
from payment_ledger.models.payment import (
    Payment,
    PaymentDraft,
    PaymentStatus,
    StatusChangeRequest,
)
from payment_ledger.models.user import Permission, User
from payment_ledger.validation import RecordValidator


logger = structlog.get_logger(__name__)

DraftInput = Union[PaymentDraft, Mapping[str, Any]]


class PaymentStore:
    """
    Owns the lifetime of all payments.

    Iteration follows insertion order. That order carries no display
    meaning; consumers sort and filter explicitly.
    """

    def __init__(
        self,
        payments: Optional[list[Payment]] = None,
        validator: Optional[RecordValidator] = None,
    ):
        self._payments: list[Payment] = []
        self._validator = validator or RecordValidator()
        self._awaiting_confirmation: dict[UUID, StatusChangeRequest] = {}
        if payments:
            self.replace_all(payments)

    def __len__(self) -> int:
        return len(self._payments)

    def __iter__(self) -> Iterator[Payment]:
        return iter(tuple(self._payments))

    def __contains__(self, payment_id: object) -> bool:
        return any(p.id == payment_id for p in self._payments)

    def snapshot(self) -> list[Payment]:
        """A copy of the collection, safe to hold while the store changes."""
        return list(self._payments)

    def _index_of(self, payment_id: UUID) -> int:
        for index, payment in enumerate(self._payments):
            if payment.id == payment_id:
                return index
        raise NotFound("Payment", payment_id)

    def get(self, payment_id: UUID) -> Payment:
        return self._payments[self._index_of(payment_id)]

    # -------------------------------------------------------------------------
    # CRUD
    # -------------------------------------------------------------------------

    def create(self, draft: DraftInput, acting_user: User) -> Payment:
        """
        Add a new payment with a fresh id and status pending.

        Raises:
            PermissionDenied: Without the `add` permission
            ValidationError: If the draft is malformed
        """
        require_permission(acting_user, Permission.ADD, "add a payment")
        checked = self._validator.to_draft(draft)

        payment = Payment.from_draft(checked, status=PaymentStatus.PENDING)
        self._payments.append(payment)
        logger.debug("payment_created", payment_id=str(payment.id))
        return payment

    def update(
        self,
        payment_id: UUID,
        draft: DraftInput,
        acting_user: User,
    ) -> Payment:
        """
        Replace every field except id and status.

        Editing the content never resets the status.

        Raises:
            PermissionDenied: Without the `edit` permission
            NotFound: If no payment has this id
            ValidationError: If the draft is malformed
        """
        require_permission(acting_user, Permission.EDIT, "edit a payment")
        index = self._index_of(payment_id)
        checked = self._validator.to_draft(draft)

        previous = self._payments[index]
        payment = Payment.from_draft(
            checked,
            status=previous.status,
            payment_id=previous.id,
        )
        self._payments[index] = payment
        logger.debug("payment_updated", payment_id=str(payment.id))
        return payment

    def delete(self, payment_id: UUID, acting_user: User) -> Payment:
        """
        Remove a payment. Nothing references payments, so nothing cascades.

        Returns:
            The removed payment

        Raises:
            PermissionDenied: Without the `delete` permission
            NotFound: If no payment has this id
        """
        require_permission(acting_user, Permission.DELETE, "delete a payment")
        index = self._index_of(payment_id)

        removed = self._payments.pop(index)
        self._awaiting_confirmation.pop(removed.id, None)
        logger.debug("payment_deleted", payment_id=str(removed.id))
        return removed

    # -------------------------------------------------------------------------
    # STATUS WORKFLOW
    # -------------------------------------------------------------------------

    def request_status_change(
        self,
        payment_id: UUID,
        new_status: PaymentStatus,
        acting_user: User,
    ) -> StatusChangeRequest:
        """
        Phase one of a status change.

        pending -> paid is applied right away. paid -> pending is only
        recorded; the returned request has requires_confirmation=True.
        Asking for the current status changes nothing.

        Raises:
            PermissionDenied: Without the `changeStatus` permission
            NotFound: If no payment has this id
        """
        require_permission(
            acting_user, Permission.CHANGE_STATUS, "change a payment status"
        )
        new_status = PaymentStatus(new_status)
        index = self._index_of(payment_id)
        current = self._payments[index]

        if current.status == new_status:
            self._awaiting_confirmation.pop(current.id, None)
            return StatusChangeRequest(
                payment_id=current.id,
                current_status=current.status,
                requested_status=new_status,
                requires_confirmation=False,
                applied=False,
            )

        if current.status == PaymentStatus.PAID:
            request = StatusChangeRequest(
                payment_id=current.id,
                current_status=current.status,
                requested_status=new_status,
                requires_confirmation=True,
                applied=False,
            )
            self._awaiting_confirmation[current.id] = request
            logger.debug("status_change_awaits_confirmation", payment_id=str(current.id))
            return request

        self._awaiting_confirmation.pop(current.id, None)
        self._payments[index] = current.with_status(new_status)
        return StatusChangeRequest(
            payment_id=current.id,
            current_status=current.status,
            requested_status=new_status,
            requires_confirmation=False,
            applied=True,
        )

    def set_status(
        self,
        payment_id: UUID,
        new_status: PaymentStatus,
        acting_user: User,
    ) -> StatusChangeRequest:
        """
        Change a payment's status.

        Same as request_status_change: reverting a paid payment still
        needs confirm_status_change before it takes effect.
        """
        return self.request_status_change(payment_id, new_status, acting_user)

    def toggle_status(self, payment_id: UUID, acting_user: User) -> StatusChangeRequest:
        """Request the opposite of the payment's current status."""
        require_permission(
            acting_user, Permission.CHANGE_STATUS, "change a payment status"
        )
        current = self.get(payment_id)
        target = (
            PaymentStatus.PENDING
            if current.status == PaymentStatus.PAID
            else PaymentStatus.PAID
        )
        return self.request_status_change(payment_id, target, acting_user)

    def awaiting_confirmation(self, payment_id: UUID) -> Optional[StatusChangeRequest]:
        return self._awaiting_confirmation.get(payment_id)

    def confirm_status_change(self, payment_id: UUID, acting_user: User) -> Payment:
        """
        Phase two: apply the outstanding status change for a payment.

        Raises:
            PermissionDenied: Without the `changeStatus` permission
            NotFound: If no payment has this id
            NoPendingConfirmation: If nothing awaits confirmation, or the
                payment's status changed since the request was made
        """
        require_permission(
            acting_user, Permission.CHANGE_STATUS, "change a payment status"
        )
        index = self._index_of(payment_id)
        current = self._payments[index]

        request = self._awaiting_confirmation.get(current.id)
        if request is None:
            raise NoPendingConfirmation(current.id)
        if request.current_status != current.status:
            self._awaiting_confirmation.pop(current.id)
            raise NoPendingConfirmation(
                current.id, "status changed since the request was made"
            )

        del self._awaiting_confirmation[current.id]
        payment = current.with_status(request.requested_status)
        self._payments[index] = payment
        return payment

    def cancel_status_change(self, payment_id: UUID) -> bool:
        """
        Drop an outstanding request without applying it.

        Returns:
            True if there was one
        """
        return self._awaiting_confirmation.pop(payment_id, None) is not None

    # -------------------------------------------------------------------------
    # BULK
    # -------------------------------------------------------------------------

    def extend(self, payments: list[Payment]) -> None:
        """
        Append already-validated payments.

        Raises:
            ValidationError: If an id collides with a stored payment
        """
        existing = {p.id for p in self._payments}
        incoming: set[UUID] = set()
        for payment in payments:
            if payment.id in existing or payment.id in incoming:
                raise ValidationError(
                    f"Duplicate payment id: {payment.id}",
                    record=payment.to_record(),
                )
            incoming.add(payment.id)
        self._payments.extend(payments)

    def replace_all(self, payments: list[Payment]) -> None:
        """
        Discard the whole collection and use `payments` instead.

        Outstanding status requests are dropped with it.

        Raises:
            ValidationError: If `payments` contains duplicate ids
        """
        seen: set[UUID] = set()
        for payment in payments:
            if payment.id in seen:
                raise ValidationError(
                    f"Duplicate payment id: {payment.id}",
                    record=payment.to_record(),
                )
            seen.add(payment.id)
        self._payments = list(payments)
        self._awaiting_confirmation.clear()
