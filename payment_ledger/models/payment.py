"""
Core Payment Models for the Payment Ledger

A Payment is a scheduled check: due date, check number, the bank it is
drawn on, the payee company, the business group it belongs to, a free-text
description and an amount. Its status is either pending or paid.

DESIGN DECISION: Payments are frozen pydantic models. The id is assigned
once at creation and a changed payment is always a new model instance,
so nothing can mutate a record behind the store's back.

External records (imports, backups) use camelCase keys such as
`dueDate` and `businessGroup`. Models accept both spellings and dump
camelCase with `by_alias=True`.
"""

from datetime import date, datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
)


# Accepted textual date formats, tried in order
DATE_FORMATS = ("%Y-%m-%d", "%d.%m.%Y")


class PaymentStatus(str, Enum):
    """
    Payment lifecycle status.

    CRITICAL: paid -> pending is a sensitive transition and is never
    applied without an explicit confirmation.
    """
    PENDING = "pending"
    PAID = "paid"


def parse_date(value: Any) -> Any:
    """
    Coerce common date inputs to a `date`.

    Accepts date, datetime (date part), ISO `YYYY-MM-DD` and `DD.MM.YYYY`.
    Anything else is passed through for pydantic to reject.
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, str):
        text = value.strip()
        for fmt in DATE_FORMATS:
            try:
                return datetime.strptime(text, fmt).date()
            except ValueError:
                continue
        return text
    return value


def canonical_amount(amount: Decimal) -> str:
    """
    Canonical string form of an amount: plain notation, no trailing zeros.

    Decimal("100.00") -> "100", Decimal("100.50") -> "100.5"
    """
    return format(amount.normalize(), "f")


class PaymentDraft(BaseModel):
    """
    The caller-editable content of a payment.

    Used for create and update. Everything except id and status.
    """
    model_config = ConfigDict(
        str_strip_whitespace=True,
        populate_by_name=True,
    )

    due_date: date = Field(
        ...,
        alias="dueDate",
        description="Date the check is due"
    )
    check_number: str = Field(
        ...,
        alias="checkNumber",
        min_length=1,
        max_length=50,
        description="Check number (not required to be unique)"
    )
    bank: str = Field(
        ...,
        min_length=1,
        max_length=200,
        description="Bank the check is drawn on"
    )
    company: str = Field(
        ...,
        min_length=1,
        max_length=200,
        description="Payee company"
    )
    business_group: str = Field(
        ...,
        alias="businessGroup",
        min_length=1,
        max_length=200,
        description="Business group the payment belongs to"
    )
    description: str = Field(
        default="",
        max_length=1000,
        description="Free-text description"
    )
    amount: Decimal = Field(
        ...,
        ge=0,
        description="Amount, currency-agnostic"
    )

    @field_validator("due_date", mode="before")
    @classmethod
    def coerce_due_date(cls, v: Any) -> Any:
        return parse_date(v)

    @field_validator("description", mode="before")
    @classmethod
    def none_description_is_empty(cls, v: Any) -> Any:
        return "" if v is None else v


class Payment(PaymentDraft):
    """
    A stored payment.

    The id never changes after creation. Status is never null.
    """
    model_config = ConfigDict(frozen=True)

    id: UUID = Field(
        default_factory=uuid4,
        description="Unique payment ID"
    )
    status: PaymentStatus = Field(
        default=PaymentStatus.PENDING,
        description="Payment status"
    )

    @classmethod
    def from_draft(
        cls,
        draft: PaymentDraft,
        status: PaymentStatus = PaymentStatus.PENDING,
        payment_id: Optional[UUID] = None,
    ) -> "Payment":
        """Build a payment from a draft, keeping an existing id if given."""
        fields = draft.model_dump()
        if payment_id is not None:
            fields["id"] = payment_id
        return cls(status=status, **fields)

    def to_draft(self) -> PaymentDraft:
        """The editable content of this payment."""
        return PaymentDraft(**self.model_dump(exclude={"id", "status"}))

    def with_status(self, status: PaymentStatus) -> "Payment":
        """Return a copy with a different status."""
        return self.model_copy(update={"status": status})

    @property
    def amount_text(self) -> str:
        """Canonical string form of the amount, used for substring search."""
        return canonical_amount(self.amount)

    def to_record(self) -> dict:
        """
        Convert to a plain structured row for export collaborators.

        Keys are camelCase. Values stay typed (date, Decimal); formatting
        is the collaborator's concern.
        """
        record = self.model_dump(by_alias=True)
        record["id"] = str(self.id)
        record["status"] = self.status.value
        return record


class StatusChangeRequest(BaseModel):
    """
    Outcome of asking for a status change.

    pending -> paid is applied at once. paid -> pending comes back with
    requires_confirmation=True and nothing applied; the caller must ask
    the user and then call confirm_status_change.
    """
    model_config = ConfigDict(frozen=True)

    payment_id: UUID
    current_status: PaymentStatus
    requested_status: PaymentStatus
    requires_confirmation: bool
    applied: bool
    requested_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
