"""
Query Models

Filter criteria are transient: built by the caller for one query and
never persisted. Totals and summaries are derived views, recomputed
from the live payment collection on every query.
"""

from datetime import date
from decimal import Decimal
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from payment_ledger.models.payment import Payment, PaymentStatus


class Month(BaseModel):
    """A calendar month of a specific year."""
    model_config = ConfigDict(frozen=True)

    year: int = Field(..., ge=1, le=9999)
    month: int = Field(..., ge=1, le=12)

    @classmethod
    def parse(cls, value: str) -> "Month":
        """Parse `YYYY-MM`."""
        year, _, month = value.strip().partition("-")
        if not year.isdigit() or not month.isdigit():
            raise ValueError(f"Expected YYYY-MM, got: {value!r}")
        return cls(year=int(year), month=int(month))

    @classmethod
    def of(cls, day: date) -> "Month":
        return cls(year=day.year, month=day.month)

    def contains(self, day: date) -> bool:
        return day.year == self.year and day.month == self.month

    def __str__(self) -> str:
        return f"{self.year:04d}-{self.month:02d}"


class FilterCriteria(BaseModel):
    """
    Multi-field payment filter.

    Every criterion is optional. An empty criterion always passes; in
    particular an empty selection set means "no restriction", not
    "match nothing".
    """
    model_config = ConfigDict(str_strip_whitespace=True)

    month: Optional[Month] = None
    check_number: str = ""
    banks: frozenset[str] = frozenset()
    companies: frozenset[str] = frozenset()
    business_groups: frozenset[str] = frozenset()
    description: str = ""
    amount: str = ""
    status: Optional[PaymentStatus] = None

    @field_validator("month", mode="before")
    @classmethod
    def coerce_month(cls, v: Any) -> Any:
        if v is None or v == "":
            return None
        if isinstance(v, str):
            return Month.parse(v)
        if isinstance(v, date):
            return Month.of(v)
        return v

    @field_validator("status", mode="before")
    @classmethod
    def empty_status_is_none(cls, v: Any) -> Any:
        return None if v == "" else v

    @property
    def is_empty(self) -> bool:
        return self == FilterCriteria()


class BankTotal(BaseModel):
    """Sum of amounts for one bank."""
    bank: str
    amount: Decimal


class Totals(BaseModel):
    """
    Aggregate of a payment sequence.

    `by_bank` is sorted by descending amount; banks with equal amounts
    keep the order in which they first appear.
    """
    total: Decimal = Decimal("0")
    count: int = Field(default=0, ge=0)
    by_bank: list[BankTotal] = Field(default_factory=list)


class LedgerSummary(BaseModel):
    """
    The four aggregate views shown on the summary panel.

    Each view is computed independently from the same base collection.
    """
    as_of: date
    all: Totals
    paid: Totals
    pending: Totals
    current_month: Totals
    current_month_paid: Decimal

    @property
    def remaining(self) -> Decimal:
        """Outstanding amount over all payments."""
        return self.all.total - self.paid.total

    @property
    def current_month_remaining(self) -> Decimal:
        return self.current_month.total - self.current_month_paid


class FilterResult(BaseModel):
    """Payments matching a filter, plus their total."""
    criteria: FilterCriteria
    payments: list[Payment]
    total: Decimal

    @property
    def count(self) -> int:
        return len(self.payments)
