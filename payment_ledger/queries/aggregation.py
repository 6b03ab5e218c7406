"""
Payment Aggregation

Totals are derived views: computed from whatever payments are passed in,
on every call, and never stored.
"""

from datetime import date
from decimal import Decimal
from typing import Iterable, Optional

from payment_ledger.models.payment import Payment, PaymentStatus
from payment_ledger.models.query import BankTotal, LedgerSummary, Month, Totals


def sum_amounts(payments: Iterable[Payment]) -> Decimal:
    return sum((payment.amount for payment in payments), Decimal("0"))


def aggregate(payments: Iterable[Payment]) -> Totals:
    """
    Total and per-bank breakdown of a payment sequence.

    The breakdown is sorted by descending amount. Banks with equal
    amounts keep their first-occurrence order (sorted() is stable).
    Empty input gives a zero total and an empty breakdown.
    """
    per_bank: dict[str, Decimal] = {}
    total = Decimal("0")
    count = 0

    for payment in payments:
        per_bank[payment.bank] = per_bank.get(payment.bank, Decimal("0")) + payment.amount
        total += payment.amount
        count += 1

    by_bank = sorted(
        (BankTotal(bank=bank, amount=amount) for bank, amount in per_bank.items()),
        key=lambda bank_total: bank_total.amount,
        reverse=True,
    )
    return Totals(total=total, count=count, by_bank=by_bank)


def summarize(
    payments: Iterable[Payment],
    today: Optional[date] = None,
) -> LedgerSummary:
    """
    The four summary views over one base collection.

    - all: every payment
    - paid: status paid
    - pending: status pending
    - current_month: due in today's calendar month

    Args:
        payments: The base collection
        today: Reference date for the current month (defaults to today)
    """
    today = today or date.today()
    base = list(payments)
    this_month = Month.of(today)

    paid = [p for p in base if p.status == PaymentStatus.PAID]
    pending = [p for p in base if p.status == PaymentStatus.PENDING]
    current_month = [p for p in base if this_month.contains(p.due_date)]

    return LedgerSummary(
        as_of=today,
        all=aggregate(base),
        paid=aggregate(paid),
        pending=aggregate(pending),
        current_month=aggregate(current_month),
        current_month_paid=sum_amounts(
            p for p in current_month if p.status == PaymentStatus.PAID
        ),
    )
