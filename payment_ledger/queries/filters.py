"""
Payment Filtering

A payment passes a filter only if it matches ALL active criteria.
An inactive (empty) criterion always matches.

Filtering is pure: it never changes the input and keeps its order.
"""

from typing import Callable, Iterable

from payment_ledger.models.category import CategoryId, category_value
from payment_ledger.models.payment import Payment
from payment_ledger.models.query import FilterCriteria


Predicate = Callable[[Payment], bool]


def _contains_ignore_case(text: str, needle: str) -> bool:
    return needle.lower() in text.lower()


def build_predicates(criteria: FilterCriteria) -> list[Predicate]:
    """
    One predicate per active criterion.

    Each predicate reads its value from `criteria` itself, never from a
    local reused across branches.
    """
    predicates: list[Predicate] = []

    if criteria.month is not None:
        predicates.append(lambda p: criteria.month.contains(p.due_date))

    if criteria.check_number:
        predicates.append(
            lambda p: _contains_ignore_case(p.check_number, criteria.check_number)
        )

    if criteria.banks:
        predicates.append(lambda p: p.bank in criteria.banks)

    if criteria.companies:
        predicates.append(lambda p: p.company in criteria.companies)

    if criteria.business_groups:
        predicates.append(lambda p: p.business_group in criteria.business_groups)

    if criteria.description:
        predicates.append(
            lambda p: _contains_ignore_case(p.description, criteria.description)
        )

    # Digit-substring match on the canonical amount text, not a numeric comparison
    if criteria.amount:
        predicates.append(lambda p: criteria.amount in p.amount_text)

    if criteria.status is not None:
        predicates.append(lambda p: p.status == criteria.status)

    return predicates


def filter_payments(
    payments: Iterable[Payment],
    criteria: FilterCriteria,
) -> list[Payment]:
    """
    Return the payments matching every active criterion, in input order.

    With all criteria empty the whole input comes back unchanged.
    """
    predicates = build_predicates(criteria)
    return [
        payment for payment in payments
        if all(predicate(payment) for predicate in predicates)
    ]


def distinct_values(
    payments: Iterable[Payment],
    category_id: CategoryId,
) -> list[str]:
    """Sorted unique values of one category field, for filter option lists."""
    category_id = CategoryId(category_id)
    return sorted({category_value(category_id, payment) for payment in payments})
