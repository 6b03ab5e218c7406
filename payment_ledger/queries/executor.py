"""
Query Execution

DESIGN DECISION: Queries are read-only and run on a snapshot of the
payment store. Nothing computed here is cached: every call rescans
the live collection.
"""

from datetime import date
from typing import Optional

from payment_ledger.models.category import CategoryId
from payment_ledger.models.payment import Payment
from payment_ledger.models.query import FilterCriteria, FilterResult, LedgerSummary, Totals
from payment_ledger.queries.aggregation import aggregate, sum_amounts, summarize
from payment_ledger.queries.filters import distinct_values, filter_payments
from payment_ledger.stores.payments import PaymentStore


class QueryExecutor:
    """
    Executes filters and aggregations against the payment store.

    GUARANTEES:
    - Never mutates the store
    - Results reflect the store at the moment of the call
    """

    def __init__(self, store: PaymentStore):
        self._store = store

    def _snapshot(self) -> list[Payment]:
        return self._store.snapshot()

    def filter(self, criteria: Optional[FilterCriteria] = None) -> FilterResult:
        """Payments matching `criteria` and their total."""
        criteria = criteria or FilterCriteria()
        matches = filter_payments(self._snapshot(), criteria)
        return FilterResult(
            criteria=criteria,
            payments=matches,
            total=sum_amounts(matches),
        )

    def aggregate(self, criteria: Optional[FilterCriteria] = None) -> Totals:
        """Totals of the payments matching `criteria`."""
        criteria = criteria or FilterCriteria()
        return aggregate(filter_payments(self._snapshot(), criteria))

    def summary(self, today: Optional[date] = None) -> LedgerSummary:
        """The four summary views over the whole collection."""
        return summarize(self._snapshot(), today=today)

    def options(self, category_id: CategoryId) -> list[str]:
        """Values present in the collection for one category, sorted."""
        return distinct_values(self._snapshot(), category_id)

    def describe(self, criteria: FilterCriteria) -> str:
        """Human-readable description of the active criteria."""
        if criteria.is_empty:
            return "All payments"

        parts = []
        if criteria.month is not None:
            parts.append(f"due in {criteria.month}")
        if criteria.check_number:
            parts.append(f"check number contains {criteria.check_number!r}")
        if criteria.banks:
            parts.append(f"bank: {', '.join(sorted(criteria.banks))}")
        if criteria.companies:
            parts.append(f"company: {', '.join(sorted(criteria.companies))}")
        if criteria.business_groups:
            parts.append(f"business group: {', '.join(sorted(criteria.business_groups))}")
        if criteria.description:
            parts.append(f"description contains {criteria.description!r}")
        if criteria.amount:
            parts.append(f"amount contains {criteria.amount!r}")
        if criteria.status is not None:
            parts.append(f"status: {criteria.status.value}")
        return "Payments " + " | ".join(parts)
