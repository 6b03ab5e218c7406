"""Filtering and aggregation package."""

from payment_ledger.queries.aggregation import aggregate, sum_amounts, summarize
from payment_ledger.queries.executor import QueryExecutor
from payment_ledger.queries.filters import distinct_values, filter_payments

__all__ = [
    "QueryExecutor",
    "aggregate",
    "distinct_values",
    "filter_payments",
    "sum_amounts",
    "summarize",
]
