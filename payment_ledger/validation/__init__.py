"""Payment record validation package."""

from payment_ledger.validation.validator import (
    ImportRecord,
    RecordValidator,
    describe_errors,
)

__all__ = ["ImportRecord", "RecordValidator", "describe_errors"]
