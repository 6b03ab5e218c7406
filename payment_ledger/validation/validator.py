"""
Payment Record Validation

DESIGN DECISION: Validation happens in two distinct stages:

STAGE 1 - SCHEMA VALIDATION:
- Valid due date
- Non-negative amount
- Non-empty required strings (check number, bank, company, business group)
- Known status, if one is given

STAGE 2 - CATEGORY VALIDATION (only in strict mode):
- bank, company and business group must be labels of their categories

Stage 2 only runs when stage 1 passes.

IMPORTANT: Validation NEVER silently fixes issues beyond trimming
whitespace. Every problem is reported back with the offending record.
"""

from typing import TYPE_CHECKING, Any, Mapping, Optional, Union

from pydantic import ValidationError as PydanticValidationError
from pydantic import field_validator

from payment_ledger.errors import ValidationError
from payment_ledger.models.category import CategoryId, category_value
from payment_ledger.models.payment import Payment, PaymentDraft, PaymentStatus

if TYPE_CHECKING:
    from payment_ledger.stores.categories import CategoryStore


class ImportRecord(PaymentDraft):
    """An incoming payment row. Status is optional and defaults to pending."""

    status: PaymentStatus = PaymentStatus.PENDING

    @field_validator("status", mode="before")
    @classmethod
    def missing_status_is_pending(cls, v: Any) -> Any:
        if v is None or v == "":
            return PaymentStatus.PENDING
        return v


def describe_errors(error: PydanticValidationError) -> list[str]:
    """Flatten pydantic errors to `field: message` strings."""
    issues = []
    for err in error.errors():
        location = ".".join(str(part) for part in err["loc"]) or "record"
        issues.append(f"{location}: {err['msg']}")
    return issues


class RecordValidator:
    """
    Validates payment records before they reach the payment store.

    Category checking needs the category store and is only done
    when strict_categories is on.
    """

    def __init__(
        self,
        categories: Optional["CategoryStore"] = None,
        strict_categories: bool = False,
    ):
        self._categories = categories
        self._strict = strict_categories and categories is not None

    @property
    def strict(self) -> bool:
        return self._strict

    def _category_issues(self, draft: PaymentDraft) -> list[str]:
        """Stage 2: every classified field must be a known label."""
        if not self._strict:
            return []

        issues = []
        for category_id in CategoryId:
            value = category_value(category_id, draft)
            if not self._categories.contains(category_id, value):
                issues.append(
                    f"{category_id.value}: unknown label {value!r}"
                )
        return issues

    def check_draft(self, draft: PaymentDraft) -> None:
        """
        Run category validation on an already well-formed draft.

        Raises:
            ValidationError: If a label is unknown (strict mode only)
        """
        issues = self._category_issues(draft)
        if issues:
            raise ValidationError(
                f"Payment references unknown labels: {'; '.join(issues)}",
                record=draft.model_dump(by_alias=True),
                issues=issues,
            )

    def to_draft(
        self,
        data: Union[PaymentDraft, Mapping[str, Any]],
    ) -> PaymentDraft:
        """
        Accept either a draft or a plain mapping and return a checked draft.

        Raises:
            ValidationError: If the mapping is malformed or labels are unknown
        """
        if isinstance(data, PaymentDraft):
            draft = PaymentDraft(**data.model_dump(exclude={"id", "status"}))
        else:
            try:
                draft = PaymentDraft.model_validate(data)
            except PydanticValidationError as e:
                issues = describe_errors(e)
                raise ValidationError(
                    f"Invalid payment: {'; '.join(issues)}",
                    record=data,
                    issues=issues,
                )
        self.check_draft(draft)
        return draft

    def validate_import(
        self,
        record: Mapping[str, Any],
        index: Optional[int] = None,
    ) -> ImportRecord:
        """
        Validate one incoming import row.

        Raises:
            ValidationError: Carrying the record, its index and all issues
        """
        if not isinstance(record, Mapping):
            raise ValidationError(
                f"Record {index}: expected a mapping, got {type(record).__name__}",
                index=index,
                issues=["record: not a mapping"],
            )

        # Stage 1: schema
        try:
            parsed = ImportRecord.model_validate(record)
        except PydanticValidationError as e:
            issues = describe_errors(e)
            raise ValidationError(
                f"Record {index}: {'; '.join(issues)}",
                record=record,
                index=index,
                issues=issues,
            )

        # Stage 2: categories
        issues = self._category_issues(parsed)
        if issues:
            raise ValidationError(
                f"Record {index}: {'; '.join(issues)}",
                record=record,
                index=index,
                issues=issues,
            )

        return parsed

    def validate_backup(
        self,
        record: Mapping[str, Any],
        index: Optional[int] = None,
    ) -> Payment:
        """
        Parse one backup row verbatim, keeping its id and status.

        Backups come from this system's own export, so no category
        check is made.
        """
        if not isinstance(record, Mapping):
            raise ValidationError(
                f"Backup record {index}: expected a mapping, got {type(record).__name__}",
                index=index,
                issues=["record: not a mapping"],
            )
        try:
            return Payment.model_validate(record)
        except PydanticValidationError as e:
            issues = describe_errors(e)
            raise ValidationError(
                f"Backup record {index}: {'; '.join(issues)}",
                record=record,
                index=index,
                issues=issues,
            )
