"""
Category Models

A category is a named, editable list of labels for one payment
dimension. There are exactly three of them.

DESIGN DECISION: The mapping from category to payment field is an
explicit table of accessors keyed by CategoryId, never a field name
looked up from a string.
"""

from enum import Enum
from operator import attrgetter
from typing import Callable

from pydantic import BaseModel, Field

from payment_ledger.models.payment import PaymentDraft


class CategoryId(str, Enum):
    """The fixed set of categories. Values are the persisted ids."""
    BANK = "bank"
    COMPANY = "company"
    BUSINESS_GROUP = "businessGroup"


# Category -> the payment field it classifies
CATEGORY_FIELDS: dict[CategoryId, Callable[[PaymentDraft], str]] = {
    CategoryId.BANK: attrgetter("bank"),
    CategoryId.COMPANY: attrgetter("company"),
    CategoryId.BUSINESS_GROUP: attrgetter("business_group"),
}


def category_value(category_id: CategoryId, payment: PaymentDraft) -> str:
    """Value of the payment field that `category_id` classifies."""
    return CATEGORY_FIELDS[category_id](payment)


class Category(BaseModel):
    """One category and its ordered, duplicate-free labels."""

    id: CategoryId
    name: str = Field(
        ...,
        min_length=1,
        description="Display name"
    )
    labels: list[str] = Field(default_factory=list)
