"""
Category Store

Holds the label lists of the three categories (bank, company, business
group). Labels are ordered and duplicate-free.

INVARIANT: a label cannot be removed while any payment references it in
the corresponding field. remove_label runs the in-use scan itself and
never trusts a check made earlier by the caller.
"""

from typing import Iterable, Optional

import structlog

from payment_ledger.errors import LabelInUse, NotFound
from payment_ledger.models.category import Category, CategoryId, category_value
from payment_ledger.models.payment import PaymentDraft


logger = structlog.get_logger(__name__)


class CategoryStore:
    """The three category label lists."""

    def __init__(self, categories: Optional[Iterable[Category]] = None):
        self._categories: dict[CategoryId, Category] = {
            category_id: Category(id=category_id, name=category_id.value)
            for category_id in CategoryId
        }
        for category in categories or []:
            labels: list[str] = []
            for label in category.labels:
                label = label.strip()
                if label and label not in labels:
                    labels.append(label)
            self._categories[category.id] = Category(
                id=category.id,
                name=category.name,
                labels=labels,
            )

    def get(self, category_id: CategoryId) -> Category:
        """A copy of one category."""
        return self._categories[CategoryId(category_id)].model_copy(deep=True)

    def categories(self) -> list[Category]:
        return [self.get(category_id) for category_id in CategoryId]

    def labels(self, category_id: CategoryId) -> list[str]:
        return list(self._categories[CategoryId(category_id)].labels)

    def contains(self, category_id: CategoryId, label: str) -> bool:
        return label in self._categories[CategoryId(category_id)].labels

    def add_label(self, category_id: CategoryId, label: str) -> bool:
        """
        Append a label to a category.

        Whitespace is trimmed. Empty input and labels already present
        (exact, case-sensitive match) are no-ops.

        Returns:
            True if the label was added
        """
        category = self._categories[CategoryId(category_id)]
        label = label.strip()
        if not label or label in category.labels:
            return False

        category.labels.append(label)
        logger.debug("label_added", category=category.id.value, label=label)
        return True

    def is_in_use(
        self,
        category_id: CategoryId,
        label: str,
        payments: Iterable[PaymentDraft],
    ) -> bool:
        """True if any payment's field for this category equals `label`."""
        category_id = CategoryId(category_id)
        return any(
            category_value(category_id, payment) == label
            for payment in payments
        )

    def remove_label(
        self,
        category_id: CategoryId,
        label: str,
        payments: Iterable[PaymentDraft],
    ) -> None:
        """
        Remove a label from a category.

        Raises:
            LabelInUse: If any payment references the label
            NotFound: If the category has no such label
        """
        category = self._categories[CategoryId(category_id)]
        if self.is_in_use(category.id, label, payments):
            raise LabelInUse(category.id.value, label)
        if label not in category.labels:
            raise NotFound(f"{category.id.value} label", label)

        category.labels.remove(label)
        logger.debug("label_removed", category=category.id.value, label=label)
