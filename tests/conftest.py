"""Shared fixtures for the payment ledger tests."""

from datetime import date
from decimal import Decimal

import pytest

from payment_ledger.audit import AuditLogger
from payment_ledger.models import (
    Category,
    CategoryId,
    Payment,
    PaymentStatus,
    Permissions,
    User,
)
from payment_ledger.services.storage import InMemoryAuditStorage, InMemoryUserRepository
from payment_ledger.stores import CategoryStore, PaymentStore, UserStore


@pytest.fixture
def admin():
    """An account holding all six permissions."""
    return User(id="1", username="admin", password="admin", permissions=Permissions.all_granted())


@pytest.fixture
def viewer():
    """An account with no permissions at all."""
    return User(id="2", username="viewer", password="secret")


@pytest.fixture
def clerk():
    """Can add and change status, nothing else."""
    return User(
        id="3",
        username="clerk",
        password="clerk",
        permissions=Permissions(add=True, change_status=True),
    )


@pytest.fixture
def make_payment():
    """Factory for stored payments with sensible defaults."""

    def _make(**overrides) -> Payment:
        fields = {
            "due_date": date(2024, 3, 15),
            "check_number": "A-100",
            "bank": "A",
            "company": "Acme",
            "business_group": "North",
            "description": "",
            "amount": Decimal("100"),
            "status": PaymentStatus.PENDING,
        }
        fields.update(overrides)
        return Payment(**fields)

    return _make


@pytest.fixture
def draft_record():
    """A valid camelCase payment record, as a caller or import file supplies it."""
    return {
        "dueDate": "2024-03-15",
        "checkNumber": "A-100",
        "bank": "A",
        "company": "Acme",
        "businessGroup": "North",
        "description": "Rent",
        "amount": "100",
    }


@pytest.fixture
def categories():
    return CategoryStore([
        Category(id=CategoryId.BANK, name="Bank", labels=["A", "B"]),
        Category(id=CategoryId.COMPANY, name="Company", labels=["Acme"]),
        Category(id=CategoryId.BUSINESS_GROUP, name="Business Group", labels=["North"]),
    ])


@pytest.fixture
def payment_store():
    return PaymentStore()


@pytest.fixture
def user_store(admin, viewer):
    return UserStore([admin, viewer])


@pytest.fixture
def audit_storage():
    return InMemoryAuditStorage()


@pytest.fixture
def audit_logger(audit_storage):
    return AuditLogger(storage=audit_storage)


@pytest.fixture
def user_repository(admin, viewer):
    return InMemoryUserRepository([admin, viewer])
