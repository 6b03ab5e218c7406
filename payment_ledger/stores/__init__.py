"""In-memory stores for categories, users and payments."""

from payment_ledger.stores.categories import CategoryStore
from payment_ledger.stores.payments import PaymentStore
from payment_ledger.stores.users import UserStore

__all__ = ["CategoryStore", "PaymentStore", "UserStore"]
