"""Services package."""

from payment_ledger.services.storage import (
    AuditStorageInterface,
    CorruptDataError,
    InMemoryAuditStorage,
    InMemoryUserRepository,
    JsonFileUserRepository,
    StorageError,
    UserRepository,
    WriteError,
)

__all__ = [
    "AuditStorageInterface",
    "CorruptDataError",
    "InMemoryAuditStorage",
    "InMemoryUserRepository",
    "JsonFileUserRepository",
    "StorageError",
    "UserRepository",
    "WriteError",
]
