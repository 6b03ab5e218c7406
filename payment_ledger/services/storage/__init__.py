"""
Storage Services Package

Provides the persistence contracts and their implementations.
Users are stored in memory or in a JSON file; the audit log in memory.
"""

from payment_ledger.services.storage.interface import (
    AuditStorageInterface,
    CorruptDataError,
    StorageError,
    UserRepository,
    WriteError,
)
from payment_ledger.services.storage.memory import (
    InMemoryAuditStorage,
    InMemoryUserRepository,
)
from payment_ledger.services.storage.json_file import JsonFileUserRepository

__all__ = [
    # Interfaces
    "AuditStorageInterface",
    "UserRepository",
    # Exceptions
    "CorruptDataError",
    "StorageError",
    "WriteError",
    # Implementations
    "InMemoryAuditStorage",
    "InMemoryUserRepository",
    "JsonFileUserRepository",
]
