"""
JSON File Storage Implementation

DESIGN DECISION: User accounts are persisted as one JSON document:
an ordered list of {id, username, password, permissions:{...}} records.
Ids are opaque strings, so account lists written by older tools
with numeric ids load as they are.

Writes go to a temporary sibling file which then replaces the target,
so a crash mid-write never leaves a truncated user list behind.
Transient OS errors on write are retried.
"""

import json
import os
from pathlib import Path
from typing import Optional

from pydantic import ValidationError as PydanticValidationError
from tenacity import (
    Retrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from payment_ledger.config import get_settings
from payment_ledger.models.user import User
from payment_ledger.services.storage.interface import (
    CorruptDataError,
    StorageError,
    UserRepository,
    WriteError,
)


class JsonFileUserRepository(UserRepository):
    """Stores the user list in a single JSON file."""

    def __init__(
        self,
        path: Path,
        write_attempts: Optional[int] = None,
    ):
        self._path = Path(path)
        if write_attempts is None:
            write_attempts = get_settings().storage.write_attempts
        self._write_attempts = write_attempts

    @property
    def path(self) -> Path:
        return self._path

    def _record_to_user(self, record: dict) -> User:
        """Convert a persisted record to a User."""
        return User(
            id=str(record["id"]),
            username=record["username"],
            password=record["password"],
            permissions=record.get("permissions", {}),
        )

    def load(self) -> list[User]:
        """Load users; a missing file means no users yet."""
        if not self._path.exists():
            return []

        try:
            text = self._path.read_text(encoding="utf-8")
        except OSError as e:
            raise StorageError(f"Failed to read users file {self._path}: {e}")

        if not text.strip():
            return []

        try:
            records = json.loads(text)
        except json.JSONDecodeError as e:
            raise CorruptDataError(f"Users file is not valid JSON: {e}")

        if not isinstance(records, list):
            raise CorruptDataError("Users file must contain a list of users")

        try:
            return [self._record_to_user(record) for record in records]
        except (KeyError, TypeError, PydanticValidationError) as e:
            raise CorruptDataError(f"Malformed user record: {e}")

    def _write(self, text: str) -> None:
        tmp_path = self._path.with_name(self._path.name + ".tmp")
        tmp_path.write_text(text, encoding="utf-8")
        os.replace(tmp_path, self._path)

    def save(self, users: list[User]) -> None:
        """Write the full user list, retrying transient OS errors."""
        text = json.dumps(
            [user.to_record() for user in users],
            ensure_ascii=False,
            indent=2,
        )
        retrying = Retrying(
            stop=stop_after_attempt(self._write_attempts),
            wait=wait_exponential(multiplier=0.1, max=2),
            retry=retry_if_exception_type(OSError),
            reraise=True,
        )
        try:
            for attempt in retrying:
                with attempt:
                    self._write(text)
        except OSError as e:
            raise WriteError(f"Failed to write users file {self._path}: {e}")
