"""
Ledger Facade

This module ties the stores, the reconciliation logic and the audit
trail together and is the single entry point for callers (a UI layer,
a script, tests).

DESIGN DECISION: The ledger enforces the boundaries:
- Every operation takes the acting user explicitly and checks permissions
  against that account as currently stored
- Every operation is audited, including the rejected ones
- User accounts are saved through the injected repository after every
  account change; if the save fails the change is undone

LIFECYCLE:
- start(): load users, seed the bootstrap admin if there are none
- close(): nothing to release, logs the shutdown
"""

from contextlib import contextmanager
from datetime import date
from typing import Any, Iterable, Iterator, Mapping, Optional, Union
from uuid import UUID

import structlog

from payment_ledger.audit import AuditLogger, create_correlation_id
from payment_ledger.config import Settings, get_settings
from payment_ledger.errors import LedgerError, PermissionDenied
from payment_ledger.models.audit import AuditEventBuilder
from payment_ledger.models.category import Category, CategoryId
from payment_ledger.models.payment import (
    Payment,
    PaymentDraft,
    PaymentStatus,
    StatusChangeRequest,
)
from payment_ledger.models.query import FilterCriteria, FilterResult, LedgerSummary
from payment_ledger.models.user import Permission, Permissions, User, UserDraft
from payment_ledger.authorization import require_permission
from payment_ledger.queries import QueryExecutor
from payment_ledger.reconciliation import (
    ImportResult,
    bulk_import,
    export_backup,
    restore,
)
from payment_ledger.services.storage import (
    InMemoryUserRepository,
    JsonFileUserRepository,
    StorageError,
    UserRepository,
)
from payment_ledger.stores import CategoryStore, PaymentStore, UserStore
from payment_ledger.validation import RecordValidator


logger = structlog.get_logger(__name__)

DraftInput = Union[PaymentDraft, Mapping[str, Any]]


def default_categories(settings: Optional[Settings] = None) -> list[Category]:
    """The three categories seeded with their configured default labels."""
    config = (settings or get_settings()).categories
    return [
        Category(id=CategoryId.BANK, name=config.bank_name, labels=config.banks),
        Category(id=CategoryId.COMPANY, name=config.company_name, labels=config.companies),
        Category(
            id=CategoryId.BUSINESS_GROUP,
            name=config.business_group_name,
            labels=config.business_groups,
        ),
    ]


def bootstrap_admin(settings: Optional[Settings] = None) -> User:
    """The single administrative account used when no users exist."""
    config = (settings or get_settings()).admin
    return User(
        username=config.username,
        password=config.password,
        permissions=Permissions.all_granted(),
    )


class Ledger:
    """
    The payment ledger engine.

    Holds one payment store, one category store and one user store.
    Every mutating call is permission-gated and audited.
    """

    def __init__(
        self,
        user_repository: Optional[UserRepository] = None,
        audit_logger: Optional[AuditLogger] = None,
        categories: Optional[Iterable[Category]] = None,
        strict_categories: Optional[bool] = None,
        settings: Optional[Settings] = None,
    ):
        self._settings = settings or get_settings()
        self._user_repository = user_repository or InMemoryUserRepository()
        self._audit = audit_logger or AuditLogger()

        if strict_categories is None:
            strict_categories = self._settings.app.strict_categories

        self._categories = CategoryStore(
            categories if categories is not None else default_categories(self._settings)
        )
        self._validator = RecordValidator(
            categories=self._categories,
            strict_categories=strict_categories,
        )
        self._payments = PaymentStore(validator=self._validator)
        self._users = UserStore()
        self._queries = QueryExecutor(self._payments)
        self._started = False

    # -------------------------------------------------------------------------
    # LIFECYCLE
    # -------------------------------------------------------------------------

    def start(self) -> "Ledger":
        """
        Load users from the repository, seeding the bootstrap admin
        (all six permissions) when none are stored.

        Raises:
            StorageError: If the stored users cannot be read or the seed
                cannot be saved
        """
        if self._started:
            return self

        users = self._user_repository.load()
        seeded = False
        if not users:
            users = [bootstrap_admin(self._settings)]
            self._user_repository.save(users)
            seeded = True

        self._users = UserStore(users)
        self._started = True
        self._audit.log(AuditEventBuilder.lifecycle(
            started=True,
            details={"users": len(self._users), "seeded_admin": seeded},
        ))
        return self

    def close(self) -> None:
        """Teardown. Nothing is held open; the shutdown is logged."""
        if not self._started:
            return
        self._started = False
        self._audit.log(AuditEventBuilder.lifecycle(started=False))

    def __enter__(self) -> "Ledger":
        return self.start()

    def __exit__(self, *exc_info) -> None:
        self.close()

    # -------------------------------------------------------------------------
    # ACCESSORS
    # -------------------------------------------------------------------------

    @property
    def payments(self) -> PaymentStore:
        return self._payments

    @property
    def categories(self) -> CategoryStore:
        return self._categories

    @property
    def users(self) -> UserStore:
        return self._users

    @property
    def queries(self) -> QueryExecutor:
        return self._queries

    @property
    def audit(self) -> AuditLogger:
        return self._audit

    @contextmanager
    def _audited(self, actor: User, action: str) -> Iterator[User]:
        """
        Audit and re-raise any ledger rule violation inside the block.

        Yields the acting user's stored account. Permissions are checked
        against it, never against the caller's copy, so a removed or
        demoted account loses its rights at once.

        Raises:
            NotFound: If the acting account no longer exists
        """
        username = actor.username
        try:
            yield self._users.get(actor.id)
        except PermissionDenied as e:
            self._audit.log_permission_denied(username, e.permission, action)
            raise
        except LedgerError as e:
            self._audit.log_rejected(username, action, e)
            raise

    # -------------------------------------------------------------------------
    # AUTHENTICATION
    # -------------------------------------------------------------------------

    def login(self, username: str, password: str) -> User:
        """
        The authentication entry point.

        Raises:
            InvalidCredentials: If no account matches
        """
        try:
            user = self._users.authenticate(username, password)
        except LedgerError:
            self._audit.log(AuditEventBuilder.login(username, succeeded=False))
            raise
        self._audit.log(AuditEventBuilder.login(username, succeeded=True))
        return user

    # -------------------------------------------------------------------------
    # PAYMENTS
    # -------------------------------------------------------------------------

    def create_payment(self, draft: DraftInput, acting_user: User) -> Payment:
        with self._audited(acting_user, "add a payment") as acting_user:
            payment = self._payments.create(draft, acting_user)
        self._audit.log(AuditEventBuilder.payment_created(
            payment_id=payment.id,
            actor=acting_user.username,
            bank=payment.bank,
            amount=payment.amount_text,
        ))
        return payment

    def update_payment(
        self,
        payment_id: UUID,
        draft: DraftInput,
        acting_user: User,
    ) -> Payment:
        with self._audited(acting_user, "edit a payment") as acting_user:
            payment = self._payments.update(payment_id, draft, acting_user)
        self._audit.log(AuditEventBuilder.payment_updated(payment.id, acting_user.username))
        return payment

    def delete_payment(self, payment_id: UUID, acting_user: User) -> Payment:
        with self._audited(acting_user, "delete a payment") as acting_user:
            removed = self._payments.delete(payment_id, acting_user)
        self._audit.log(AuditEventBuilder.payment_deleted(removed.id, acting_user.username))
        return removed

    def _log_status_request(self, request: StatusChangeRequest, actor: str) -> None:
        if request.applied:
            self._audit.log(AuditEventBuilder.status_changed(
                payment_id=request.payment_id,
                actor=actor,
                previous=request.current_status.value,
                status=request.requested_status.value,
                confirmed=False,
            ))
        elif request.requires_confirmation:
            self._audit.log(AuditEventBuilder.status_change_requested(
                payment_id=request.payment_id,
                actor=actor,
                current=request.current_status.value,
                requested=request.requested_status.value,
            ))

    def request_status_change(
        self,
        payment_id: UUID,
        new_status: PaymentStatus,
        acting_user: User,
    ) -> StatusChangeRequest:
        """
        Phase one of a status change. See PaymentStore.request_status_change.
        """
        with self._audited(acting_user, "change a payment status") as acting_user:
            request = self._payments.request_status_change(
                payment_id, new_status, acting_user
            )
        self._log_status_request(request, acting_user.username)
        return request

    def set_status(
        self,
        payment_id: UUID,
        new_status: PaymentStatus,
        acting_user: User,
    ) -> StatusChangeRequest:
        return self.request_status_change(payment_id, new_status, acting_user)

    def toggle_status(self, payment_id: UUID, acting_user: User) -> StatusChangeRequest:
        with self._audited(acting_user, "change a payment status") as acting_user:
            request = self._payments.toggle_status(payment_id, acting_user)
        self._log_status_request(request, acting_user.username)
        return request

    def confirm_status_change(self, payment_id: UUID, acting_user: User) -> Payment:
        """Phase two: apply a status change that awaited confirmation."""
        with self._audited(acting_user, "confirm a payment status change") as acting_user:
            previous = self._payments.get(payment_id).status
            payment = self._payments.confirm_status_change(payment_id, acting_user)
        self._audit.log(AuditEventBuilder.status_changed(
            payment_id=payment.id,
            actor=acting_user.username,
            previous=previous.value,
            status=payment.status.value,
            confirmed=True,
        ))
        return payment

    def cancel_status_change(self, payment_id: UUID) -> bool:
        return self._payments.cancel_status_change(payment_id)

    # -------------------------------------------------------------------------
    # CATEGORIES
    # -------------------------------------------------------------------------

    def add_label(self, category_id: CategoryId, label: str, acting_user: User) -> bool:
        """
        Add a label to a category. Requires `manageCategories`.

        Returns:
            True if the label was added (False for empty or duplicate input)
        """
        with self._audited(acting_user, "manage categories") as acting_user:
            require_permission(acting_user, Permission.MANAGE_CATEGORIES, "manage categories")
            added = self._categories.add_label(category_id, label)
        if added:
            self._audit.log(AuditEventBuilder.label_changed(
                category_id=CategoryId(category_id).value,
                label=label.strip(),
                actor=acting_user.username,
                added=True,
            ))
        return added

    def remove_label(self, category_id: CategoryId, label: str, acting_user: User) -> None:
        """
        Remove a label that no payment uses. Requires `manageCategories`.

        Raises:
            LabelInUse: If any payment references the label
        """
        with self._audited(acting_user, "manage categories") as acting_user:
            require_permission(acting_user, Permission.MANAGE_CATEGORIES, "manage categories")
            self._categories.remove_label(category_id, label, self._payments.snapshot())
        self._audit.log(AuditEventBuilder.label_changed(
            category_id=CategoryId(category_id).value,
            label=label,
            actor=acting_user.username,
            added=False,
        ))

    def is_label_in_use(self, category_id: CategoryId, label: str) -> bool:
        return self._categories.is_in_use(category_id, label, self._payments.snapshot())

    # -------------------------------------------------------------------------
    # USERS
    # -------------------------------------------------------------------------

    @contextmanager
    def _persisting_users(self) -> Iterator[None]:
        """Save users after the block; undo the block's change if saving fails."""
        before = self._users.snapshot()
        yield
        try:
            self._user_repository.save(self._users.snapshot())
        except StorageError:
            self._users = UserStore(before)
            logger.error("user_save_failed", users=len(before))
            raise

    def add_user(self, draft: UserDraft, acting_user: User) -> User:
        with self._audited(acting_user, "add a user") as acting_user, self._persisting_users():
            user = self._users.add_user(draft, acting_user)
        self._audit.log(AuditEventBuilder.user_added(user.id, user.username, acting_user.username))
        return user

    def remove_user(self, user_id: str, acting_user: User) -> User:
        with self._audited(acting_user, "remove a user") as acting_user, self._persisting_users():
            removed = self._users.remove_user(user_id, acting_user)
        self._audit.log(AuditEventBuilder.user_removed(removed.id, acting_user.username))
        return removed

    def update_permissions(
        self,
        user_id: str,
        permissions: Permissions,
        acting_user: User,
    ) -> User:
        with self._audited(acting_user, "change user permissions") as acting_user, self._persisting_users():
            user = self._users.update_permissions(user_id, permissions, acting_user)
        self._audit.log(AuditEventBuilder.permissions_updated(
            user_id=user.id,
            actor=acting_user.username,
            permissions=user.permissions.model_dump(by_alias=True),
        ))
        return user

    # -------------------------------------------------------------------------
    # IMPORT / RESTORE
    # -------------------------------------------------------------------------

    def import_payments(
        self,
        records: Iterable[Mapping[str, Any]],
        acting_user: User,
    ) -> ImportResult:
        """
        Append externally sourced records. Valid records are kept even if
        others in the batch are rejected.
        """
        correlation_id = create_correlation_id()
        with self._audited(acting_user, "import payments") as acting_user:
            result = bulk_import(
                self._payments.snapshot(),
                records,
                acting_user,
                validator=self._validator,
            )
            self._payments.extend(result.imported)

        self._audit.log_import_rejections(
            actor=acting_user.username,
            rejections=[(error.index, error.issues) for error in result.errors],
            correlation_id=correlation_id,
        )
        self._audit.log(AuditEventBuilder.payments_imported(
            actor=acting_user.username,
            imported=result.imported_count,
            rejected=result.rejected_count,
            correlation_id=correlation_id,
        ))
        return result

    def restore_payments(
        self,
        backup: Iterable[Mapping[str, Any]],
        acting_user: User,
    ) -> list[Payment]:
        """
        Replace every payment with the backup snapshot.

        Destructive: the caller must have confirmed with the user already.
        """
        with self._audited(acting_user, "restore payments") as acting_user:
            previous = len(self._payments)
            restored = restore(
                self._payments.snapshot(),
                backup,
                acting_user,
                validator=self._validator,
            )
            self._payments.replace_all(restored)
        self._audit.log(AuditEventBuilder.payments_restored(
            actor=acting_user.username,
            previous=previous,
            restored=len(restored),
        ))
        return restored

    def export_backup(self) -> list[dict]:
        """All payments in the backup format restore_payments reads."""
        return export_backup(self._payments.snapshot())

    # -------------------------------------------------------------------------
    # QUERIES
    # -------------------------------------------------------------------------

    def filter(self, criteria: Optional[FilterCriteria] = None) -> FilterResult:
        return self._queries.filter(criteria)

    def summary(self, today: Optional[date] = None) -> LedgerSummary:
        return self._queries.summary(today=today)


def create_ledger(
    settings: Optional[Settings] = None,
    user_repository: Optional[UserRepository] = None,
    audit_logger: Optional[AuditLogger] = None,
) -> Ledger:
    """
    Factory function: build and start a ledger from configuration.

    Uses the JSON users file when LEDGER_STORAGE_USERS_FILE is set,
    in-memory users otherwise.
    """
    settings = settings or get_settings()

    if user_repository is None:
        users_file = settings.storage.users_file
        if users_file is not None:
            user_repository = JsonFileUserRepository(
                users_file,
                write_attempts=settings.storage.write_attempts,
            )
        else:
            user_repository = InMemoryUserRepository()

    ledger = Ledger(
        user_repository=user_repository,
        audit_logger=audit_logger,
        settings=settings,
    )
    return ledger.start()
