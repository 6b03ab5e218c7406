"""Bulk import, restore and backup export."""

from payment_ledger.reconciliation.reconciler import (
    ImportResult,
    bulk_import,
    export_backup,
    restore,
)

__all__ = ["ImportResult", "bulk_import", "export_backup", "restore"]
