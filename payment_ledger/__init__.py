"""
Payment Ledger - Source Package

A check and payment tracking engine: scheduled checks with due dates,
banks, payee companies and business groups, a pending/paid status
workflow, filtered totals and per-user permissions.

DESIGN PRINCIPLES:
1. Every mutation is checked against the acting user's permissions
2. Fail early, fail visibly: a rejected operation changes nothing
3. No silent corrections
4. Every step must be auditable
5. Storage layer is swappable
"""

__version__ = "1.0.0"
__author__ = "Payment Ledger Team"
