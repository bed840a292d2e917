"""
Reconciliation statistics.

Read-only aggregation over current transaction and invoice state. Safe to
call at any time, independent of a reconciliation run.
"""

from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable

from sqlalchemy.orm import Session

from app.db.store import list_invoices, list_transactions
from app.models.bank_transaction import BankTransaction, MatchStatus
from app.models.invoice import Invoice, InvoiceStatus

SETTLED_STATUSES = (InvoiceStatus.PAID, InvoiceStatus.CLOSED)


@dataclass
class ReconciliationStats:
    total_invoices: int = 0
    matched_invoices: int = 0
    partial_matches: int = 0
    unmatched_invoices: int = 0
    total_transactions: int = 0
    matched_transactions: int = 0
    unmatched_transactions: int = 0
    auto_match_rate: int = 0

    def to_dict(self) -> dict:
        return {
            "total_invoices": self.total_invoices,
            "matched_invoices": self.matched_invoices,
            "partial_matches": self.partial_matches,
            "unmatched_invoices": self.unmatched_invoices,
            "total_transactions": self.total_transactions,
            "matched_transactions": self.matched_transactions,
            "unmatched_transactions": self.unmatched_transactions,
            "auto_match_rate": self.auto_match_rate,
        }


def compute_stats(
    transactions: Iterable[BankTransaction],
    invoices: Iterable[Invoice],
) -> ReconciliationStats:
    transactions = list(transactions)
    invoices = list(invoices)

    total_txn = len(transactions)
    matched_txn = sum(1 for t in transactions if t.match_status == MatchStatus.MATCHED)

    settled = 0
    partial = 0
    for inv in invoices:
        if inv.status in SETTLED_STATUSES:
            settled += 1
            continue
        paid = inv.paid_amount or Decimal("0")
        if 0 < paid < inv.total_amount:
            partial += 1

    rate = 0
    if total_txn > 0:
        rate = int(
            (Decimal(matched_txn) * 100 / Decimal(total_txn)).quantize(
                Decimal("1"), rounding=ROUND_HALF_UP
            )
        )

    return ReconciliationStats(
        total_invoices=len(invoices),
        matched_invoices=settled,
        partial_matches=partial,
        unmatched_invoices=len(invoices) - settled - partial,
        total_transactions=total_txn,
        matched_transactions=matched_txn,
        unmatched_transactions=total_txn - matched_txn,
        auto_match_rate=rate,
    )


def get_stats(db: Session, tenant_id: str) -> ReconciliationStats:
    """Compute statistics for one tenant from the record store."""
    return compute_stats(list_transactions(db, tenant_id), list_invoices(db, tenant_id))
