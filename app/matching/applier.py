"""
Match applier.

Applies one accepted candidate as a single unit of work across three records:

  1. Re-read the bank transaction (row lock); it must still be unmatched
  2. Re-read the invoice (row lock); it must still be open
  3. Reject the apply if it would overpay the invoice
  4. Add the amount to invoice.paid_amount and move the invoice status
  5. Link the transaction to the invoice
  6. Append a Payment ledger row
  7. Commit 4-6 together, or roll everything back

Both rows also carry an optimistic version counter, so a writer that slipped
past the re-read on a backend without row locks fails at commit instead of
double-counting.
"""

import logging
from dataclasses import dataclass
from decimal import Decimal

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.config import get_settings
from app.db.store import get_invoice_for_update, get_transaction_for_update
from app.matching.candidates import MatchCandidate
from app.matching.errors import (
    AlreadyMatched,
    ApplyError,
    InvoiceClosed,
    Overpayment,
    RecordNotFound,
    StoreUnavailable,
)
from app.models.bank_transaction import MatchStatus
from app.models.invoice import InvoiceStatus
from app.models.payment import Payment

logger = logging.getLogger(__name__)

AUTO_MATCH_NOTE = "Auto-matched from bank transaction"


@dataclass
class AppliedMatch:
    """Outcome of a successful apply, for cache refresh and notifications."""

    transaction_id: str
    invoice_id: str
    payment_id: str
    amount: Decimal
    invoice_status: str
    paid_amount: Decimal
    remaining_amount: Decimal

    def to_dict(self) -> dict:
        return {
            "transaction_id": self.transaction_id,
            "invoice_id": self.invoice_id,
            "payment_id": self.payment_id,
            "amount": str(self.amount),
            "invoice_status": self.invoice_status,
            "paid_amount": str(self.paid_amount),
            "remaining_amount": str(self.remaining_amount),
        }


def apply_match(
    db: Session,
    candidate: MatchCandidate,
    amount: Decimal | None = None,
    payment_method: str | None = None,
    notes: str = AUTO_MATCH_NOTE,
) -> AppliedMatch:
    """
    Apply a candidate to the record store.

    Args:
        db: SQLAlchemy session; committed on success, rolled back on failure
        candidate: The accepted transaction/invoice pair
        amount: Amount to book; defaults to the absolute transaction amount
        payment_method: Ledger payment method; defaults to settings
        notes: Free-text note stored on the payment row

    Raises:
        AlreadyMatched, InvoiceClosed, Overpayment, RecordNotFound,
        StoreUnavailable
    """
    try:
        return _apply(db, candidate, amount, payment_method, notes)
    except ApplyError:
        db.rollback()
        raise
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(
            "Store failure applying txn %s -> invoice %s: %s",
            candidate.transaction_id,
            candidate.invoice_id,
            str(e),
        )
        raise StoreUnavailable(
            f"Store failure while applying match: {e}",
            transaction_id=candidate.transaction_id,
            invoice_id=candidate.invoice_id,
        ) from e


def _apply(
    db: Session,
    candidate: MatchCandidate,
    amount: Decimal | None,
    payment_method: str | None,
    notes: str,
) -> AppliedMatch:
    settings = get_settings()
    txn_id = candidate.transaction_id
    inv_id = candidate.invoice_id

    # Step 1: transaction must still be unmatched
    txn = get_transaction_for_update(db, txn_id)
    if txn is None:
        raise RecordNotFound(
            f"Transaction {txn_id} not found", transaction_id=txn_id, invoice_id=inv_id
        )
    if txn.match_status != MatchStatus.UNMATCHED:
        raise AlreadyMatched(
            f"Transaction {txn_id} is already matched to invoice {txn.matched_invoice_id}",
            transaction_id=txn_id,
            invoice_id=inv_id,
        )

    # Step 2: invoice must still be open
    invoice = get_invoice_for_update(db, inv_id)
    if invoice is None:
        raise RecordNotFound(
            f"Invoice {inv_id} not found", transaction_id=txn_id, invoice_id=inv_id
        )
    if not invoice.is_open:
        raise InvoiceClosed(
            f"Invoice {invoice.invoice_number} is no longer open "
            f"(status {invoice.status.value}, remaining {invoice.remaining_amount})",
            transaction_id=txn_id,
            invoice_id=inv_id,
        )

    # Step 3: overpayment guard
    if amount is None:
        amount = txn.abs_amount
    if amount <= 0:
        raise ApplyError(
            f"Cannot apply non-positive amount {amount}",
            transaction_id=txn_id,
            invoice_id=inv_id,
        )

    paid_before = invoice.paid_amount or Decimal("0")
    new_paid = paid_before + amount
    if new_paid > invoice.total_amount + settings.overpayment_tolerance:
        raise Overpayment(
            f"Applying {amount} to invoice {invoice.invoice_number} would bring "
            f"paid amount to {new_paid}, above total {invoice.total_amount}",
            transaction_id=txn_id,
            invoice_id=inv_id,
        )

    # Step 4: invoice bookkeeping
    invoice.paid_amount = new_paid
    if new_paid >= invoice.total_amount - settings.amount_epsilon:
        invoice.status = InvoiceStatus.PAID
    else:
        invoice.status = InvoiceStatus.PARTIALLY_PAID

    # Step 5: link transaction
    txn.match_status = MatchStatus.MATCHED
    txn.matched_invoice_id = invoice.id

    # Step 6: ledger entry
    payment = Payment(
        tenant_id=invoice.tenant_id,
        invoice_id=invoice.id,
        source_transaction_id=txn.id,
        amount=amount,
        payment_method=payment_method or settings.default_payment_method,
        notes=f"{notes} {txn.id}",
    )
    db.add(payment)

    # Step 7: one commit for all three writes
    db.flush()
    invoice_number = invoice.invoice_number
    applied = AppliedMatch(
        transaction_id=txn.id,
        invoice_id=invoice.id,
        payment_id=payment.id,
        amount=amount,
        invoice_status=invoice.status.value,
        paid_amount=new_paid,
        remaining_amount=invoice.total_amount - new_paid,
    )
    db.commit()

    logger.info(
        "Applied txn %s -> invoice %s: %s (invoice now %s, confidence %d)",
        txn_id,
        invoice_number,
        amount,
        applied.invoice_status,
        candidate.confidence,
    )
    return applied
