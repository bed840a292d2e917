"""Record store queries used by the reconciliation engine."""

from sqlalchemy.orm import Session

from app.models.bank_transaction import BankTransaction, MatchStatus
from app.models.invoice import Invoice, CLOSED_STATUSES


def list_unmatched_transactions(db: Session, tenant_id: str) -> list[BankTransaction]:
    return (
        db.query(BankTransaction)
        .filter(
            BankTransaction.tenant_id == tenant_id,
            BankTransaction.match_status == MatchStatus.UNMATCHED,
        )
        .order_by(BankTransaction.transaction_date.desc(), BankTransaction.id)
        .all()
    )


def list_open_invoices(db: Session, tenant_id: str) -> list[Invoice]:
    """Invoices that can still receive payments.

    Status is filtered in SQL; the remaining-balance check runs in Python so
    it uses the same definition as Invoice.is_open.
    """
    invoices = (
        db.query(Invoice)
        .filter(
            Invoice.tenant_id == tenant_id,
            Invoice.status.notin_(list(CLOSED_STATUSES)),
        )
        .order_by(Invoice.created_at.desc(), Invoice.id)
        .all()
    )
    return [inv for inv in invoices if inv.is_open]


def list_transactions(db: Session, tenant_id: str) -> list[BankTransaction]:
    return db.query(BankTransaction).filter(BankTransaction.tenant_id == tenant_id).all()


def list_invoices(db: Session, tenant_id: str) -> list[Invoice]:
    return db.query(Invoice).filter(Invoice.tenant_id == tenant_id).all()


def get_transaction_for_update(db: Session, transaction_id: str) -> BankTransaction | None:
    """Re-read a transaction from the database, row-locked where supported."""
    return db.get(
        BankTransaction,
        transaction_id,
        populate_existing=True,
        with_for_update=True,
    )


def get_invoice_for_update(db: Session, invoice_id: str) -> Invoice | None:
    """Re-read an invoice from the database, row-locked where supported."""
    return db.get(
        Invoice,
        invoice_id,
        populate_existing=True,
        with_for_update=True,
    )
