from app.models.bank_transaction import BankTransaction, MatchStatus
from app.models.invoice import Invoice, InvoiceStatus, CLOSED_STATUSES
from app.models.payment import Payment

__all__ = [
    "BankTransaction",
    "MatchStatus",
    "Invoice",
    "InvoiceStatus",
    "CLOSED_STATUSES",
    "Payment",
]
