"""
Invoice number matching rule (Weight: 40 points).

Looks for the invoice number inside the bank transaction's description or
reference. Customers usually quote the invoice number in the transfer
memo, so this is the strongest textual signal.

Scoring:
  - Invoice number found (case-insensitive) in description or reference: 40 pts
  - Otherwise: 0 pts
"""

from app.models.bank_transaction import BankTransaction
from app.models.invoice import Invoice


def _normalize(value: str | None) -> str:
    if not value:
        return ""
    return value.strip().lower()


def score(
    transaction: BankTransaction,
    invoice: Invoice,
    weight: int = 40,
) -> dict:
    """
    Score an invoice number match between transaction text and invoice.

    Returns:
        dict with keys: score (int), max_score (int), details (str), code (str | None)
    """
    invoice_number = _normalize(invoice.invoice_number)
    if not invoice_number:
        return {
            "score": 0,
            "max_score": weight,
            "details": "Invoice has no number",
            "code": None,
        }

    description = _normalize(transaction.description)
    reference = _normalize(transaction.reference)

    if invoice_number in description or invoice_number in reference:
        return {
            "score": weight,
            "max_score": weight,
            "details": f"Invoice number '{invoice.invoice_number}' found in transaction text",
            "code": "invoice_number",
        }

    return {
        "score": 0,
        "max_score": weight,
        "details": f"Invoice number '{invoice.invoice_number}' not found",
        "code": None,
    }
