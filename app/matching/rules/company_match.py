"""
Customer name matching rule (Weight: 25 points).

Banks often truncate the payer name in the reference field, so the full
customer name is looked up in the description and a short prefix of it in
the reference.

Scoring:
  - Full name in description, or name prefix in reference: 25 pts
  - Otherwise: 0 pts
"""

from app.models.bank_transaction import BankTransaction
from app.models.invoice import Invoice


def score(
    transaction: BankTransaction,
    invoice: Invoice,
    weight: int = 25,
    prefix_length: int = 10,
) -> dict:
    """
    Score a customer name match between transaction text and invoice.

    Returns:
        dict with keys: score (int), max_score (int), details (str), code (str | None)
    """
    customer_name = (invoice.customer_name or "").strip().lower()

    if not customer_name:
        return {
            "score": 0,
            "max_score": weight,
            "details": "Invoice has no customer name",
            "code": None,
        }

    description = (transaction.description or "").lower()
    reference = (transaction.reference or "").lower()

    if customer_name in description:
        return {
            "score": weight,
            "max_score": weight,
            "details": f"Customer '{invoice.customer_name}' named in description",
            "code": "customer_name",
        }

    prefix = customer_name[:prefix_length]
    if prefix in reference:
        return {
            "score": weight,
            "max_score": weight,
            "details": f"Customer prefix '{prefix}' found in reference",
            "code": "customer_name",
        }

    return {
        "score": 0,
        "max_score": weight,
        "details": f"Customer '{invoice.customer_name}' not found",
        "code": None,
    }
