"""
Date proximity matching rule (Weight: 15 near / 5 far points).

Compares the transaction date against the invoice due date. Payments tend
to land around the due date, early or late.

Scoring:
  - Within 7 days of the due date: 15 pts
  - Within 30 days: 5 pts
  - Further apart, or no due date: 0 pts
"""

from app.models.bank_transaction import BankTransaction
from app.models.invoice import Invoice


def score(
    transaction: BankTransaction,
    invoice: Invoice,
    near_weight: int = 15,
    far_weight: int = 5,
    near_days: int = 7,
    far_days: int = 30,
) -> dict:
    """
    Score date proximity between transaction and invoice due date.

    Returns:
        dict with keys: score (int), max_score (int), details (str), code (str | None)
    """
    txn_date = transaction.transaction_date
    due_date = invoice.due_date

    if txn_date is None or due_date is None:
        return {
            "score": 0,
            "max_score": near_weight,
            "details": "Missing transaction date or due date",
            "code": None,
        }

    day_diff = abs((txn_date - due_date).days)

    if day_diff <= near_days:
        return {
            "score": near_weight,
            "max_score": near_weight,
            "details": f"Paid {day_diff} day(s) from due date {due_date}",
            "code": "date_proximity",
        }

    if day_diff <= far_days:
        return {
            "score": far_weight,
            "max_score": near_weight,
            "details": f"Paid {day_diff} days from due date {due_date}",
            "code": "date_proximity",
        }

    return {
        "score": 0,
        "max_score": near_weight,
        "details": f"Dates too far apart ({day_diff} days): txn={txn_date}, due={due_date}",
        "code": None,
    }
