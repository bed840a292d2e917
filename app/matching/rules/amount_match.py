"""
Amount matching rule (Weight: 50 exact / 30 partial points).

Compares the absolute value of the bank transaction amount against the
invoice's remaining balance (total_amount - paid_amount). This rule is also
the gate for candidate generation: a pair without amount compatibility is
never scored by the other rules.

Scoring:
  - Payment larger than the remaining balance: pair skipped (gate closed)
  - Zero amount: pair skipped
  - Within epsilon of the remaining balance: exact weight (50 pts)
  - Less than the remaining balance: partial weight (30 pts)
"""

from decimal import Decimal

from app.models.bank_transaction import BankTransaction
from app.models.invoice import Invoice

EXACT = "exact"
PARTIAL = "partial"


def score(
    transaction: BankTransaction,
    invoice: Invoice,
    exact_weight: int = 50,
    partial_weight: int = 30,
    epsilon: Decimal = Decimal("1"),
) -> dict:
    """
    Score amount compatibility between a transaction and an invoice.

    Args:
        transaction: Bank transaction (amount may be negative)
        invoice: Open invoice
        exact_weight: Score when the payment settles the remaining balance
        partial_weight: Score when the payment covers part of it
        epsilon: Maximum shortfall still treated as an exact settlement

    Returns:
        dict with keys: score (int), max_score (int), details (str),
        match_type ("exact", "partial" or None when the pair is gated out)
        and code (reason code or None).
    """
    if transaction.amount is None:
        return _gated(exact_weight, "Missing transaction amount")

    txn_amount = abs(transaction.amount)
    remaining = invoice.remaining_amount

    if txn_amount == Decimal("0"):
        return _gated(exact_weight, "Zero transaction amount")

    if txn_amount > remaining:
        return _gated(
            exact_weight,
            f"Overshoot: {txn_amount} exceeds remaining balance {remaining}",
        )

    if remaining - txn_amount < epsilon:
        return {
            "score": exact_weight,
            "max_score": exact_weight,
            "details": f"Exact amount match: {txn_amount} settles remaining {remaining}",
            "match_type": EXACT,
            "code": "amount_exact",
        }

    return {
        "score": partial_weight,
        "max_score": exact_weight,
        "details": f"Partial amount match: {txn_amount} of remaining {remaining}",
        "match_type": PARTIAL,
        "code": "amount_partial",
    }


def _gated(weight: int, details: str) -> dict:
    return {
        "score": 0,
        "max_score": weight,
        "details": details,
        "match_type": None,
        "code": None,
    }
