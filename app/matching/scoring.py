"""
Scoring combiner — runs all matching rules and produces a confidence score.

Takes a bank transaction and invoice pair, runs the amount gate first and,
if it opens, the textual and date rules with their configured weights.
Returns an integer confidence (0-100) plus the ordered reason codes and a
per-rule breakdown for auditability.

No rule ever subtracts points, so confidence only grows as signals are added.
"""

from dataclasses import dataclass, field

from app.config import get_settings
from app.models.bank_transaction import BankTransaction
from app.models.invoice import Invoice
from app.matching.rules import amount_match, reference_match, company_match, date_match

MAX_CONFIDENCE = 100


@dataclass
class ScoreResult:
    """Result of scoring a transaction/invoice pair."""

    confidence: int
    match_type: str | None
    reason_codes: list[str] = field(default_factory=list)
    rule_scores: dict = field(default_factory=dict)

    @property
    def amount_compatible(self) -> bool:
        return self.match_type is not None


def score_pair(transaction: BankTransaction, invoice: Invoice) -> ScoreResult:
    """
    Score a transaction/invoice pair using all matching rules.

    Weights and windows are loaded from application settings (config.py).
    When the amount gate is closed the other rules are not evaluated and the
    result has confidence 0 and no match type.
    """
    settings = get_settings()

    amount = amount_match.score(
        transaction,
        invoice,
        exact_weight=settings.exact_amount_weight,
        partial_weight=settings.partial_amount_weight,
        epsilon=settings.amount_epsilon,
    )
    if amount["match_type"] is None:
        return ScoreResult(
            confidence=0,
            match_type=None,
            rule_scores={"amount": amount},
        )

    rules = [
        ("amount", amount),
        (
            "invoice_number",
            reference_match.score(
                transaction, invoice, weight=settings.invoice_number_weight
            ),
        ),
        (
            "customer_name",
            company_match.score(
                transaction,
                invoice,
                weight=settings.customer_name_weight,
                prefix_length=settings.customer_name_prefix_length,
            ),
        ),
        (
            "date",
            date_match.score(
                transaction,
                invoice,
                near_weight=settings.date_near_weight,
                far_weight=settings.date_far_weight,
                near_days=settings.date_near_days,
                far_days=settings.date_far_days,
            ),
        ),
    ]

    rule_scores = {}
    reason_codes = []
    total = 0

    for rule_name, result in rules:
        rule_scores[rule_name] = result
        total += result["score"]
        if result["code"]:
            reason_codes.append(result["code"])

    return ScoreResult(
        confidence=min(total, MAX_CONFIDENCE),
        match_type=amount["match_type"],
        reason_codes=reason_codes,
        rule_scores=rule_scores,
    )
