"""
Candidate generation.

Scores every (transaction, invoice) pair and keeps those that pass the amount
gate and reach the minimum viable confidence. Pure: no database access, the
caller hands in already-loaded records.
"""

import logging
from dataclasses import dataclass, field
from typing import Iterable

from app.config import get_settings
from app.models.bank_transaction import BankTransaction
from app.models.invoice import Invoice
from app.matching.scoring import score_pair

logger = logging.getLogger(__name__)


@dataclass
class MatchCandidate:
    """A scored transaction/invoice pair proposed for reconciliation."""

    transaction_id: str
    invoice_id: str
    confidence: int
    match_type: str
    reason_codes: list[str] = field(default_factory=list)
    rule_scores: dict = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {
            "transaction_id": self.transaction_id,
            "invoice_id": self.invoice_id,
            "confidence": self.confidence,
            "match_type": self.match_type,
            "reason_codes": list(self.reason_codes),
        }


def generate_candidates(
    transactions: Iterable[BankTransaction],
    invoices: Iterable[Invoice],
    min_confidence: int | None = None,
) -> list[MatchCandidate]:
    """
    Produce scored candidates for all compatible pairs.

    The caller is expected to pass only unmatched transactions and open
    invoices; this function does not filter them again.

    Candidates come out in transaction order, then invoice order. The
    selector relies on that order to break confidence ties.
    """
    if min_confidence is None:
        min_confidence = get_settings().min_candidate_confidence

    invoices = list(invoices)
    candidates: list[MatchCandidate] = []

    for txn in transactions:
        for inv in invoices:
            result = score_pair(txn, inv)
            if not result.amount_compatible:
                continue
            if result.confidence < min_confidence:
                continue
            candidates.append(
                MatchCandidate(
                    transaction_id=txn.id,
                    invoice_id=inv.id,
                    confidence=result.confidence,
                    match_type=result.match_type,
                    reason_codes=result.reason_codes,
                    rule_scores=result.rule_scores,
                )
            )

    logger.debug("Generated %d candidates", len(candidates))
    return candidates
