"""
Candidate selection.

Greedy best-match-first: each transaction keeps its highest-confidence
candidate. Invoices are not deduplicated, since one invoice can legitimately
be settled by several instalments.
"""

from typing import Iterable

from app.config import get_settings
from app.matching.candidates import MatchCandidate


def select_best(candidates: Iterable[MatchCandidate]) -> list[MatchCandidate]:
    """Return at most one candidate per transaction, best confidence first.

    list.sort is stable, so ties keep generation order.
    """
    ordered = sorted(candidates, key=lambda c: c.confidence, reverse=True)

    seen: set = set()
    selected: list[MatchCandidate] = []
    for candidate in ordered:
        if candidate.transaction_id in seen:
            continue
        seen.add(candidate.transaction_id)
        selected.append(candidate)

    return selected


def split_by_threshold(
    selected: Iterable[MatchCandidate],
    threshold: int | None = None,
) -> tuple[list[MatchCandidate], list[MatchCandidate]]:
    """Split selected candidates into (auto_apply, suggested)."""
    if threshold is None:
        threshold = get_settings().auto_apply_threshold

    auto_apply: list[MatchCandidate] = []
    suggested: list[MatchCandidate] = []
    for candidate in selected:
        if candidate.confidence >= threshold:
            auto_apply.append(candidate)
        else:
            suggested.append(candidate)

    return auto_apply, suggested
