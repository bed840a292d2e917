"""
Reconciliation orchestrator.

Drives one reconciliation run for a tenant:

  IDLE -> FETCHING -> GENERATING -> SELECTING -> AUTO_APPLYING -> DONE
  (FAILED is reachable from any state)

Flow:
  1. Load unmatched bank transactions and open invoices
  2. Score every (transaction, invoice) pair
  3. Keep the best candidate per transaction (greedy, highest confidence first)
  4. With auto_apply, apply candidates above the auto-apply threshold one by
     one; the rest are returned as suggestions for manual confirmation
  5. Recompute statistics

A failed apply never aborts the run; it is recorded and the loop moves on.
Without auto_apply nothing is written and every selected candidate is a
suggestion.
"""

import enum
import logging
import threading
from dataclasses import dataclass, field
from datetime import datetime

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.config import get_settings
from app.db.store import list_open_invoices, list_unmatched_transactions
from app.matching.applier import AppliedMatch, apply_match
from app.matching.candidates import MatchCandidate, generate_candidates
from app.matching.errors import ApplyError, ReconciliationFailed
from app.matching.selector import select_best, split_by_threshold
from app.services.statistics_service import ReconciliationStats, get_stats

logger = logging.getLogger(__name__)

MANUAL_MATCH_NOTE = "Confirmed match from bank transaction"


class RunState(str, enum.Enum):
    IDLE = "idle"
    FETCHING = "fetching"
    GENERATING = "generating"
    SELECTING = "selecting"
    AUTO_APPLYING = "auto_applying"
    DONE = "done"
    FAILED = "failed"


@dataclass
class ApplyFailure:
    """A candidate that could not be applied during a run."""

    candidate: MatchCandidate
    code: str
    message: str
    retryable: bool = False

    def to_dict(self) -> dict:
        return {
            "transaction_id": self.candidate.transaction_id,
            "invoice_id": self.candidate.invoice_id,
            "confidence": self.candidate.confidence,
            "code": self.code,
            "message": self.message,
            "retryable": self.retryable,
        }


@dataclass
class RunResult:
    """Summary of a reconciliation run."""

    tenant_id: str
    state: RunState = RunState.IDLE
    auto_apply: bool = False
    total_transactions: int = 0
    total_invoices: int = 0
    candidates_found: int = 0
    applied: list[AppliedMatch] = field(default_factory=list)
    suggested: list[MatchCandidate] = field(default_factory=list)
    failures: list[ApplyFailure] = field(default_factory=list)
    cancelled: bool = False
    stats: ReconciliationStats | None = None
    started_at: datetime = field(default_factory=datetime.utcnow)
    completed_at: datetime | None = None

    @property
    def applied_count(self) -> int:
        return len(self.applied)

    def to_dict(self) -> dict:
        return {
            "tenant_id": self.tenant_id,
            "state": self.state.value,
            "auto_apply": self.auto_apply,
            "total_transactions": self.total_transactions,
            "total_invoices": self.total_invoices,
            "candidates_found": self.candidates_found,
            "applied_count": self.applied_count,
            "applied": [a.to_dict() for a in self.applied],
            "suggested": [c.to_dict() for c in self.suggested],
            "failures": [f.to_dict() for f in self.failures],
            "cancelled": self.cancelled,
            "stats": self.stats.to_dict() if self.stats else None,
            "started_at": self.started_at.isoformat(),
            "completed_at": self.completed_at.isoformat() if self.completed_at else None,
        }


def run_reconciliation(
    db: Session,
    tenant_id: str,
    auto_apply: bool = False,
    cancel_event: threading.Event | None = None,
) -> RunResult:
    """
    Run the full reconciliation pipeline for one tenant.

    Args:
        db: SQLAlchemy session
        tenant_id: Tenant whose records are reconciled; the caller is
                   responsible for having authorized it
        auto_apply: Apply candidates at or above the auto-apply threshold
        cancel_event: Checked before each apply; once set, the run stops
                      applying and reports what was applied so far

    Returns:
        RunResult with applied matches, suggestions, failures and stats.

    Raises:
        ReconciliationFailed: if the input data could not be loaded.
    """
    settings = get_settings()
    result = RunResult(tenant_id=tenant_id, auto_apply=auto_apply)

    # Step 1: Load unmatched records
    result.state = RunState.FETCHING
    try:
        transactions = list_unmatched_transactions(db, tenant_id)
        invoices = list_open_invoices(db, tenant_id)
    except SQLAlchemyError as e:
        db.rollback()
        result.state = RunState.FAILED
        logger.error("Reconciliation fetch failed for tenant %s: %s", tenant_id, str(e))
        raise ReconciliationFailed(
            f"Could not load reconciliation data: {e}", tenant_id=tenant_id
        ) from e

    result.total_transactions = len(transactions)
    result.total_invoices = len(invoices)

    logger.info(
        "Starting reconciliation for tenant %s: %d transactions x %d invoices",
        tenant_id,
        len(transactions),
        len(invoices),
    )

    # Step 2: Score all pairs
    result.state = RunState.GENERATING
    candidates = generate_candidates(
        transactions, invoices, min_confidence=settings.min_candidate_confidence
    )
    result.candidates_found = len(candidates)

    # Step 3: One candidate per transaction
    result.state = RunState.SELECTING
    selected = select_best(candidates)

    if auto_apply:
        to_apply, result.suggested = split_by_threshold(
            selected, threshold=settings.auto_apply_threshold
        )
        # Step 4: Apply each candidate independently
        result.state = RunState.AUTO_APPLYING
        _auto_apply(db, to_apply, result, cancel_event)
    else:
        result.suggested = selected

    # Step 5: Statistics from current state
    try:
        result.stats = get_stats(db, tenant_id)
    except SQLAlchemyError as e:
        db.rollback()
        logger.warning("Could not compute stats for tenant %s: %s", tenant_id, str(e))

    result.state = RunState.DONE
    result.completed_at = datetime.utcnow()

    logger.info(
        "Reconciliation complete for tenant %s: %d applied, %d suggested, %d failed%s",
        tenant_id,
        result.applied_count,
        len(result.suggested),
        len(result.failures),
        " (cancelled)" if result.cancelled else "",
    )

    return result


def _auto_apply(
    db: Session,
    candidates: list[MatchCandidate],
    result: RunResult,
    cancel_event: threading.Event | None,
) -> None:
    for candidate in candidates:
        if cancel_event is not None and cancel_event.is_set():
            result.cancelled = True
            logger.info(
                "Reconciliation for tenant %s cancelled after %d applies",
                result.tenant_id,
                result.applied_count,
            )
            return

        try:
            result.applied.append(apply_match(db, candidate))
        except ApplyError as e:
            logger.warning(
                "Skipped txn %s -> invoice %s (%s): %s",
                candidate.transaction_id,
                candidate.invoice_id,
                e.code,
                e.message,
            )
            result.failures.append(
                ApplyFailure(
                    candidate=candidate,
                    code=e.code,
                    message=e.message,
                    retryable=e.retryable,
                )
            )


def apply_candidate(db: Session, candidate: MatchCandidate) -> AppliedMatch:
    """Apply one suggested candidate after a human confirmed it.

    Raises the same ApplyError subclasses as apply_match.
    """
    return apply_match(db, candidate, notes=MANUAL_MATCH_NOTE)
