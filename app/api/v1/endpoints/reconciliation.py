"""Reconciliation endpoints — run matching, confirm suggestions, read stats."""

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from app.db.session import get_db
from app.matching.candidates import MatchCandidate
from app.matching.engine import apply_candidate, run_reconciliation
from app.matching.errors import (
    AlreadyMatched,
    ApplyError,
    InvoiceClosed,
    ReconciliationFailed,
    RecordNotFound,
    StoreUnavailable,
)
from app.services.statistics_service import get_stats
from app.api.v1.schemas.reconciliation import (
    AppliedMatchResponse,
    ApplyFailureResponse,
    CandidateSchema,
    RunRequest,
    RunResponse,
    StatsResponse,
)

router = APIRouter(prefix="/reconciliation", tags=["Reconciliation"])


def _status_for(error: ApplyError) -> int:
    if isinstance(error, RecordNotFound):
        return 404
    if isinstance(error, (AlreadyMatched, InvoiceClosed)):
        return 409
    if isinstance(error, StoreUnavailable):
        return 503
    # Overpayment, bad amounts
    return 422


@router.post("/run", response_model=RunResponse)
def start_run(
    request: RunRequest,
    db: Session = Depends(get_db),
):
    """
    Run reconciliation for a tenant.

    With auto_apply=false nothing is written; every best candidate comes back
    as a suggestion. With auto_apply=true, candidates at or above the
    auto-apply threshold are applied and the rest are suggested.
    """
    try:
        result = run_reconciliation(db, request.tenant_id, auto_apply=request.auto_apply)
    except ReconciliationFailed as e:
        raise HTTPException(status_code=503, detail=e.message)

    return RunResponse(
        message=(
            f"Reconciliation complete: {result.applied_count} applied, "
            f"{len(result.suggested)} suggested, {len(result.failures)} failed"
        ),
        tenant_id=result.tenant_id,
        state=result.state.value,
        auto_apply=result.auto_apply,
        total_transactions=result.total_transactions,
        total_invoices=result.total_invoices,
        candidates_found=result.candidates_found,
        applied_count=result.applied_count,
        applied=[AppliedMatchResponse(**vars(a)) for a in result.applied],
        suggested=[CandidateSchema(**c.to_dict()) for c in result.suggested],
        failures=[ApplyFailureResponse(**f.to_dict()) for f in result.failures],
        cancelled=result.cancelled,
        stats=StatsResponse(**result.stats.to_dict()) if result.stats else None,
        started_at=result.started_at,
        completed_at=result.completed_at,
    )


@router.post("/apply", response_model=AppliedMatchResponse)
def confirm_candidate(
    request: CandidateSchema,
    db: Session = Depends(get_db),
):
    """
    Apply a single suggested match after a human confirmed it.

    Returns 409 if the transaction was already matched or the invoice closed
    in the meantime, 422 on overpayment and 503 on a store failure (retry).
    """
    candidate = MatchCandidate(
        transaction_id=request.transaction_id,
        invoice_id=request.invoice_id,
        confidence=request.confidence,
        match_type=request.match_type,
        reason_codes=list(request.reason_codes),
    )

    try:
        applied = apply_candidate(db, candidate)
    except ApplyError as e:
        raise HTTPException(
            status_code=_status_for(e),
            detail={"code": e.code, "message": e.message},
        )

    return AppliedMatchResponse(**vars(applied))


@router.get("/stats", response_model=StatsResponse)
def read_stats(
    tenant_id: str = Query(..., description="Tenant to aggregate"),
    db: Session = Depends(get_db),
):
    """Matched/unmatched/partial counts and auto-match rate for a tenant."""
    return StatsResponse(**get_stats(db, tenant_id).to_dict())
