"""Pydantic schemas for reconciliation endpoints."""

from datetime import datetime
from decimal import Decimal
from typing import Literal

from pydantic import BaseModel, Field


class RunRequest(BaseModel):
    """Request body for starting a reconciliation run."""
    tenant_id: str
    auto_apply: bool = False


class CandidateSchema(BaseModel):
    """A proposed transaction/invoice match."""
    transaction_id: str
    invoice_id: str
    confidence: int = Field(ge=0, le=100)
    match_type: Literal["exact", "partial", "suggested"]
    reason_codes: list[str] = []


class AppliedMatchResponse(BaseModel):
    transaction_id: str
    invoice_id: str
    payment_id: str
    amount: Decimal
    invoice_status: str
    paid_amount: Decimal
    remaining_amount: Decimal


class ApplyFailureResponse(BaseModel):
    transaction_id: str
    invoice_id: str
    confidence: int
    code: str
    message: str
    retryable: bool


class StatsResponse(BaseModel):
    total_invoices: int
    matched_invoices: int
    partial_matches: int
    unmatched_invoices: int
    total_transactions: int
    matched_transactions: int
    unmatched_transactions: int
    auto_match_rate: int


class RunResponse(BaseModel):
    """Response from a reconciliation run."""
    message: str
    tenant_id: str
    state: str
    auto_apply: bool
    total_transactions: int
    total_invoices: int
    candidates_found: int
    applied_count: int
    applied: list[AppliedMatchResponse]
    suggested: list[CandidateSchema]
    failures: list[ApplyFailureResponse]
    cancelled: bool
    stats: StatsResponse | None = None
    started_at: datetime
    completed_at: datetime | None = None
