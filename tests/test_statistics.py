"""Tests for reconciliation statistics."""

from decimal import Decimal

from app.models import InvoiceStatus, MatchStatus
from app.services.statistics_service import compute_stats, get_stats
from tests.factories import OTHER_TENANT, TENANT, build_invoice, build_transaction, persist


def test_empty_tenant_has_zero_rate():
    stats = compute_stats([], [])

    assert stats.auto_match_rate == 0
    assert stats.total_transactions == 0
    assert stats.unmatched_invoices == 0


def test_counts_and_rate():
    transactions = [
        build_transaction(match_status=MatchStatus.MATCHED, matched_invoice_id="i1"),
        build_transaction(match_status=MatchStatus.MATCHED, matched_invoice_id="i2"),
        build_transaction(),
    ]
    invoices = [
        build_invoice(status=InvoiceStatus.PAID, paid_amount=Decimal("1000000")),
        build_invoice(status=InvoiceStatus.CLOSED),
        build_invoice(status=InvoiceStatus.PARTIALLY_PAID, paid_amount=Decimal("400000")),
        build_invoice(),
        build_invoice(status=InvoiceStatus.CANCELLED),
    ]

    stats = compute_stats(transactions, invoices)

    assert stats.total_transactions == 3
    assert stats.matched_transactions == 2
    assert stats.unmatched_transactions == 1
    assert stats.auto_match_rate == 67
    assert stats.total_invoices == 5
    assert stats.matched_invoices == 2
    assert stats.partial_matches == 1
    assert stats.unmatched_invoices == 2


def test_rate_rounds_half_up():
    transactions = [build_transaction(match_status=MatchStatus.MATCHED)] + [
        build_transaction() for _ in range(7)
    ]

    # 1 / 8 = 12.5%
    assert compute_stats(transactions, []).auto_match_rate == 13


def test_settled_invoice_is_not_also_partial():
    # Paid within the rounding epsilon: status paid, paid_amount just short of total
    invoices = [
        build_invoice(
            status=InvoiceStatus.PAID,
            total_amount=Decimal("1000000"),
            paid_amount=Decimal("999999.50"),
        )
    ]

    stats = compute_stats([], invoices)

    assert stats.matched_invoices == 1
    assert stats.partial_matches == 0
    assert stats.unmatched_invoices == 0


def test_get_stats_is_scoped_to_tenant(db_session):
    persist(
        db_session,
        build_transaction(),
        build_invoice(),
        build_transaction(tenant_id=OTHER_TENANT),
        build_transaction(tenant_id=OTHER_TENANT),
    )

    stats = get_stats(db_session, TENANT)

    assert stats.total_transactions == 1
    assert stats.total_invoices == 1
    assert stats.to_dict()["auto_match_rate"] == 0
