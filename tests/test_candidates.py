"""Tests for pair scoring and candidate generation."""

from datetime import date
from decimal import Decimal

from app.matching.candidates import generate_candidates
from app.matching.scoring import score_pair
from app.matching.selector import select_best
from tests.factories import build_invoice, build_transaction


def test_exact_amount_with_invoice_number_scores_90():
    txn = build_transaction(amount=Decimal("1000000"), description="Thanh toan INV-2026-001")
    inv = build_invoice(invoice_number="INV-2026-001", total_amount=Decimal("1000000"))

    candidates = generate_candidates([txn], [inv])

    assert len(candidates) == 1
    assert candidates[0].confidence == 90
    assert candidates[0].match_type == "exact"
    assert candidates[0].reason_codes == ["amount_exact", "invoice_number"]


def test_partial_amount_near_due_date_scores_45():
    txn = build_transaction(amount=Decimal("300000"), transaction_date=date(2026, 3, 15))
    inv = build_invoice(total_amount=Decimal("1000000"), due_date=date(2026, 3, 10))

    candidates = generate_candidates([txn], [inv])

    assert len(candidates) == 1
    assert candidates[0].confidence == 45
    assert candidates[0].match_type == "partial"
    assert candidates[0].reason_codes == ["amount_partial", "date_proximity"]


def test_overshoot_emits_no_candidate():
    txn = build_transaction(
        amount=Decimal("1200000"), description="INV-2026-001 Cong ty Minh Phat"
    )
    inv = build_invoice(total_amount=Decimal("1000000"))

    assert generate_candidates([txn], [inv]) == []


def test_text_signal_without_amount_compatibility_is_not_a_candidate():
    txn = build_transaction(amount=Decimal("5000000"), description="INV-2026-001")
    inv = build_invoice(total_amount=Decimal("1000000"))

    result = score_pair(txn, inv)

    assert result.confidence == 0
    assert result.amount_compatible is False
    # Text rules are not evaluated once the gate is closed
    assert list(result.rule_scores) == ["amount"]


def test_partial_amount_alone_is_below_minimum():
    txn = build_transaction(amount=Decimal("300000"))
    inv = build_invoice(total_amount=Decimal("1000000"))

    assert score_pair(txn, inv).confidence == 30
    assert generate_candidates([txn], [inv]) == []


def test_minimum_confidence_override():
    txn = build_transaction(amount=Decimal("300000"))
    inv = build_invoice(total_amount=Decimal("1000000"))

    assert len(generate_candidates([txn], [inv], min_confidence=30)) == 1


def test_confidence_capped_at_100():
    txn = build_transaction(
        amount=Decimal("1000000"),
        description="INV-2026-001 Cong ty Minh Phat",
        transaction_date=date(2026, 1, 6),
    )
    inv = build_invoice()

    candidates = generate_candidates([txn], [inv])

    # 50 + 40 + 25 + 15 = 130
    assert candidates[0].confidence == 100
    assert candidates[0].reason_codes == [
        "amount_exact",
        "invoice_number",
        "customer_name",
        "date_proximity",
    ]
    assert set(candidates[0].rule_scores) == {"amount", "invoice_number", "customer_name", "date"}


def test_candidates_follow_transaction_then_invoice_order():
    txns = [build_transaction(id=f"t{i}", amount=Decimal("500000")) for i in range(2)]
    invs = [
        build_invoice(id=f"i{i}", invoice_number=f"INV-{i}", total_amount=Decimal("500000"))
        for i in range(2)
    ]

    candidates = generate_candidates(txns, invs)

    assert [(c.transaction_id, c.invoice_id) for c in candidates] == [
        ("t0", "i0"),
        ("t0", "i1"),
        ("t1", "i0"),
        ("t1", "i1"),
    ]


def test_amount_gate_and_confidence_bounds_hold_for_mixed_batch():
    txns = [
        build_transaction(amount=Decimal(amount), description=desc, transaction_date=d)
        for amount, desc, d in [
            ("100000", "INV-A", date(2026, 1, 1)),
            ("250000", "", date(2026, 1, 20)),
            ("999999", "Cong ty Minh Phat", date(2026, 2, 1)),
            ("-400000", "INV-B", date(2026, 3, 1)),
            ("2000000", "INV-C", date(2026, 1, 1)),
        ]
    ]
    invs = [
        build_invoice(invoice_number="INV-A", total_amount=Decimal("100000"), due_date=date(2026, 1, 3)),
        build_invoice(invoice_number="INV-B", total_amount=Decimal("900000"), paid_amount=Decimal("500000")),
        build_invoice(invoice_number="INV-C", total_amount=Decimal("1000000"), due_date=date(2026, 1, 25)),
    ]
    by_id = {t.id: t for t in txns}
    inv_by_id = {i.id: i for i in invs}

    candidates = generate_candidates(txns, invs)

    assert candidates
    for c in candidates:
        assert 40 <= c.confidence <= 100
        assert abs(by_id[c.transaction_id].amount) <= inv_by_id[c.invoice_id].remaining_amount


def test_generation_and_selection_are_deterministic():
    def snapshot():
        txns = [
            build_transaction(id=f"t{i}", amount=Decimal(a), description=d)
            for i, (a, d) in enumerate([("500000", ""), ("500000", "INV-2"), ("300000", "INV-1")])
        ]
        invs = [
            build_invoice(id=f"i{i}", invoice_number=f"INV-{i}", total_amount=Decimal("500000"))
            for i in range(3)
        ]
        return txns, invs

    first = select_best(generate_candidates(*snapshot()))
    second = select_best(generate_candidates(*snapshot()))

    assert [c.to_dict() for c in first] == [c.to_dict() for c in second]
